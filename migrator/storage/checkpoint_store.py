# migrator/storage/checkpoint_store.py

from typing import List, Optional, Tuple

import msgspec

from ..core.logging import LoggingMixin
from ..types import Checkpoint, CheckpointKey, Subsystem
from .interfaces import KeyValueStoreInterface


class CheckpointStore(LoggingMixin):
    """
    Durable record of positions withdrawn from the old ledger but not yet
    deposited into the new one.

    Without a backing store, or when the store fails, every operation degrades
    to a no-op: the migration keeps running, it just cannot resume.
    """

    def __init__(self, store: Optional[KeyValueStoreInterface] = None):
        self.store = store
        self._encoder = msgspec.json.Encoder()
        self._decoder = msgspec.json.Decoder(Checkpoint)

        if store is None:
            self.log_warning("No checkpoint storage available, migration will not be resumable")

    @property
    def durable(self) -> bool:
        return self.store is not None

    def get(self, key: CheckpointKey) -> Optional[Checkpoint]:
        if self.store is None:
            return None

        try:
            raw = self.store.get(key.storage_key)
        except Exception as e:
            self.log_error("Could not read checkpoint", key=key.storage_key, error=str(e))
            return None

        if raw is None:
            return None

        try:
            return self._decoder.decode(raw)
        except (msgspec.DecodeError, msgspec.ValidationError) as e:
            self.log_error("Ignoring malformed checkpoint", key=key.storage_key, error=str(e))
            return None

    def set(self, key: CheckpointKey, checkpoint: Checkpoint) -> bool:
        """Persist a checkpoint; False when it could not be written"""
        if self.store is None:
            return False

        try:
            self.store.set(key.storage_key, self._encoder.encode(checkpoint).decode())
        except Exception as e:
            self.log_error("Could not write checkpoint", key=key.storage_key, error=str(e))
            return False

        self.log_debug("Checkpoint saved",
                       key=key.storage_key,
                       position_id=key.position_id,
                       amount=checkpoint.amount)
        return True

    def clear(self, key: CheckpointKey) -> None:
        if self.store is None:
            return

        try:
            self.store.remove(key.storage_key)
        except Exception as e:
            self.log_error("Could not remove checkpoint", key=key.storage_key, error=str(e))

    def pending(self, subsystem: Optional[Subsystem] = None,
                account: Optional[str] = None) -> List[Tuple[CheckpointKey, Checkpoint]]:
        """In-flight checkpoints, optionally narrowed to one subsystem and account"""
        if self.store is None:
            return []

        prefix = f"migration_{subsystem.value}_" if subsystem else "migration_"
        try:
            storage_keys = self.store.keys(prefix)
        except Exception as e:
            self.log_error("Could not list checkpoints", error=str(e))
            return []

        pending = []
        for storage_key in storage_keys:
            try:
                key = CheckpointKey.parse(storage_key)
            except ValueError:
                continue
            if account and key.account.lower() != account.lower():
                continue
            checkpoint = self.get(key)
            if checkpoint is not None:
                pending.append((key, checkpoint))

        return sorted(pending, key=lambda item: (item[0].subsystem.value, item[0].position_id))
