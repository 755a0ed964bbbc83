# migrator/types/checkpoint.py

from eth_utils import to_checksum_address
from msgspec import Struct, field

from .ledger import Subsystem
from .new import EvmAddress, IntStr


class CheckpointKey(Struct, frozen=True):
    account: EvmAddress
    position_id: int
    subsystem: Subsystem

    @property
    def storage_key(self) -> str:
        # addresses are case-insensitive, keys are not
        account = to_checksum_address(self.account)
        return f"migration_{self.subsystem.value}_{account}_pid_{self.position_id}"

    @classmethod
    def parse(cls, storage_key: str) -> 'CheckpointKey':
        # migration_<subsystem>_<account>_pid_<id>
        prefix, subsystem, rest = storage_key.split("_", 2)
        account, _, position_id = rest.rpartition("_pid_")
        if prefix != "migration" or not account:
            raise ValueError(f"Not a checkpoint key: {storage_key}")
        return cls(
            account=EvmAddress(to_checksum_address(account)),
            position_id=int(position_id),
            subsystem=Subsystem(subsystem),
        )


class Checkpoint(Struct):
    """Withdrawn-but-not-yet-deposited position, persisted between runs"""
    destination_resource: EvmAddress = field(name="destinationResource")
    amount: IntStr

    @classmethod
    def create(cls, destination_resource: str, amount: int) -> 'Checkpoint':
        if amount < 0:
            raise ValueError(f"Checkpoint amount must be non-negative: {amount}")
        return cls(destination_resource=EvmAddress(destination_resource), amount=IntStr(str(amount)))

    @property
    def quantity(self) -> int:
        return int(self.amount)
