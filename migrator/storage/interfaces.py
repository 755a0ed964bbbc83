"""
Storage interfaces for the migrator.

A plain string key-value store; the Checkpoint Store owns the record format.
"""
from abc import ABC, abstractmethod
from typing import List, Optional


class KeyValueStoreInterface(ABC):
    """Base interface for persistent key-value backends."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Get the value stored under key.

        Returns:
            Stored value, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store value under key, replacing any previous value.
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """
        Remove key. Removing an absent key is not an error.
        """
        pass

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        """
        List stored keys starting with prefix.
        """
        pass
