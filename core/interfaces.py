"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod


class Storage(ABC):
    """Abstract base class for durable key-value storage."""

    @abstractmethod
    def load_config(self) -> dict:
        """Load optional configuration. Returns config dict (empty if none)."""
        pass

    @abstractmethod
    def load_state(self, namespace: str) -> dict | None:
        """Load the blob stored under a namespace. Returns None if missing or unreadable."""
        pass

    @abstractmethod
    def save_state(self, state: dict, namespace: str) -> None:
        """Store a blob under a namespace, replacing any previous one."""
        pass

    @abstractmethod
    def has_vocabulary_snapshot(self) -> bool:
        """Check whether the vocabulary snapshot sentinel exists."""
        pass

    @abstractmethod
    def save_vocabulary_snapshot(self, snapshot: dict) -> None:
        """Write the vocabulary snapshot. snapshot maps record keys
        (including the sentinel) to JSON-serializable data."""
        pass

    def close(self) -> None:
        """Release backend resources. Nothing to do by default."""
        pass
