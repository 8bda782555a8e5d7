"""
Abstract Session Storage Interface

DESIGN DECISION: We define an abstract interface for durable client storage.
This allows us to:
1. Keep the session on disk for the desktop/Streamlit surface
2. Use in-memory storage for testing
3. Swap in a keyring or browser-backed store later
4. Keep the Session Store decoupled from where bytes end up

The interface is a tiny key-value store. The session is the only thing
persisted: the token and the user profile, under two keys.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


TOKEN_KEY = "ft_token"
USER_KEY = "ft_user"


class SessionStorageInterface(ABC):
    """
    Abstract interface for durable key-value client storage.

    Values must be JSON-serializable.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Read a value.

        Returns:
            The stored value, or None if the key is absent
        """
        pass

    @abstractmethod
    def set_many(self, values: dict[str, Any]) -> None:
        """
        Write several keys in one step.

        Either all keys are written or none are.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove(self, *keys: str) -> None:
        """
        Remove keys. Missing keys are ignored.

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptStorageError(StorageError):
    """Persisted data could not be decoded."""
    pass
