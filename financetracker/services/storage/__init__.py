"""
Storage Services Package

Provides the abstract durable-storage interface and its implementations.
The client persists only the session (token + user profile).
"""

from financetracker.services.storage.interface import (
    TOKEN_KEY,
    USER_KEY,
    CorruptStorageError,
    SessionStorageInterface,
    StorageError,
)
from financetracker.services.storage.file_store import (
    FileSessionStorage,
    InMemorySessionStorage,
)

__all__ = [
    # Interface
    "SessionStorageInterface",
    "TOKEN_KEY",
    "USER_KEY",
    # Exceptions
    "CorruptStorageError",
    "StorageError",
    # Implementations
    "FileSessionStorage",
    "InMemorySessionStorage",
]
