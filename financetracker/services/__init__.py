"""
Services package.

The API gateway lives in financetracker.services.gateway and is imported
from there directly, since it depends on the session store.
"""

from financetracker.services.checkout import BillingInterval, CheckoutService
from financetracker.services.storage import (
    CorruptStorageError,
    FileSessionStorage,
    InMemorySessionStorage,
    SessionStorageInterface,
    StorageError,
)

__all__ = [
    # Checkout
    "BillingInterval",
    "CheckoutService",
    # Storage
    "CorruptStorageError",
    "FileSessionStorage",
    "InMemorySessionStorage",
    "SessionStorageInterface",
    "StorageError",
]
