"""
Storage capability and its two backends.

MemoryStorage and DatabaseStorage satisfy the same Storage protocol;
create_storage_provider() picks one from configuration.
"""

from derra.storage.factory import StorageProvider, create_storage_provider
from derra.storage.interface import Storage
from derra.storage.memory import MemoryStorage

__all__ = ["MemoryStorage", "Storage", "StorageProvider", "create_storage_provider"]
