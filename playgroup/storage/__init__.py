from playgroup.storage.base import Storage
from playgroup.storage.database import DatabaseStorage, get_storage
from playgroup.storage.memory import MemStorage

__all__ = ["DatabaseStorage", "MemStorage", "Storage", "get_storage"]
