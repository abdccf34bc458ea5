"""Store module for resp-kv."""

from .dispatcher import CommandDispatcher
from .rwlock import ReadWriteLock
from .store import KVStore

__all__ = ["CommandDispatcher", "KVStore", "ReadWriteLock"]
