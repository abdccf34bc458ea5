"""
Key-Value Store Module

This module implements the shared key-value map used by every
connection. All access goes through the synchronized accessors below.
"""

from typing import Any, Dict, Optional

from .rwlock import ReadWriteLock


class KVStore:
    """
    Thread-safe in-memory string key-value store.

    This class provides O(1) average-case time complexity for:
    - set: Insert or overwrite a key-value pair
    - get: Retrieve a value by key

    Concurrency:
        Reads take the shared side of a ReadWriteLock and may run in
        parallel; writes take the exclusive side. A get() therefore sees
        either a miss or the value of a set() that completed before it
        started, never a partially applied write.

    A store is an ordinary object: create one per server (or per test)
    and pass it to whatever needs it.
    """

    def __init__(self):
        self._lock = ReadWriteLock()
        self._data: Dict[str, str] = {}
        self._writes = 0

    def set(self, key: str, value: str) -> None:
        """
        Insert or overwrite a key-value pair.

        Args:
            key: The key to store
            value: The value to associate with the key

        Time Complexity: O(1) average
        """
        with self._lock.write_locked():
            self._data[key] = value
            self._writes += 1

    def get(self, key: str) -> Optional[str]:
        """
        Retrieve the value for a given key.

        Args:
            key: The key to look up

        Returns:
            The value if present, None otherwise

        Time Complexity: O(1) average
        """
        with self._lock.read_locked():
            return self._data.get(key)

    def size(self) -> int:
        """Get the current number of keys in the store."""
        with self._lock.read_locked():
            return len(self._data)

    def clear(self) -> None:
        """Remove all keys from the store."""
        with self._lock.write_locked():
            self._data.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - total_keys: Keys currently stored
            - total_writes: Number of set() calls served
        """
        with self._lock.read_locked():
            return {
                "total_keys": len(self._data),
                "total_writes": self._writes,
            }
