import asyncio
import copy
import weakref
from typing import Any, Dict, List, Tuple


class KeyValueStore:
    """
    In-process key-value store with get / set / prefix scan.

    Values are deep-copied in and out, so callers never share mutable state
    with the store.
    """

    def __init__(self):
        self._data: Dict[str, Any] = {}
        # a group's lock lives only while someone holds or waits on it
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    async def get(self, key: str, default=None):
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    async def set(self, key: str, value) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def scan(self, prefix: str) -> List[Tuple[str, Any]]:
        return [
            (key, copy.deepcopy(value))
            for key, value in self._data.items()
            if key.startswith(prefix)
        ]

    def lock(self, group_id: str) -> asyncio.Lock:
        """Lock serialising read-modify-write of one group's ledger."""
        lock = self._locks.get(group_id)
        if lock is None:
            lock = self._locks[group_id] = asyncio.Lock()
        return lock


store = KeyValueStore()


async def get_store():
    yield store


def group_key(group_id: str, *parts: str) -> str:
    return ":".join(("group", group_id) + parts)
