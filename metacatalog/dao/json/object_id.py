import asyncio
import logging
import weakref
from typing import Dict

from metacatalog.core.exceptions import BaseCatalogException
from metacatalog.models.entities import INVALID_OBJECT_ID
from metacatalog.services.storage_accessor import StorageAccessor

logger = logging.getLogger(__name__)

class JsonObjectIdGenerator:
    """
    Durable per-family counters kept in ``oid.json``.

    The read-increment-write cycle runs under one lock per counter file,
    shared by every generator in the process, and the file is replaced
    atomically. Separate processes sharing the directory are not serialized.
    """

    FILE_NAME = "oid.json"

    # A lock lives only while some generator holds it.
    _locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def __init__(self, storageAccessor: StorageAccessor):
        self.storageAccessor = storageAccessor

    def _lock(self) -> asyncio.Lock:
        path = self.storageAccessor.resolvePath(self.FILE_NAME)
        lock = self._locks.get(path)
        if lock is None:
            lock = self._locks[path] = asyncio.Lock()
        return lock

    async def generate(self, tableName: str) -> int:
        """Return the next id for ``tableName``, or INVALID_OBJECT_ID if the store is unusable."""
        async with self._lock():
            try:
                counters = await self._readCounters()
                newId = int(counters.get(tableName, 0)) + 1
                counters[tableName] = newId
                await self.storageAccessor.writeJsonFile(self.FILE_NAME, counters)
            except (BaseCatalogException, TypeError, ValueError) as e:
                logger.error("Object id generation failed for '%s': %s", tableName, e)
                return INVALID_OBJECT_ID
        return newId

    async def _readCounters(self) -> Dict[str, int]:
        if not await self.storageAccessor.fileExists(self.FILE_NAME):
            return {}
        counters = await self.storageAccessor.readJsonFile(self.FILE_NAME)
        if not isinstance(counters, dict):
            raise ValueError(f"{self.FILE_NAME} does not contain a mapping")
        return counters
