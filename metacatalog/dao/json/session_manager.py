import logging
from typing import Any, Dict, List, Set

from metacatalog.core.exceptions import InternalErrorException, NotFoundException
from metacatalog.dao.base import DbSessionManager, TableName
from metacatalog.dao.json.object_id import JsonObjectIdGenerator
from metacatalog.services.storage_accessor import StorageAccessor

logger = logging.getLogger(__name__)

class JsonSessionManager(DbSessionManager):
    """
    Session over a directory of JSON documents, one per entity family.

    A transaction is purely in memory: DAOs mutate the loaded documents,
    commit writes every dirty document back, rollback drops them so the next
    access reloads from disk. Outside a transaction every read reloads.
    """

    def __init__(self, storageDirPath: str):
        super().__init__()
        self.storageAccessor = StorageAccessor(storageDirPath)
        self.objectIdGenerator = JsonObjectIdGenerator(self.storageAccessor)
        self._rootNodes: Dict[str, str] = {}
        self._contents: Dict[str, Dict[str, Any]] = {}
        self._dirty: Set[str] = set()

    def _createDao(self, tableName: TableName):
        from metacatalog.dao.json import daos

        daoClasses = {
            TableName.TABLES: daos.JsonTablesDao,
            TableName.COLUMNS: daos.JsonColumnsDao,
            TableName.INDEXES: daos.JsonIndexesDao,
            TableName.STATISTICS: daos.JsonStatisticsDao,
            TableName.DATATYPES: daos.JsonDataTypesDao,
        }
        return daoClasses[tableName](self)

    async def _connect(self) -> None:
        await self.storageAccessor.ensureDirectory()

    async def _disconnect(self) -> None:
        self._contents.clear()
        self._dirty.clear()

    async def _begin(self) -> None:
        self._contents.clear()
        self._dirty.clear()

    async def _commit(self) -> None:
        # The tables document goes first so a removed table disappears before its columns.
        tablesFile = f"{TableName.TABLES.value}.json"
        order = sorted(self._dirty, key=lambda fileName: (fileName != tablesFile, fileName))
        await self.storageAccessor.writeJsonFiles({fileName: self._contents[fileName] for fileName in order})
        self._dirty.clear()

    async def _rollback(self) -> None:
        self._contents.clear()
        self._dirty.clear()

    async def registerDocument(self, fileName: str, rootNode: str) -> None:
        self._rootNodes[fileName] = rootNode
        if not await self.storageAccessor.fileExists(fileName):
            logger.info("Creating metadata document %s", fileName)
            await self.storageAccessor.writeJsonFile(fileName, {rootNode: []})
        await self._readDocument(fileName)

    async def loadContents(self, fileName: str) -> List[Dict[str, Any]]:
        """Return the mutable root array of ``fileName``."""
        if not (self.inTransaction and fileName in self._contents):
            self._contents[fileName] = await self._readDocument(fileName)
        return self._contents[fileName][self._rootNodes[fileName]]

    def markDirty(self, fileName: str) -> None:
        self.ensureTransaction()
        self._dirty.add(fileName)

    async def _readDocument(self, fileName: str) -> Dict[str, Any]:
        rootNode = self._rootNodes[fileName]
        try:
            document = await self.storageAccessor.readJsonFile(fileName)
        except NotFoundException:
            raise InternalErrorException(f"Metadata document {fileName} disappeared.")
        if not isinstance(document, dict) or not isinstance(document.get(rootNode), list):
            raise InternalErrorException(f"Metadata document {fileName} has no '{rootNode}' array.")
        return document
