import logging
from typing import Any, Dict, List

from metacatalog.core.exceptions import (
    AlreadyExistsException, InternalErrorException, InvalidParameterException, NotFoundException
)
from metacatalog.dao.base import (
    ColumnsDao, DataTypesDao, GenericDao, IndexesDao, LookupValue, StatisticsDao, TableName, TablesDao,
    normalizeLookup, notFoundError, requireHeader
)
from metacatalog.models import trees
from metacatalog.models.builtin_datatypes import builtinDataTypes
from metacatalog.models.entities import (
    Column, ColumnStatistic, ObjectHeader, FORMAT_VERSION, INITIAL_GENERATION, INVALID_OBJECT_ID,
    KEY_ID, KEY_NAME
)

logger = logging.getLogger(__name__)


class JsonObjectDao(GenericDao):
    tableName: TableName

    @property
    def fileName(self) -> str:
        return f"{self.tableName.value}.json"

    def _toTree(self, record: Any) -> Dict[str, Any]:
        raise NotImplementedError

    def _fromTree(self, tree: Dict[str, Any]) -> Any:
        raise NotImplementedError

    def _isDuplicate(self, tree: Dict[str, Any], record: Any) -> bool:
        return tree.get(KEY_NAME) == record.header.name

    def _convert(self, tree: Dict[str, Any]) -> Any:
        requireHeader(self.resourceType, tree, self.fileName)
        try:
            return self._fromTree(tree)
        except ValueError as e:
            logger.error("Corrupt %s record in %s: %s", self.resourceType, self.fileName, e)
            raise InternalErrorException(f"Corrupt {self.resourceType} record in {self.fileName}.")

    def _findPosition(self, objects: List[Dict[str, Any]], key: str, value: LookupValue) -> int:
        for position, tree in enumerate(objects):
            if not isinstance(tree, dict) or key not in tree:
                raise InternalErrorException(f"{self.resourceType} record without '{key}' in {self.fileName}.")
            if tree[key] == value:
                return position
        raise notFoundError(self.resourceType, key, value)

    async def _objects(self) -> List[Dict[str, Any]]:
        return await self.sessionManager.loadContents(self.fileName)

    async def prepare(self) -> None:
        await self.sessionManager.registerDocument(self.fileName, self.tableName.value)

    async def exists(self, name: str) -> bool:
        objects = await self._objects()
        return any(isinstance(tree, dict) and tree.get(KEY_NAME) == name for tree in objects)

    async def insert(self, record: Any) -> int:
        self.sessionManager.ensureTransaction()
        objects = await self._objects()
        if any(isinstance(tree, dict) and self._isDuplicate(tree, record) for tree in objects):
            raise AlreadyExistsException(self.resourceType, record.header.name)

        newId = await self.sessionManager.objectIdGenerator.generate(self.tableName.value)
        if newId == INVALID_OBJECT_ID:
            raise InternalErrorException(f"Could not generate an object id for {self.tableName.value}.")

        stamped = record.model_copy(deep=True)
        stamped.header = ObjectHeader(
            id=newId, name=record.header.name, formatVersion=FORMAT_VERSION, generation=INITIAL_GENERATION
        )
        objects.append(self._toTree(stamped))
        self.sessionManager.markDirty(self.fileName)
        return newId

    async def select(self, key: str, value: LookupValue) -> Any:
        key, value = normalizeLookup(self.resourceType, key, value)
        objects = await self._objects()
        return self._convert(objects[self._findPosition(objects, key, value)])

    async def selectAll(self) -> List[Any]:
        return [self._convert(tree) for tree in await self._objects()]

    async def update(self, key: str, value: LookupValue, record: Any) -> None:
        self.sessionManager.ensureTransaction()
        key, value = normalizeLookup(self.resourceType, key, value)
        objects = await self._objects()
        position = self._findPosition(objects, key, value)
        previous = requireHeader(self.resourceType, objects[position], self.fileName)
        if any(
            isinstance(tree, dict) and self._isDuplicate(tree, record)
            for other, tree in enumerate(objects) if other != position
        ):
            raise AlreadyExistsException(self.resourceType, record.header.name)

        updated = record.model_copy(deep=True)
        updated.header = ObjectHeader(
            id=previous.get(KEY_ID),
            name=record.header.name,
            formatVersion=previous.get("formatVersion"),
            generation=(previous.get("generation") or 0) + 1,
        )
        objects[position] = self._toTree(updated)
        self.sessionManager.markDirty(self.fileName)

    async def remove(self, key: str, value: LookupValue) -> int:
        self.sessionManager.ensureTransaction()
        key, value = normalizeLookup(self.resourceType, key, value)
        objects = await self._objects()
        position = self._findPosition(objects, key, value)
        requireHeader(self.resourceType, objects[position], self.fileName)
        removed = objects.pop(position)
        self.sessionManager.markDirty(self.fileName)
        return int(removed[KEY_ID])


class JsonTablesDao(JsonObjectDao, TablesDao):
    tableName = TableName.TABLES

    def _toTree(self, record):
        # Columns live in their own document.
        return trees.tableToTree(record, withColumns=False)

    def _fromTree(self, tree):
        return trees.tableFromTree(tree)

    async def updateReltuples(self, tupleCount: float, key: str, value: LookupValue) -> int:
        self.sessionManager.ensureTransaction()
        key, value = normalizeLookup(self.resourceType, key, value)
        objects = await self._objects()
        tree = requireHeader(self.resourceType, objects[self._findPosition(objects, key, value)], self.fileName)
        tree["tupleCount"] = tupleCount
        self.sessionManager.markDirty(self.fileName)
        return int(tree[KEY_ID])


class JsonColumnsDao(JsonObjectDao, ColumnsDao):
    tableName = TableName.COLUMNS

    def _toTree(self, record):
        return trees.columnToTree(record)

    def _fromTree(self, tree):
        return trees.columnFromTree(tree)

    def _isDuplicate(self, tree: Dict[str, Any], record: Column) -> bool:
        if tree.get("tableId") != record.tableId:
            return False
        return tree.get(KEY_NAME) == record.header.name or tree.get("ordinalPosition") == record.ordinalPosition

    async def selectByTableId(self, tableId: int) -> List[Column]:
        columns = [
            self._convert(tree) for tree in await self._objects()
            if isinstance(tree, dict) and tree.get("tableId") == tableId
        ]
        return sorted(columns, key=lambda c: c.ordinalPosition)

    async def removeByTableId(self, tableId: int) -> int:
        self.sessionManager.ensureTransaction()
        objects = await self._objects()
        kept = [tree for tree in objects if not (isinstance(tree, dict) and tree.get("tableId") == tableId)]
        removedCount = len(objects) - len(kept)
        if removedCount:
            objects[:] = kept
            self.sessionManager.markDirty(self.fileName)
        return removedCount


class JsonIndexesDao(JsonObjectDao, IndexesDao):
    tableName = TableName.INDEXES

    def _toTree(self, record):
        return trees.indexToTree(record)

    def _fromTree(self, tree):
        return trees.indexFromTree(tree)


class JsonDataTypesDao(JsonObjectDao, DataTypesDao):
    resourceType = DataTypesDao.resourceType
    tableName = TableName.DATATYPES

    def _toTree(self, record):
        return trees.dataTypeToTree(record)

    def _fromTree(self, tree):
        return trees.dataTypeFromTree(tree)

    async def prepare(self) -> None:
        await super().prepare()
        if await self._objects():
            return
        logger.info("Seeding built-in data types into %s", self.fileName)
        await self.sessionManager.storageAccessor.writeJsonFile(
            self.fileName, {self.tableName.value: [self._toTree(d) for d in builtinDataTypes()]}
        )


class JsonStatisticsDao(StatisticsDao):
    tableName = TableName.STATISTICS

    @property
    def fileName(self) -> str:
        return f"{self.tableName.value}.json"

    async def prepare(self) -> None:
        await self.sessionManager.registerDocument(self.fileName, self.tableName.value)

    def _convert(self, tree: Dict[str, Any]) -> ColumnStatistic:
        try:
            return trees.columnStatisticFromTree(tree)
        except ValueError as e:
            logger.error("Corrupt column statistic in %s: %s", self.fileName, e)
            raise InternalErrorException(f"Corrupt {self.resourceType} record in {self.fileName}.")

    @staticmethod
    def _matches(tree: Any, tableId: int, ordinalPosition: int) -> bool:
        return (
            isinstance(tree, dict)
            and tree.get("tableId") == tableId
            and tree.get("ordinalPosition") == ordinalPosition
        )

    async def upsert(self, statistic: ColumnStatistic) -> None:
        self.sessionManager.ensureTransaction()
        objects = await self.sessionManager.loadContents(self.fileName)
        tree = trees.columnStatisticToTree(statistic)
        for position, existing in enumerate(objects):
            if self._matches(existing, statistic.tableId, statistic.ordinalPosition):
                objects[position] = tree
                break
        else:
            objects.append(tree)
        self.sessionManager.markDirty(self.fileName)

    async def select(self, tableId: int, ordinalPosition: int) -> ColumnStatistic:
        for tree in await self.sessionManager.loadContents(self.fileName):
            if self._matches(tree, tableId, ordinalPosition):
                return self._convert(tree)
        raise NotFoundException(self.resourceType, f"tableId={tableId}, ordinalPosition={ordinalPosition}")

    async def selectAllByTableId(self, tableId: int) -> Dict[int, ColumnStatistic]:
        statistics = [
            self._convert(tree) for tree in await self.sessionManager.loadContents(self.fileName)
            if isinstance(tree, dict) and tree.get("tableId") == tableId
        ]
        if not statistics:
            raise InvalidParameterException(f"No column statistics for table id {tableId}.")
        return {s.ordinalPosition: s for s in sorted(statistics, key=lambda s: s.ordinalPosition)}

    async def remove(self, tableId: int, ordinalPosition: int) -> None:
        self.sessionManager.ensureTransaction()
        objects = await self.sessionManager.loadContents(self.fileName)
        for position, tree in enumerate(objects):
            if self._matches(tree, tableId, ordinalPosition):
                del objects[position]
                self.sessionManager.markDirty(self.fileName)
                return
        raise NotFoundException(self.resourceType, f"tableId={tableId}, ordinalPosition={ordinalPosition}")

    async def removeAllByTableId(self, tableId: int) -> int:
        self.sessionManager.ensureTransaction()
        objects = await self.sessionManager.loadContents(self.fileName)
        kept = [tree for tree in objects if not (isinstance(tree, dict) and tree.get("tableId") == tableId)]
        removedCount = len(objects) - len(kept)
        if removedCount:
            objects[:] = kept
            self.sessionManager.markDirty(self.fileName)
        return removedCount
