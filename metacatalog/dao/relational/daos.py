import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from metacatalog.core.exceptions import (
    AlreadyExistsException, InternalErrorException, InvalidParameterException, NotFoundException
)
from metacatalog.dao.base import (
    ColumnsDao, DataTypesDao, GenericDao, IndexesDao, LookupValue, StatisticsDao, TableName, TablesDao,
    normalizeLookup, notFoundError, requireHeader
)
from metacatalog.db.models_db import (
    ColumnModel, ColumnStatisticModel, DataTypeModel, IndexModel, TableModel
)
from metacatalog.models import trees
from metacatalog.models.builtin_datatypes import builtinDataTypes
from metacatalog.models.entities import (
    Column, ColumnStatistic, ObjectHeader, FORMAT_VERSION, INITIAL_GENERATION, INVALID_OBJECT_ID
)

logger = logging.getLogger(__name__)


def rowToTree(model, row) -> Dict[str, Any]:
    return {column.key: getattr(row, column.key) for column in model.__table__.columns}


class SqlObjectDao(GenericDao):
    tableName: TableName
    model: Any

    def _toTree(self, record: Any) -> Dict[str, Any]:
        raise NotImplementedError

    def _fromTree(self, tree: Dict[str, Any]) -> Any:
        raise NotImplementedError

    def _duplicateCriteria(self, record: Any):
        return self.model.name == record.header.name

    def _convert(self, row) -> Any:
        tree = requireHeader(self.resourceType, rowToTree(self.model, row), self.model.__tablename__)
        try:
            return self._fromTree(tree)
        except ValueError as e:
            logger.error("Corrupt %s row in %s: %s", self.resourceType, self.model.__tablename__, e)
            raise InternalErrorException(f"Corrupt {self.resourceType} row in {self.model.__tablename__}.")

    async def _findRow(self, key: str, value: LookupValue):
        key, value = normalizeLookup(self.resourceType, key, value)
        result = await self.sessionManager.execute(
            select(self.model).where(getattr(self.model, key) == value).order_by(self.model.id).limit(1)
        )
        row = result.scalars().first()
        if row is None:
            raise notFoundError(self.resourceType, key, value)
        return row

    async def _hasDuplicate(self, record: Any, excludeId: Optional[int] = None) -> bool:
        stmt = select(self.model.id).where(self._duplicateCriteria(record))
        if excludeId is not None:
            stmt = stmt.where(self.model.id != excludeId)
        result = await self.sessionManager.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def prepare(self) -> None:
        await self.sessionManager.connect()
        await self.sessionManager.execute(select(func.count()).select_from(self.model))

    async def exists(self, name: str) -> bool:
        result = await self.sessionManager.execute(
            select(self.model.id).where(self.model.name == name).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def insert(self, record: Any) -> int:
        self.sessionManager.ensureTransaction()
        conflict = AlreadyExistsException(self.resourceType, record.header.name)
        if await self._hasDuplicate(record):
            raise conflict

        newId = await self.sessionManager.objectIdGenerator.generate(self.tableName.value)
        if newId == INVALID_OBJECT_ID:
            raise InternalErrorException(f"Could not generate an object id for {self.tableName.value}.")

        stamped = record.model_copy(deep=True)
        stamped.header = ObjectHeader(
            id=newId, name=record.header.name, formatVersion=FORMAT_VERSION, generation=INITIAL_GENERATION
        )
        self.sessionManager.session.add(self.model(**self._toTree(stamped)))
        await self.sessionManager.flush(conflict=conflict)
        return newId

    async def select(self, key: str, value: LookupValue) -> Any:
        return self._convert(await self._findRow(key, value))

    async def selectAll(self) -> List[Any]:
        result = await self.sessionManager.execute(select(self.model).order_by(self.model.id))
        return [self._convert(row) for row in result.scalars().all()]

    async def update(self, key: str, value: LookupValue, record: Any) -> None:
        self.sessionManager.ensureTransaction()
        row = await self._findRow(key, value)
        conflict = AlreadyExistsException(self.resourceType, record.header.name)
        if await self._hasDuplicate(record, excludeId=row.id):
            raise conflict

        updated = record.model_copy(deep=True)
        updated.header = ObjectHeader(
            id=row.id,
            name=record.header.name,
            formatVersion=row.formatVersion,
            generation=(row.generation or 0) + 1,
        )
        for attribute, newValue in self._toTree(updated).items():
            setattr(row, attribute, newValue)
        await self.sessionManager.flush(conflict=conflict)

    async def remove(self, key: str, value: LookupValue) -> int:
        self.sessionManager.ensureTransaction()
        row = await self._findRow(key, value)
        objectId = row.id
        await self.sessionManager.session.delete(row)
        await self.sessionManager.flush()
        return objectId


class SqlTablesDao(SqlObjectDao, TablesDao):
    tableName = TableName.TABLES
    model = TableModel

    def _toTree(self, record):
        return trees.tableToTree(record, withColumns=False)

    def _fromTree(self, tree):
        return trees.tableFromTree(tree)

    async def updateReltuples(self, tupleCount: float, key: str, value: LookupValue) -> int:
        self.sessionManager.ensureTransaction()
        row = await self._findRow(key, value)
        row.tupleCount = tupleCount
        await self.sessionManager.flush()
        return row.id


class SqlColumnsDao(SqlObjectDao, ColumnsDao):
    tableName = TableName.COLUMNS
    model = ColumnModel

    def _toTree(self, record):
        return trees.columnToTree(record)

    def _fromTree(self, tree):
        return trees.columnFromTree(tree)

    def _duplicateCriteria(self, record: Column):
        return (ColumnModel.tableId == record.tableId) & or_(
            ColumnModel.name == record.header.name,
            ColumnModel.ordinalPosition == record.ordinalPosition,
        )

    async def selectByTableId(self, tableId: int) -> List[Column]:
        result = await self.sessionManager.execute(
            select(ColumnModel).where(ColumnModel.tableId == tableId).order_by(ColumnModel.ordinalPosition)
        )
        return [self._convert(row) for row in result.scalars().all()]

    async def removeByTableId(self, tableId: int) -> int:
        self.sessionManager.ensureTransaction()
        result = await self.sessionManager.execute(delete(ColumnModel).where(ColumnModel.tableId == tableId))
        return result.rowcount


class SqlIndexesDao(SqlObjectDao, IndexesDao):
    tableName = TableName.INDEXES
    model = IndexModel

    def _toTree(self, record):
        return trees.indexToTree(record)

    def _fromTree(self, tree):
        return trees.indexFromTree(tree)


class SqlDataTypesDao(SqlObjectDao, DataTypesDao):
    resourceType = DataTypesDao.resourceType
    tableName = TableName.DATATYPES
    model = DataTypeModel

    def _toTree(self, record):
        return trees.dataTypeToTree(record)

    def _fromTree(self, tree):
        return trees.dataTypeFromTree(tree)

    async def prepare(self) -> None:
        await self.sessionManager.connect()
        result = await self.sessionManager.execute(select(func.count()).select_from(DataTypeModel))
        if result.scalar_one():
            return
        logger.info("Seeding built-in data types")
        session = self.sessionManager.session
        try:
            session.add_all([DataTypeModel(**self._toTree(d)) for d in builtinDataTypes()])
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Seeding data types failed: %s", e)
            raise InternalErrorException(f"Seeding data types failed: {e}")


class SqlStatisticsDao(StatisticsDao):
    tableName = TableName.STATISTICS

    def _convert(self, row) -> ColumnStatistic:
        try:
            return trees.columnStatisticFromTree(rowToTree(ColumnStatisticModel, row))
        except ValueError as e:
            logger.error("Corrupt column statistic row: %s", e)
            raise InternalErrorException(f"Corrupt {self.resourceType} row in {ColumnStatisticModel.__tablename__}.")

    @staticmethod
    def _criteria(tableId: int, ordinalPosition: int):
        return (ColumnStatisticModel.tableId == tableId) & (ColumnStatisticModel.ordinalPosition == ordinalPosition)

    async def _findRow(self, tableId: int, ordinalPosition: int):
        result = await self.sessionManager.execute(
            select(ColumnStatisticModel).where(self._criteria(tableId, ordinalPosition))
        )
        return result.scalars().first()

    async def prepare(self) -> None:
        await self.sessionManager.connect()
        await self.sessionManager.execute(select(func.count()).select_from(ColumnStatisticModel))

    async def upsert(self, statistic: ColumnStatistic) -> None:
        self.sessionManager.ensureTransaction()
        row = await self._findRow(statistic.tableId, statistic.ordinalPosition)
        if row is None:
            self.sessionManager.session.add(ColumnStatisticModel(**trees.columnStatisticToTree(statistic)))
        else:
            row.columnStatistic = statistic.columnStatistic
        await self.sessionManager.flush()

    async def select(self, tableId: int, ordinalPosition: int) -> ColumnStatistic:
        row = await self._findRow(tableId, ordinalPosition)
        if row is None:
            raise NotFoundException(self.resourceType, f"tableId={tableId}, ordinalPosition={ordinalPosition}")
        return self._convert(row)

    async def selectAllByTableId(self, tableId: int) -> Dict[int, ColumnStatistic]:
        result = await self.sessionManager.execute(
            select(ColumnStatisticModel)
            .where(ColumnStatisticModel.tableId == tableId)
            .order_by(ColumnStatisticModel.ordinalPosition)
        )
        rows = result.scalars().all()
        if not rows:
            raise InvalidParameterException(f"No column statistics for table id {tableId}.")
        return {row.ordinalPosition: self._convert(row) for row in rows}

    async def remove(self, tableId: int, ordinalPosition: int) -> None:
        self.sessionManager.ensureTransaction()
        result = await self.sessionManager.execute(
            delete(ColumnStatisticModel).where(self._criteria(tableId, ordinalPosition))
        )
        if result.rowcount == 0:
            raise NotFoundException(self.resourceType, f"tableId={tableId}, ordinalPosition={ordinalPosition}")

    async def removeAllByTableId(self, tableId: int) -> int:
        self.sessionManager.ensureTransaction()
        result = await self.sessionManager.execute(
            delete(ColumnStatisticModel).where(ColumnStatisticModel.tableId == tableId)
        )
        return result.rowcount
