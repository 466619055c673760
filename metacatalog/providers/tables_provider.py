import logging
from typing import List, Optional

from metacatalog.core.exceptions import (
    AlreadyExistsException, InvalidParameterException, NotFoundException,
    TableNameAlreadyExistsException
)
from metacatalog.dao.base import ColumnsDao, DbSessionManager, LookupValue, StatisticsDao, TableName, TablesDao
from metacatalog.models.entities import Table, TableStatistic, KEY_ID, KEY_NAME
from metacatalog.providers.base_provider import BaseProvider
from metacatalog.providers.datatypes_provider import DataTypesProvider

logger = logging.getLogger(__name__)

class TablesProvider(BaseProvider):
    """
    Tables and their columns.

    A table row and its column rows are written in one transaction; a
    failure on any of them rolls the whole operation back. Removing a table
    also removes its columns and column statistics.
    """

    tablesDao: Optional[TablesDao] = None
    columnsDao: Optional[ColumnsDao] = None
    statisticsDao: Optional[StatisticsDao] = None

    def __init__(self, sessionManager: DbSessionManager, dataTypesProvider: Optional[DataTypesProvider] = None):
        super().__init__(sessionManager)
        self.dataTypesProvider = dataTypesProvider or DataTypesProvider(sessionManager)

    async def init(self) -> None:
        if self.tablesDao is None:
            self.tablesDao = await self.sessionManager.getDao(TableName.TABLES)
        if self.columnsDao is None:
            self.columnsDao = await self.sessionManager.getDao(TableName.COLUMNS)
        if self.statisticsDao is None:
            self.statisticsDao = await self.sessionManager.getDao(TableName.STATISTICS)
        await self.dataTypesProvider.init()

    async def addTable(self, table: Table) -> int:
        await self.init()
        await self.checkTable(table)

        await self.sessionManager.startTransaction()
        try:
            tableId = await self.tablesDao.insert(table)
        except Exception as e:
            await self.rollback(e)
            if isinstance(e, AlreadyExistsException) and await self._tableNameExists(table.header.name):
                raise TableNameAlreadyExistsException(table.header.name) from e
            raise self.catalogError(e)

        try:
            await self._insertColumns(tableId, table)
            await self.sessionManager.commit()
        except Exception as e:
            await self.abort(e)

        logger.info("Added table '%s' (id=%s, %d columns)", table.header.name, tableId, len(table.columns))
        return tableId

    async def getTable(self, key: str, value: LookupValue) -> Table:
        await self.init()
        table = await self.tablesDao.select(key, value)
        table.columns = await self.columnsDao.selectByTableId(table.header.id)
        return table

    async def getAllTables(self) -> List[Table]:
        await self.init()
        tables = await self.tablesDao.selectAll()
        for table in tables:
            table.columns = await self.columnsDao.selectByTableId(table.header.id)
        return tables

    async def updateTable(self, tableId: int, table: Table) -> None:
        """Replace the table definition, including its full column set."""
        await self.init()
        await self.checkTable(table)

        await self.sessionManager.startTransaction()
        try:
            try:
                await self.tablesDao.update(KEY_ID, tableId, table)
            except AlreadyExistsException as e:
                raise TableNameAlreadyExistsException(table.header.name) from e
            await self.columnsDao.removeByTableId(tableId)
            await self._insertColumns(tableId, table)
            await self.sessionManager.commit()
        except Exception as e:
            await self.abort(e)

    async def removeTable(self, key: str, value: LookupValue) -> int:
        await self.init()

        await self.sessionManager.startTransaction()
        try:
            tableId = await self.tablesDao.remove(key, value)
        except Exception as e:
            await self.abort(e)

        try:
            await self.columnsDao.removeByTableId(tableId)
            await self.statisticsDao.removeAllByTableId(tableId)
            await self.sessionManager.commit()
        except Exception as e:
            await self.abort(e)

        logger.info("Removed table %s=%s (id=%s)", key, value, tableId)
        return tableId

    async def setTableStatistic(self, statistic: TableStatistic) -> int:
        await self.init()
        if (statistic.id is None) == (statistic.name is None):
            raise InvalidParameterException("Exactly one of 'id' or 'name' must identify the table.")
        if statistic.tupleCount is None:
            raise InvalidParameterException("'tupleCount' is required.")
        key, value = (KEY_ID, statistic.id) if statistic.id is not None else (KEY_NAME, statistic.name)

        await self.sessionManager.startTransaction()
        try:
            tableId = await self.tablesDao.updateReltuples(statistic.tupleCount, key, value)
            await self.sessionManager.commit()
        except Exception as e:
            await self.abort(e)
        return tableId

    async def getTableStatistic(self, key: str, value: LookupValue) -> TableStatistic:
        await self.init()
        table = await self.tablesDao.select(key, value)
        return TableStatistic(id=table.header.id, name=table.header.name, tupleCount=table.tupleCount)

    async def checkTable(self, table: Table) -> None:
        if not table.header.name:
            raise InvalidParameterException("Table name is required.")

        for column in table.columns:
            if not column.header.name:
                raise InvalidParameterException(f"Column name is required (table '{table.header.name}').")
            if column.ordinalPosition is None or column.ordinalPosition <= 0:
                raise InvalidParameterException(
                    f"Column '{column.header.name}' needs a positive ordinal position."
                )
            if column.dataTypeId is None or column.dataTypeId < 0:
                raise InvalidParameterException(f"Column '{column.header.name}' needs a data type id.")
            try:
                await self.dataTypesProvider.getDataType(KEY_ID, column.dataTypeId)
            except NotFoundException:
                raise InvalidParameterException(
                    f"Column '{column.header.name}' refers to unknown data type id {column.dataTypeId}."
                )
            if column.nullable is None:
                raise InvalidParameterException(f"Column '{column.header.name}' must state 'nullable'.")

    async def _insertColumns(self, tableId: int, table: Table) -> None:
        for column in table.columns:
            await self.columnsDao.insert(column.model_copy(update={"tableId": tableId}))

    async def _tableNameExists(self, name: str) -> bool:
        try:
            existing = await self.tablesDao.select(KEY_NAME, name)
        except NotFoundException:
            return False
        return existing.header.id is not None
