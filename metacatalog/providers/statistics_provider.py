from typing import Dict, Optional

from metacatalog.core.exceptions import InvalidParameterException
from metacatalog.dao.base import StatisticsDao, TableName, TablesDao
from metacatalog.models.entities import ColumnStatistic, KEY_ID
from metacatalog.providers.base_provider import BaseProvider

class StatisticsProvider(BaseProvider):
    """
    Column statistics, keyed by (tableId, ordinalPosition).

    The statistic payload is stored as given; the catalog never reads it.
    """

    statisticsDao: Optional[StatisticsDao] = None
    tablesDao: Optional[TablesDao] = None

    async def init(self) -> None:
        if self.statisticsDao is None:
            self.statisticsDao = await self.sessionManager.getDao(TableName.STATISTICS)
        if self.tablesDao is None:
            self.tablesDao = await self.sessionManager.getDao(TableName.TABLES)

    async def addColumnStatistic(self, statistic: ColumnStatistic) -> None:
        await self.init()
        self._checkPosition(statistic.tableId, statistic.ordinalPosition)
        # The owning table must exist.
        await self.tablesDao.select(KEY_ID, statistic.tableId)

        await self.sessionManager.startTransaction()
        try:
            await self.statisticsDao.upsert(statistic)
            await self.sessionManager.commit()
        except Exception as e:
            await self.abort(e)

    async def getColumnStatistic(self, tableId: int, ordinalPosition: int) -> ColumnStatistic:
        await self.init()
        self._checkPosition(tableId, ordinalPosition)
        return await self.statisticsDao.select(tableId, ordinalPosition)

    async def getAllColumnStatistics(self, tableId: int) -> Dict[int, ColumnStatistic]:
        """Statistics of one table by ordinal position; INVALID_PARAMETER when there are none."""
        await self.init()
        return await self.statisticsDao.selectAllByTableId(tableId)

    async def removeColumnStatistic(self, tableId: int, ordinalPosition: int) -> None:
        await self.init()
        self._checkPosition(tableId, ordinalPosition)

        await self.sessionManager.startTransaction()
        try:
            await self.statisticsDao.remove(tableId, ordinalPosition)
            await self.sessionManager.commit()
        except Exception as e:
            await self.abort(e)

    async def removeAllColumnStatistics(self, tableId: int) -> int:
        await self.init()

        await self.sessionManager.startTransaction()
        try:
            removedCount = await self.statisticsDao.removeAllByTableId(tableId)
            await self.sessionManager.commit()
        except Exception as e:
            await self.abort(e)
        return removedCount

    @staticmethod
    def _checkPosition(tableId: int, ordinalPosition: int) -> None:
        if tableId <= 0 or ordinalPosition <= 0:
            raise InvalidParameterException("tableId and ordinalPosition must be positive.")
