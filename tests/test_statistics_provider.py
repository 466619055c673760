"""Tests for StatisticsProvider"""

import pytest

from conftest import makeTable
from metacatalog.core.exceptions import BaseCatalogException, ErrorCode, InvalidParameterException
from metacatalog.models.entities import ColumnStatistic
from metacatalog.providers.statistics_provider import StatisticsProvider
from metacatalog.providers.tables_provider import TablesProvider


@pytest.fixture
async def tableId(tablesProvider: TablesProvider) -> int:
    return await tablesProvider.addTable(makeTable())


def statistic(tableId: int, ordinalPosition: int, **payload) -> ColumnStatistic:
    return ColumnStatistic(tableId=tableId, ordinalPosition=ordinalPosition, columnStatistic=payload)


class TestColumnStatistics:
    """Test column statistics keyed by (tableId, ordinalPosition)."""

    @pytest.mark.asyncio
    async def test_add_and_get(self, statisticsProvider: StatisticsProvider, tableId: int):
        payload = {"nullFraction": 0.25, "mostCommonValues": ["a", "b"], "histogram": {"bounds": [1, 5, 9]}}
        await statisticsProvider.addColumnStatistic(statistic(tableId, 2, **payload))

        stored = await statisticsProvider.getColumnStatistic(tableId, 2)
        assert stored.columnStatistic == payload

    @pytest.mark.asyncio
    async def test_upsert_overwrites(self, statisticsProvider: StatisticsProvider, tableId: int):
        await statisticsProvider.addColumnStatistic(statistic(tableId, 1, distinct=10))
        await statisticsProvider.addColumnStatistic(statistic(tableId, 1, distinct=20))

        statistics = await statisticsProvider.getAllColumnStatistics(tableId)
        assert list(statistics) == [1]
        assert statistics[1].columnStatistic == {"distinct": 20}

    @pytest.mark.asyncio
    async def test_all_by_ordinal_position(self, statisticsProvider: StatisticsProvider, tableId: int):
        for ordinalPosition in (3, 1, 2):
            await statisticsProvider.addColumnStatistic(statistic(tableId, ordinalPosition, ordinal=ordinalPosition))

        statistics = await statisticsProvider.getAllColumnStatistics(tableId)
        assert list(statistics) == [1, 2, 3]
        assert all(s.tableId == tableId for s in statistics.values())

    @pytest.mark.asyncio
    async def test_none_recorded(self, statisticsProvider: StatisticsProvider, tableId: int):
        """Test that a table without statistics is reported as an invalid parameter."""
        with pytest.raises(InvalidParameterException):
            await statisticsProvider.getAllColumnStatistics(tableId)

    @pytest.mark.asyncio
    async def test_missing_table(self, statisticsProvider: StatisticsProvider):
        with pytest.raises(BaseCatalogException) as excInfo:
            await statisticsProvider.addColumnStatistic(statistic(999, 1, distinct=1))
        assert excInfo.value.errorCode == ErrorCode.ID_NOT_FOUND

    @pytest.mark.asyncio
    async def test_non_positive_position(self, statisticsProvider: StatisticsProvider, tableId: int):
        with pytest.raises(InvalidParameterException):
            await statisticsProvider.addColumnStatistic(statistic(tableId, 0))

    @pytest.mark.asyncio
    async def test_missing_statistic(self, statisticsProvider: StatisticsProvider, tableId: int):
        with pytest.raises(BaseCatalogException) as excInfo:
            await statisticsProvider.getColumnStatistic(tableId, 1)
        assert excInfo.value.errorCode == ErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_remove(self, statisticsProvider: StatisticsProvider, tableId: int):
        await statisticsProvider.addColumnStatistic(statistic(tableId, 1, distinct=1))
        await statisticsProvider.addColumnStatistic(statistic(tableId, 2, distinct=2))

        await statisticsProvider.removeColumnStatistic(tableId, 1)
        assert list(await statisticsProvider.getAllColumnStatistics(tableId)) == [2]

        with pytest.raises(BaseCatalogException) as excInfo:
            await statisticsProvider.removeColumnStatistic(tableId, 1)
        assert excInfo.value.errorCode == ErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_remove_all(self, statisticsProvider: StatisticsProvider, tableId: int):
        for ordinalPosition in (1, 2, 3):
            await statisticsProvider.addColumnStatistic(statistic(tableId, ordinalPosition, distinct=ordinalPosition))

        assert await statisticsProvider.removeAllColumnStatistics(tableId) == 3
        assert await statisticsProvider.removeAllColumnStatistics(tableId) == 0

    @pytest.mark.asyncio
    async def test_statistics_leave_table_untouched(
        self, statisticsProvider: StatisticsProvider, tablesProvider: TablesProvider, tableId: int
    ):
        """Test that statistics writes do not bump the table generation."""
        before = await tablesProvider.getTable("id", tableId)
        await statisticsProvider.addColumnStatistic(statistic(tableId, 1, distinct=5))
        after = await tablesProvider.getTable("id", tableId)
        assert after == before
