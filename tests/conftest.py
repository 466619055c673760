"""Pytest configuration and shared fixtures for catalog tests"""

from typing import AsyncGenerator, Callable, List, Optional

import pytest

from metacatalog.dao.base import DbSessionManager
from metacatalog.dao.json.session_manager import JsonSessionManager
from metacatalog.dao.relational.session_manager import RelationalSessionManager
from metacatalog.db.session import createEngine
from metacatalog.models.entities import Column, Index, ObjectHeader, Table
from metacatalog.providers.datatypes_provider import DataTypesProvider
from metacatalog.providers.indexes_provider import IndexesProvider
from metacatalog.providers.statistics_provider import StatisticsProvider
from metacatalog.providers.tables_provider import TablesProvider

INT32 = 4
INT64 = 6
VARCHAR = 14


# ==================== Backend Fixtures ====================


@pytest.fixture(params=["json", "relational"])
def backend(request) -> str:
    """Name of the storage backend under test"""
    return request.param


@pytest.fixture
async def sessionManagerFactory(backend: str, tmp_path) -> AsyncGenerator[Callable[[], DbSessionManager], None]:
    """Builds session managers that all share one backing store"""
    engines = []

    def factory() -> DbSessionManager:
        if backend == "json":
            return JsonSessionManager(str(tmp_path / "catalog"))
        if not engines:
            engines.append(createEngine(f"sqlite+aiosqlite:///{tmp_path}/catalog.db"))
        return RelationalSessionManager(engines[0])

    yield factory
    for engine in engines:
        await engine.dispose()


@pytest.fixture
async def sessionManager(sessionManagerFactory) -> AsyncGenerator[DbSessionManager, None]:
    """Connected session manager with proper cleanup"""
    manager = sessionManagerFactory()
    await manager.connect()
    try:
        yield manager
    finally:
        await manager.disconnect()


# ==================== Provider Fixtures ====================


@pytest.fixture
def tablesProvider(sessionManager: DbSessionManager) -> TablesProvider:
    return TablesProvider(sessionManager)


@pytest.fixture
def indexesProvider(sessionManager: DbSessionManager) -> IndexesProvider:
    return IndexesProvider(sessionManager)


@pytest.fixture
def statisticsProvider(sessionManager: DbSessionManager) -> StatisticsProvider:
    return StatisticsProvider(sessionManager)


@pytest.fixture
def dataTypesProvider(sessionManager: DbSessionManager) -> DataTypesProvider:
    return DataTypesProvider(sessionManager)


# ==================== Sample Records ====================


def makeColumn(name: str, ordinalPosition: int, dataTypeId: int = INT32, nullable: Optional[bool] = True) -> Column:
    return Column(
        header=ObjectHeader(name=name),
        ordinalPosition=ordinalPosition,
        dataTypeId=dataTypeId,
        nullable=nullable,
    )


def makeTable(name: str = "customer", columns: Optional[List[Column]] = None) -> Table:
    if columns is None:
        columns = [
            makeColumn("c_id", 1, INT64, nullable=False),
            makeColumn("c_name", 2, VARCHAR),
            makeColumn("c_age", 3, INT32),
        ]
    return Table(
        header=ObjectHeader(name=name),
        namespace="public",
        columns=columns,
        primaryKeys=[1],
    )


def makeIndex(name: str = "customer_pkey", ownerId: int = 1, keys: Optional[List[int]] = None) -> Index:
    return Index(
        header=ObjectHeader(name=name),
        ownerId=ownerId,
        accessMethod=403,
        keys=[1] if keys is None else keys,
    )
