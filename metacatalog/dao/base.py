"""
Backend-independent DAO contract and session manager state machine.

Providers only see the abstract classes declared here; the ``json`` and
``relational`` packages implement them.
"""
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Tuple, Union

from metacatalog.core.exceptions import (
    IdNotFoundException, NameNotFoundException, NotFoundException,
    NotSupportedException, InternalErrorException
)
from metacatalog.models.entities import (
    Column, ColumnStatistic, DataType, KEY_ID, KEY_NAME
)
from metacatalog.models.trees import HEADER_FIELDS

logger = logging.getLogger(__name__)

LookupValue = Union[int, str]

class TableName(str, Enum):
    TABLES = "tables"
    COLUMNS = "columns"
    INDEXES = "indexes"
    STATISTICS = "column_statistics"
    DATATYPES = "datatypes"

class SessionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    TRANSACTION_OPEN = "transaction-open"

def notFoundError(resourceType: str, key: str, value: Any) -> NotFoundException:
    if key == KEY_ID:
        return IdNotFoundException(resourceType, value)
    if key == KEY_NAME:
        return NameNotFoundException(resourceType, value)
    return NotFoundException(resourceType, f"{key}={value}")

def normalizeLookup(resourceType: str, key: str, value: LookupValue) -> Tuple[str, LookupValue]:
    """Validate a (key, value) lookup pair and coerce the value to the key's type."""
    if key == KEY_ID:
        try:
            return key, int(value)
        except (TypeError, ValueError):
            raise IdNotFoundException(resourceType, value)
    if key == KEY_NAME:
        return key, str(value)
    raise NotSupportedException(key, [KEY_ID, KEY_NAME])

def requireHeader(resourceType: str, tree: Any, location: str) -> Dict[str, Any]:
    """Reject a stored record that is not an object or whose header is incomplete."""
    if not isinstance(tree, dict):
        raise InternalErrorException(f"{resourceType} record in {location} is not an object.")
    missing = [field for field in HEADER_FIELDS if tree.get(field) is None]
    if missing:
        logger.error("%s record in %s lacks %s", resourceType, location, ", ".join(missing))
        raise InternalErrorException(f"{resourceType} record in {location} lacks {', '.join(missing)}.")
    return tree


class GenericDao(ABC):
    resourceType: str = "Object"

    def __init__(self, sessionManager: "DbSessionManager"):
        self.sessionManager = sessionManager

    @abstractmethod
    async def prepare(self) -> None: ...

    @abstractmethod
    async def exists(self, name: str) -> bool: ...

    @abstractmethod
    async def insert(self, record: Any) -> int: ...

    @abstractmethod
    async def select(self, key: str, value: LookupValue) -> Any: ...

    @abstractmethod
    async def selectAll(self) -> List[Any]: ...

    @abstractmethod
    async def update(self, key: str, value: LookupValue, record: Any) -> None: ...

    @abstractmethod
    async def remove(self, key: str, value: LookupValue) -> int: ...


class TablesDao(GenericDao):
    resourceType = "Table"

    @abstractmethod
    async def updateReltuples(self, tupleCount: float, key: str, value: LookupValue) -> int: ...


class ColumnsDao(GenericDao):
    resourceType = "Column"

    @abstractmethod
    async def selectByTableId(self, tableId: int) -> List[Column]: ...

    @abstractmethod
    async def removeByTableId(self, tableId: int) -> int: ...


class IndexesDao(GenericDao):
    resourceType = "Index"


class DataTypesDao(ABC):
    resourceType = "DataType"

    def __init__(self, sessionManager: "DbSessionManager"):
        self.sessionManager = sessionManager

    @abstractmethod
    async def prepare(self) -> None: ...

    @abstractmethod
    async def select(self, key: str, value: LookupValue) -> DataType: ...

    @abstractmethod
    async def selectAll(self) -> List[DataType]: ...


class StatisticsDao(ABC):
    resourceType = "ColumnStatistic"

    def __init__(self, sessionManager: "DbSessionManager"):
        self.sessionManager = sessionManager

    @abstractmethod
    async def prepare(self) -> None: ...

    @abstractmethod
    async def upsert(self, statistic: ColumnStatistic) -> None: ...

    @abstractmethod
    async def select(self, tableId: int, ordinalPosition: int) -> ColumnStatistic: ...

    @abstractmethod
    async def selectAllByTableId(self, tableId: int) -> Dict[int, ColumnStatistic]: ...

    @abstractmethod
    async def remove(self, tableId: int, ordinalPosition: int) -> None: ...

    @abstractmethod
    async def removeAllByTableId(self, tableId: int) -> int: ...


class DbSessionManager(ABC):
    """
    Owns one connection/session handle and the DAOs bound to it.

    disconnected -> connected -> transaction-open -> connected.
    Calling startTransaction/commit/rollback out of order raises
    InternalErrorException.
    """

    def __init__(self):
        self.state = SessionState.DISCONNECTED
        self._daos: Dict[TableName, Any] = {}

    @property
    def inTransaction(self) -> bool:
        return self.state == SessionState.TRANSACTION_OPEN

    async def connect(self) -> None:
        if self.state != SessionState.DISCONNECTED:
            return
        await self._connect()
        self.state = SessionState.CONNECTED

    async def disconnect(self) -> None:
        if self.state == SessionState.DISCONNECTED:
            return
        if self.inTransaction:
            logger.warning("Disconnecting with an open transaction; rolling back.")
            await self._rollback()
        await self._disconnect()
        self._daos.clear()
        self.state = SessionState.DISCONNECTED

    async def startTransaction(self) -> None:
        if self.state != SessionState.CONNECTED:
            raise InternalErrorException(f"Cannot start a transaction in state '{self.state.value}'.")
        await self._begin()
        self.state = SessionState.TRANSACTION_OPEN

    async def commit(self) -> None:
        self.ensureTransaction()
        await self._commit()
        self.state = SessionState.CONNECTED

    async def rollback(self) -> None:
        self.ensureTransaction()
        try:
            await self._rollback()
        finally:
            self.state = SessionState.CONNECTED

    def ensureTransaction(self) -> None:
        if not self.inTransaction:
            raise InternalErrorException(f"No transaction in progress (state '{self.state.value}').")

    async def getDao(self, tableName: TableName):
        await self.connect()
        dao = self._daos.get(tableName)
        if dao is None:
            dao = self._createDao(tableName)
            await dao.prepare()
            self._daos[tableName] = dao
        return dao

    async def __aenter__(self) -> "DbSessionManager":
        await self.connect()
        return self

    async def __aexit__(self, excType, exc, tb) -> None:
        await self.disconnect()

    @abstractmethod
    def _createDao(self, tableName: TableName): ...

    @abstractmethod
    async def _connect(self) -> None: ...

    @abstractmethod
    async def _disconnect(self) -> None: ...

    @abstractmethod
    async def _begin(self) -> None: ...

    @abstractmethod
    async def _commit(self) -> None: ...

    @abstractmethod
    async def _rollback(self) -> None: ...
