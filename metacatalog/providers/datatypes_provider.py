from typing import List, Optional

from metacatalog.dao.base import DataTypesDao, LookupValue, TableName
from metacatalog.models.entities import DataType
from metacatalog.providers.base_provider import BaseProvider

class DataTypesProvider(BaseProvider):
    """Read-only access to the data type catalog."""

    dataTypesDao: Optional[DataTypesDao] = None

    async def init(self) -> None:
        if self.dataTypesDao is None:
            self.dataTypesDao = await self.sessionManager.getDao(TableName.DATATYPES)

    async def getDataType(self, key: str, value: LookupValue) -> DataType:
        await self.init()
        return await self.dataTypesDao.select(key, value)

    async def getAllDataTypes(self) -> List[DataType]:
        await self.init()
        return await self.dataTypesDao.selectAll()
