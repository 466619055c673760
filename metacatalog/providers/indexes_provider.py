from typing import List, Optional

from metacatalog.core.exceptions import InvalidParameterException
from metacatalog.dao.base import IndexesDao, LookupValue, TableName
from metacatalog.models.entities import Index, KEY_ID
from metacatalog.providers.base_provider import BaseProvider

class IndexesProvider(BaseProvider):
    indexesDao: Optional[IndexesDao] = None

    async def init(self) -> None:
        if self.indexesDao is None:
            self.indexesDao = await self.sessionManager.getDao(TableName.INDEXES)

    async def addIndex(self, index: Index) -> int:
        await self.init()
        index = self.checkIndex(index)

        await self.sessionManager.startTransaction()
        try:
            indexId = await self.indexesDao.insert(index)
            await self.sessionManager.commit()
        except Exception as e:
            await self.abort(e)
        return indexId

    async def getIndex(self, key: str, value: LookupValue) -> Index:
        await self.init()
        return await self.indexesDao.select(key, value)

    async def getAllIndexes(self) -> List[Index]:
        await self.init()
        return await self.indexesDao.selectAll()

    async def updateIndex(self, indexId: int, index: Index) -> None:
        await self.init()
        index = self.checkIndex(index)

        await self.sessionManager.startTransaction()
        try:
            await self.indexesDao.update(KEY_ID, indexId, index)
            await self.sessionManager.commit()
        except Exception as e:
            await self.abort(e)

    async def removeIndex(self, key: str, value: LookupValue) -> int:
        await self.init()

        await self.sessionManager.startTransaction()
        try:
            indexId = await self.indexesDao.remove(key, value)
            await self.sessionManager.commit()
        except Exception as e:
            await self.abort(e)
        return indexId

    @staticmethod
    def checkIndex(index: Index) -> Index:
        """
        Validate the column counts against the key list and fill the
        counts the caller left out (all keys, all key columns).
        """
        if not index.header.name:
            raise InvalidParameterException("Index name is required.")

        numberOfColumns = index.numberOfColumns if index.numberOfColumns is not None else len(index.keys)
        numberOfKeyColumns = (
            index.numberOfKeyColumns if index.numberOfKeyColumns is not None else numberOfColumns
        )
        if not 0 <= numberOfKeyColumns <= numberOfColumns <= len(index.keys):
            raise InvalidParameterException(
                f"Index '{index.header.name}': expected numberOfKeyColumns ({numberOfKeyColumns}) <= "
                f"numberOfColumns ({numberOfColumns}) <= number of keys ({len(index.keys)})."
            )
        if index.keysId and len(index.keysId) != len(index.keys):
            raise InvalidParameterException(f"Index '{index.header.name}': keysId must parallel keys.")

        return index.model_copy(update={
            "numberOfColumns": numberOfColumns,
            "numberOfKeyColumns": numberOfKeyColumns,
        })
