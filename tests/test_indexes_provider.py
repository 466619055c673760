"""Tests for IndexesProvider"""

import pytest

from conftest import makeIndex
from metacatalog.core.exceptions import (
    AlreadyExistsException, BaseCatalogException, ErrorCode, InvalidParameterException
)
from metacatalog.models.entities import INITIAL_GENERATION
from metacatalog.providers.indexes_provider import IndexesProvider


class TestAddIndex:
    """Test index creation and lookup."""

    @pytest.mark.asyncio
    async def test_round_trip(self, indexesProvider: IndexesProvider):
        """Test that omitted column counts are derived from the key list."""
        indexId = await indexesProvider.addIndex(makeIndex(keys=[1, 2]))

        index = await indexesProvider.getIndex("id", indexId)
        assert index.header.name == "customer_pkey"
        assert index.header.generation == INITIAL_GENERATION
        assert index.keys == [1, 2]
        assert index.numberOfColumns == 2
        assert index.numberOfKeyColumns == 2
        assert index.accessMethod == 403

    @pytest.mark.asyncio
    async def test_explicit_counts(self, indexesProvider: IndexesProvider):
        """Test a covering index whose included columns are not key columns."""
        index = makeIndex(keys=[1, 2, 3]).model_copy(update={"numberOfColumns": 3, "numberOfKeyColumns": 1})
        indexId = await indexesProvider.addIndex(index)

        stored = await indexesProvider.getIndex("name", "customer_pkey")
        assert stored.header.id == indexId
        assert stored.numberOfKeyColumns == 1

    @pytest.mark.asyncio
    async def test_duplicate_name(self, indexesProvider: IndexesProvider):
        await indexesProvider.addIndex(makeIndex())
        with pytest.raises(AlreadyExistsException) as excInfo:
            await indexesProvider.addIndex(makeIndex())
        assert excInfo.value.errorCode == ErrorCode.ALREADY_EXISTS

    @pytest.mark.asyncio
    @pytest.mark.parametrize("update", [
        {"numberOfColumns": 3},
        {"numberOfColumns": 1, "numberOfKeyColumns": 2},
        {"numberOfKeyColumns": -1},
        {"keysId": [7]},
    ], ids=["too-many-columns", "keys-exceed-columns", "negative-keys", "short-keys-id"])
    async def test_invalid_counts(self, indexesProvider: IndexesProvider, update):
        index = makeIndex(keys=[1, 2]).model_copy(update=update)
        with pytest.raises(InvalidParameterException):
            await indexesProvider.addIndex(index)
        assert await indexesProvider.getAllIndexes() == []

    @pytest.mark.asyncio
    async def test_missing_name(self, indexesProvider: IndexesProvider):
        with pytest.raises(InvalidParameterException):
            await indexesProvider.addIndex(makeIndex(name=""))


class TestUpdateAndRemoveIndex:
    """Test index replacement and removal."""

    @pytest.mark.asyncio
    async def test_update(self, indexesProvider: IndexesProvider):
        indexId = await indexesProvider.addIndex(makeIndex())

        await indexesProvider.updateIndex(indexId, makeIndex(name="customer_idx", keys=[2, 3]))

        index = await indexesProvider.getIndex("id", indexId)
        assert index.header.name == "customer_idx"
        assert index.header.generation == INITIAL_GENERATION + 1
        assert index.keys == [2, 3]

    @pytest.mark.asyncio
    async def test_update_keeps_own_name(self, indexesProvider: IndexesProvider):
        """Test that updating a record under its current name is not a conflict."""
        indexId = await indexesProvider.addIndex(makeIndex())
        await indexesProvider.updateIndex(indexId, makeIndex(keys=[4]))
        assert (await indexesProvider.getIndex("id", indexId)).keys == [4]

    @pytest.mark.asyncio
    async def test_remove(self, indexesProvider: IndexesProvider):
        firstId = await indexesProvider.addIndex(makeIndex("first"))
        await indexesProvider.addIndex(makeIndex("second"))

        assert await indexesProvider.removeIndex("name", "first") == firstId

        assert [i.header.name for i in await indexesProvider.getAllIndexes()] == ["second"]
        with pytest.raises(BaseCatalogException) as excInfo:
            await indexesProvider.removeIndex("id", firstId)
        assert excInfo.value.errorCode == ErrorCode.ID_NOT_FOUND
