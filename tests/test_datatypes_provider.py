"""Tests for DataTypesProvider"""

import pytest

from metacatalog.core.exceptions import BaseCatalogException, ErrorCode
from metacatalog.models.builtin_datatypes import builtinDataTypes
from metacatalog.providers.datatypes_provider import DataTypesProvider


class TestDataTypes:
    """Test the seeded data type catalog."""

    @pytest.mark.asyncio
    async def test_all_builtins(self, dataTypesProvider: DataTypesProvider):
        dataTypes = await dataTypesProvider.getAllDataTypes()
        assert [d.header.id for d in dataTypes] == [d.header.id for d in builtinDataTypes()]

    @pytest.mark.asyncio
    async def test_lookup(self, dataTypesProvider: DataTypesProvider):
        byId = await dataTypesProvider.getDataType("id", 6)
        byName = await dataTypesProvider.getDataType("name", "INT64")
        assert byId == byName
        assert byId.pgDataType == 20
        assert byId.pgDataTypeQualifiedName == "int8"

    @pytest.mark.asyncio
    async def test_string_id_is_coerced(self, dataTypesProvider: DataTypesProvider):
        assert (await dataTypesProvider.getDataType("id", "4")).header.name == "INT32"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key, value, errorCode", [
        ("id", 999, ErrorCode.ID_NOT_FOUND),
        ("id", "abc", ErrorCode.ID_NOT_FOUND),
        ("name", "BLOB", ErrorCode.NAME_NOT_FOUND),
        ("oid", 23, ErrorCode.NOT_SUPPORTED),
    ])
    async def test_lookup_errors(self, dataTypesProvider: DataTypesProvider, key, value, errorCode):
        with pytest.raises(BaseCatalogException) as excInfo:
            await dataTypesProvider.getDataType(key, value)
        assert excInfo.value.errorCode == errorCode

    @pytest.mark.asyncio
    async def test_seeded_once(self, sessionManager, sessionManagerFactory):
        """Test that reopening the store does not seed the builtins again."""
        await DataTypesProvider(sessionManager).getAllDataTypes()

        async with sessionManagerFactory() as reopened:
            dataTypes = await DataTypesProvider(reopened).getAllDataTypes()
        assert len(dataTypes) == len(builtinDataTypes())
