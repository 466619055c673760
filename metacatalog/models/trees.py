"""
Record <-> tree conversion.

A tree is the flat ``dict`` shape catalog objects take on the wire: in the
JSON documents, in SQL rows and in HTTP bodies. Header fields sit next to
the entity fields instead of being nested under ``header``.

Every ``...FromTree`` raises ``ValueError`` (pydantic's ``ValidationError``
included) when the tree does not describe a valid record.
"""
from typing import Any, Dict, Tuple, Type, TypeVar

from pydantic import BaseModel

from metacatalog.models.entities import (
    ObjectHeader, Table, Column, Index, ColumnStatistic, DataType, TableStatistic
)

HEADER_FIELDS = ("id", "name", "formatVersion", "generation")

RecordT = TypeVar("RecordT", bound=BaseModel)

def headerToTree(header: ObjectHeader) -> Dict[str, Any]:
    return header.model_dump()

def splitHeader(tree: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    if not isinstance(tree, dict):
        raise ValueError(f"Expected a mapping, got {type(tree).__name__}")
    header = {k: tree.get(k) for k in HEADER_FIELDS}
    rest = {k: v for k, v in tree.items() if k not in HEADER_FIELDS}
    return header, rest

def _recordToTree(record: BaseModel, exclude: set = frozenset()) -> Dict[str, Any]:
    tree = headerToTree(record.header)
    tree.update(record.model_dump(exclude={"header", *exclude}))
    return tree

def _recordFromTree(modelClass: Type[RecordT], tree: Dict[str, Any]) -> RecordT:
    header, rest = splitHeader(tree)
    return modelClass.model_validate({**rest, "header": header})

def columnToTree(column: Column) -> Dict[str, Any]:
    return _recordToTree(column)

def columnFromTree(tree: Dict[str, Any]) -> Column:
    return _recordFromTree(Column, tree)

def tableToTree(table: Table, withColumns: bool = True) -> Dict[str, Any]:
    tree = _recordToTree(table, exclude={"columns"})
    if withColumns:
        tree["columns"] = [columnToTree(c) for c in table.columns]
    return tree

def tableFromTree(tree: Dict[str, Any]) -> Table:
    header, rest = splitHeader(tree)
    columns = [columnFromTree(c) for c in rest.pop("columns", None) or []]
    return Table.model_validate({**rest, "header": header, "columns": columns})

def indexToTree(index: Index) -> Dict[str, Any]:
    return _recordToTree(index)

def indexFromTree(tree: Dict[str, Any]) -> Index:
    return _recordFromTree(Index, tree)

def dataTypeToTree(dataType: DataType) -> Dict[str, Any]:
    return _recordToTree(dataType)

def dataTypeFromTree(tree: Dict[str, Any]) -> DataType:
    return _recordFromTree(DataType, tree)

# Column statistics and table statistics carry no header.
def columnStatisticToTree(statistic: ColumnStatistic) -> Dict[str, Any]:
    return statistic.model_dump()

def columnStatisticFromTree(tree: Dict[str, Any]) -> ColumnStatistic:
    if not isinstance(tree, dict):
        raise ValueError(f"Expected a mapping, got {type(tree).__name__}")
    return ColumnStatistic.model_validate(tree)

def tableStatisticFromTree(tree: Dict[str, Any]) -> TableStatistic:
    if not isinstance(tree, dict):
        raise ValueError(f"Expected a mapping, got {type(tree).__name__}")
    return TableStatistic.model_validate(tree)
