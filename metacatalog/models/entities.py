from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional

INVALID_OBJECT_ID = 0
FORMAT_VERSION = 1
INITIAL_GENERATION = 1

# Lookup keys accepted by select/update/remove.
KEY_ID = "id"
KEY_NAME = "name"

class ObjectHeader(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    formatVersion: Optional[int] = None
    generation: Optional[int] = None

class Column(BaseModel):
    header: ObjectHeader = Field(default_factory=ObjectHeader)
    tableId: Optional[int] = None
    ordinalPosition: Optional[int] = None
    dataTypeId: Optional[int] = None
    dataLength: Optional[List[int]] = None
    varying: Optional[bool] = None
    nullable: Optional[bool] = None
    defaultExpression: Optional[str] = None

class Table(BaseModel):
    header: ObjectHeader = Field(default_factory=ObjectHeader)
    namespace: Optional[str] = None
    columns: List[Column] = Field(default_factory=list)
    primaryKeys: Optional[List[int]] = None
    constraints: Optional[List[Dict[str, Any]]] = None
    tupleCount: Optional[float] = None

class TableStatistic(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    tupleCount: Optional[float] = None

class Index(BaseModel):
    header: ObjectHeader = Field(default_factory=ObjectHeader)
    ownerId: Optional[int] = None
    accessMethod: Optional[int] = None
    numberOfColumns: Optional[int] = None
    numberOfKeyColumns: Optional[int] = None
    keys: List[int] = Field(default_factory=list)
    keysId: List[int] = Field(default_factory=list)
    options: List[Any] = Field(default_factory=list)

class ColumnStatistic(BaseModel):
    tableId: int
    ordinalPosition: int
    columnStatistic: Optional[Dict[str, Any]] = None

class DataType(BaseModel):
    header: ObjectHeader = Field(default_factory=ObjectHeader)
    pgDataType: Optional[int] = None
    pgDataTypeName: Optional[str] = None
    pgDataTypeQualifiedName: Optional[str] = None
