from typing import List

from metacatalog.models.entities import DataType, ObjectHeader, FORMAT_VERSION, INITIAL_GENERATION

# (id, name, pg oid, pg name, pg qualified name)
_BUILTIN_DATA_TYPES = [
    (4, "INT32", 23, "integer", "int4"),
    (6, "INT64", 20, "bigint", "int8"),
    (8, "FLOAT32", 700, "real", "float4"),
    (9, "FLOAT64", 701, "double precision", "float8"),
    (13, "CHAR", 1042, "char", "bpchar"),
    (14, "VARCHAR", 1043, "varchar", "varchar"),
    (15, "NUMERIC", 1700, "numeric", "numeric"),
    (16, "DATE", 1082, "date", "date"),
    (17, "TIME", 1083, "time", "time"),
    (18, "TIMETZ", 1266, "timetz", "timetz"),
    (19, "TIMESTAMP", 1114, "timestamp", "timestamp"),
    (20, "TIMESTAMPTZ", 1184, "timestamptz", "timestamptz"),
    (21, "INTERVAL", 1186, "interval", "interval"),
]

def builtinDataTypes() -> List[DataType]:
    return [
        DataType(
            header=ObjectHeader(
                id=typeId, name=name, formatVersion=FORMAT_VERSION, generation=INITIAL_GENERATION
            ),
            pgDataType=pgOid,
            pgDataTypeName=pgName,
            pgDataTypeQualifiedName=pgQualifiedName,
        )
        for typeId, name, pgOid, pgName, pgQualifiedName in _BUILTIN_DATA_TYPES
    ]
