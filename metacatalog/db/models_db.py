from sqlalchemy import Boolean, Column, Float, Integer, JSON, String, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class TableModel(Base):
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False, unique=True)
    formatVersion = Column(Integer, nullable=False)
    generation = Column(Integer, nullable=False)
    namespace = Column(String, nullable=True)
    primaryKeys = Column(JSON, nullable=True)
    constraints = Column(JSON, nullable=True)
    tupleCount = Column(Float, nullable=True) # reltuples

class ColumnModel(Base):
    __tablename__ = "columns"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    formatVersion = Column(Integer, nullable=False)
    generation = Column(Integer, nullable=False)
    # Back-reference only; providers own the cascade.
    tableId = Column(Integer, nullable=False, index=True)
    ordinalPosition = Column(Integer, nullable=False)
    dataTypeId = Column(Integer, nullable=True)
    dataLength = Column(JSON, nullable=True)
    varying = Column(Boolean, nullable=True)
    nullable = Column(Boolean, nullable=True)
    defaultExpression = Column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint('tableId', 'name', name='_table_column_name_uc'),
        UniqueConstraint('tableId', 'ordinalPosition', name='_table_column_ordinal_uc'),
    )

class IndexModel(Base):
    __tablename__ = "indexes"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False, unique=True)
    formatVersion = Column(Integer, nullable=False)
    generation = Column(Integer, nullable=False)
    ownerId = Column(Integer, nullable=True)
    accessMethod = Column(Integer, nullable=True)
    numberOfColumns = Column(Integer, nullable=True)
    numberOfKeyColumns = Column(Integer, nullable=True)
    keys = Column(JSON, nullable=False, default=list)
    keysId = Column(JSON, nullable=False, default=list)
    options = Column(JSON, nullable=False, default=list)

class ColumnStatisticModel(Base):
    __tablename__ = "column_statistics"

    tableId = Column(Integer, primary_key=True, autoincrement=False)
    ordinalPosition = Column(Integer, primary_key=True, autoincrement=False)
    columnStatistic = Column(JSON, nullable=True)

class DataTypeModel(Base):
    __tablename__ = "datatypes"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False, unique=True)
    formatVersion = Column(Integer, nullable=False)
    generation = Column(Integer, nullable=False)
    pgDataType = Column(Integer, nullable=True)
    pgDataTypeName = Column(String, nullable=True)
    pgDataTypeQualifiedName = Column(String, nullable=True)

class ObjectIdModel(Base):
    __tablename__ = "object_ids"

    name = Column(String, primary_key=True)
    currentId = Column(Integer, nullable=False)
