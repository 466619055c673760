import logging
import weakref
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.schema import CreateSchema

from metacatalog.core.exceptions import BaseCatalogException, InternalErrorException
from metacatalog.dao.base import DbSessionManager, TableName
from metacatalog.dao.relational.object_id import RelationalObjectIdGenerator
from metacatalog.db.models_db import Base
from metacatalog.db.session import createSessionFactory

logger = logging.getLogger(__name__)

class RelationalSessionManager(DbSessionManager):
    """Session over one AsyncSession; transactions are the database's own."""

    # Engines whose tables have been created; entries go with the engine.
    _initializedEngines: "weakref.WeakSet" = weakref.WeakSet()

    def __init__(self, engine: AsyncEngine, databaseSchema: Optional[str] = None):
        super().__init__()
        self.engine = engine
        self.databaseSchema = databaseSchema
        self.sessionFactory = createSessionFactory(engine)
        self.session: Optional[AsyncSession] = None
        self.objectIdGenerator = RelationalObjectIdGenerator(self)

    def _createDao(self, tableName: TableName):
        from metacatalog.dao.relational import daos

        daoClasses = {
            TableName.TABLES: daos.SqlTablesDao,
            TableName.COLUMNS: daos.SqlColumnsDao,
            TableName.INDEXES: daos.SqlIndexesDao,
            TableName.STATISTICS: daos.SqlStatisticsDao,
            TableName.DATATYPES: daos.SqlDataTypesDao,
        }
        return daoClasses[tableName](self)

    async def _connect(self) -> None:
        try:
            if self.engine.sync_engine not in self._initializedEngines:
                async with self.engine.begin() as conn:
                    if self.databaseSchema:
                        await conn.execute(CreateSchema(self.databaseSchema, if_not_exists=True))
                    await conn.run_sync(Base.metadata.create_all)
                self._initializedEngines.add(self.engine.sync_engine)
        except (SQLAlchemyError, OSError) as e:
            logger.error("Cannot reach the metadata database: %s", e)
            raise InternalErrorException(f"Cannot reach the metadata database: {e}")
        self.session = self.sessionFactory()

    async def _disconnect(self) -> None:
        if self.session is not None:
            await self.session.close()
            self.session = None

    async def _begin(self) -> None:
        try:
            # Drop the implicit read transaction left by earlier selects.
            if self.session.in_transaction():
                await self.session.rollback()
            await self.session.begin()
        except SQLAlchemyError as e:
            raise InternalErrorException(f"Failed to start a transaction: {e}")

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error("Commit failed: %s", e)
            raise InternalErrorException(f"Commit failed: {e}")

    async def _rollback(self) -> None:
        try:
            await self.session.rollback()
        except SQLAlchemyError as e:
            logger.error("Rollback failed: %s", e)
            raise InternalErrorException(f"Rollback failed: {e}")

    async def execute(self, statement):
        try:
            return await self.session.execute(statement)
        except SQLAlchemyError as e:
            logger.error("Statement failed: %s", e)
            raise InternalErrorException(f"A database error occurred: {type(e).__name__}")

    async def flush(self, conflict: Optional[BaseCatalogException] = None) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            if conflict is not None:
                raise conflict
            raise InternalErrorException(f"Integrity violation: {e.orig}")
        except SQLAlchemyError as e:
            logger.error("Flush failed: %s", e)
            raise InternalErrorException(f"A database error occurred: {type(e).__name__}")
