import logging
from typing import NoReturn

from metacatalog.core.exceptions import BaseCatalogException, InternalErrorException
from metacatalog.dao.base import DbSessionManager

logger = logging.getLogger(__name__)

class BaseProvider:
    def __init__(self, sessionManager: DbSessionManager):
        self.sessionManager = sessionManager

    @staticmethod
    def catalogError(cause: Exception) -> BaseCatalogException:
        """``cause`` itself if it is a catalog error, else an INTERNAL_ERROR chained to it."""
        if isinstance(cause, BaseCatalogException):
            return cause
        error = InternalErrorException(f"Unexpected {type(cause).__name__}: {cause}")
        error.__cause__ = cause
        return error

    async def rollback(self, cause: Exception) -> None:
        """Roll back after ``cause``; a failing rollback replaces ``cause``."""
        logger.warning("Rolling back after %s", cause)
        try:
            await self.sessionManager.rollback()
        except BaseCatalogException as rollbackError:
            raise rollbackError from cause

    async def abort(self, cause: Exception) -> NoReturn:
        await self.rollback(cause)
        raise self.catalogError(cause)
