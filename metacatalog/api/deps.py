from typing import Any, AsyncGenerator, Callable, Dict, TypeVar

from metacatalog.core.exceptions import InvalidParameterException
from metacatalog.dao.base import DbSessionManager
from metacatalog.dao.factory import createSessionManager

T = TypeVar("T")

async def getSessionManager() -> AsyncGenerator[DbSessionManager, None]:
    # One session manager, and so one in-flight operation, per request.
    async with createSessionManager() as sessionManager:
        yield sessionManager

def parseTree(converter: Callable[[Dict[str, Any]], T], tree: Dict[str, Any]) -> T:
    try:
        return converter(tree)
    except ValueError as e:
        raise InvalidParameterException(f"Malformed request body: {e}")
