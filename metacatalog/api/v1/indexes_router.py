from fastapi import APIRouter, Depends, status, Body, Path
from typing import Any, Dict, List

from metacatalog.api.deps import getSessionManager, parseTree
from metacatalog.core.exceptions import BaseCatalogException, ErrorResponse, InternalErrorException
from metacatalog.dao.base import DbSessionManager
from metacatalog.models import trees
from metacatalog.providers.indexes_provider import IndexesProvider

router = APIRouter(
    prefix="/v1/indexes",
    tags=["Indexes"],
    responses={
        400: {"model": ErrorResponse}, 404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse, "description": "Internal Server Error"},
    }
)

@router.get("", response_model=List[Dict[str, Any]])
async def listIndexesEndpoint(sessionManager: DbSessionManager = Depends(getSessionManager)):
    try:
        indexes = await IndexesProvider(sessionManager).getAllIndexes()
        return [trees.indexToTree(i) for i in indexes]
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.post("", status_code=status.HTTP_200_OK)
async def addIndexEndpoint(
    request: Dict[str, Any] = Body(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    index = parseTree(trees.indexFromTree, request)
    try:
        indexId = await IndexesProvider(sessionManager).addIndex(index)
        return {"id": indexId}
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.get("/{key}/{value}", response_model=Dict[str, Any])
async def getIndexEndpoint(
    key: str = Path(..., description="Lookup key: 'id' or 'name'"),
    value: str = Path(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    try:
        index = await IndexesProvider(sessionManager).getIndex(key, value)
        return trees.indexToTree(index)
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.put("/id/{indexId}", status_code=status.HTTP_204_NO_CONTENT)
async def updateIndexEndpoint(
    indexId: int = Path(...),
    request: Dict[str, Any] = Body(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    index = parseTree(trees.indexFromTree, request)
    try:
        await IndexesProvider(sessionManager).updateIndex(indexId, index)
        return
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.delete("/{key}/{value}", status_code=status.HTTP_200_OK)
async def removeIndexEndpoint(
    key: str = Path(..., description="Lookup key: 'id' or 'name'"),
    value: str = Path(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    try:
        indexId = await IndexesProvider(sessionManager).removeIndex(key, value)
        return {"id": indexId}
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))
