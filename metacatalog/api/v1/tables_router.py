from fastapi import APIRouter, Depends, status, Body, Path
from typing import Any, Dict, List

from metacatalog.api.deps import getSessionManager, parseTree
from metacatalog.core.exceptions import BaseCatalogException, ErrorResponse, InternalErrorException
from metacatalog.dao.base import DbSessionManager
from metacatalog.models import trees
from metacatalog.models.entities import TableStatistic
from metacatalog.providers.tables_provider import TablesProvider

router = APIRouter(
    prefix="/v1/tables",
    tags=["Tables"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request"},
        404: {"model": ErrorResponse, "description": "Not Found"},
        409: {"model": ErrorResponse, "description": "Conflict"},
        500: {"model": ErrorResponse, "description": "Internal Server Error"},
    }
)

@router.get("", response_model=List[Dict[str, Any]])
async def listTablesEndpoint(sessionManager: DbSessionManager = Depends(getSessionManager)):
    try:
        tables = await TablesProvider(sessionManager).getAllTables()
        return [trees.tableToTree(t) for t in tables]
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.post("", status_code=status.HTTP_200_OK)
async def addTableEndpoint(
    request: Dict[str, Any] = Body(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    table = parseTree(trees.tableFromTree, request)
    try:
        tableId = await TablesProvider(sessionManager).addTable(table)
        return {"id": tableId}
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.post("/statistic", status_code=status.HTTP_200_OK)
async def setTableStatisticEndpoint(
    request: Dict[str, Any] = Body(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    statistic = parseTree(trees.tableStatisticFromTree, request)
    try:
        tableId = await TablesProvider(sessionManager).setTableStatistic(statistic)
        return {"id": tableId}
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.get("/{key}/{value}/statistic", response_model=TableStatistic)
async def getTableStatisticEndpoint(
    key: str = Path(..., description="Lookup key: 'id' or 'name'"),
    value: str = Path(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    try:
        return await TablesProvider(sessionManager).getTableStatistic(key, value)
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.get("/{key}/{value}", response_model=Dict[str, Any])
async def getTableEndpoint(
    key: str = Path(..., description="Lookup key: 'id' or 'name'"),
    value: str = Path(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    try:
        table = await TablesProvider(sessionManager).getTable(key, value)
        return trees.tableToTree(table)
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.put("/id/{tableId}", status_code=status.HTTP_204_NO_CONTENT)
async def updateTableEndpoint(
    tableId: int = Path(...),
    request: Dict[str, Any] = Body(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    table = parseTree(trees.tableFromTree, request)
    try:
        await TablesProvider(sessionManager).updateTable(tableId, table)
        return
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.delete("/{key}/{value}", status_code=status.HTTP_200_OK)
async def removeTableEndpoint(
    key: str = Path(..., description="Lookup key: 'id' or 'name'"),
    value: str = Path(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    try:
        tableId = await TablesProvider(sessionManager).removeTable(key, value)
        return {"id": tableId}
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))
