from fastapi import APIRouter, Depends, status, Body, Path
from typing import Any, Dict

from metacatalog.api.deps import getSessionManager, parseTree
from metacatalog.core.exceptions import BaseCatalogException, ErrorResponse, InternalErrorException
from metacatalog.dao.base import DbSessionManager
from metacatalog.models import trees
from metacatalog.models.entities import ColumnStatistic
from metacatalog.providers.statistics_provider import StatisticsProvider

router = APIRouter(
    prefix="/v1/statistics/{tableId}",
    tags=["Column Statistics"],
    responses={
        400: {"model": ErrorResponse}, 404: {"model": ErrorResponse},
        500: {"model": ErrorResponse, "description": "Internal Server Error"},
    }
)

@router.get("", response_model=Dict[int, ColumnStatistic])
async def listColumnStatisticsEndpoint(
    tableId: int = Path(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    try:
        return await StatisticsProvider(sessionManager).getAllColumnStatistics(tableId)
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.put("/{ordinalPosition}", status_code=status.HTTP_204_NO_CONTENT)
async def setColumnStatisticEndpoint(
    tableId: int = Path(...),
    ordinalPosition: int = Path(...),
    request: Dict[str, Any] = Body(..., description="Opaque statistic payload"),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    statistic = parseTree(trees.columnStatisticFromTree, {
        "tableId": tableId, "ordinalPosition": ordinalPosition, "columnStatistic": request
    })
    try:
        await StatisticsProvider(sessionManager).addColumnStatistic(statistic)
        return
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.get("/{ordinalPosition}", response_model=ColumnStatistic)
async def getColumnStatisticEndpoint(
    tableId: int = Path(...),
    ordinalPosition: int = Path(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    try:
        return await StatisticsProvider(sessionManager).getColumnStatistic(tableId, ordinalPosition)
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.delete("/{ordinalPosition}", status_code=status.HTTP_204_NO_CONTENT)
async def removeColumnStatisticEndpoint(
    tableId: int = Path(...),
    ordinalPosition: int = Path(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    try:
        await StatisticsProvider(sessionManager).removeColumnStatistic(tableId, ordinalPosition)
        return
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.delete("", status_code=status.HTTP_200_OK)
async def removeAllColumnStatisticsEndpoint(
    tableId: int = Path(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    try:
        removedCount = await StatisticsProvider(sessionManager).removeAllColumnStatistics(tableId)
        return {"removed": removedCount}
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))
