from fastapi import APIRouter, Depends, Path
from typing import Any, Dict, List

from metacatalog.api.deps import getSessionManager
from metacatalog.core.exceptions import BaseCatalogException, ErrorResponse, InternalErrorException
from metacatalog.dao.base import DbSessionManager
from metacatalog.models import trees
from metacatalog.providers.datatypes_provider import DataTypesProvider

router = APIRouter(
    prefix="/v1/datatypes",
    tags=["Data Types"],
    responses={
        400: {"model": ErrorResponse}, 404: {"model": ErrorResponse},
        500: {"model": ErrorResponse, "description": "Internal Server Error"},
    }
)

@router.get("", response_model=List[Dict[str, Any]])
async def listDataTypesEndpoint(sessionManager: DbSessionManager = Depends(getSessionManager)):
    try:
        dataTypes = await DataTypesProvider(sessionManager).getAllDataTypes()
        return [trees.dataTypeToTree(d) for d in dataTypes]
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))

@router.get("/{key}/{value}", response_model=Dict[str, Any])
async def getDataTypeEndpoint(
    key: str = Path(..., description="Lookup key: 'id' or 'name'"),
    value: str = Path(...),
    sessionManager: DbSessionManager = Depends(getSessionManager)
):
    try:
        dataType = await DataTypesProvider(sessionManager).getDataType(key, value)
        return trees.dataTypeToTree(dataType)
    except BaseCatalogException as e:
        raise e
    except Exception as e:
        raise InternalErrorException(message=str(e))
