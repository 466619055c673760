from fastapi import APIRouter
from metacatalog.core.config import settings

router = APIRouter()

@router.get("/v1/config")
async def getConfig():
    backendProperties = {
        "storage-backend": settings.storageBackend,
    }
    if settings.storageBackend == "json":
        backendProperties["storage-dir-path"] = settings.storageDirPath
    elif settings.databaseSchema:
        backendProperties["database-schema"] = settings.databaseSchema

    return {
        "default": backendProperties,
        "format-version": 1,
    }
