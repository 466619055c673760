from fastapi import APIRouter
from metacatalog.api.v1 import config_router, datatypes_router, indexes_router, statistics_router, tables_router

apiRouter = APIRouter()

apiRouter.include_router(config_router.router, tags=["Configuration"])
apiRouter.include_router(tables_router.router)
apiRouter.include_router(indexes_router.router)
apiRouter.include_router(statistics_router.router)
apiRouter.include_router(datatypes_router.router)
