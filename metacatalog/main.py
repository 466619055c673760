import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

from metacatalog.api.router import apiRouter
from metacatalog.core.config import settings
from metacatalog.core.exceptions import BaseCatalogException, InternalErrorException, InvalidParameterException
from metacatalog.db.session import disposeEngines

logging.basicConfig(
    level=settings.logLevel,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Metadata Catalog",
    version="0.1.0",
    description="Schema metadata catalog for tables, columns, indexes, data types and statistics.",
)

@app.on_event("startup")
async def onStartup():
    logger.info("Metadata catalog starting with %s storage backend", settings.storageBackend)

@app.on_event("shutdown")
async def onShutdown():
    await disposeEngines()


@app.exception_handler(BaseCatalogException)
async def catalogExceptionHandler(request: Request, exc: BaseCatalogException):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.detail)

@app.exception_handler(RequestValidationError)
async def validationExceptionHandler(request: Request, exc: RequestValidationError):
    problems = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    invalidParameter = InvalidParameterException(message="Invalid request: " + "; ".join(problems))
    return JSONResponse(status_code=invalidParameter.status_code, content=invalidParameter.detail)

@app.exception_handler(SQLAlchemyError)
async def sqlalchemyExceptionHandler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    serverError = InternalErrorException(message=f"A database error occurred ({type(exc).__name__}).")

    return JSONResponse(status_code=serverError.status_code, content=serverError.detail)

@app.exception_handler(Exception)
async def genericExceptionHandler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    serverError = InternalErrorException(message="An unexpected internal server error occurred.")

    return JSONResponse(status_code=serverError.status_code, content=serverError.detail)

app.include_router(apiRouter)

@app.get("/", include_in_schema=False)
async def root():
    return {"message": "Welcome to the Metadata Catalog!"}
