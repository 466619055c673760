from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine, AsyncSession


_engines: Dict[str, AsyncEngine] = {}

def createEngine(databaseUrl: str, databaseSchema: Optional[str] = None, echo: bool = False) -> AsyncEngine:
    executionOptions = {}
    if databaseSchema:
        # Models are declared without a schema; place them in the catalog schema.
        executionOptions["schema_translate_map"] = {None: databaseSchema}
    return create_async_engine(databaseUrl, echo=echo, execution_options=executionOptions)

def getEngine(databaseUrl: str, databaseSchema: Optional[str] = None, echo: bool = False) -> AsyncEngine:
    """Process-wide engine per (url, schema); engines own the connection pool."""
    cacheKey = f"{databaseUrl}|{databaseSchema or ''}"
    if cacheKey not in _engines:
        _engines[cacheKey] = createEngine(databaseUrl, databaseSchema, echo=echo)
    return _engines[cacheKey]

def createSessionFactory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False
    )

async def disposeEngines() -> None:
    for engine in _engines.values():
        await engine.dispose()
    _engines.clear()
