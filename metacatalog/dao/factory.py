from metacatalog.core.config import Settings, settings
from metacatalog.dao.base import DbSessionManager
from metacatalog.dao.json.session_manager import JsonSessionManager
from metacatalog.dao.relational.session_manager import RelationalSessionManager
from metacatalog.db.session import getEngine

def createSessionManager(config: Settings = settings) -> DbSessionManager:
    if config.storageBackend == "relational":
        engine = getEngine(config.databaseUrl, config.databaseSchema, echo=config.databaseEcho)
        return RelationalSessionManager(engine, databaseSchema=config.databaseSchema)
    return JsonSessionManager(config.storageDirPath)
