from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    storageBackend: Literal["json", "relational"] = "json"
    storageDirPath: str = "./catalog_data"
    databaseUrl: str = "sqlite+aiosqlite:///./catalog.db"
    databaseSchema: Optional[str] = None
    databaseEcho: bool = False
    logLevel: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
