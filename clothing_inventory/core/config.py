from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "Clothing Inventory"
    LOG_LEVEL: str = "INFO"

    # LOCAL STORE
    DB_URL: str = "sqlite+aiosqlite:///./clothing_inventory.db"
    SCHEMA_VERSION: int = 4

    # REMOTE MIRROR
    FIREBASE_DATABASE_URL: Optional[str] = None
    FIREBASE_API_KEY: Optional[str] = None
    AUTH_BASE_URL: str = "https://identitytoolkit.googleapis.com/v1"
    AUTH_TIMEOUT_SECONDS: float = 30.0
    REMOTE_TIMEOUT_SECONDS: float = 15.0
    START_ONLINE: bool = True

    # INVENTORY
    STOCK_OUT_GUARD: bool = True
    LOW_STOCK_DEFAULT_THRESHOLD: int = 10
    SOUND_ENABLED_DEFAULT: bool = True

    # BACKUP
    BACKUP_VERSION: str = "1.0"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
