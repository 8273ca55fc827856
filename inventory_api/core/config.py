# inventory_api/core/config.py
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


class Settings(BaseSettings):
    # tell pydantic-settings to load from .env
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongo_uri: str
    db_name: str
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    bcrypt_rounds: int = 12

    environment: str = "production"
    log_level: Optional[str] = None
    cors_origins: List[str] = ["*"]

    # optional administrator created at startup
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    admin_first_name: str = "System"
    admin_last_name: str = "Administrator"

    @property
    def debug(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return LOG_LEVELS.get(self.environment.lower(), "INFO")


@lru_cache
def get_settings() -> Settings:
    return Settings()
