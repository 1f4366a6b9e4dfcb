from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from functools import lru_cache

DEFAULT_API_BASE_URL = "https://sonic-delivery.up.railway.app"

class Settings(BaseSettings):
    API_BASE_URL: str = DEFAULT_API_BASE_URL
    HTTP_TIMEOUT: float = 15.0
    TOKEN_FILE: str = "~/.courier_client/token"
    ORDER_CACHE_SIZE: int = 256
    ORDER_CACHE_TTL: int = 300
    HISTORY_PAGE_SIZE: int = 20
    LOG_LEVEL: str = "INFO"
    SERVICE_NAME: str = "courier-client"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("API_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        # An empty variable falls back to the hosted backend
        value = value.strip()
        return value.rstrip("/") if value else DEFAULT_API_BASE_URL

@lru_cache
def get_settings() -> Settings:
    return Settings()
