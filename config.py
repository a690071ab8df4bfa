from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Service settings loaded from environment variables (or a .env file).

    Attributes:
        events_db_file: JSON array file holding events
        events_profiles_file: JSON array file holding profiles
        events_trail_file: JSON array file receiving one entry per request
        host: bind address for the uvicorn launcher
        port: bind port for the uvicorn launcher
        cors_origins: comma-separated allowed CORS origins
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    events_db_file: str = "events.json"
    events_profiles_file: str = "profiles.json"
    events_trail_file: str = "validation-output.json"
    host: str = "127.0.0.1"
    port: int = 5000
    cors_origins: str = "*"

    @field_validator("port")
    @classmethod
    def port_in_range(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("port must be between 1 and 65535")
        return v

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
