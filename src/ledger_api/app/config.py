from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from starlette.config import Config
from starlette.datastructures import Secret

ENV_PATH = Path(".env")
config = Config(ENV_PATH if ENV_PATH.exists() else None)


class StorageBackend(StrEnum):
    POSTGRES = "postgres"
    MEMORY = "memory"


@dataclass(slots=True, frozen=True)
class Settings:
    storage: StorageBackend
    app_host: str
    app_port: int
    log_level: str


@dataclass(slots=True, frozen=True)
class DatabaseSettings:
    host: str
    port: int
    name: str
    user: str
    password: Secret
    pool_min_size: int
    pool_max_size: int


def load_settings(config: Config = config) -> Settings:
    return Settings(
        storage=config("LEDGER_STORAGE", cast=StorageBackend, default="postgres"),
        app_host=config("APP_HOST", default="0.0.0.0"),
        app_port=config("APP_PORT", cast=int, default=8080),
        log_level=config("LOG_LEVEL", default="INFO").upper(),
    )


def load_database_settings(config: Config = config) -> DatabaseSettings:
    """Only the PostgreSQL backend needs these, so they are read separately
    and a missing required variable fails that backend alone."""
    return DatabaseSettings(
        host=config("DB_HOST"),
        port=config("DB_PORT", cast=int, default=5432),
        name=config("DB_NAME"),
        user=config("DB_USER"),
        password=config("DB_PASSWORD", cast=Secret),
        pool_min_size=config("DB_POOL_MIN_SIZE", cast=int, default=10),
        pool_max_size=config("DB_POOL_MAX_SIZE", cast=int, default=25),
    )
