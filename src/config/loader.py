# src/config/loader.py
"""
Загрузчик конфигурации orderflow.
Базовые значения берутся из config/config.json.
Секреты и адреса сервисов переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Загружает config.json и возвращает словарь без ключей-комментариев."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return {k: v for k, v in data.items() if not k.startswith("_comment_")}


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "orderflow"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    COMPONENT_MODE: str = "all"


class DeploymentSettings(BaseModel):
    """Адреса и порты сервисов."""
    AUTH_SERVICE_HOST: str = "localhost"
    AUTH_SERVICE_PORT: int = 3000
    USERS_SERVICE_HOST: str = "localhost"
    USERS_SERVICE_PORT: int = 3001
    ORDERS_SERVICE_HOST: str = "localhost"
    ORDERS_SERVICE_PORT: int = 3002
    GATEWAY_HOST: str = "0.0.0.0"
    GATEWAY_PORT: int = 3003

    @property
    def auth_service_url(self) -> str:
        return f"http://{self.AUTH_SERVICE_HOST}:{self.AUTH_SERVICE_PORT}"

    @property
    def users_service_url(self) -> str:
        return f"http://{self.USERS_SERVICE_HOST}:{self.USERS_SERVICE_PORT}"

    @property
    def orders_service_url(self) -> str:
        return f"http://{self.ORDERS_SERVICE_HOST}:{self.ORDERS_SERVICE_PORT}"


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5


class DatabaseSettings(BaseModel):
    """Настройки PostgreSQL."""
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "appdb"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_MIN_POOL_SIZE: int = 2
    DB_MAX_POOL_SIZE: int = 10
    DB_COMMAND_TIMEOUT: int = 30
    DB_RETRY_ATTEMPTS: int = 3
    DB_RETRY_DELAY: float = 1.0

    @field_validator("DB_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает пароль из переменных окружения."""
        if not v:
            return os.getenv("DB_PASSWORD", "")
        return v

    @property
    def dsn(self) -> str:
        """Возвращает DSN для подключения к PostgreSQL."""
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


class RedisSettings(BaseModel):
    """Настройки Redis (шина событий)."""
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_MAX_CONNECTIONS: int = 20

    @property
    def url(self) -> str:
        """Возвращает URL для подключения к Redis."""
        auth = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


class AuthSettings(BaseModel):
    """Подпись токенов и статическая демо-учётка."""
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    TOKEN_TTL_SECONDS: int = 3600
    DEMO_USER_ID: int = 1
    DEMO_USERNAME: str = "admin"
    DEMO_PASSWORD: str = "password"
    DEMO_ROLE: str = "user"

    @field_validator("JWT_SECRET", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Секрет берётся из окружения, если не задан явно."""
        if not v:
            return os.getenv("JWT_SECRET", "")
        return v


class GatewaySettings(BaseModel):
    """Таймауты и повторы вызовов gateway к сервисам."""
    UPSTREAM_TIMEOUT: float = 5.0
    UPSTREAM_RETRY_ATTEMPTS: int = Field(default=3, ge=1)
    UPSTREAM_RETRY_DELAY: float = 0.2


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек.
    Агрегирует все секции конфигурации.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    system: SystemSettings = Field(default_factory=SystemSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)

    @classmethod
    def from_config_json(cls, config_data: dict[str, Any] | None = None) -> "Settings":
        """
        Создаёт объект Settings из config.json.
        Переменные окружения имеют приоритет над значениями из файла.
        """
        data = config_data if config_data is not None else load_config_json()

        def pick(key: str, default: Any) -> Any:
            return os.getenv(key, data.get(key, default))

        return cls(
            system=SystemSettings(
                PROJECT_NAME=data.get("PROJECT_NAME", "orderflow"),
                VERSION=data.get("VERSION", "1.0.0"),
                DEBUG=data.get("DEBUG", False),
                ENVIRONMENT=pick("ENVIRONMENT", "development"),
                COMPONENT_MODE=pick("COMPONENT_MODE", "all"),
            ),
            deployment=DeploymentSettings(
                AUTH_SERVICE_HOST=pick("AUTH_SERVICE_HOST", "localhost"),
                AUTH_SERVICE_PORT=int(pick("AUTH_SERVICE_PORT", 3000)),
                USERS_SERVICE_HOST=pick("USERS_SERVICE_HOST", "localhost"),
                USERS_SERVICE_PORT=int(pick("USERS_SERVICE_PORT", 3001)),
                ORDERS_SERVICE_HOST=pick("ORDERS_SERVICE_HOST", "localhost"),
                ORDERS_SERVICE_PORT=int(pick("ORDERS_SERVICE_PORT", 3002)),
                GATEWAY_HOST=pick("GATEWAY_HOST", "0.0.0.0"),
                GATEWAY_PORT=int(pick("GATEWAY_PORT", 3003)),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=pick("LOG_LEVEL", "INFO"),
                LOG_TO_FILE=data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_FORMAT=pick("LOG_FORMAT", "colored"),
                LOG_MAX_BYTES=data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=data.get("LOG_BACKUP_COUNT", 5),
            ),
            database=DatabaseSettings(
                DB_HOST=pick("DB_HOST", "localhost"),
                DB_PORT=int(pick("DB_PORT", 5432)),
                DB_NAME=pick("DB_NAME", "appdb"),
                DB_USER=pick("DB_USER", "postgres"),
                DB_PASSWORD=pick("DB_PASSWORD", ""),
                DB_MIN_POOL_SIZE=data.get("DB_MIN_POOL_SIZE", 2),
                DB_MAX_POOL_SIZE=data.get("DB_MAX_POOL_SIZE", 10),
                DB_COMMAND_TIMEOUT=data.get("DB_COMMAND_TIMEOUT", 30),
                DB_RETRY_ATTEMPTS=data.get("DB_RETRY_ATTEMPTS", 3),
                DB_RETRY_DELAY=data.get("DB_RETRY_DELAY", 1.0),
            ),
            redis=RedisSettings(
                REDIS_HOST=pick("REDIS_HOST", "localhost"),
                REDIS_PORT=int(pick("REDIS_PORT", 6379)),
                REDIS_DB=int(pick("REDIS_DB", 0)),
                REDIS_PASSWORD=pick("REDIS_PASSWORD", ""),
                REDIS_MAX_CONNECTIONS=data.get("REDIS_MAX_CONNECTIONS", 20),
            ),
            auth=AuthSettings(
                JWT_SECRET=pick("JWT_SECRET", ""),
                JWT_ALGORITHM=data.get("JWT_ALGORITHM", "HS256"),
                TOKEN_TTL_SECONDS=int(pick("TOKEN_TTL_SECONDS", 3600)),
                DEMO_USER_ID=data.get("DEMO_USER_ID", 1),
                DEMO_USERNAME=data.get("DEMO_USERNAME", "admin"),
                DEMO_PASSWORD=pick("DEMO_PASSWORD", "password"),
                DEMO_ROLE=data.get("DEMO_ROLE", "user"),
            ),
            gateway=GatewaySettings(
                UPSTREAM_TIMEOUT=float(pick("UPSTREAM_TIMEOUT", 5.0)),
                UPSTREAM_RETRY_ATTEMPTS=int(pick("UPSTREAM_RETRY_ATTEMPTS", 3)),
                UPSTREAM_RETRY_DELAY=float(pick("UPSTREAM_RETRY_DELAY", 0.2)),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Перед чтением конфига подгружает .env из корня проекта.
    """
    from dotenv import load_dotenv

    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


# Экспорт для удобного импорта
settings = get_settings()
