from __future__ import annotations

import typing as t

import pydantic as p

from .base import BaseSettings


class StorageSettings(BaseSettings):
    persistent: PersistentSettings


class PersistentSettings(BaseSettings):
    database: DatabaseSettings
    echo: bool = False


class DatabaseSettings(BaseSettings):
    """Connection settings; `sqlite+pysqlite` with database ":memory:" is for tests."""

    driver: t.Literal["postgresql+psycopg", "sqlite+pysqlite"] = "postgresql+psycopg"
    host: p.IPvAnyAddress | str | None = None
    port: int | None = None
    database: str
    username: str | None = None
    password: p.SecretStr | None = None

    @property
    def is_memory(self) -> bool:
        return self.driver.startswith("sqlite") and self.database in ("", ":memory:")
