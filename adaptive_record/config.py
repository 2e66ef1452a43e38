"""
Configuration settings for Adaptive Record.

Uses Pydantic Settings to load environment variables for the PostgreSQL
connection, logging and SQL generation defaults. Only the ambient layer (CLI,
PostgreSQL persistence, scripts) reads settings; the record store and SQL
generator take explicit arguments.
"""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("adaptive_record", alias="DB_NAME")
    db_connect_attempts: int = Field(3, alias="DB_CONNECT_ATTEMPTS", ge=1)

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # SQL generation defaults
    record_table: str = Field("Records", alias="RECORD_TABLE")
    sql_dialect: str = Field("sqlite", alias="SQL_DIALECT", pattern="^(sqlite|postgres)$")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
