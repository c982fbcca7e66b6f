"""Configuration and environment settings for the bank statement importer."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings for the bank statement importer."""

    database_url: str = "sqlite:///transactions.db"
    server_host: str = "127.0.0.1"
    server_port: int = 8000
    log_file: str = "logs/import.log"
    max_upload_bytes: int = 5_000_000
    bulk_import_max_rows: int = 1000
    bulk_import_chunk_size: int = 500
    bulk_import_timeout_seconds: float = 60.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
