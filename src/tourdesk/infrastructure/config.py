from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="TOURDESK_", extra="ignore")

    DATA_DIR: Path = Path("data")
    STORE_BACKEND: str = "json"  # json|sql
    # Only used with STORE_BACKEND=sql. Defaults to a SQLite file inside DATA_DIR.
    DATABASE_URL: str = ""
    DOCUMENT_DIR: Path = Path("data/documents")

    MAX_PASSENGERS: int = 20
    PASSPORT_MIN_VALIDITY_MONTHS: int = 6
    ALLOW_STAFF_CAPACITY_BYPASS: bool = True
    # Seconds without a claim before a drifted seat ledger row may be resynced.
    LEDGER_RESYNC_IDLE_SECONDS: int = 60

    LOG_LEVEL: str = "WARNING"

    @field_validator("STORE_BACKEND", mode="after")
    @classmethod
    def known_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("json", "sql"):
            raise ValueError("STORE_BACKEND must be 'json' or 'sql'")
        return v

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Hosted databases often hand out postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v

    @field_validator("MAX_PASSENGERS", "PASSPORT_MIN_VALIDITY_MONTHS", mode="after")
    @classmethod
    def positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("LEDGER_RESYNC_IDLE_SECONDS", mode="after")
    @classmethod
    def not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cannot be negative")
        return v

    @property
    def database_url(self) -> str:
        return self.DATABASE_URL or f"sqlite:///{self.DATA_DIR / 'tourdesk.db'}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
