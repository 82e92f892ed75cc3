# marketplace/config.py
"""Process configuration read from the environment (and a local .env file)."""
import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()


def normalize_database_url(url: str) -> str:
    # SQLAlchemy 2.x doesn't accept 'postgres://'
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg2://", 1)
    return url


def _split_origins(raw: str) -> List[str]:
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


@dataclass
class Settings:
    database_url: str
    db_pool_size: int = 5
    db_max_overflow: int = 10
    auth_url: str = ""
    auth_api_key: str = ""
    auth_timeout: float = 10.0
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    seed_categories: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        database_url = os.getenv("POSTGRES_URL")
        if not database_url:
            raise RuntimeError("POSTGRES_URL not set")
        return cls(
            database_url=normalize_database_url(database_url),
            db_pool_size=int(os.getenv("DB_POOL_SIZE", 5)),
            db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", 10)),
            auth_url=os.getenv("AUTH_URL", ""),
            auth_api_key=os.getenv("AUTH_API_KEY", ""),
            auth_timeout=float(os.getenv("AUTH_TIMEOUT", 10)),
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
            seed_categories=os.getenv("SEED_CATEGORIES", "0") == "1",
        )
