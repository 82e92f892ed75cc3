# marketplace/utils.py
"""Shared utilities: logging setup, clock and pagination helpers."""
import os
import logging
from datetime import datetime, timezone
from dotenv import load_dotenv

load_dotenv()

def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("marketplace")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def paginate(total: int, limit: int, offset: int) -> dict:
    total = total or 0
    return {
        "total": total,
        "limit": limit,
        "offset": offset,
        "hasMore": total > offset + limit,
    }
