"""Application configuration.

Environment variables override all defaults. A `.env` file next to the
backend directory is loaded first for local development.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


class Settings:
    # Remote inventory service (source of truth for stock and restock orders)
    INVENTORY_API_BASE_URL: str = os.getenv("INVENTORY_API_BASE_URL", "http://localhost:3001").rstrip("/")
    REQUEST_TIMEOUT_SECONDS: float = _float_env("REQUEST_TIMEOUT_SECONDS", 10.0)
    # Only idempotent GETs are retried; POST/PATCH never are
    REQUEST_MAX_RETRIES: int = _int_env("REQUEST_MAX_RETRIES", 2)

    # Restocking screen refreshes every 5 minutes
    RESTOCK_POLL_INTERVAL_SECONDS: float = _float_env("RESTOCK_POLL_INTERVAL_SECONDS", 300.0)

    # Restock form defaults
    DEFAULT_DELIVERY_LEAD_DAYS: int = _int_env("DEFAULT_DELIVERY_LEAD_DAYS", 7)

    # Medication-form stock policy: "Low Stock" up to reorder point + margin
    LOW_STOCK_MARGIN: int = _int_env("LOW_STOCK_MARGIN", 10)

    # Front page alerts
    EXPIRY_WARNING_DAYS: int = _int_env("EXPIRY_WARNING_DAYS", 30)

    # CORS for the UI collaborator
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:8081,http://127.0.0.1:8081,http://localhost:19006",
        ).split(",")
        if origin.strip()
    ]

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"


settings = Settings()


def build_api_url(endpoint: str, base_url: Optional[str] = None) -> str:
    """Join an endpoint path onto the inventory service base URL."""
    base = (base_url or settings.INVENTORY_API_BASE_URL).rstrip("/")
    normalized = endpoint if endpoint.startswith("/") else f"/{endpoint}"
    return f"{base}{normalized}"
