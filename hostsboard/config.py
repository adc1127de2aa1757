"""Centralised settings for the hostsboard backend.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_TRUTHY = {"1", "true", "yes", "on"}

# Default directory used when running deployed; the project directory is
# typically read-only there.
PRODUCTION_DATA_DIR = Path("/tmp/data")


def _env(*names: str, default: str = "") -> str:
    """Return the first non-empty environment variable among *names*."""
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return default


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Runtime mode
    # ------------------------------------------------------------------
    environment: str = field(
        default_factory=lambda: _env(
            "HOSTSBOARD_ENV", "NODE_ENV", default="development"
        ).lower()
    )

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------
    data_dir_override: Path | None = field(
        default_factory=lambda: (
            Path(_env("HOSTSBOARD_DB_DIR", "DB_DIR"))
            if _env("HOSTSBOARD_DB_DIR", "DB_DIR")
            else None
        )
    )
    db_filename: str = "db.json"
    serialize_writes: bool = field(
        default_factory=lambda: os.environ.get(
            "HOSTSBOARD_SERIALIZE_WRITES", ""
        ).lower() in _TRUTHY
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("HOSTSBOARD_LOG_LEVEL", "INFO").upper()
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def data_dir(self) -> Path:
        """Directory holding the JSON document.

        An explicit override wins; otherwise the default depends on the
        runtime mode.
        """
        if self.data_dir_override is not None:
            return self.data_dir_override
        if self.is_production:
            return PRODUCTION_DATA_DIR
        return Path.cwd() / "data"

    @property
    def db_path(self) -> Path:
        """Absolute path to the JSON document."""
        return self.data_dir / self.db_filename

    def ensure_data_dir(self) -> None:
        """Create the data directory if it does not exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton — import this everywhere:
#   from hostsboard.config import settings
settings = Settings()
