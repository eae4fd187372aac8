"""WebSift runtime settings.

Every tunable (timeouts, page budget, expiry windows, update manifest) is read
from the environment when :data:`settings` is built.  A `.env` file at the
project root is loaded first and never overrides variables already set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("WEBSIFT_WORKSPACE", Path.home() / ".websift_data")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        return self.workspace_dir / "results.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Search backends
    # ------------------------------------------------------------------
    page_budget: int = field(
        default_factory=lambda: int(os.environ.get("PAGE_BUDGET", "3"))
    )
    search_provider_timeout: float = field(
        default_factory=lambda: float(os.environ.get("SEARCH_PROVIDER_TIMEOUT", "10.0"))
    )

    # ------------------------------------------------------------------
    # Harvester / browser
    # ------------------------------------------------------------------
    harvest_timeout: float = field(
        default_factory=lambda: float(os.environ.get("HARVEST_TIMEOUT", "30.0"))
    )
    page_settle_delay: float = field(
        default_factory=lambda: float(os.environ.get("PAGE_SETTLE_DELAY", "1.0"))
    )
    browser_headless: bool = field(
        default_factory=lambda: _env_bool("BROWSER_HEADLESS", "true")
    )

    # ------------------------------------------------------------------
    # Stored results
    # ------------------------------------------------------------------
    result_expiry: float = field(
        default_factory=lambda: float(os.environ.get("RESULT_EXPIRY", "3600"))
    )
    result_sweep_interval: float = field(
        default_factory=lambda: float(os.environ.get("RESULT_SWEEP_INTERVAL", "300"))
    )

    # ------------------------------------------------------------------
    # Update checker
    # ------------------------------------------------------------------
    update_api_url: str = field(
        default_factory=lambda: os.environ.get(
            "UPDATE_API_URL", "https://extupdater.inled.es/api/updates.json"
        )
    )
    update_match_keyword: str = field(
        default_factory=lambda: os.environ.get("UPDATE_MATCH_KEYWORD", "edgeai-v2")
    )
    update_check_interval: float = field(
        default_factory=lambda: float(os.environ.get("UPDATE_CHECK_INTERVAL", "600"))
    )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton; import this everywhere:
#   from websift.config import settings
settings = Settings()
