"""Static configuration for packscope.

All user-editable settings (channels, categories, fetch, toggles, admin API,
logging) live in a single JSON file for quick edits without touching Python.
Secrets stay in .env.
"""

import json
import os

from core.categories import build_category_table
from core.config import AdminConfig, FetchConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.environ.get("PACKSCOPE_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _normalize_channels(raw_channels: list[dict]) -> set[str]:
    """Return enabled source keys (``@username`` or ``chat_id:<id>``)."""

    channels: set[str] = set()
    for entry in raw_channels:
        source_key = entry.get("source_key")
        if not source_key or not entry.get("enabled", True):
            continue
        channels.add(source_key.lower() if source_key.startswith("@") else source_key)
    return channels


_CONFIG = _load_json_config()

CONFIG = _CONFIG

# Commands are only accepted in these channels; empty means everywhere.
CHANNELS = _normalize_channels(_CONFIG.get("channels", []))

COMMAND_PREFIX = _CONFIG.get("command_prefix", "!")

# Calibrated colour ranges, with optional per-category overrides.
CATEGORY_TABLE = build_category_table(_CONFIG.get("categories", {}))

_cache = _CONFIG.get("cache", {})
CACHE_DB_PATH = _cache.get("path", "packscope.db")
if not os.path.isabs(CACHE_DB_PATH):
    CACHE_DB_PATH = os.path.join(PROJECT_ROOT, CACHE_DB_PATH)

_fetch = _CONFIG.get("fetch", {})
FETCH = FetchConfig(
    page_size=int(_fetch.get("page_size", 100)),
    max_attempts=int(_fetch.get("max_attempts", 5)),
    base_delay=float(_fetch.get("base_delay", 5.0)),
    multiplier=float(_fetch.get("multiplier", 2.0)),
    max_delay=float(_fetch.get("max_delay", 60.0)),
)

# Initial toggle values; the admin API can flip them at runtime.
_control = _CONFIG.get("control", {})
PROCESSING_ENABLED = bool(_control.get("processing_enabled", True))
CACHING_ENABLED = bool(_control.get("caching_enabled", True))
REPORTING_ENABLED = bool(_control.get("reporting_enabled", True))

_admin = _CONFIG.get("admin", {})
ADMIN = AdminConfig(
    enabled=bool(_admin.get("enabled", True)),
    host=_admin.get("host", "127.0.0.1"),
    port=int(_admin.get("port", 8765)),
)
# Base URL the console uses to reach the admin API.
ADMIN_URL = _admin.get("url") or f"http://{ADMIN.host}:{ADMIN.port}"

# In-flight sessions get this long to finish after an Exit request.
SHUTDOWN_GRACE_SECONDS = float(_CONFIG.get("shutdown", {}).get("grace_seconds", 30))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
