"""Plain ``KEY=value`` settings file parsing."""

import contextlib
from pathlib import Path
from typing import Any

from ..collector_logging import get_logger

logger = get_logger()

SETTINGS_FILENAME = ".debt-collector.txt"

# Uppercase settings keys -> config fields; lowercase keys pass through
KEY_MAPPING = {
    "OPENAI_API_KEY": "openai_api_key",
    "OPENAI_MODEL": "chat_model",
    "CHAT_MODEL": "chat_model",
    "EMBEDDING_PROVIDER": "embedding_provider",
    "EMBEDDING_MODEL": "embedding_model",
    "ENABLE_LLM": "enable_llm",
    "ENRICH_LIMIT": "enrich_limit",
    "REQUEST_DELAY": "request_delay_seconds",
    "MAX_CONCURRENCY": "max_concurrency",
    "EXCLUDE_DIRS": "exclude_dirs",
    "INCLUDE_EXTENSIONS": "include_extensions",
    "OUTPUT_FORMAT": "output_format",
    "OUTPUT_PATH": "output_path",
}


def _coerce(raw_value: str) -> Any:
    value: Any = raw_value
    if raw_value.lower() in ("true", "false"):
        return raw_value.lower() == "true"
    if raw_value.replace(".", "", 1).replace("-", "", 1).isdigit():
        with contextlib.suppress(ValueError):
            value = float(raw_value) if "." in raw_value else int(raw_value)
    return value


def load_settings_file(settings_file: Path) -> dict[str, Any]:
    """Read a settings file into config field names.

    Blank lines, ``#`` comments and trailing `` # `` comments are ignored.
    Booleans and numbers are converted. A missing or unreadable file yields
    an empty dict.
    """
    settings: dict[str, Any] = {}
    if not settings_file.exists():
        return settings

    try:
        with open(settings_file, encoding="utf-8") as f:
            for line in f:
                line = line.split(" #", 1)[0].strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, raw_value = line.split("=", 1)
                key = key.strip()
                if not key:
                    continue

                settings[KEY_MAPPING.get(key, key)] = _coerce(raw_value.strip())
    except OSError as e:
        logger.warning(f"Failed to load {settings_file}: {e}")

    return settings
