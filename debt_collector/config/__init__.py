"""Configuration for the debt collector."""

from .legacy import SETTINGS_FILENAME, load_settings_file
from .loader import load_config
from .models import CollectorConfig

__all__ = ["CollectorConfig", "load_config", "load_settings_file", "SETTINGS_FILENAME"]
