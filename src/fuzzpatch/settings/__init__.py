from .models import (
    LogLevel,
    LoggingSettings,
    PatchSettings,
    Settings,
    SETTINGS_FILE_NAMES,
)
from .loader import ENV_PATTERN, find_settings_file, load_settings

__all__ = [
    "LogLevel",
    "LoggingSettings",
    "PatchSettings",
    "Settings",
    "SETTINGS_FILE_NAMES",
    "ENV_PATTERN",
    "find_settings_file",
    "load_settings",
]
