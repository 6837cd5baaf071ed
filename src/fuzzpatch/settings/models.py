from enum import Enum
import codecs
from typing import Dict, Final, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

# Config file names looked up in the project root, in priority order
SETTINGS_FILE_NAMES: Final[Tuple[str, ...]] = (
    ".fuzzpatch.yaml",
    ".fuzzpatch.yml",
    ".fuzzpatch.json5",
    ".fuzzpatch.json",
)


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"
    critical = "critical"


class PatchSettings(BaseModel):
    # Fail fuzzy matches that have more than one candidate region
    strict: bool = False
    # Persist files where only some blocks applied
    allow_partial: bool = False
    encoding: str = "utf-8"
    show_diff: bool = False

    @field_validator("encoding")
    @classmethod
    def _validate_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as exc:
            raise ValueError(f"Unknown encoding {v!r}") from exc
        return v


class LoggingSettings(BaseModel):
    default_level: LogLevel = LogLevel.warning
    # Mapping of logger name -> level override (e.g., {"asyncio": "debug"})
    enabled_loggers: Dict[str, LogLevel] = Field(default_factory=dict)
    log_file: Optional[str] = None


class Settings(BaseModel):
    patch: PatchSettings = Field(default_factory=PatchSettings)
    logging: Optional[LoggingSettings] = Field(default=None)
