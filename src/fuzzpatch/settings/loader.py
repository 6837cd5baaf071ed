from typing import Any, Optional, Union
import os
import re
from pathlib import Path

import json5  # type: ignore
import yaml

from .models import SETTINGS_FILE_NAMES, Settings

# ${env:NAME} placeholder; '$${env:NAME}' stays a literal '${env:NAME}'
ENV_PATTERN = re.compile(r"(?<!\$)\$\{env:([A-Za-z_][A-Za-z0-9_]*)\}")


def _expand_env(value: str) -> str:
    def repl(m: re.Match) -> str:
        name = m.group(1)
        env_val = os.getenv(name)
        if env_val is None:
            raise ValueError(f"Environment variable '{name}' is not set")
        return env_val

    return ENV_PATTERN.sub(repl, value).replace("$${", "${")


def _expand_tree(obj: Any) -> Any:
    if isinstance(obj, str):
        return _expand_env(obj)
    if isinstance(obj, dict):
        return {k: _expand_tree(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_tree(v) for v in obj]
    return obj


def _load_raw_file(path: Path) -> Any:
    ext = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if ext in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    elif ext in {".json5", ".jsonc", ".json"}:
        data = json5.loads(text)
    else:
        raise ValueError(f"Unsupported config file extension: {ext}")
    return {} if data is None else data


def load_settings(path: Union[str, Path]) -> Settings:
    """
    Load a YAML or JSON5 settings file. String values may reference the
    environment as ${env:NAME}; pydantic coerces the expanded text to the
    field type, so `strict: ${env:FUZZPATCH_STRICT}` works for booleans too.
    """
    data = _load_raw_file(Path(path))
    if not isinstance(data, dict):
        raise ValueError("Root configuration must be a mapping/object")
    return Settings.model_validate(_expand_tree(data))


def find_settings_file(base_path: Union[str, Path]) -> Optional[Path]:
    base = Path(base_path)
    for name in SETTINGS_FILE_NAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None
