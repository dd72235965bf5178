import os
import sys
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from rx_intake.commons.exceptions import MalformedInputError
from rx_intake.commons.types import Settings

CONFIG_DIR = Path(__file__).resolve().parent.parent / "configs"
DEFAULT_SETTINGS = CONFIG_DIR / "settings.yaml"


def resource_path(relative_path: str) -> str:
    """Absolute path to a bundled resource, frozen executable or dev checkout."""
    if hasattr(sys, "_MEIPASS"):
        base_path = sys._MEIPASS
    else:
        base_path = os.path.abspath(".")
    return os.path.join(base_path, relative_path)


def _resolve(path: Optional[str]) -> Path:
    """Relative paths: working directory first, then the configs dir, then the install root."""
    if not path:
        return DEFAULT_SETTINGS
    candidate = Path(resource_path(path))
    if Path(path).is_absolute() or candidate.exists():
        return candidate
    for base in (CONFIG_DIR, CONFIG_DIR.parent.parent):
        if (base / path).exists():
            return base / path
    return candidate


def load_cfg(path: Optional[str] = None) -> Settings:
    config_path = _resolve(path)
    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    try:
        return Settings.model_validate(raw)
    except PydanticValidationError as ex:
        raise MalformedInputError(
            f"Invalid settings file {config_path}",
            detail={"errors": ex.errors(include_url=False, include_context=False)},
        ) from ex
