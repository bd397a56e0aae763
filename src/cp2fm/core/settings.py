"""Converter settings and their loading from YAML / JSON files."""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from ruamel.yaml import YAML

from cp2fm.exceptions import SettingsError

logger = logging.getLogger(__name__)

_YAML_EXTS = {".yaml", ".yml"}
_JSON_EXTS = {".json"}

_yaml_parser = YAML(typ="safe")

DEFAULT_HANDLERS = ["bundle", "cfg-json", "cfg", "config", "xml"]


class ConverterSettings(BaseModel):
    """Flags driving a conversion."""

    model_config = ConfigDict(extra="forbid")

    strict_validation: bool = Field(
        default=False,
        description="Reject malformed content packages instead of best-effort reading.",
    )
    merge_configurations: bool = Field(
        default=False,
        description="Union properties of duplicate PIDs instead of failing.",
    )
    bundles_start_order: int = Field(
        default=0, ge=0, description="Start order assigned to every bundle."
    )
    handlers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_HANDLERS),
        description="Entry handler names, in dispatch order.",
    )

    @field_validator("handlers")
    def validate_handlers(cls, v: list[str]) -> list[str]:
        from cp2fm.handlers import HANDLER_TYPES

        names = [name.strip().lower() for name in v]
        unknown = [name for name in names if name not in HANDLER_TYPES]
        if unknown:
            raise ValueError(
                f"Unknown handlers: {', '.join(unknown)}. "
                f"Available: {', '.join(sorted(HANDLER_TYPES))}"
            )
        if len(set(names)) != len(names):
            raise ValueError("Handlers must not be listed twice")
        return names


def load_settings(path: str | Path, **overrides: Any) -> ConverterSettings:
    """
    Load settings from a YAML or JSON file.

    Args:
        path: Settings file (.yaml, .yml or .json)
        overrides: Values taking precedence over the file; None values are ignored

    Raises:
        SettingsError: If the file is missing, unparsable or invalid
    """
    file_path = Path(path)

    if not file_path.exists():
        raise SettingsError(f"Settings file not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix not in _YAML_EXTS | _JSON_EXTS:
        raise SettingsError(
            f"Unsupported settings extension '{file_path.suffix}'. "
            f"Supported: {', '.join(sorted(_YAML_EXTS | _JSON_EXTS))}"
        )

    try:
        raw_text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SettingsError(f"Cannot read {file_path}: {exc}") from exc

    try:
        if suffix in _YAML_EXTS:
            data = _yaml_parser.load(raw_text)
        else:
            data = json.loads(raw_text)
    except Exception as exc:
        raise SettingsError(f"Cannot parse {file_path.name}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SettingsError("Top-level settings object must be a mapping")

    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        settings = ConverterSettings(**data)
    except ValidationError as exc:
        raise SettingsError(f"Invalid settings in {file_path.name}: {exc}") from exc

    logger.debug(f"Settings loaded from {file_path}")
    return settings
