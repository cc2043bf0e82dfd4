"""Prepper-backed configuration loader for rewrap."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Iterator, Literal, Mapping

from dotenv import dotenv_values
from prepper import (
    Field,
    IoError,
    SchemaError,
    SchemaModel,
    ValidationError,
    model_validator,
)
from prepper.loaders import _parse_file, _path_to_source, discover_file_paths
from prepper.merge import merge_layer
from prepper.provenance import ProvenanceRecorder

from .errors import FormatterConfigurationError
from .formatters import DEFAULT_COMMAND

APP_NAME = "Rewrap"


class RewrapConfig(SchemaModel):
    """Schema describing all supported configuration options."""

    REWRAP_COLUMN_LIMIT: int = Field(
        default=100,
        description="Maximum number of columns per output line.",
    )
    REWRAP_INDENT_WIDTH: int = Field(
        default=2,
        description="Block indentation used by the primary formatter.",
    )
    REWRAP_FORMATTER: Literal["command", "identity"] = Field(
        default="command",
        description="Formatter selection.",
    )
    REWRAP_FORMATTER_COMMAND: str = Field(default=DEFAULT_COMMAND)
    REWRAP_FORMATTER_TIMEOUT: float = Field(default=30.0)
    REWRAP_VERBOSE: bool = Field(default=False)
    REWRAP_DEBUG_FORMATTER: bool = Field(default=False)

    @model_validator(mode="before")
    def _normalise_formatter(data: Any) -> Any:
        if isinstance(data, dict):
            raw_value = data.get("REWRAP_FORMATTER")
            if isinstance(raw_value, str):
                normalized = raw_value.strip().lower().replace("-", "_")
                synonyms = {
                    "external": "command",
                    "default": "command",
                    "noop": "identity",
                    "echo": "identity",
                }
                normalized = synonyms.get(normalized, normalized)
                if normalized not in {"command", "identity"}:
                    normalized = "command"
                data["REWRAP_FORMATTER"] = normalized
        return data


@lru_cache(maxsize=1)
def _load_settings(app_dir: Path | None = None) -> RewrapConfig:
    """Merge YAML files, ``.env`` and the environment once, later layers winning."""

    base_dir = app_dir or Path.cwd()
    provenance = ProvenanceRecorder()
    combined: dict[str, Any] = {}
    try:
        for values, source, layer in _layers(base_dir):
            merge_layer(combined, values, provenance=provenance, source=source, layer=layer)
        settings = RewrapConfig.validate(combined, provenance=provenance)
    except (IoError, SchemaError) as exc:
        raise FormatterConfigurationError(f"Configuration could not be loaded: {exc}") from exc
    except ValidationError as exc:
        raise FormatterConfigurationError(
            _bullets(_describe(entry) for entry in exc.to_dict())
        ) from exc

    problems = _check_ranges(settings)
    if problems:
        raise FormatterConfigurationError(_bullets(problems))
    return settings


def _layers(base_dir: Path) -> Iterator[tuple[Mapping[str, Any], str, str]]:
    for path, label in discover_file_paths(APP_NAME, "yaml", app_dir=base_dir, extra_paths=None):
        parsed = _parse_file(path, "yaml")
        if not isinstance(parsed, Mapping):
            raise IoError(f"{path} must hold a mapping at its root.")
        yield parsed, _path_to_source(label, "yaml", path), "file"

    known = RewrapConfig.__field_infos__.keys()
    dotenv_path = base_dir / ".env"
    env_sources = [(".env", dotenv_values(dotenv_path) if dotenv_path.exists() else {})]
    env_sources.append(("process", os.environ))
    for origin, values in env_sources:
        for key in sorted(known):
            if values.get(key) is not None:
                yield {key: values[key]}, f"env:{origin}:{key}", "env"


def _check_ranges(settings: RewrapConfig) -> list[str]:
    problems = [
        f"{name} must be positive."
        for name in ("REWRAP_COLUMN_LIMIT", "REWRAP_INDENT_WIDTH", "REWRAP_FORMATTER_TIMEOUT")
        if getattr(settings, name) <= 0
    ]
    if settings.REWRAP_FORMATTER == "command" and not settings.REWRAP_FORMATTER_COMMAND.strip():
        problems.append("REWRAP_FORMATTER_COMMAND is required for the command formatter.")
    return problems


def _describe(entry: Mapping[str, Any]) -> str:
    path = entry.get("path") or []
    if isinstance(path, (list, tuple)):
        path = ".".join(str(part) for part in path if part not in (None, ""))
    message = entry.get("message") or entry.get("msg") or "Invalid value"
    return f"{path}: {message}" if path else str(message)


def _bullets(problems: Iterable[str]) -> str:
    return "Invalid rewrap configuration:\n" + "\n".join(f"- {item}" for item in problems)


def get_settings(app_dir: Path | None = None) -> RewrapConfig:
    """Return the validated settings."""

    return _load_settings(app_dir=app_dir)
