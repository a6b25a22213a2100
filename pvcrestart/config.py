"""Configuration loading from environment variables and CLI overrides."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable

from pvcrestart.errors import ConfigurationError
from pvcrestart.models.config import (
    DEFAULT_ANNOTATION,
    ClusterConfig,
    FilterConfig,
    LogConfig,
    RestartConfig,
)

_LOG_LEVELS = {"debug", "info", "warning", "error"}
_LOG_FORMATS = {"json", "console"}


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"PVCRESTART_{key}", default)


def _validate_log_level(value: str) -> str:
    if value.lower() not in _LOG_LEVELS:
        raise ConfigurationError(f"Invalid log level: {value}. Must be one of {sorted(_LOG_LEVELS)}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    if value.lower() not in _LOG_FORMATS:
        raise ConfigurationError(f"Invalid log format: {value}. Must be one of {sorted(_LOG_FORMATS)}")
    return value.lower()


def _compile_name_regex(value: str | None) -> re.Pattern[str] | None:
    if value is None:
        return None
    try:
        return re.compile(value)
    except re.error as exc:
        raise ConfigurationError(f"Invalid name regex {value!r}: {exc}") from exc


def parse_types(values: Iterable[str]) -> frozenset[str] | None:
    """Flatten repeated/comma-separated type options.

    Returns None when no type option was given at all. Raises
    ConfigurationError when options were given but name no type.
    """
    raw = list(values)
    if not raw:
        return None
    types = frozenset(part.strip() for value in raw for part in value.split(",") if part.strip())
    if not types:
        raise ConfigurationError("Type filter given but contains no storage types")
    return types


def build_filters(
    annotation: str | None = None,
    all_annotations: bool = False,
    name_regex: str | None = None,
    types: Iterable[str] = (),
) -> FilterConfig:
    """Build and validate the filter configuration.

    ``all_annotations`` disables the opt-out check regardless of
    ``annotation``.
    """
    if all_annotations:
        key = ""
    elif annotation is not None:
        key = annotation
    else:
        key = _env("ANNOTATION", DEFAULT_ANNOTATION)

    filters = FilterConfig(
        annotation=key,
        name_pattern=_compile_name_regex(name_regex),
        types=parse_types(types),
    )
    if not filters.has_name_filter and not filters.has_type_filter:
        raise ConfigurationError("At least one of a name regex or a storage type filter is required")
    return filters


def load_config(
    annotation: str | None = None,
    all_annotations: bool = False,
    name_regex: str | None = None,
    types: Iterable[str] = (),
    delete: bool = False,
    keep_going: bool = False,
    kubeconfig: str | None = None,
    context: str | None = None,
    log_level: str | None = None,
    log_format: str | None = None,
) -> RestartConfig:
    """Load configuration from PVCRESTART_* environment variables.

    Explicit arguments (the CLI flags) take precedence over the environment.
    """
    return RestartConfig(
        filters=build_filters(
            annotation=annotation,
            all_annotations=all_annotations,
            name_regex=name_regex,
            types=types,
        ),
        delete=delete,
        keep_going=keep_going,
        cluster=ClusterConfig(
            kubeconfig=kubeconfig or None,
            context=context or _env("CONTEXT") or None,
        ),
        log=LogConfig(
            level=_validate_log_level(log_level or _env("LOG_LEVEL", "info")),
            format=_validate_log_format(log_format or _env("LOG_FORMAT", "json")),
        ),
    )
