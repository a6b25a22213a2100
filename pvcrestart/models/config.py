"""Configuration data structures."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

DEFAULT_ANNOTATION = "pvc-restart.io/exclude"


@dataclass(frozen=True)
class FilterConfig:
    """Which pods count as matches.

    An empty ``annotation`` disables the opt-out check. At least one of
    ``name_pattern`` and ``types`` must be set for a run.
    """

    annotation: str = DEFAULT_ANNOTATION
    name_pattern: re.Pattern[str] | None = None
    types: frozenset[str] | None = None

    @property
    def has_name_filter(self) -> bool:
        return self.name_pattern is not None

    @property
    def has_type_filter(self) -> bool:
        return self.types is not None


@dataclass(frozen=True)
class ClusterConfig:
    """Where to find cluster credentials."""

    kubeconfig: str | None = None
    context: str | None = None


@dataclass(frozen=True)
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass(frozen=True)
class RestartConfig:
    """Top-level run configuration. Immutable for the run."""

    filters: FilterConfig = field(default_factory=FilterConfig)
    delete: bool = False
    keep_going: bool = False
    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    log: LogConfig = field(default_factory=LogConfig)
