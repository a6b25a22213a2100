"""Core data structures for pvc-restart."""

from pvcrestart.models.config import (
    DEFAULT_ANNOTATION,
    ClusterConfig,
    FilterConfig,
    LogConfig,
    RestartConfig,
)
from pvcrestart.models.resources import (
    ClaimRecord,
    ObjectQuery,
    PodRecord,
    ResourceKind,
    VolumeRecord,
)

__all__ = [
    "DEFAULT_ANNOTATION",
    "ClaimRecord",
    "ClusterConfig",
    "FilterConfig",
    "LogConfig",
    "ObjectQuery",
    "PodRecord",
    "ResourceKind",
    "RestartConfig",
    "VolumeRecord",
]
