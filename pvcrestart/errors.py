"""Exception hierarchy for pvc-restart.

Resolution errors (a claim or volume that cannot be resolved) are absorbed
by the match predicate; every other error is fatal for the run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pvcrestart.models.resources import ObjectQuery


class PVCRestartError(Exception):
    """Base class for all pvc-restart errors."""


class ConfigurationError(PVCRestartError):
    """The run configuration is unusable (no filter, empty type set, bad regex)."""


class ClusterConnectionError(PVCRestartError):
    """Cluster credentials could not be loaded."""


class TransientReadFailure(PVCRestartError):
    """A cluster read failed or returned something undecodable."""

    def __init__(self, query: ObjectQuery, cause: object) -> None:
        super().__init__(f"Read of {query.cache_key} failed: {cause}")
        self.query = query
        self.cause = cause


class MalformedObject(TransientReadFailure):
    """A retrieved object is missing a required field."""


class ResolutionError(PVCRestartError):
    """A claim or volume does not resolve to something that can match."""


class ClaimNotFound(ResolutionError):
    """The PersistentVolumeClaim does not exist."""

    def __init__(self, namespace: str, claim_name: str) -> None:
        super().__init__(f"PersistentVolumeClaim {namespace}/{claim_name} not found")
        self.namespace = namespace
        self.claim_name = claim_name


class NotBound(ResolutionError):
    """The PersistentVolumeClaim exists but is not bound to a volume."""

    def __init__(self, namespace: str, claim_name: str) -> None:
        super().__init__(f"PersistentVolumeClaim {namespace}/{claim_name} is not bound")
        self.namespace = namespace
        self.claim_name = claim_name


class VolumeNotFound(ResolutionError):
    """The PersistentVolume a claim is bound to does not exist."""

    def __init__(self, volume_name: str) -> None:
        super().__init__(f"PersistentVolume {volume_name} not found")
        self.volume_name = volume_name


class ObjectNotFound(PVCRestartError):
    """Raised by the cluster client when a read returns 404."""

    def __init__(self, query: ObjectQuery) -> None:
        super().__init__(f"{query.cache_key} not found")
        self.query = query


class DeleteFailure(PVCRestartError):
    """One or more matched pods could not be deleted.

    ``failures`` holds ``(namespace, pod, reason)`` tuples in processing order.
    """

    def __init__(self, failures: list[tuple[str, str, str]]) -> None:
        names = ", ".join(f"{ns}/{pod}" for ns, pod, _ in failures)
        super().__init__(f"Failed to delete {len(failures)} pod(s): {names}")
        self.failures = failures
