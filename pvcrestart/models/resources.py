"""Typed read models for the cluster objects the matcher needs.

Each model is decoded from the raw JSON the API server returns, keeping
only the fields the matching engine looks at. Missing required fields raise
MalformedObject instead of being treated as empty.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pvcrestart.errors import MalformedObject


class ResourceKind(StrEnum):
    """API resource kinds read by pvc-restart (plural REST names)."""

    POD = "pods"
    PERSISTENT_VOLUME_CLAIM = "persistentvolumeclaims"
    PERSISTENT_VOLUME = "persistentvolumes"


@dataclass(frozen=True)
class ObjectQuery:
    """A single read against the API server.

    An empty ``name`` means "list"; an empty ``namespace`` on a namespaced
    kind means "all namespaces".
    """

    kind: ResourceKind
    namespace: str = ""
    name: str = ""
    output: str = "json"

    @property
    def cache_key(self) -> str:
        return f"{self.kind.value}/{self.namespace}/{self.name}?output={self.output}"


# PersistentVolume spec fields that describe the volume rather than its backend.
_PV_GENERIC_FIELDS = frozenset(
    {
        "accessModes",
        "capacity",
        "claimRef",
        "mountOptions",
        "nodeAffinity",
        "persistentVolumeReclaimPolicy",
        "storageClassName",
        "volumeAttributesClassName",
        "volumeMode",
    }
)


def _metadata(raw: Any, query: ObjectQuery) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise MalformedObject(query, "object is not a mapping")
    metadata = raw.get("metadata")
    if not isinstance(metadata, dict):
        raise MalformedObject(query, "missing metadata")
    if not metadata.get("name"):
        raise MalformedObject(query, "missing metadata.name")
    return metadata


@dataclass(frozen=True)
class PodRecord:
    """A pod that references at least one PersistentVolumeClaim."""

    namespace: str
    name: str
    claim_names: tuple[str, ...] = ()
    annotations: dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def key(self) -> tuple[str, str]:
        return (self.namespace, self.name)

    @classmethod
    def from_raw(cls, raw: Any, query: ObjectQuery) -> PodRecord:
        metadata = _metadata(raw, query)
        namespace = metadata.get("namespace")
        if not namespace:
            raise MalformedObject(query, f"pod {metadata['name']} has no metadata.namespace")
        name = str(metadata["name"])
        spec = raw.get("spec") or {}
        return cls(
            namespace=str(namespace),
            name=name,
            claim_names=_claim_names(name, spec.get("volumes") or []),
            annotations={str(k): str(v) for k, v in (metadata.get("annotations") or {}).items()},
        )


def _claim_names(pod_name: str, volumes: list[dict[str, Any]]) -> tuple[str, ...]:
    """Distinct claim names referenced by *volumes*, first occurrence wins.

    Generic ephemeral volumes own a claim named ``<pod>-<volume>``.
    """
    seen: dict[str, None] = {}
    for volume in volumes:
        pvc = volume.get("persistentVolumeClaim")
        if pvc and pvc.get("claimName"):
            seen.setdefault(str(pvc["claimName"]), None)
        elif volume.get("ephemeral") and volume.get("name"):
            seen.setdefault(f"{pod_name}-{volume['name']}", None)
    return tuple(seen)


@dataclass(frozen=True)
class ClaimRecord:
    """A PersistentVolumeClaim and the volume it is bound to, if any."""

    namespace: str
    name: str
    volume_name: str | None = None

    @classmethod
    def from_raw(cls, raw: Any, query: ObjectQuery) -> ClaimRecord:
        metadata = _metadata(raw, query)
        spec = raw.get("spec") or {}
        return cls(
            namespace=str(metadata.get("namespace") or query.namespace),
            name=str(metadata["name"]),
            volume_name=spec.get("volumeName") or None,
        )


@dataclass(frozen=True)
class VolumeRecord:
    """A PersistentVolume and its storage-type descriptors.

    ``types`` maps a backend key (``nfs``, ``glusterfs``, ``csi``, ...) to
    its descriptor as found in the PV spec.
    """

    name: str
    types: dict[str, Any] = field(default_factory=dict, compare=False)

    def has_type(self, key: str) -> bool:
        value = self.types.get(key)
        return value is not None and value is not False

    @classmethod
    def from_raw(cls, raw: Any, query: ObjectQuery) -> VolumeRecord:
        metadata = _metadata(raw, query)
        spec = raw.get("spec") or {}
        return cls(
            name=str(metadata["name"]),
            types={k: v for k, v in spec.items() if k not in _PV_GENERIC_FIELDS},
        )


def decode_pod_list(raw: Any, query: ObjectQuery) -> list[PodRecord]:
    """Decode a PodList, keeping every pod (filtering happens in the enumerator)."""
    if not isinstance(raw, dict) or not isinstance(raw.get("items"), list):
        raise MalformedObject(query, "pod list has no items")
    return [PodRecord.from_raw(item, query) for item in raw["items"]]
