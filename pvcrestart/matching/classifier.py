"""Storage-type membership of PersistentVolumes."""

from __future__ import annotations

from collections.abc import Set

from pvcrestart.cache import ObjectCache
from pvcrestart.errors import ConfigurationError, ObjectNotFound, VolumeNotFound
from pvcrestart.models.resources import ObjectQuery, ResourceKind, VolumeRecord


class TypeClassifier:
    """Answers "is this volume backed by any of these storage types?"."""

    def __init__(self, cache: ObjectCache) -> None:
        self._cache = cache

    async def has_any_type(self, volume_name: str, requested_types: Set[str]) -> bool:
        if not requested_types:
            raise ConfigurationError("has_any_type() called with an empty type set")

        query = ObjectQuery(kind=ResourceKind.PERSISTENT_VOLUME, name=volume_name)
        try:
            raw = await self._cache.fetch_json(query)
        except ObjectNotFound as exc:
            raise VolumeNotFound(volume_name) from exc

        volume = VolumeRecord.from_raw(raw, query)
        return any(volume.has_type(key) for key in requested_types)
