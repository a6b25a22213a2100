"""PersistentVolumeClaim -> PersistentVolume resolution."""

from __future__ import annotations

from pvcrestart.cache import ObjectCache
from pvcrestart.errors import ClaimNotFound, NotBound, ObjectNotFound
from pvcrestart.models.resources import ClaimRecord, ObjectQuery, ResourceKind


class VolumeResolver:
    """Looks up the volume a claim is bound to."""

    def __init__(self, cache: ObjectCache) -> None:
        self._cache = cache

    async def resolve_volume(self, namespace: str, claim_name: str) -> str:
        """Return the name of the volume bound to ``namespace/claim_name``.

        Raises ClaimNotFound if the claim does not exist and NotBound if it
        has no volume yet.
        """
        query = ObjectQuery(kind=ResourceKind.PERSISTENT_VOLUME_CLAIM, namespace=namespace, name=claim_name)
        try:
            raw = await self._cache.fetch_json(query)
        except ObjectNotFound as exc:
            raise ClaimNotFound(namespace, claim_name) from exc

        claim = ClaimRecord.from_raw(raw, query)
        if not claim.volume_name:
            raise NotBound(namespace, claim_name)
        return claim.volume_name
