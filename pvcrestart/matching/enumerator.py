"""Cluster-wide pod enumeration."""

from __future__ import annotations

from collections.abc import Iterator

from pvcrestart.cache import ObjectCache
from pvcrestart.models.resources import ObjectQuery, PodRecord, ResourceKind, decode_pod_list
from pvcrestart.observability.logging import get_logger

_log = get_logger("matching.enumerator")

ALL_PODS = ObjectQuery(kind=ResourceKind.POD)


def is_opted_out(pod: PodRecord, annotation: str) -> bool:
    """True if *annotation* is active and the pod carries a non-empty value for it."""
    if not annotation:
        return False
    return bool(pod.annotations.get(annotation))


class PodEnumerator:
    """Produces the candidate pods for one run, sorted by (namespace, name)."""

    def __init__(self, cache: ObjectCache) -> None:
        self._cache = cache

    async def list_pods(self, annotation: str) -> Iterator[PodRecord]:
        """List every pod that references a claim and is not opted out.

        Read failures propagate: without the pod list there is nothing to do.
        """
        raw = await self._cache.fetch_json(ALL_PODS)
        pods = decode_pod_list(raw, ALL_PODS)

        candidates: list[PodRecord] = []
        opted_out = 0
        for pod in pods:
            if not pod.claim_names:
                continue
            if is_opted_out(pod, annotation):
                opted_out += 1
                _log.debug("pod_opted_out", namespace=pod.namespace, pod=pod.name, annotation=annotation)
                continue
            candidates.append(pod)

        candidates.sort(key=lambda p: p.key)
        _log.info("pods_enumerated", total=len(pods), candidates=len(candidates), opted_out=opted_out)
        return iter(candidates)
