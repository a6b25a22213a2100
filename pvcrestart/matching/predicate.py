"""Per-pod match decision.

A pod matches when ANY of its claims resolves to a volume that passes every
active filter (name regex, storage types). Claims are tried in order and the
first passing claim ends the evaluation. A claim that cannot be resolved
only removes itself from consideration.
"""

from __future__ import annotations

from collections.abc import Sequence

from pvcrestart.errors import ConfigurationError, ResolutionError, TransientReadFailure
from pvcrestart.matching.classifier import TypeClassifier
from pvcrestart.matching.resolver import VolumeResolver
from pvcrestart.models.config import FilterConfig
from pvcrestart.observability.logging import get_logger

_log = get_logger("matching.predicate")


class MatchPredicate:
    """Combines volume resolution, the name regex and the type filter."""

    def __init__(
        self,
        filters: FilterConfig,
        resolver: VolumeResolver,
        classifier: TypeClassifier,
    ) -> None:
        if not filters.has_name_filter and not filters.has_type_filter:
            raise ConfigurationError("MatchPredicate needs a name regex or a storage type filter")
        if filters.types is not None and not filters.types:
            raise ConfigurationError("Storage type filter must not be empty")
        self._filters = filters
        self._resolver = resolver
        self._classifier = classifier

    async def matches(self, namespace: str, pod_name: str, claim_names: Sequence[str]) -> bool:
        for claim_name in claim_names:
            try:
                if await self._claim_matches(namespace, claim_name):
                    _log.debug("claim_matched", namespace=namespace, pod=pod_name, claim=claim_name)
                    return True
            except ResolutionError as exc:
                _log.debug("claim_skipped", namespace=namespace, pod=pod_name, claim=claim_name, reason=str(exc))
            except TransientReadFailure as exc:
                _log.warning("claim_lookup_failed", namespace=namespace, pod=pod_name, claim=claim_name, error=str(exc))
        return False

    async def _claim_matches(self, namespace: str, claim_name: str) -> bool:
        volume_name = await self._resolver.resolve_volume(namespace, claim_name)

        pattern = self._filters.name_pattern
        if pattern is not None and pattern.search(volume_name) is None:
            return False

        types = self._filters.types
        if types is not None:
            return await self._classifier.has_any_type(volume_name, types)
        return True
