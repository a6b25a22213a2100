"""Run driver for pvc-restart.

Wires the components for one run and walks the candidate pods:
config → K8s client → object cache → enumerator → predicate → (delete)

Processing is strictly sequential: each pod is evaluated, and deleted if
requested, before the next one is looked at. The object cache and the API
client are released on every exit path, including errors and interrupts.
Pods already deleted stay deleted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from pvcrestart.cache import ObjectCache
from pvcrestart.cluster import ClusterClient, connect
from pvcrestart.errors import DeleteFailure
from pvcrestart.matching import MatchPredicate, PodEnumerator, TypeClassifier, VolumeResolver
from pvcrestart.models.config import RestartConfig
from pvcrestart.models.resources import PodRecord
from pvcrestart.observability.logging import get_logger

_log = get_logger("app")


class DriverState(StrEnum):
    """Where the driver is in its run."""

    IDLE = "idle"
    ENUMERATING = "enumerating"
    EVALUATING = "evaluating"
    MATCHED = "matched"
    UNMATCHED = "unmatched"
    DELETING = "deleting"
    FINISHED = "finished"
    FAILED = "failed"


class PodDeleter(Protocol):
    async def delete_pod(self, namespace: str, name: str) -> bool: ...


@dataclass
class RunSummary:
    """What one run did."""

    candidates: int = 0
    matched: list[tuple[str, str]] = field(default_factory=list)
    deleted: int = 0
    already_gone: int = 0
    delete_failures: list[tuple[str, str, str]] = field(default_factory=list)
    cache_hits: int = 0
    cache_misses: int = 0


class RestartDriver:
    """Evaluates every enumerated pod and optionally deletes the matches.

    Delete failures abort the run unless ``config.keep_going`` is set, in
    which case they are collected and raised together once every pod has
    been processed.
    """

    def __init__(
        self,
        config: RestartConfig,
        enumerator: PodEnumerator,
        predicate: MatchPredicate,
        deleter: PodDeleter,
        cache: ObjectCache | None = None,
    ) -> None:
        self._config = config
        self._enumerator = enumerator
        self._predicate = predicate
        self._deleter = deleter
        self._cache = cache
        self.state = DriverState.IDLE
        self.summary = RunSummary()

    def _transition(self, state: DriverState, **context: object) -> None:
        self.state = state
        _log.debug("driver_state", state=state.value, **context)

    async def run(self) -> RunSummary:
        try:
            self._transition(DriverState.ENUMERATING)
            pods = await self._enumerator.list_pods(self._config.filters.annotation)
            for pod in pods:
                await self._process(pod)
        except BaseException:
            self._transition(DriverState.FAILED)
            raise
        finally:
            self._record_cache_stats()

        self._transition(DriverState.FAILED if self.summary.delete_failures else DriverState.FINISHED)
        _log.info(
            "finished",
            dry_run=not self._config.delete,
            candidates=self.summary.candidates,
            matched=len(self.summary.matched),
            deleted=self.summary.deleted,
            already_gone=self.summary.already_gone,
            delete_failures=len(self.summary.delete_failures),
            cache_hits=self.summary.cache_hits,
            cache_misses=self.summary.cache_misses,
        )
        if self.summary.delete_failures:
            raise DeleteFailure(self.summary.delete_failures)
        return self.summary

    async def _process(self, pod: PodRecord) -> None:
        self.summary.candidates += 1
        self._transition(DriverState.EVALUATING, namespace=pod.namespace, pod=pod.name)
        if not await self._predicate.matches(pod.namespace, pod.name, pod.claim_names):
            self._transition(DriverState.UNMATCHED, namespace=pod.namespace, pod=pod.name)
            return

        self._transition(DriverState.MATCHED, namespace=pod.namespace, pod=pod.name)
        self.summary.matched.append(pod.key)
        _log.info("pod_matched", namespace=pod.namespace, pod=pod.name)

        if self._config.delete:
            await self._delete(pod)

    async def _delete(self, pod: PodRecord) -> None:
        self._transition(DriverState.DELETING, namespace=pod.namespace, pod=pod.name)
        try:
            existed = await self._deleter.delete_pod(pod.namespace, pod.name)
        except Exception as exc:
            failure = (pod.namespace, pod.name, str(exc))
            _log.error("pod_delete_failed", namespace=pod.namespace, pod=pod.name, error=str(exc))
            if not self._config.keep_going:
                raise DeleteFailure([failure]) from exc
            self.summary.delete_failures.append(failure)
            return

        if existed:
            self.summary.deleted += 1
            _log.info("pod_deleted", namespace=pod.namespace, pod=pod.name)
        else:
            self.summary.already_gone += 1
            _log.info("pod_already_gone", namespace=pod.namespace, pod=pod.name)

    def _record_cache_stats(self) -> None:
        if self._cache is None:
            return
        stats = self._cache.stats()
        self.summary.cache_hits = stats.hits
        self.summary.cache_misses = stats.misses


def build_driver(config: RestartConfig, cache: ObjectCache, deleter: PodDeleter) -> RestartDriver:
    """Wire the matching engine around *cache* for one run."""
    predicate = MatchPredicate(
        config.filters,
        resolver=VolumeResolver(cache),
        classifier=TypeClassifier(cache),
    )
    return RestartDriver(
        config,
        enumerator=PodEnumerator(cache),
        predicate=predicate,
        deleter=deleter,
        cache=cache,
    )


async def run(config: RestartConfig, client: ClusterClient) -> RunSummary:
    """Run once against an already connected *client*."""
    async with ObjectCache(client) as cache:
        driver = build_driver(config, cache, client)
        return await driver.run()


async def main(config: RestartConfig) -> RunSummary:
    """Connect to the cluster, run, and release the connection."""
    _log.info(
        "pvc_restart_starting",
        version=_pvcrestart_version(),
        delete=config.delete,
        annotation=config.filters.annotation or None,
        name_regex=config.filters.name_pattern.pattern if config.filters.name_pattern else None,
        types=sorted(config.filters.types) if config.filters.types else None,
    )
    async with await connect(config.cluster) as client:
        return await run(config, client)


def _pvcrestart_version() -> str:
    from pvcrestart import __version__

    return __version__
