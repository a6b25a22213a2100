"""Tests for MatchPredicate: filter combinations and claim short-circuiting."""

from __future__ import annotations

import re

import pytest

from pvcrestart.cache import ObjectCache
from pvcrestart.errors import ConfigurationError
from pvcrestart.matching import MatchPredicate, TypeClassifier, VolumeResolver
from pvcrestart.models.config import FilterConfig
from pvcrestart.models.resources import ObjectQuery, ResourceKind
from tests.fakes import FakeCluster


def _predicate(
    cache: ObjectCache,
    name_regex: str | None = None,
    types: set[str] | None = None,
) -> MatchPredicate:
    filters = FilterConfig(
        name_pattern=re.compile(name_regex) if name_regex is not None else None,
        types=frozenset(types) if types is not None else None,
    )
    return MatchPredicate(filters, VolumeResolver(cache), TypeClassifier(cache))


@pytest.fixture
def gluster_pod(cluster: FakeCluster) -> FakeCluster:
    """ns1/p1 -> c1 -> pv1 (glusterfs)."""
    cluster.add_pod("ns1", "p1", ["c1"])
    cluster.add_claim("ns1", "c1", "pv1")
    cluster.add_volume("pv1", glusterfs={"endpoints": "gluster", "path": "vol1"})
    return cluster


class TestConstruction:
    def test_no_filter_is_rejected(self, cache: ObjectCache) -> None:
        with pytest.raises(ConfigurationError):
            _predicate(cache)

    def test_empty_type_set_is_rejected(self, cache: ObjectCache) -> None:
        with pytest.raises(ConfigurationError):
            _predicate(cache, types=set())


class TestTypeFilter:
    async def test_matching_type(self, gluster_pod: FakeCluster, cache: ObjectCache) -> None:
        assert await _predicate(cache, types={"glusterfs"}).matches("ns1", "p1", ["c1"])

    async def test_non_matching_type(self, gluster_pod: FakeCluster, cache: ObjectCache) -> None:
        assert not await _predicate(cache, types={"nfs"}).matches("ns1", "p1", ["c1"])


class TestNameFilter:
    async def test_anchored_name_matches(self, gluster_pod: FakeCluster, cache: ObjectCache) -> None:
        assert await _predicate(cache, name_regex="^pv1$").matches("ns1", "p1", ["c1"])

    async def test_anchored_name_does_not_match_other_volume(self, cluster: FakeCluster, cache: ObjectCache) -> None:
        cluster.add_claim("ns1", "c1", "pv2")
        cluster.add_volume("pv2", glusterfs={})

        assert not await _predicate(cache, name_regex="^pv1$").matches("ns1", "p1", ["c1"])

    async def test_unanchored_regex_searches(self, cluster: FakeCluster, cache: ObjectCache) -> None:
        cluster.add_claim("ns1", "c1", "pvc-1234-legacy")

        assert await _predicate(cache, name_regex="legacy").matches("ns1", "p1", ["c1"])

    async def test_name_only_filter_does_not_read_volume(self, gluster_pod: FakeCluster, cache: ObjectCache) -> None:
        await _predicate(cache, name_regex="^pv1$").matches("ns1", "p1", ["c1"])

        assert not any(key.startswith("persistentvolumes/") for key in gluster_pod.reads)


class TestCombinedFilters:
    async def test_both_must_hold_on_the_same_claim(self, cluster: FakeCluster, cache: ObjectCache) -> None:
        """c1 passes the name filter only, c2 the type filter only: no match."""
        cluster.add_claim("ns1", "c1", "pv-old")
        cluster.add_volume("pv-old", nfs={"server": "nfs"})
        cluster.add_claim("ns1", "c2", "pv-new")
        cluster.add_volume("pv-new", glusterfs={"path": "vol"})

        predicate = _predicate(cache, name_regex="old", types={"glusterfs"})

        assert not await predicate.matches("ns1", "p1", ["c1", "c2"])

    async def test_both_hold(self, gluster_pod: FakeCluster, cache: ObjectCache) -> None:
        assert await _predicate(cache, name_regex="^pv", types={"glusterfs"}).matches("ns1", "p1", ["c1"])

    async def test_name_mismatch_skips_type_lookup(self, gluster_pod: FakeCluster, cache: ObjectCache) -> None:
        await _predicate(cache, name_regex="^nomatch$", types={"glusterfs"}).matches("ns1", "p1", ["c1"])

        assert "persistentvolumes//pv1?output=json" not in gluster_pod.reads


class TestClaimIteration:
    async def test_unresolvable_claim_is_skipped(self, gluster_pod: FakeCluster, cache: ObjectCache) -> None:
        """Claims [A, B] where A does not exist and B matches: the pod matches."""
        assert await _predicate(cache, types={"glusterfs"}).matches("ns1", "p1", ["missing", "c1"])

    async def test_unbound_claim_is_skipped(self, gluster_pod: FakeCluster, cache: ObjectCache) -> None:
        gluster_pod.add_claim("ns1", "pending")

        assert await _predicate(cache, types={"glusterfs"}).matches("ns1", "p1", ["pending", "c1"])

    async def test_read_failure_on_one_claim_is_skipped(self, gluster_pod: FakeCluster, cache: ObjectCache) -> None:
        query = ObjectQuery(kind=ResourceKind.PERSISTENT_VOLUME_CLAIM, namespace="ns1", name="flaky")
        gluster_pod.fail_read(query)

        assert await _predicate(cache, types={"glusterfs"}).matches("ns1", "p1", ["flaky", "c1"])

    async def test_missing_volume_is_skipped(self, gluster_pod: FakeCluster, cache: ObjectCache) -> None:
        gluster_pod.add_claim("ns1", "dangling", "pv-deleted")

        assert await _predicate(cache, types={"glusterfs"}).matches("ns1", "p1", ["dangling", "c1"])

    async def test_first_matching_claim_short_circuits(self, gluster_pod: FakeCluster, cache: ObjectCache) -> None:
        gluster_pod.add_claim("ns1", "c2", "pv2")
        gluster_pod.add_volume("pv2", glusterfs={})

        assert await _predicate(cache, types={"glusterfs"}).matches("ns1", "p1", ["c1", "c2"])

        assert not any("c2" in key or "pv2" in key for key in gluster_pod.reads)

    async def test_no_resolvable_claim(self, cache: ObjectCache) -> None:
        assert not await _predicate(cache, types={"glusterfs"}).matches("ns1", "p1", ["a", "b"])

    async def test_no_claims(self, cache: ObjectCache) -> None:
        assert not await _predicate(cache, types={"glusterfs"}).matches("ns1", "p1", [])
