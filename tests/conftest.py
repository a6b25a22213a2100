"""Shared fixtures for pvc-restart tests."""

from __future__ import annotations

import pytest

from pvcrestart.cache import ObjectCache
from tests.fakes import FakeCluster


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def cache(cluster: FakeCluster) -> ObjectCache:
    return ObjectCache(cluster)
