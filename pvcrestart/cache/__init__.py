"""Cache layer for pvc-restart.

Submodules:
    object_cache -- Write-once, per-run memoization of raw cluster reads.
"""

from pvcrestart.cache.object_cache import CacheStats, ObjectCache, ObjectReader

__all__ = ["CacheStats", "ObjectCache", "ObjectReader"]
