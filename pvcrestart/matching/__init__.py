"""Matching engine: decides which pods are wanted for a restart.

Submodules:
    enumerator -- PodEnumerator: cluster-wide pod listing with the annotation opt-out.
    resolver   -- VolumeResolver: claim -> bound volume name.
    classifier -- TypeClassifier: does a volume carry one of the requested storage types.
    predicate  -- MatchPredicate: per-pod decision across its claims.
"""

from pvcrestart.matching.classifier import TypeClassifier
from pvcrestart.matching.enumerator import PodEnumerator, is_opted_out
from pvcrestart.matching.predicate import MatchPredicate
from pvcrestart.matching.resolver import VolumeResolver

__all__ = [
    "MatchPredicate",
    "PodEnumerator",
    "TypeClassifier",
    "VolumeResolver",
    "is_opted_out",
]
