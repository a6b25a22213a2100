"""Kubernetes API access for pvc-restart.

Exposes:
    ClusterClient -- raw reads (bytes) and pod deletion over kubernetes-asyncio.
    connect       -- build a ClusterClient from kubeconfig / in-cluster credentials.
"""

from pvcrestart.cluster.client import ClusterClient, connect

__all__ = ["ClusterClient", "connect"]
