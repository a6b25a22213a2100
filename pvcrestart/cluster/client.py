"""Thin async wrapper around the kubernetes-asyncio CoreV1 API.

Reads are issued with ``_preload_content=False`` so callers get the raw
JSON bytes the API server sent, in the server's own camelCase field names.
Nothing here retries: retry and timeout policy belong to the API client
configuration.
"""

from __future__ import annotations

import asyncio
from types import TracebackType
from typing import Any

import aiohttp
from kubernetes_asyncio import client as k8s_client
from kubernetes_asyncio import config as k8s_config
from kubernetes_asyncio.client.exceptions import ApiException

from pvcrestart.errors import ClusterConnectionError, ObjectNotFound, TransientReadFailure
from pvcrestart.models.config import ClusterConfig
from pvcrestart.models.resources import ObjectQuery, ResourceKind
from pvcrestart.observability.logging import get_logger

_log = get_logger("cluster")


class ClusterClient:
    """Reads pods, claims and volumes as raw bytes; deletes pods.

    Owns the ApiClient connection pool; use as an async context manager or
    call close() explicitly.
    """

    def __init__(self, api_client: k8s_client.ApiClient) -> None:
        self._api_client = api_client
        self._v1 = k8s_client.CoreV1Api(api_client)
        self.reads = 0

    async def read(self, query: ObjectQuery) -> bytes:
        """Perform *query* and return the response body.

        Raises ObjectNotFound on 404 and TransientReadFailure on any other
        API or transport error.
        """
        self.reads += 1
        _log.debug("api_read", query=query.cache_key)
        try:
            response = await self._dispatch(query)
            try:
                if response.status == 404:
                    raise ObjectNotFound(query)
                if not 200 <= response.status <= 299:
                    body = (await response.read())[:200].decode(errors="replace")
                    raise TransientReadFailure(query, f"HTTP {response.status}: {body}")
                return await response.read()
            finally:
                response.release()
        except ApiException as exc:
            if exc.status == 404:
                raise ObjectNotFound(query) from exc
            raise TransientReadFailure(query, f"HTTP {exc.status}: {exc.reason}") from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransientReadFailure(query, exc) from exc

    async def _dispatch(self, query: ObjectQuery) -> Any:
        if query.output != "json":
            raise ValueError(f"Unsupported output format: {query.output}")
        if query.kind is ResourceKind.POD and not query.name:
            if query.namespace:
                return await self._v1.list_namespaced_pod(query.namespace, _preload_content=False)
            return await self._v1.list_pod_for_all_namespaces(_preload_content=False)
        if query.kind is ResourceKind.PERSISTENT_VOLUME_CLAIM and query.name:
            return await self._v1.read_namespaced_persistent_volume_claim(
                query.name, query.namespace, _preload_content=False
            )
        if query.kind is ResourceKind.PERSISTENT_VOLUME and query.name:
            return await self._v1.read_persistent_volume(query.name, _preload_content=False)
        raise ValueError(f"Unsupported query: {query.cache_key}")

    async def delete_pod(self, namespace: str, name: str) -> bool:
        """Delete a pod. Returns False if it was already gone.

        Any other API error propagates as ApiException.
        """
        try:
            await self._v1.delete_namespaced_pod(name, namespace)
        except ApiException as exc:
            if exc.status == 404:
                return False
            raise
        return True

    async def close(self) -> None:
        await self._api_client.close()

    async def __aenter__(self) -> ClusterClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


async def connect(cluster: ClusterConfig) -> ClusterClient:
    """Build a ClusterClient from in-cluster config or kubeconfig.

    An explicit kubeconfig path or context skips in-cluster detection.
    """
    configuration = k8s_client.Configuration()
    try:
        if cluster.kubeconfig is None and cluster.context is None:
            try:
                k8s_config.load_incluster_config(client_configuration=configuration)
                _log.info("k8s client configured from in-cluster service account")
                return ClusterClient(k8s_client.ApiClient(configuration))
            except k8s_config.ConfigException:
                pass
        await k8s_config.load_kube_config(
            config_file=cluster.kubeconfig,
            context=cluster.context,
            client_configuration=configuration,
        )
        _log.info("k8s client configured from kubeconfig", context=cluster.context)
    except (k8s_config.ConfigException, OSError) as exc:
        raise ClusterConnectionError(f"Could not load cluster credentials: {exc}") from exc
    return ClusterClient(k8s_client.ApiClient(configuration))
