"""
etcd key-value storage backend.

Implements StorageBackend on an etcd v3 cluster through its JSON gRPC
gateway. Every key lives under a namespace; unlike the other backends,
listing a prefix returns every key below it, nested ones included.
"""

import asyncio
from collections.abc import Callable
from functools import partial
from typing import Any, TypeVar
from urllib.parse import urlsplit

import etcd3gw
from etcd3gw.client import Etcd3Client
from etcd3gw.exceptions import Etcd3Exception

from objectstore.core.exceptions import (
    BackendUnavailableError,
    InvalidArgumentError,
    ObjectNotFoundError,
)
from objectstore.core.logging import get_logger
from objectstore.storage.base import StorageBackend
from objectstore.storage.objects import EPOCH, Metadata, Object

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_PORT = 2379


def _as_bytes(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def _as_text(value: str | bytes) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def parse_endpoint(endpoint: str, ssl_enabled: bool = False) -> tuple[str, str, int]:
    """
    Split an endpoint into (protocol, host, port).

    Accepts ``host``, ``host:port`` and full ``http(s)://host:port`` URLs.
    """
    if "://" not in endpoint:
        endpoint = f"{'https' if ssl_enabled else 'http'}://{endpoint}"
    parts = urlsplit(endpoint)
    if not parts.hostname:
        raise InvalidArgumentError(
            message=f"Invalid etcd endpoint: {endpoint}",
            details={"endpoint": endpoint},
        )
    return parts.scheme, parts.hostname, parts.port or DEFAULT_PORT


class EtcdStorageBackend(StorageBackend):
    """etcd storage implementation."""

    def __init__(
        self,
        endpoints: list[str],
        namespace: str,
        ssl_enabled: bool = False,
        ssl_ca: str | None = None,
        ssl_cert: str | None = None,
        ssl_key: str | None = None,
        ssl_verify: bool = True,
        timeout: float | None = 10.0,
        client: Etcd3Client | None = None,
    ) -> None:
        """
        Initialize etcd storage backend and check cluster health.

        Args:
            endpoints: Cluster endpoints; the first one is used.
            namespace: Prefix prepended to every key (e.g. ``/app/env/``).
            ssl_enabled: Connect over TLS.
            ssl_ca: CA certificate file.
            ssl_cert: Client certificate file.
            ssl_key: Client key file.
            ssl_verify: Verify the server certificate.
            timeout: Request timeout in seconds.
            client: Pre-built client, mainly for tests.

        Raises:
            InvalidArgumentError: If no endpoint is configured or the cluster
                status check fails.
        """
        if not endpoints:
            raise InvalidArgumentError(message="No etcd endpoints configured")

        self.endpoint = endpoints[0]
        self.namespace = namespace

        if client is None:
            protocol, host, port = parse_endpoint(self.endpoint, ssl_enabled)
            tls: dict[str, Any] = {}
            if ssl_enabled:
                logger.debug("etcd_tls_enabled", endpoint=self.endpoint)
                tls = {"ca_cert": ssl_ca, "cert_cert": ssl_cert, "cert_key": ssl_key}
            client = etcd3gw.client(
                host=host,
                port=port,
                protocol=protocol,
                timeout=timeout,
                **tls,
            )
            if ssl_enabled and not ssl_verify:
                client.session.verify = False

        self.client = client

        try:
            self.client.status()
        except (Etcd3Exception, OSError) as e:
            logger.error("etcd_status_check_failed", endpoint=self.endpoint, error=str(e))
            raise InvalidArgumentError(
                message=f"Unable to check etcd cluster status: {e}",
                details={"endpoint": self.endpoint},
            ) from e

    @property
    def backend_name(self) -> str:
        return "etcd"

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args))

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def _unavailable(self, e: Exception, key: str) -> BackendUnavailableError:
        return BackendUnavailableError(
            message=f"etcd request failed: {e}",
            details={"key": key, "endpoint": self.endpoint},
        )

    def _to_object(self, path: str, value: str | bytes = b"") -> Object:
        # etcd keeps no timestamps
        return Object(
            path=path,
            data=_as_bytes(value),
            last_modified=EPOCH,
            metadata=Metadata(),
        )

    async def list_objects(self, prefix: str = "") -> list[Object]:
        """Range query over every key starting with the prefix."""
        try:
            results = await self._run(self.client.get_prefix, self._key(prefix))
        except (Etcd3Exception, OSError) as e:
            raise self._unavailable(e, prefix) from e

        objects: list[Object] = []
        for _value, meta in results:
            key = _as_text(meta["key"]).removeprefix(self.namespace)
            objects.append(self._to_object(key))

        logger.debug("objects_listed", backend="etcd", prefix=prefix, count=len(objects))
        return objects

    async def get_object(self, key: str) -> Object:
        """Read a single key."""
        try:
            values = await self._run(self.client.get, self._key(key))
        except (Etcd3Exception, OSError) as e:
            raise self._unavailable(e, key) from e

        if not values:
            raise ObjectNotFoundError(key, backend="etcd")

        obj = self._to_object(key, values[0])
        logger.debug("object_fetched", backend="etcd", key=key, size=len(obj.data))
        return obj

    async def put_object(self, key: str, data: bytes) -> None:
        """Write a single key."""
        try:
            await self._run(self.client.put, self._key(key), data)
        except (Etcd3Exception, OSError) as e:
            raise self._unavailable(e, key) from e

        logger.debug("object_stored", backend="etcd", key=key, size=len(data))

    async def delete_object(self, key: str) -> None:
        """
        Delete a single key.

        Deleting a key that does not exist is not an error on etcd.
        """
        try:
            deleted = await self._run(self.client.delete, self._key(key))
        except (Etcd3Exception, OSError) as e:
            raise self._unavailable(e, key) from e

        logger.debug("object_deleted", backend="etcd", key=key, existed=bool(deleted))
