"""
Provisioning status tracking for nodes.

Provides pluggable tracker backends:
- Redis: flags persisted in a networked key-value store
- Memory: flags held in a process-local mapping (lost on restart)

A key that has never been set reads as not provisioned; that is not an error.
"""

import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import redis
import structlog

from ..config import TrackerBackend
from ..exceptions import ConfigurationError, TrackerConnectionError, TrackerValueError

if TYPE_CHECKING:
    from ..config import Settings

logger = structlog.get_logger(__name__)

_FALSE_VALUES = {b"0", "0", 0}


class Tracker(ABC):
    """Abstract base class for node provisioning trackers."""

    backend: TrackerBackend

    @abstractmethod
    def get(self, key: str) -> bool:
        """
        Check whether a node has been provisioned.

        Args:
            key: Node identity

        Returns:
            True if the node was marked and not cleared since, False otherwise
        """
        pass

    @abstractmethod
    def set(self, key: str) -> None:
        """
        Mark a node as provisioned.

        Args:
            key: Node identity
        """
        pass

    @abstractmethod
    def clear(self, key: str) -> None:
        """
        Forget the provisioning status of a node.

        Args:
            key: Node identity
        """
        pass


class KeyValueTracker(Tracker):
    """
    Tracker backed by a Redis server.

    The client handle is owned by the caller; this class never opens or
    closes it. Store errors are raised to the caller as-is, without retries.
    """

    backend = TrackerBackend.REDIS

    def __init__(self, client: "redis.Redis") -> None:
        self.client = client

    def get(self, key: str) -> bool:
        value = self.client.get(key)
        if value is None:
            return False

        # Only 0 reads as false; any other string or integer reply is true.
        if isinstance(value, (bytes, str, int)):
            return value not in _FALSE_VALUES

        raise TrackerValueError(
            f"Stored value for {key!r} is not a boolean: {value!r}",
            key=key,
            value=value,
        )

    def set(self, key: str) -> None:
        self.client.set(key, 1)
        logger.debug("Node marked as provisioned", key=key, backend="redis")

    def clear(self, key: str) -> None:
        self.client.delete(key)
        logger.debug("Node provisioning status cleared", key=key, backend="redis")


class MemoryTracker(Tracker):
    """In-memory tracker, used when no key-value store is configured."""

    backend = TrackerBackend.MEMORY

    def __init__(self) -> None:
        self._data: dict[str, bool] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bool:
        with self._lock:
            return self._data.get(key, False)

    def set(self, key: str) -> None:
        with self._lock:
            self._data[key] = True

    def clear(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


def normalize_redis_url(url: str) -> str:
    """
    Normalize a store address into a URL the redis client accepts.

    Docker links advertise the store as ``tcp://host:port``; that scheme is
    rewritten to ``redis://``.

    Raises:
        ConfigurationError: If the address has no usable host
    """
    parsed = urlparse(url)

    if parsed.scheme == "unix":
        return url

    if parsed.scheme not in {"tcp", "redis", "rediss"} or not parsed.hostname:
        raise ConfigurationError(
            f"Unable to look up redis database address: {url!r}",
            context={"url": url},
        )

    if parsed.scheme == "tcp":
        return parsed._replace(scheme="redis").geturl()
    return url


class TrackerFactory:
    """Factory for creating the tracker selected by configuration."""

    @staticmethod
    def create_tracker(
        backend: TrackerBackend | str,
        redis_url: str | None = None,
        client: "redis.Redis | None" = None,
        **kwargs: Any,
    ) -> Tracker:
        """
        Create a tracker instance for the requested backend.

        Args:
            backend: 'auto', 'memory' or 'redis'
            redis_url: Address of the redis server
            client: Already connected redis client to use instead of redis_url
            **kwargs: Additional options (socket_timeout)

        Returns:
            Tracker instance

        Raises:
            ValueError: If backend is not supported
            ConfigurationError: If redis is selected without an address
            TrackerConnectionError: If the redis server cannot be reached
        """
        if not isinstance(backend, TrackerBackend):
            try:
                backend = TrackerBackend(backend.lower())
            except ValueError as e:
                supported = ", ".join(TrackerFactory.get_supported_backends())
                raise ValueError(
                    f"Unknown tracker backend: {backend}. "
                    f"Supported backends: {supported}"
                ) from e

        if backend == TrackerBackend.AUTO:
            has_store = client is not None or bool(redis_url)
            backend = TrackerBackend.REDIS if has_store else TrackerBackend.MEMORY

        if backend == TrackerBackend.MEMORY:
            logger.info("Using in-memory tracker for node provisioning status")
            return MemoryTracker()

        if client is None:
            client = TrackerFactory._connect(redis_url, kwargs.get("socket_timeout"))

        logger.info("Using redis tracker for node provisioning status")
        return KeyValueTracker(client)

    @staticmethod
    def from_settings(settings: "Settings") -> Tracker:
        """Create the tracker described by application settings."""
        return TrackerFactory.create_tracker(
            settings.tracker_backend,
            redis_url=settings.resolved_redis_url,
            socket_timeout=settings.redis_socket_timeout,
        )

    @staticmethod
    def get_supported_backends() -> list[str]:
        """Get list of supported tracker backends."""
        return [backend.value for backend in TrackerBackend]

    @staticmethod
    def _connect(redis_url: str | None, socket_timeout: float | None) -> "redis.Redis":
        """Open a redis client and check the server answers."""
        if not redis_url:
            raise ConfigurationError(
                "Tracker configured for redis, but no redis address defined"
            )

        url = normalize_redis_url(redis_url)
        try:
            client = redis.Redis.from_url(url, socket_timeout=socket_timeout)
        except ValueError as e:
            raise ConfigurationError(
                f"Unable to look up redis database address: {redis_url!r}",
                context={"url": redis_url},
            ) from e

        try:
            client.ping()
        except redis.exceptions.RedisError as e:
            logger.error("Unable to connect to redis database", url=url, error=str(e))
            raise TrackerConnectionError(
                f"Unable to connect to redis database at {url}: {e}", url=url
            ) from e

        return client
