"""
Abstract base class for storage backends.

Provides a consistent interface for the local filesystem, S3, Google Cloud
Storage and etcd.
"""

from abc import ABC, abstractmethod

from objectstore.storage.objects import Object


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    A backend is bound to one external system and, where applicable, one
    prefix fixed at construction. Keys passed to every operation are
    relative to that prefix.
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend identifier used in log events."""
        ...

    @abstractmethod
    async def list_objects(self, prefix: str = "") -> list[Object]:
        """
        List the objects stored directly under a prefix.

        Args:
            prefix: Key prefix relative to the backend prefix.

        Returns:
            Objects with empty data and prefix-stripped paths. Empty if the
            prefix does not exist yet.

        Raises:
            BackendUnavailableError: If the backend cannot be reached.
        """
        ...

    @abstractmethod
    async def get_object(self, key: str) -> Object:
        """
        Fetch an object with its content.

        Args:
            key: Object key relative to the backend prefix.

        Returns:
            Object with data and last_modified populated.

        Raises:
            ObjectNotFoundError: If the key does not exist.
            BackendUnavailableError: If the backend cannot be reached.
            PermissionDeniedError: If access is rejected.
        """
        ...

    @abstractmethod
    async def put_object(self, key: str, data: bytes) -> None:
        """
        Create or overwrite an object.

        Missing intermediate hierarchy is created implicitly. After a
        failure the state of the object at ``key`` is unspecified.

        Args:
            key: Object key relative to the backend prefix.
            data: Object content.

        Raises:
            BackendUnavailableError: If the write cannot be completed.
            PermissionDeniedError: If access is rejected.
        """
        ...

    @abstractmethod
    async def delete_object(self, key: str) -> None:
        """
        Remove an object.

        Args:
            key: Object key relative to the backend prefix.

        Raises:
            ObjectNotFoundError: If the key does not exist (not raised by
                every backend, see the adapter documentation).
            BackendUnavailableError: If the backend cannot be reached.
        """
        ...
