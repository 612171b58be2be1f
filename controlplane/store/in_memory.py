"""Module for in memory resource store."""

from collections.abc import Iterator
from contextlib import contextmanager
import logging
import threading
from typing import Any, TypeVar

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from controlplane.config import StoreConfig
from controlplane.exceptions import (
    ResourceNotFoundError,
    SerializationError,
    UnknownStorageError,
)
from controlplane.resource import Reference, Resource

from .store import Store


_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def _type_name(cls: Any) -> str:
    return getattr(cls, "__name__", None) or repr(cls)


def _adapter(cls: Any) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(cls)
    except PydanticSchemaGenerationError as err:
        raise SerializationError(
            f"Type {_type_name(cls)} is not supported: {err}"
        ) from err


class InMemoryStore(Store):
    """In-memory implementation of the Store interface.

    Resources are kept as serialized JSON keyed by Reference. A single lock
    guards the whole map for each operation, so writers to different
    references still serialize behind one another. The lock is attempted
    without blocking by default and contention fails fast with
    UnknownStorageError rather than queuing.
    """

    def __init__(self, config: StoreConfig | None = None) -> None:
        """Initialize the InMemoryStore."""
        self._config = config or StoreConfig()
        self._objects: dict[Reference, bytes] = {}
        self._mutex = threading.Lock()

    @contextmanager
    def _lock(self) -> Iterator[None]:
        timeout = self._config.lock_timeout
        if timeout > 0:
            acquired = self._mutex.acquire(timeout=timeout)
        else:
            acquired = self._mutex.acquire(blocking=False)
        if not acquired:
            _LOGGER.warning("Store is busy, lock not acquired within %ss", timeout)
            raise UnknownStorageError("Store lock is held by another caller")
        try:
            yield
        finally:
            self._mutex.release()

    def write(self, resource: Resource) -> None:
        """Serialize a resource and store it under its Reference."""
        ref = resource.resource_ref()
        try:
            value = _adapter(type(resource)).dump_json(
                resource, by_alias=True, warnings="error"
            )
        except PydanticSerializationError as err:
            raise SerializationError(
                f"Resource {ref} can't be serialized: {err}"
            ) from err
        with self._lock():
            if ref in self._objects:
                _LOGGER.debug("Updating existing resource %s in store", ref)
            else:
                _LOGGER.debug("Adding resource %s to store", ref)
            self._objects[ref] = value

    def read(self, ref: Reference, cls: type[T]) -> T:
        """Read the resource stored under the Reference as the specified type."""
        adapter = _adapter(cls)
        with self._lock():
            if (value := self._objects.get(ref)) is None:
                raise ResourceNotFoundError(ref)
            _LOGGER.debug("Reading resource %s as %s", ref, _type_name(cls))
            try:
                return adapter.validate_json(value)
            except ValidationError as err:
                raise SerializationError(
                    f"Resource {ref} is not a valid {_type_name(cls)}: {err}"
                ) from err

    def delete(self, ref: Reference) -> None:
        """Remove the resource stored under the Reference."""
        with self._lock():
            if self._objects.pop(ref, None) is None:
                raise ResourceNotFoundError(ref)
            _LOGGER.debug("Deleted resource %s from store", ref)

    def __contains__(self, ref: object) -> bool:
        """Return True if a resource is stored under the Reference."""
        with self._lock():
            return ref in self._objects
