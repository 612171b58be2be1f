"""Exceptions related to the resource registry."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .resource import Reference

__all__ = [
    "RegistryException",
    "InputException",
    "StorageError",
    "ResourceNotFoundError",
    "SerializationError",
    "UnknownStorageError",
]


class RegistryException(Exception):
    """Generic base exception used for this library."""


class InputException(RegistryException):
    """Raised when a resource is constructed from values that are not valid for its kind."""


class StorageError(RegistryException):
    """Base class for failures reported by a resource store."""


class ResourceNotFoundError(StorageError):
    """Raised when no resource is stored under the requested reference."""

    def __init__(self, ref: "Reference") -> None:
        super().__init__(f"Resource {ref} not found")
        self.ref = ref


class SerializationError(StorageError):
    """Raised when a resource can't be serialized, or a stored document does not match the requested type."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Serialization error: {detail}")
        self.detail = detail


class UnknownStorageError(StorageError):
    """Raised on a backend level failure such as lock contention.

    Callers should treat this as retryable.
    """
