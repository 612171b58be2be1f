"""Store module for persisting resources by reference."""

from abc import ABC, abstractmethod
from typing import TypeVar

from controlplane.resource import Reference, Resource

T = TypeVar("T")


class Store(ABC):
    """Abstract base class for the central resource store.

    A store maps a Reference to the serialized form of a resource. Any
    Resource may be written, and a read names the type to decode the stored
    document as, so the store never needs to know the universe of kinds.
    """

    @abstractmethod
    def write(self, resource: Resource) -> None:
        """Serialize a resource and store it under its Reference.

        Any value previously stored under the same Reference is replaced.

        Raises:
            SerializationError: If the resource can't be serialized. The
                store is left unchanged.
            UnknownStorageError: If the backend failed, e.g. on contention.
        """

    @abstractmethod
    def read(self, ref: Reference, cls: type[T]) -> T:
        """Read the resource stored under the Reference as the specified type.

        The type may be a resource class, a parametrized generic resource such
        as `GenericResource[Payload]`, or the `Resources` union.

        Raises:
            ResourceNotFoundError: If nothing is stored under the Reference.
            SerializationError: If the stored document does not match the type.
            UnknownStorageError: If the backend failed, e.g. on contention.
        """

    @abstractmethod
    def delete(self, ref: Reference) -> None:
        """Remove the resource stored under the Reference.

        Raises:
            ResourceNotFoundError: If nothing is stored under the Reference.
            UnknownStorageError: If the backend failed, e.g. on contention.
        """

    @abstractmethod
    def __contains__(self, ref: object) -> bool:
        """Return True if a resource is stored under the Reference."""
