"""Representation of the resources held by the registry.

Every resource carries the same envelope: an `apiVersion` and `kind` that say
what the resource is, and `metadata` that names it and optionally links it to
an owning resource. The envelope is flattened into the serialized document so
a consumer sees `{apiVersion, kind, metadata, spec}`.

Built in kinds (`Project`, `Namespace`, `ResourceDefinition`) have a fixed
group. New kinds can be described with data alone using `GenericResource`,
which pairs a caller chosen group with an arbitrary `spec` payload.
"""

from abc import ABC, abstractmethod
import logging
from typing import Annotated, Any, ClassVar, Generic, Literal, Self, TypeVar, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    ValidationError,
    model_serializer,
    model_validator,
)

from .exceptions import InputException

__all__ = [
    "Reference",
    "ResourceGroup",
    "ResourceMetadata",
    "Resource",
    "BaseResource",
    "Project",
    "Namespace",
    "GenericResource",
    "UntypedResource",
    "ResourceDefinition",
    "ResourceDefinitionSpec",
    "ResourceNames",
    "ResourceVersion",
    "JsonSchema",
    "Resources",
    "define_resource",
    "resource_schema",
]

_LOGGER = logging.getLogger(__name__)


CORE_API_VERSION = "core/v1"
PROJECT_KIND = "project"
NAMESPACE_KIND = "namespace"
RESOURCE_DEFINITION_KIND = "resourcedefinition"
JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

# Envelope fields every serialized resource has, in document order.
ENVELOPE_FIELDS = ["apiVersion", "kind", "metadata"]


def _compact(doc: dict[str, Any]) -> dict[str, Any]:
    if not isinstance(metadata := doc.get("metadata"), dict):
        return doc
    doc["metadata"] = {
        key: value
        for key, value in metadata.items()
        if key not in ("labels", "annotations") or value
    }
    return doc


class BaseObject(BaseModel):
    """Base class for all registry objects."""

    model_config = ConfigDict(
        frozen=True,
        validate_by_name=True,
        validate_by_alias=True,
        serialize_by_alias=True,
        ser_json_inf_nan="constants",
    )

    OMIT_IF_NONE: ClassVar[tuple[str, ...]] = ()
    """Fields left out of the serialized document entirely when unset."""

    @model_serializer(mode="wrap")
    def _omit_none(self, handler: SerializerFunctionWrapHandler) -> Any:
        data = handler(self)
        if not isinstance(data, dict):
            return data
        for name in self.OMIT_IF_NONE:
            if getattr(self, name) is not None:
                continue
            data.pop(name, None)
            if alias := type(self).model_fields[name].alias:
                data.pop(alias, None)
        return data

    def to_dict(self) -> dict[str, Any]:
        """Return the serialized document for the object."""
        return self.model_dump(mode="json", by_alias=True)

    def compact_dict(self) -> dict[str, Any]:
        """Return a compact dictionary representation of the object.

        This is the serialized document with empty labels and annotations
        removed from its metadata.
        """
        return _compact(self.to_dict())

    @classmethod
    def parse_yaml(cls, content: str) -> Self:
        """Parse a serialized object."""
        try:
            doc = yaml.safe_load(content)
        except yaml.YAMLError as err:
            raise InputException(f"Invalid {cls.__name__} document: {err}") from err
        if not isinstance(doc, dict):
            raise InputException(f"Invalid {cls.__name__} document: {content!r}")
        try:
            return cls.model_validate(doc)
        except ValidationError as err:
            raise InputException(f"Invalid {cls.__name__}: {err}") from err

    def yaml(self) -> str:
        """Return a YAML string representation of to_dict."""
        return yaml.dump(self.to_dict(), sort_keys=False, explicit_start=True)


class Reference(BaseObject):
    """Identifier for a resource, used as the store key.

    Equality and hashing are structural so two independently built references
    to the same resource are interchangeable.
    """

    api_version: str = Field(alias="apiVersion")
    """The apiVersion of the referenced resource."""

    kind: str
    """The kind of the referenced resource."""

    name: str
    """The name of the referenced resource."""

    def __str__(self) -> str:
        """Return the apiVersion, kind and name concatenated as an id."""
        return f"{self.api_version}/{self.kind}/{self.name}"


class ResourceGroup(BaseObject):
    """Declares what a resource is."""

    api_version: str = Field(alias="apiVersion")
    kind: str


class ResourceMetadata(BaseObject):
    """Common metadata carried by every resource."""

    OMIT_IF_NONE: ClassVar[tuple[str, ...]] = ("owner_ref",)

    name: str
    """The name of the resource, unique per apiVersion and kind."""

    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)

    owner_ref: Reference | None = Field(default=None, alias="ownerRef")
    """The resource that logically contains this one, if any.

    Existence and acyclicity of owners is left to the layers above the store.
    """


class Resource(ABC):
    """A value that can be written to a resource store."""

    @abstractmethod
    def resource_ref(self) -> Reference:
        """Return the Reference identifying this resource.

        This is computed from the current field values only.
        """


class BaseResource(BaseObject, Resource):
    """The envelope shared by every resource kind."""

    api_version: str = Field(alias="apiVersion")
    """The apiVersion of the resource."""

    kind: str
    """The kind of the resource."""

    metadata: ResourceMetadata
    """Name, labels and owner of the resource."""

    @property
    def group(self) -> ResourceGroup:
        """Return the apiVersion and kind of the resource."""
        return ResourceGroup(api_version=self.api_version, kind=self.kind)

    @property
    def name(self) -> str:
        """Return the name of the resource."""
        return self.metadata.name

    def resource_ref(self) -> Reference:
        """Return the Reference identifying this resource."""
        return Reference(
            api_version=self.api_version, kind=self.kind, name=self.metadata.name
        )


def _metadata(
    name: str,
    owner_ref: Reference | None = None,
    labels: dict[str, str] | None = None,
    annotations: dict[str, str] | None = None,
) -> ResourceMetadata:
    return ResourceMetadata(
        name=name,
        labels=labels or {},
        annotations=annotations or {},
        owner_ref=owner_ref,
    )


class Project(BaseResource):
    """Project represents the broadest tenant. It contains all other resources."""

    api_version: Literal["core/v1"] = Field(
        default=CORE_API_VERSION, alias="apiVersion"
    )
    kind: Literal["project"] = PROJECT_KIND

    @model_validator(mode="after")
    def _check_no_owner(self) -> Self:
        if self.metadata.owner_ref is not None:
            raise ValueError(
                f"Project {self.metadata.name} can't have an owner "
                f"(was {self.metadata.owner_ref})"
            )
        return self

    @classmethod
    def new(
        cls,
        name: str,
        labels: dict[str, str] | None = None,
        annotations: dict[str, str] | None = None,
    ) -> "Project":
        """Create a Project with the specified name."""
        return cls(metadata=_metadata(name, labels=labels, annotations=annotations))

    @classmethod
    def resource_definition(cls) -> "ResourceDefinition":
        """Return the ResourceDefinition describing Projects."""
        return define_resource(
            cls, ResourceGroup(api_version=CORE_API_VERSION, kind=PROJECT_KIND)
        )


class Namespace(BaseResource):
    """Namespace represents a slice of the resources in a Project.

    Names are unique across the whole store, not per Project.
    """

    api_version: Literal["core/v1"] = Field(
        default=CORE_API_VERSION, alias="apiVersion"
    )
    kind: Literal["namespace"] = NAMESPACE_KIND

    @model_validator(mode="after")
    def _check_owner(self) -> Self:
        if self.metadata.owner_ref is None:
            raise ValueError(f"Namespace {self.metadata.name} missing ownerRef")
        return self

    @classmethod
    def new(
        cls,
        project: Reference,
        name: str,
        labels: dict[str, str] | None = None,
        annotations: dict[str, str] | None = None,
    ) -> "Namespace":
        """Create a Namespace owned by the specified Project."""
        if project.api_version != CORE_API_VERSION or project.kind != PROJECT_KIND:
            raise InputException(
                f"Namespace {name} owner must be a {CORE_API_VERSION} "
                f"{PROJECT_KIND} (was {project})"
            )
        return cls(
            metadata=_metadata(
                name, owner_ref=project, labels=labels, annotations=annotations
            )
        )

    @classmethod
    def resource_definition(cls) -> "ResourceDefinition":
        """Return the ResourceDefinition describing Namespaces."""
        return define_resource(
            cls, ResourceGroup(api_version=CORE_API_VERSION, kind=NAMESPACE_KIND)
        )


SpecT = TypeVar("SpecT")


class GenericResource(BaseResource, Generic[SpecT]):
    """A user defined resource kind with an arbitrary spec payload.

    The group is data on the instance rather than fixed by the class, so any
    kind can be represented without declaring a new type:

    ```python
    repo = GenericResource[RepoSpec].new(
        ResourceGroup(api_version="josh/v1", kind="Repo"),
        "controlplane",
        RepoSpec(url="https://example.com/controlplane.git"),
    )
    ```
    """

    spec: SpecT
    """The payload of the resource."""

    @classmethod
    def new(
        cls,
        group: ResourceGroup,
        name: str,
        spec: SpecT,
        owner_ref: Reference | None = None,
        labels: dict[str, str] | None = None,
        annotations: dict[str, str] | None = None,
    ) -> "GenericResource[SpecT]":
        """Create a resource of the specified group."""
        return cls(
            api_version=group.api_version,
            kind=group.kind,
            metadata=_metadata(
                name, owner_ref=owner_ref, labels=labels, annotations=annotations
            ),
            spec=spec,
        )


class UntypedResource(BaseResource):
    """Any resource, with its spec and other fields kept as raw values."""

    model_config = ConfigDict(extra="allow")

    OMIT_IF_NONE: ClassVar[tuple[str, ...]] = ("spec",)

    spec: Any = None


class JsonSchema(BaseObject):
    """A JSON Schema document used to validate a resource version."""

    format: Literal["JsonSchema"] = "JsonSchema"
    document: dict[str, Any]


# Further schema formats join this as a union discriminated on `format`.
SchemaVariant = JsonSchema


class ResourceVersion(BaseObject):
    """ResourceVersion captures the schema of one version of a kind."""

    name: str
    """The version name, e.g. v1."""

    schema_: SchemaVariant = Field(alias="schema")
    """The validation options for the version."""


class ResourceNames(BaseObject):
    """Names used to refer to a kind."""

    kind: str


class ResourceDefinitionSpec(BaseObject):
    """Describes the group, names and versions of a kind."""

    group: str
    names: ResourceNames
    versions: list[ResourceVersion]


class ResourceDefinition(BaseResource):
    """A ResourceDefinition outlines the shape of the resources of one kind."""

    api_version: Literal["core/v1"] = Field(
        default=CORE_API_VERSION, alias="apiVersion"
    )
    kind: Literal["resourcedefinition"] = RESOURCE_DEFINITION_KIND
    spec: ResourceDefinitionSpec

    @classmethod
    def new(cls, spec: ResourceDefinitionSpec) -> "ResourceDefinition":
        """Create a ResourceDefinition named after the kind and group it describes."""
        return cls(metadata=_metadata(f"{spec.names.kind}.{spec.group}"), spec=spec)


def resource_schema(model: type[BaseResource]) -> dict[str, Any]:
    """Return the JSON Schema for the serialized form of a resource model.

    The envelope fields are always present in a serialized resource, so they
    are required even when the model fills them in by default.
    """
    schema = model.model_json_schema(by_alias=True)
    required = [
        *ENVELOPE_FIELDS,
        *(key for key in schema.get("required", ()) if key not in ENVELOPE_FIELDS),
    ]
    return {"$schema": JSON_SCHEMA_DIALECT, **schema, "required": required}


def define_resource(
    model: type[BaseResource], group: ResourceGroup
) -> ResourceDefinition:
    """Build a ResourceDefinition for the resource model of the specified group.

    An apiVersion of `<group>/<version>` becomes the definition group and the
    name of its single version.
    """
    definition_group, _, version = group.api_version.rpartition("/")
    definition = ResourceDefinition.new(
        ResourceDefinitionSpec(
            group=definition_group,
            names=ResourceNames(kind=group.kind),
            versions=[
                ResourceVersion(
                    name=version,
                    schema_=JsonSchema(document=resource_schema(model)),
                )
            ],
        )
    )
    _LOGGER.debug("Built resource definition %s", definition.metadata.name)
    return definition


Resources = Annotated[
    Union[Project, Namespace, ResourceDefinition, UntypedResource],
    Field(union_mode="left_to_right"),
]
"""Any resource, decoded as the first of the listed kinds that matches.

This is best-effort: `UntypedResource` accepts every well formed envelope so
it must remain last, and a typed read should be preferred when the kind is
known.
"""
