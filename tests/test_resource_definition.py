"""Tests for resource definitions and their schemas."""

from typing import Any

import pytest
from jsonschema import Draft202012Validator
from pydantic import BaseModel

from controlplane.resource import (
    BaseResource,
    GenericResource,
    JsonSchema,
    Namespace,
    Project,
    Reference,
    ResourceDefinition,
    ResourceGroup,
    define_resource,
    resource_schema,
)


class RepoSpec(BaseModel):
    url: str


def _only_schema(definition: ResourceDefinition) -> dict[str, Any]:
    versions = definition.spec.versions
    assert len(versions) == 1
    schema = versions[0].schema_
    assert isinstance(schema, JsonSchema)
    Draft202012Validator.check_schema(schema.document)
    return schema.document


def test_project_definition() -> None:
    """Test the project definition describes the project kind."""
    definition = Project.resource_definition()
    assert definition.resource_ref() == Reference(
        api_version="core/v1", kind="resourcedefinition", name="project.core"
    )
    assert definition.spec.group == "core"
    assert definition.spec.names.kind == "project"
    assert definition.spec.versions[0].name == "v1"


def test_project_schema_validates_project() -> None:
    """Test the project schema accepts projects built by the constructor."""
    validator = Draft202012Validator(_only_schema(Project.resource_definition()))
    validator.validate(Project.new("mine").to_dict())
    validator.validate(
        Project.new("mine", labels={"a": "b"}, annotations={"c": "d"}).to_dict()
    )


def test_project_schema_rejects_other_documents() -> None:
    """Test the project schema is not satisfied by other shapes."""
    validator = Draft202012Validator(_only_schema(Project.resource_definition()))
    assert not validator.is_valid({"apiVersion": "core/v1", "kind": "project"})
    assert not validator.is_valid(
        {"apiVersion": "core/v1", "kind": "namespace", "metadata": {"name": "x"}}
    )
    assert not validator.is_valid(
        {"apiVersion": "core/v1", "kind": "project", "metadata": {"labels": {}}}
    )


def test_schema_shape() -> None:
    """Test the generated schema exposes the envelope."""
    schema = resource_schema(Project)
    assert schema["$schema"] == "https://json-schema.org/draft/2020-12/schema"
    assert schema["type"] == "object"
    assert schema["required"] == ["apiVersion", "kind", "metadata"]
    assert {"apiVersion", "kind", "metadata"} <= set(schema["properties"])
    assert schema["$defs"]["ResourceMetadata"]["required"] == ["name"]
    assert schema["$defs"]["Reference"]["required"] == ["apiVersion", "kind", "name"]


def test_namespace_schema_validates_namespace() -> None:
    """Test the namespace schema accepts namespaces and their owner reference."""
    validator = Draft202012Validator(_only_schema(Namespace.resource_definition()))
    namespace = Namespace.new(Project.new("default").resource_ref(), "apps")
    validator.validate(namespace.to_dict())

    doc = namespace.to_dict()
    del doc["metadata"]["ownerRef"]["name"]
    assert not validator.is_valid(doc)


def test_generic_definition() -> None:
    """Test a definition for a generic kind is split from its apiVersion."""
    group = ResourceGroup(api_version="josh/v1", kind="Repo")
    definition = define_resource(GenericResource[RepoSpec], group)
    assert definition.metadata.name == "Repo.josh"
    assert definition.spec.group == "josh"
    assert definition.spec.names.kind == "Repo"
    assert definition.spec.versions[0].name == "v1"

    validator = Draft202012Validator(_only_schema(definition))
    repo = GenericResource[RepoSpec].new(
        group, "controlplane", RepoSpec(url="https://example.com")
    )
    validator.validate(repo.to_dict())
    assert not validator.is_valid({**repo.to_dict(), "spec": {"branch": "main"}})


@pytest.mark.parametrize(
    ("model", "resource"),
    [
        (Project, Project.new("default")),
        (
            Namespace,
            Namespace.new(Project.new("default").resource_ref(), "default"),
        ),
        (ResourceDefinition, Project.resource_definition()),
    ],
)
def test_schema_self_consistency(
    model: type[BaseResource], resource: BaseResource
) -> None:
    """Test each built in kind's schema validates its own serialized form."""
    Draft202012Validator(resource_schema(model)).validate(resource.to_dict())


def test_definition_serialized() -> None:
    """Test the schema variant is tagged in the serialized definition."""
    doc = Project.resource_definition().to_dict()
    assert doc["apiVersion"] == "core/v1"
    assert doc["kind"] == "resourcedefinition"
    (version,) = doc["spec"]["versions"]
    assert version["name"] == "v1"
    assert version["schema"]["format"] == "JsonSchema"
    assert version["schema"]["document"]["$schema"].startswith("https://json-schema")
