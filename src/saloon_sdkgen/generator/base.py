"""Generated-code bundle passed between generation stages.

Each stage takes a :class:`GeneratedCode` and returns an updated copy; no
stage mutates the value it was handed.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol

import jinja2
from pydantic import BaseModel, ConfigDict

from saloon_sdkgen.config import GeneratorConfig
from saloon_sdkgen.naming import dto_class_name, request_class_name, resource_class_name
from saloon_sdkgen.parser.base import ApiSpecification, Endpoint
from saloon_sdkgen.phpgen import PhpFile

STUBS_DIR = Path(__file__).parent.parent / "stubs"


class TaggedOutputFile(BaseModel):
    """A plain-text artifact (manifest, config, stub, test) with its output path."""

    model_config = ConfigDict(frozen=True)

    tag: str
    file: str
    path: str


class GeneratedCode(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    connector_class: PhpFile | None = None
    resource_classes: list[PhpFile] = []
    request_classes: list[PhpFile] = []
    dto_classes: dict[str, PhpFile] = {}
    # {dto: {property: item dto}} for array properties holding DTOs
    dto_array_items: dict[str, dict[str, str]] = {}
    additional_files: list[TaggedOutputFile] = []

    def with_connector(self, connector: PhpFile) -> "GeneratedCode":
        return self.model_copy(update={"connector_class": connector})

    def with_resource_classes(self, classes: list[PhpFile]) -> "GeneratedCode":
        return self.model_copy(update={"resource_classes": list(classes)})

    def with_request_classes(self, classes: list[PhpFile]) -> "GeneratedCode":
        return self.model_copy(update={"request_classes": list(classes)})

    def with_dto_classes(
        self, classes: dict[str, PhpFile], array_items: dict[str, dict[str, str]] | None = None
    ) -> "GeneratedCode":
        return self.model_copy(update={
            "dto_classes": dict(classes),
            "dto_array_items": dict(array_items or {}),
        })

    def with_additional_files(self, files: list[TaggedOutputFile]) -> "GeneratedCode":
        return self.model_copy(update={"additional_files": [*self.additional_files, *files]})

    def with_tag(self, tag: str) -> list[TaggedOutputFile]:
        return [f for f in self.additional_files if f.tag == tag]


class PostProcessor(Protocol):
    """A stage run after the class generators, e.g. tests or composer.json."""

    def process(
        self, spec: ApiSpecification, config: GeneratorConfig, code: GeneratedCode
    ) -> GeneratedCode:
        ...


PRIMITIVE_TYPES = frozenset({
    "string", "int", "integer", "float", "bool", "boolean", "array", "object",
    "mixed", "null", "float|int", "int|float",
})


def is_dto_type(type_: str | None) -> bool:
    """Whether a parameter/property type names a DTO rather than a primitive."""
    if not type_:
        return False
    return type_.lstrip("?").lower() not in PRIMITIVE_TYPES


def dto_fqn(config: GeneratorConfig, type_: str) -> str:
    """Fully-qualified class of a DTO type given bare, dotted or qualified."""
    return f"{config.dto_namespace}\\{dto_class_name(type_.lstrip('?'))}"


def endpoint_resource_name(endpoint: Endpoint, config: GeneratorConfig) -> str:
    """Resource class an endpoint belongs to."""
    return resource_class_name(endpoint.collection or config.fallback_resource_name)


def endpoint_request_name(endpoint: Endpoint) -> str:
    return request_class_name(endpoint.name)


def group_by_resource(
    spec: ApiSpecification, config: GeneratorConfig
) -> dict[str, list[Endpoint]]:
    """Endpoints grouped by resource class, in first-seen order."""
    groups: dict[str, list[Endpoint]] = {}
    for endpoint in spec.endpoints:
        groups.setdefault(endpoint_resource_name(endpoint, config), []).append(endpoint)
    return groups


def tests_namespace(config: GeneratorConfig) -> str:
    """Namespace of the generated test suite, autoloaded from ``tests/``."""
    return f"Tests\\{config.root_namespace}"


@lru_cache(maxsize=1)
def _stub_environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(STUBS_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )


def render_stub(template: str, /, **context: Any) -> str:
    """Render one of the ``stubs/*.stub`` text templates."""
    return _stub_environment().get_template(f"{template}.stub").render(**context)
