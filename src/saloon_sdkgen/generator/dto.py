"""DTO generator: one spatie/laravel-data class per schema."""

import logging
import textwrap

from saloon_sdkgen.config import GeneratorConfig
from saloon_sdkgen.naming import dto_class_name, safe_variable_name
from saloon_sdkgen.parser.base import ApiSpecification, Schema, SchemaRef
from saloon_sdkgen.phpgen import ClassType, PhpFile

logger = logging.getLogger(__name__)

SPATIE_DATA = "Spatie\\LaravelData\\Data"
MAP_NAME = "Spatie\\LaravelData\\Attributes\\MapName"

PAGINATION_META_DTO = "PaginatedResponseMetaDto"

_PHP_TYPES = {
    "integer": "int",
    "string": "string",
    "boolean": "bool",
    "object": "array",
    "array": "array",
    "null": "null",
}


def map_type(type_: str | None, format_: str | None = None) -> str:
    """PHP type for a single JSON schema type name."""
    if type_ == "number":
        if format_ == "float":
            return "float"
        if format_ in ("int32", "int64"):
            return "int"
        return "int|float"
    return _PHP_TYPES.get(type_, "mixed")


def schema_php_type(schema: Schema) -> str:
    if isinstance(schema.type, list):
        return "|".join(dict.fromkeys(map_type(t) for t in schema.type))
    return map_type(schema.type, schema.format)


def paginated_dto_name(item_dto: str) -> str:
    return f"{dto_class_name(item_dto)}PaginatedResponseDto"


class DtoGenerator:
    """Turns ``components.schemas`` into DTO classes.

    Named schemas are generated first, in declaration order. Inline object
    properties produce nested DTOs named after the property, or after the
    parent and the property when that name is already taken or belongs to a
    named schema.

    Array properties whose items are DTOs are recorded in :attr:`array_items`
    (``{dto: {property: item dto}}``) alongside the ``@var Item[]`` docblock.
    """

    def __init__(self, config: GeneratorConfig):
        self.config = config
        self._generated: dict[str, PhpFile] = {}
        self._schema_names: set[str] = set()
        self.array_items: dict[str, dict[str, str]] = {}

    def generate(self, spec: ApiSpecification) -> dict[str, PhpFile]:
        self._generated = {}
        self.array_items = {}

        if any(e.response_dto_is_paginated for e in spec.endpoints):
            self._generate_pagination_meta_dto()

        schemas = spec.components.schemas if spec.components else {}
        self._schema_names = {dto_class_name(name) for name in schemas}
        for schema_name, schema in schemas.items():
            class_name = dto_class_name(schema_name)
            try:
                self._generate_dto_class(class_name, schema)
            except Exception as e:
                self._generated.pop(class_name, None)
                self.array_items.pop(class_name, None)
                logger.warning("Skipping DTO %s: %s", class_name, e)

        for endpoint in spec.endpoints:
            if endpoint.response_dto_is_paginated and endpoint.response_dto:
                self._generate_paginated_response_dto(endpoint.response_dto)

        logger.debug("Generated %d DTO classes", len(self._generated))
        return dict(self._generated)

    def _new_file(self, class_name: str) -> tuple[PhpFile, ClassType]:
        file = PhpFile()
        namespace = file.add_namespace(self.config.dto_namespace)
        namespace.add_use(SPATIE_DATA, alias="SpatieData")
        class_type = ClassType(class_name, extends=SPATIE_DATA)
        namespace.add(class_type)
        return file, class_type

    def _nested_name(self, parent: str, property_name: str) -> str:
        taken = set(self._generated) | self._schema_names
        name = dto_class_name(property_name)
        if name not in taken:
            return name
        base = dto_class_name(f"{parent} {property_name}")
        name, n = base, 2
        while name in taken:
            name, n = f"{base}{n}", n + 1
        return name

    def _generate_dto_class(self, class_name: str, schema: Schema) -> PhpFile:
        file, class_type = self._new_file(class_name)
        self._generated[class_name] = file

        class_type.add_comment(schema.title or "")
        if schema.description:
            class_type.add_comment("")
            class_type.add_comment("\n".join(textwrap.wrap(schema.description, 100)))

        constructor = class_type.add_method("__construct")
        for property_name, property_schema in schema.properties.items():
            name = safe_variable_name(property_name)
            param = constructor.add_promoted_parameter(name)
            param.type = self._property_type(class_name, property_name, property_schema, param)

            nullable = (
                property_name not in schema.required
                or (isinstance(property_schema, Schema) and property_schema.nullable)
            )
            if nullable:
                param.nullable = True
                param.set_default(None)

            if name != property_name:
                param.add_attribute(MAP_NAME, [property_name])
                file.namespace.add_use(MAP_NAME)

        return file

    def _property_type(
        self, class_name: str, property_name: str, schema: Schema | SchemaRef, param
    ) -> str:
        if isinstance(schema, SchemaRef):
            return f"{self.config.dto_namespace}\\{dto_class_name(schema.ref)}"

        php_type = schema_php_type(schema)
        if schema.type == "object" and schema.properties:
            nested = self._nested_name(class_name, property_name)
            self._generate_dto_class(nested, schema)
            return f"{self.config.dto_namespace}\\{nested}"

        if schema.type == "array":
            item_class = None
            if isinstance(schema.items, SchemaRef):
                item_class = dto_class_name(schema.items.ref)
            elif isinstance(schema.items, Schema) and schema.items.properties:
                item_class = self._nested_name(class_name, f"{property_name} item")
                self._generate_dto_class(item_class, schema.items)
            if item_class:
                param.add_comment(f"@var {item_class}[] {schema.description or ''}".rstrip())
                self.array_items.setdefault(class_name, {})[param.name] = item_class

        return php_type

    def _generate_pagination_meta_dto(self) -> None:
        file, class_type = self._new_file(PAGINATION_META_DTO)
        file.namespace.add_use(MAP_NAME)
        class_type.add_comment("Pagination metadata for paginated responses")

        constructor = class_type.add_method("__construct")
        for name, wire_name in (
            ("currentPage", "current_page"),
            ("perPage", "per_page"),
            ("lastPage", "last_page"),
            ("total", None),
            ("from", None),
            ("to", None),
        ):
            param = constructor.add_promoted_parameter(name, "int").set_default(None)
            param.nullable = True
            if wire_name:
                param.add_attribute(MAP_NAME, [wire_name])

        self._generated[PAGINATION_META_DTO] = file

    def _generate_paginated_response_dto(self, item_dto: str) -> None:
        class_name = paginated_dto_name(item_dto)
        if class_name in self._generated:
            return

        item_class = dto_class_name(item_dto)
        file, class_type = self._new_file(class_name)
        class_type.add_comment(f"Paginated response containing {item_class} items")

        constructor = class_type.add_method("__construct")
        constructor.add_promoted_parameter("data", "array").add_comment(f"@var {item_class}[]")
        constructor.add_promoted_parameter(
            "meta", f"{self.config.dto_namespace}\\{PAGINATION_META_DTO}"
        )

        self._generated[class_name] = file
        self.array_items[class_name] = {"data": item_class}
