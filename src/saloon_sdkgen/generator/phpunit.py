"""PHPUnit test suite generator.

Produces, as tagged text files:

* ``tests/TestCase.php`` and ``phpunit.xml``
* ``tests/Feature/<Resource>Test.php``, one test method per endpoint
* ``tests/Stubs/<Resource>/<endpoint>.json`` mock response bodies
* ``tests/Unit/Dto/<Dto>Test.php``, one per generated DTO
"""

import logging
from typing import Any

from saloon_sdkgen.config import GeneratorConfig
from saloon_sdkgen.generator.base import (
    GeneratedCode,
    TaggedOutputFile,
    dto_fqn,
    endpoint_request_name,
    group_by_resource,
    is_dto_type,
    render_stub,
    tests_namespace,
)
from saloon_sdkgen.generator.dto import MAP_NAME, paginated_dto_name
from saloon_sdkgen.generator.request import request_parameters
from saloon_sdkgen.generator.stubs import StubGenerator
from saloon_sdkgen.generator.values import php_array, php_value, sample_value
from saloon_sdkgen.naming import dto_class_name, safe_variable_name
from saloon_sdkgen.parser.base import ApiSpecification, Endpoint
from saloon_sdkgen.phpgen import Parameter as PhpParameter
from saloon_sdkgen.phpgen import PhpFile, short_name

logger = logging.getLogger(__name__)

TAG = "phpunit"

MAX_SAMPLE_DEPTH = 3


def detect_auth_scheme(spec: ApiSpecification) -> str | None:
    """Category of the first declared security scheme: apiKey, bearer, basic or oauth2."""
    if not spec.components or not spec.components.security_schemes:
        return None
    scheme = next(iter(spec.components.security_schemes.values()))
    if scheme.type == "apiKey":
        return "apiKey"
    if scheme.type == "http":
        return (scheme.scheme or "bearer").lower()
    if scheme.type == "oauth2":
        return "oauth2"
    return None


def needs_token_request(auth_scheme: str | None) -> bool:
    return auth_scheme in ("bearer", "oauth2")


def connector_arguments(code: GeneratedCode) -> str:
    """Named constructor arguments for the generated connector in test setup."""
    if code.connector_class is None:
        return ""
    constructor = code.connector_class.class_type.get_method("__construct")
    if constructor is None:
        return ""
    return ", ".join(
        f"{p.name}: {php_value(p.type)}" for p in constructor.parameters if not p.nullable
    )


def endpoint_arguments(endpoint: Endpoint, config: GeneratorConfig) -> str:
    return ", ".join(
        f"{safe_variable_name(p.name)}: {php_value(p.type)}"
        for p in request_parameters(endpoint, config)
    )


def endpoint_dto_imports(endpoints: list[Endpoint], config: GeneratorConfig) -> list[str]:
    """Sorted DTO classes referenced by the endpoints' responses and parameters."""
    imports = set()
    for endpoint in endpoints:
        if endpoint.response_dto:
            imports.add(dto_fqn(config, endpoint.response_dto))
            if endpoint.response_dto_is_paginated:
                imports.add(dto_fqn(config, paginated_dto_name(endpoint.response_dto)))
        for param in endpoint.all_parameters():
            if is_dto_type(param.type):
                imports.add(dto_fqn(config, param.type))
    return sorted(imports)


def wire_name(param: PhpParameter) -> str:
    """Key a DTO property is read from, honouring ``#[MapName]``."""
    attribute = param.attribute(MAP_NAME)
    return attribute.args[0] if attribute and attribute.args else param.name


def _is_class_type(type_: str | None) -> bool:
    return bool(type_) and "\\" in type_


class PhpUnitTestGenerator:
    """Post-processor emitting a PHPUnit suite for the generated SDK."""

    def __init__(self):
        self.config: GeneratorConfig | None = None
        self.code = GeneratedCode()
        self.auth_scheme: str | None = None

    def process(
        self, spec: ApiSpecification, config: GeneratorConfig, code: GeneratedCode
    ) -> GeneratedCode:
        self.config = config
        self.code = code
        self.auth_scheme = detect_auth_scheme(spec)
        namespace = tests_namespace(config)

        files = [
            TaggedOutputFile(
                tag=TAG,
                file=render_stub("phpunit-testcase", namespace=namespace),
                path="tests/TestCase.php",
            ),
            TaggedOutputFile(tag=TAG, file=render_stub("phpunit-xml"), path="phpunit.xml"),
        ]

        stubs: list[TaggedOutputFile] = []
        stub_generator = StubGenerator(spec.components)
        for resource_name, endpoints in group_by_resource(spec, config).items():
            test = self.generate_feature_test(resource_name, endpoints)
            if test is not None:
                files.append(test)
            for endpoint in endpoints:
                stub = self.generate_stub_file(stub_generator, resource_name, endpoint)
                if stub is not None:
                    stubs.append(stub)

        for dto_file in code.dto_classes.values():
            test = self.generate_dto_test(dto_file)
            if test is not None:
                files.append(test)

        return code.with_additional_files([*files, *stubs])

    # -- feature tests -------------------------------------------------------

    def generate_feature_test(
        self, resource_name: str, endpoints: list[Endpoint]
    ) -> TaggedOutputFile | None:
        try:
            config = self.config
            request_namespace = f"{config.request_namespace}\\{resource_name}"
            imports = list(dict.fromkeys(
                f"{request_namespace}\\{endpoint_request_name(e)}" for e in endpoints
            ))
            imports.extend(endpoint_dto_imports(endpoints, config))

            auth_import = ""
            if needs_token_request(self.auth_scheme):
                auth_import = f"// use {config.namespace}\\Requests\\TokenRequest;"

            content = render_stub(
                "phpunit-feature-test",
                namespace=tests_namespace(config),
                connector_fqn=self._connector_fqn(),
                connector_name=short_name(self._connector_fqn()),
                connector_args=connector_arguments(self.code),
                imports=imports,
                auth_import=auth_import,
                auth_mock=needs_token_request(self.auth_scheme),
                resource_name=resource_name,
                resource_method=safe_variable_name(resource_name),
                tests=[self._feature_test_method(e) for e in endpoints],
            )
        except Exception as e:
            logger.warning("Skipping feature test for %s: %s", resource_name, e)
            return None

        return TaggedOutputFile(tag=TAG, file=content, path=f"tests/Feature/{resource_name}Test.php")

    def _connector_fqn(self) -> str:
        if self.code.connector_class is not None:
            return self.code.connector_class.fully_qualified_name
        return f"{self.config.namespace}\\{self.config.connector_name}"

    def _feature_test_method(self, endpoint: Endpoint) -> dict[str, Any]:
        request_class = endpoint_request_name(endpoint)
        response_dto = None
        collection_dto = None
        if endpoint.response_dto:
            if endpoint.response_dto_is_paginated:
                response_dto = paginated_dto_name(endpoint.response_dto)
            elif endpoint.response_dto_is_collection:
                collection_dto = dto_class_name(endpoint.response_dto)
            else:
                response_dto = dto_class_name(endpoint.response_dto)

        return {
            "method_name": f"{endpoint.method.value.lower()}_{safe_variable_name(endpoint.name)}",
            "stub_name": safe_variable_name(endpoint.name),
            "request_class": request_class,
            "endpoint_method": safe_variable_name(request_class),
            "arguments": endpoint_arguments(endpoint, self.config),
            "response_dto": response_dto,
            "collection_dto": collection_dto,
        }

    def generate_stub_file(
        self, stub_generator: StubGenerator, resource_name: str, endpoint: Endpoint
    ) -> TaggedOutputFile | None:
        stub_name = safe_variable_name(endpoint.name)
        try:
            content = stub_generator.generate_stub_for_endpoint(endpoint)
        except Exception as e:
            logger.warning("Skipping response stub for %s: %s", endpoint.name, e)
            return None
        return TaggedOutputFile(
            tag=TAG, file=content, path=f"tests/Stubs/{resource_name}/{stub_name}.json"
        )

    # -- DTO unit tests ------------------------------------------------------

    def generate_dto_test(self, dto_file: PhpFile) -> TaggedOutputFile | None:
        try:
            class_type = dto_file.class_type
            dto_name = class_type.name
            params = self._dto_parameters(dto_name)
            full_data = self._sample_data(dto_name, include_nullable=True)

            nested_imports = sorted({
                dto_fqn(self.config, p.type)
                for p in params
                if _is_class_type(p.type) and short_name(p.type) != dto_name
            })

            content = render_stub(
                "phpunit-dto-test",
                namespace=tests_namespace(self.config),
                dto_name=dto_name,
                dto_fqn=dto_file.fully_qualified_name,
                nested_imports=nested_imports,
                sample_data=php_array(full_data),
                assertions=self._property_assertions(params, full_data),
                extra_methods=self._extra_test_methods(dto_name, params),
            )
        except Exception as e:
            logger.warning("Skipping DTO test for %s: %s", dto_file, e)
            return None

        return TaggedOutputFile(tag=TAG, file=content, path=f"tests/Unit/Dto/{dto_name}Test.php")

    def _dto_parameters(self, dto_name: str) -> list[PhpParameter]:
        dto_file = self.code.dto_classes.get(dto_name)
        if dto_file is None:
            return []
        constructor = dto_file.class_type.get_method("__construct")
        return constructor.promoted_parameters() if constructor else []

    def _sample_data(self, dto_name: str, include_nullable: bool, depth: int = 0) -> dict[str, Any]:
        if depth > MAX_SAMPLE_DEPTH:
            return {}
        data = {}
        for param in self._dto_parameters(dto_name):
            if not include_nullable and param.nullable and param.has_default:
                continue
            if _is_class_type(param.type):
                value = self._sample_data(short_name(param.type), include_nullable, depth + 1)
            else:
                value = sample_value(param.type, param.name)
            data[wire_name(param)] = value
        return data

    def _property_assertions(self, params: list[PhpParameter], data: dict[str, Any]) -> list[str]:
        lines = []
        for param in params:
            prop = f"$dto->{param.name}"
            key = wire_name(param)
            type_ = (param.type or "mixed").lstrip("?")
            equals = f"$this->assertEquals($data['{key}'], {prop});"

            if _is_class_type(type_):
                lines.append(f"$this->assertInstanceOf({short_name(type_)}::class, {prop});")
            elif type_ in ("string", "int", "float", "bool"):
                assertion = {"string": "String", "int": "Int", "float": "Float", "bool": "Bool"}[type_]
                lines.append(f"$this->assertIs{assertion}({prop});")
                lines.append(equals)
            elif type_ == "array":
                lines.append(f"$this->assertIsArray({prop});")
            elif type_ in ("int|float", "float|int"):
                lines.append(f"$this->assertIsNumeric({prop});")
                lines.append(equals)
            elif type_ == "null" or data.get(key) is None:
                lines.append(f"$this->assertNull({prop});")
            else:
                lines.append(equals)
        return lines

    def _extra_test_methods(self, dto_name: str, params: list[PhpParameter]) -> list[dict[str, Any]]:
        methods = []

        nullable = [p for p in params if p.nullable and p.has_default]
        if nullable:
            methods.append({
                "name": "it_handles_nullable_properties",
                "data": php_array(self._sample_data(dto_name, include_nullable=False)),
                "assertions": [f"$this->assertNull($dto->{p.name});" for p in nullable],
            })

        nested = [p for p in params if _is_class_type(p.type)]
        if nested:
            methods.append({
                "name": "it_handles_nested_dtos",
                "data": php_array(self._sample_data(dto_name, include_nullable=True)),
                "assertions": [
                    f"$this->assertInstanceOf({short_name(p.type)}::class, $dto->{p.name});"
                    for p in nested
                ],
            })

        arrays = [p for p in params if (p.type or "").lstrip("?") == "array"]
        if arrays:
            data = self._sample_data(dto_name, include_nullable=True)
            assertions = []
            for param in arrays:
                item_dto = self.code.dto_array_items.get(dto_name, {}).get(param.name)
                if item_dto:
                    item = self._sample_data(item_dto, include_nullable=False, depth=1)
                else:
                    item = sample_value("string", "item")
                data[wire_name(param)] = [item, item]
                assertions.append(f"$this->assertIsArray($dto->{param.name});")
                assertions.append(f"$this->assertCount(2, $dto->{param.name});")
            methods.append({
                "name": "it_handles_array_collections",
                "data": php_array(data),
                "assertions": assertions,
            })

        return methods
