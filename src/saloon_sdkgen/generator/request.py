"""Request generator: one Saloon request class per endpoint."""

import logging
import textwrap

from saloon_sdkgen.config import GeneratorConfig
from saloon_sdkgen.generator.base import (
    dto_fqn,
    endpoint_request_name,
    endpoint_resource_name,
    is_dto_type,
)
from saloon_sdkgen.generator.dto import paginated_dto_name
from saloon_sdkgen.naming import dto_class_name, safe_variable_name
from saloon_sdkgen.parser.base import ApiSpecification, Endpoint, Parameter
from saloon_sdkgen.phpgen import ClassType, Literal, Method, PhpFile

logger = logging.getLogger(__name__)

SALOON_REQUEST = "Saloon\\Http\\Request"
SALOON_RESPONSE = "Saloon\\Http\\Response"
SALOON_METHOD = "Saloon\\Enums\\Method"
HAS_BODY = "Saloon\\Contracts\\Body\\HasBody"
HAS_JSON_BODY = "Saloon\\Traits\\Body\\HasJsonBody"


def _without(params: list[Parameter], ignored: list[str]) -> list[Parameter]:
    return [p for p in params if p.name not in ignored]


def body_parameters(endpoint: Endpoint, config: GeneratorConfig) -> list[Parameter]:
    return _without(endpoint.body_parameters, config.ignored_body_params)


def query_parameters(endpoint: Endpoint, config: GeneratorConfig) -> list[Parameter]:
    return _without(endpoint.query_parameters, config.ignored_query_params)


def header_parameters(endpoint: Endpoint, config: GeneratorConfig) -> list[Parameter]:
    return _without(endpoint.header_parameters, config.ignored_header_params)


def request_parameters(endpoint: Endpoint, config: GeneratorConfig) -> list[Parameter]:
    """Constructor parameters in call order: path, body, query, header.

    A name seen twice (``id`` in both path and body) is kept once, at its
    first position.
    """
    params: dict[str, Parameter] = {}
    for param in (
        *endpoint.path_parameters,
        *body_parameters(endpoint, config),
        *query_parameters(endpoint, config),
        *header_parameters(endpoint, config),
    ):
        params.setdefault(safe_variable_name(param.name), param)
    return list(params.values())


def php_parameter_type(param: Parameter, config: GeneratorConfig) -> str:
    if is_dto_type(param.type):
        return dto_fqn(config, param.type)
    if param.type == "object":
        return "array"
    return param.type


def add_parameter(method: Method, param: Parameter, config: GeneratorConfig, promoted: bool):
    """Add an endpoint parameter to a PHP method, nullable ones defaulting to null."""
    name = safe_variable_name(param.name)
    php_param = method.add_parameter(name, php_parameter_type(param, config))
    if promoted:
        php_param.promoted = True
        php_param.visibility = "protected"
        php_param.add_comment(f"@param {param.type} ${name} {param.description or ''}".rstrip())
    if param.nullable:
        php_param.nullable = True
        php_param.set_default(None)
    return php_param


def resolve_endpoint_body(endpoint: Endpoint) -> str:
    segments = [
        f"{{$this->{safe_variable_name(s)}}}" if s.startswith(":") else s
        for s in endpoint.path_segments
    ]
    return f'return "/{"/".join(segments)}";'


class RequestGenerator:
    def __init__(self, config: GeneratorConfig):
        self.config = config

    def generate(self, spec: ApiSpecification) -> list[PhpFile]:
        classes = []
        for endpoint in spec.endpoints:
            try:
                classes.append(self.generate_request_class(endpoint))
            except Exception as e:
                logger.warning("Skipping request %s: %s", endpoint.name, e)
        return classes

    def request_namespace(self, endpoint: Endpoint) -> str:
        return f"{self.config.request_namespace}\\{endpoint_resource_name(endpoint, self.config)}"

    def generate_request_class(self, endpoint: Endpoint) -> PhpFile:
        file = PhpFile()
        namespace = file.add_namespace(self.request_namespace(endpoint))
        namespace.add_use(SALOON_METHOD).add_use(SALOON_REQUEST)

        class_type = ClassType(endpoint_request_name(endpoint), extends=SALOON_REQUEST)
        namespace.add(class_type)
        class_type.add_comment(endpoint.name)
        if endpoint.description:
            class_type.add_comment("")
            class_type.add_comment("\n".join(textwrap.wrap(endpoint.description, 100)))

        if endpoint.method.has_body:
            class_type.add_implement(HAS_BODY).add_trait(HAS_JSON_BODY)
            namespace.add_use(HAS_BODY).add_use(HAS_JSON_BODY)

        prop = class_type.add_property("method", SALOON_METHOD)
        prop.visibility = "protected"
        prop.value = Literal(f"{namespace.resolve(SALOON_METHOD)}::{endpoint.method.value}")

        resolve = class_type.add_method("resolveEndpoint")
        resolve.return_type = "string"
        resolve.add_body(resolve_endpoint_body(endpoint))

        params = request_parameters(endpoint, self.config)
        if params:
            constructor = class_type.add_method("__construct")
            for param in params:
                add_parameter(constructor, param, self.config, promoted=True)

        for method_name, group in (
            ("defaultBody", body_parameters(endpoint, self.config)),
            ("defaultQuery", query_parameters(endpoint, self.config)),
            ("defaultHeaders", header_parameters(endpoint, self.config)),
        ):
            if group:
                self._add_array_return_method(class_type, method_name, group)

        if endpoint.response_dto:
            self._add_create_dto_from_response(class_type, namespace, endpoint)

        for param in endpoint.all_parameters():
            if is_dto_type(param.type):
                namespace.add_use(dto_fqn(self.config, param.type))

        return file

    def _add_array_return_method(self, class_type: ClassType, name: str, params: list[Parameter]):
        method = class_type.add_method(name)
        method.return_type = "array"
        lines = [f"'{p.name}' => $this->{safe_variable_name(p.name)}," for p in params]
        method.add_body("return array_filter([")
        for line in lines:
            method.add_body("    " + line)
        method.add_body("]);")

    def _add_create_dto_from_response(self, class_type: ClassType, namespace, endpoint: Endpoint):
        dto = f"{self.config.dto_namespace}\\{dto_class_name(endpoint.response_dto)}"
        path = endpoint.response_dto_path
        source = f"$array['{path}']" if path else "$array"

        # Imported before the body is written so clashing names come back aliased.
        namespace.add_use(SALOON_RESPONSE).add_use(dto)
        dto_name = namespace.resolve(dto)

        method = class_type.add_method("createDtoFromResponse")
        method.add_parameter("response", SALOON_RESPONSE)
        method.add_body("$array = $response->json();")
        method.add_body("")

        if endpoint.response_dto_is_paginated:
            paginated = f"{self.config.dto_namespace}\\{paginated_dto_name(endpoint.response_dto)}"
            namespace.add_use(paginated)
            method.return_type = paginated
            method.add_body(f"return {namespace.resolve(paginated)}::from($array);")
        elif endpoint.response_dto_is_collection:
            method.return_type = "array"
            method.add_comment(f"@return {dto_name}[]")
            method.add_body(f"return array_map(fn($item) => {dto_name}::from($item), {source});")
        else:
            method.return_type = dto
            method.add_body(f"return {dto_name}::from({source});")
