"""Resource generator: groups request classes behind one class per collection."""

import logging

from saloon_sdkgen.config import GeneratorConfig
from saloon_sdkgen.generator.base import endpoint_request_name, group_by_resource
from saloon_sdkgen.generator.request import add_parameter, request_parameters
from saloon_sdkgen.naming import safe_variable_name
from saloon_sdkgen.parser.base import ApiSpecification, Endpoint
from saloon_sdkgen.phpgen import ClassType, PhpFile

logger = logging.getLogger(__name__)

SALOON_CONNECTOR = "Saloon\\Http\\Connector"
SALOON_RESPONSE = "Saloon\\Http\\Response"

BASE_RESOURCE = "Resource"


class ResourceGenerator:
    """One resource class per collection, plus the shared base ``Resource``."""

    def __init__(self, config: GeneratorConfig):
        self.config = config

    @property
    def base_resource_fqn(self) -> str:
        return f"{self.config.namespace}\\{BASE_RESOURCE}"

    def generate(self, spec: ApiSpecification) -> list[PhpFile]:
        classes = [self.generate_base_resource()]
        for resource_name, endpoints in group_by_resource(spec, self.config).items():
            try:
                classes.append(self.generate_resource_class(resource_name, endpoints))
            except Exception as e:
                logger.warning("Skipping resource %s: %s", resource_name, e)
        return classes

    def generate_base_resource(self) -> PhpFile:
        file = PhpFile()
        namespace = file.add_namespace(self.config.namespace)
        namespace.add_use(SALOON_CONNECTOR)
        class_type = ClassType(BASE_RESOURCE)
        namespace.add(class_type)

        constructor = class_type.add_method("__construct")
        param = constructor.add_promoted_parameter("connector", SALOON_CONNECTOR)
        param.visibility = "protected"
        return file

    def generate_resource_class(self, resource_name: str, endpoints: list[Endpoint]) -> PhpFile:
        file = PhpFile()
        namespace = file.add_namespace(self.config.resource_namespace)
        base_alias = f"Base{BASE_RESOURCE}" if resource_name == BASE_RESOURCE else None
        namespace.add_use(self.base_resource_fqn, alias=base_alias).add_use(SALOON_RESPONSE)

        class_type = ClassType(resource_name, extends=self.base_resource_fqn)
        namespace.add(class_type)

        request_namespace = f"{self.config.request_namespace}\\{resource_name}"
        for endpoint in endpoints:
            request_class = endpoint_request_name(endpoint)
            request_fqn = f"{request_namespace}\\{request_class}"
            # A request named like its resource would shadow the class being declared.
            alias = f"{request_class}Request" if request_class == resource_name else None
            namespace.add_use(request_fqn, alias=alias)

            method = class_type.add_method(safe_variable_name(request_class))
            method.return_type = SALOON_RESPONSE

            args = []
            for param in request_parameters(endpoint, self.config):
                php_param = add_parameter(method, param, self.config, promoted=False)
                method.add_comment(f"@param {param.type} ${php_param.name} {param.description or ''}".rstrip())
                if php_param.type and "\\" in php_param.type:
                    namespace.add_use(php_param.type)
                args.append(f"${php_param.name}")

            method.add_body(
                f"return $this->connector->send(new {namespace.resolve(request_fqn)}({', '.join(args)}));"
            )

        return file
