"""Pest test suite generator, used instead of PHPUnit when ``--pest`` is given."""

import logging

from saloon_sdkgen.config import GeneratorConfig
from saloon_sdkgen.generator.base import (
    GeneratedCode,
    TaggedOutputFile,
    endpoint_request_name,
    group_by_resource,
    render_stub,
    tests_namespace,
)
from saloon_sdkgen.generator.phpunit import (
    connector_arguments,
    endpoint_arguments,
    endpoint_dto_imports,
)
from saloon_sdkgen.naming import safe_variable_name
from saloon_sdkgen.parser.base import ApiSpecification, Endpoint
from saloon_sdkgen.phpgen import short_name

logger = logging.getLogger(__name__)

TAG = "pest"


class PestTestGenerator:
    def process(
        self, spec: ApiSpecification, config: GeneratorConfig, code: GeneratedCode
    ) -> GeneratedCode:
        namespace = tests_namespace(config)
        files = [
            TaggedOutputFile(
                tag=TAG,
                file=render_stub("pest", namespace=namespace, name=config.connector_name),
                path="tests/Pest.php",
            ),
            TaggedOutputFile(
                tag=TAG,
                file=render_stub("pest-testcase", namespace=namespace),
                path="tests/TestCase.php",
            ),
        ]

        for resource_name, endpoints in group_by_resource(spec, config).items():
            test = self.generate_test(config, code, resource_name, endpoints)
            if test is not None:
                files.append(test)

        return code.with_additional_files(files)

    def generate_test(
        self,
        config: GeneratorConfig,
        code: GeneratedCode,
        resource_name: str,
        endpoints: list[Endpoint],
    ) -> TaggedOutputFile | None:
        try:
            if code.connector_class is not None:
                connector_fqn = code.connector_class.fully_qualified_name
            else:
                connector_fqn = f"{config.namespace}\\{config.connector_name}"
            client_name = safe_variable_name(short_name(connector_fqn))
            resource_method = safe_variable_name(resource_name)
            request_namespace = f"{config.request_namespace}\\{resource_name}"

            imports = []
            tests = []
            for endpoint in endpoints:
                request_class = endpoint_request_name(endpoint)
                alias = f"{request_class}Request" if request_class == resource_name else None
                import_line = f"{request_namespace}\\{request_class}"
                imports.append(f"{import_line} as {alias}" if alias else import_line)

                method_name = safe_variable_name(request_class)
                tests.append({
                    "description": f"calls the {method_name} method in the {resource_name} resource",
                    "request_class": alias or request_class,
                    "method_name": method_name,
                    "fixture_name": safe_variable_name(f"{resource_method} {method_name}"),
                    "arguments": endpoint_arguments(endpoint, config),
                })
            imports = list(dict.fromkeys(imports))
            imports.extend(endpoint_dto_imports(endpoints, config))

            content = render_stub(
                "pest-resource-test",
                connector_fqn=connector_fqn,
                connector_name=short_name(connector_fqn),
                connector_args=connector_arguments(code),
                client_name=client_name,
                resource_method=resource_method,
                imports=imports,
                tests=tests,
            )
        except Exception as e:
            logger.warning("Skipping Pest test for %s: %s", resource_name, e)
            return None

        return TaggedOutputFile(tag=TAG, file=content, path=f"tests/{resource_name}Test.php")
