"""Project manifest post-processors: composer.json and pint.json."""

import json
from typing import Any

from saloon_sdkgen.config import GeneratorConfig
from saloon_sdkgen.generator.base import GeneratedCode, TaggedOutputFile, tests_namespace
from saloon_sdkgen.naming import kebab
from saloon_sdkgen.parser.base import ApiSpecification


def dump_manifest(data: dict[str, Any]) -> str:
    # json.dumps never escapes "/", matching composer's own formatting.
    return json.dumps(data, indent=4, ensure_ascii=False) + "\n"


def package_name(config: GeneratorConfig) -> str:
    """``<vendor>/<package>`` from the first namespace segment and the connector name."""
    vendor = kebab(config.namespace.split("\\")[0]) or "vendor"
    package = kebab(config.connector_name) or "sdk"
    return f"{vendor}/{package}"


class ComposerGenerator:
    def __init__(self, pest_enabled: bool = False):
        self.pest_enabled = pest_enabled

    def dev_dependencies(self) -> dict[str, str]:
        if self.pest_enabled:
            return {
                "pestphp/pest": "^2.0",
                "orchestra/testbench": "^8.0|^9.0",
                "saloonphp/laravel-plugin": "^3.0",
                "spatie/laravel-data": "^3.0|^4.0",
                "vlucas/phpdotenv": "^5.6",
            }
        return {"phpunit/phpunit": "^10.0|^11.0"}

    def manifest(self, spec: ApiSpecification, config: GeneratorConfig) -> dict[str, Any]:
        composer: dict[str, Any] = {
            "name": package_name(config),
            "description": f"{spec.name} SDK",
            "type": "library",
            "require": {
                "php": "^8.1",
                "saloonphp/saloon": "^3.0",
                "spatie/laravel-data": "^3.0|^4.0",
            },
            "require-dev": self.dev_dependencies(),
            "autoload": {
                "psr-4": {f"{config.root_namespace}\\": "src/"},
            },
            "autoload-dev": {
                "psr-4": {f"{tests_namespace(config)}\\": "tests/"},
            },
            "scripts": {
                "test": "vendor/bin/pest" if self.pest_enabled else "vendor/bin/phpunit",
            },
        }
        if self.pest_enabled:
            composer["config"] = {"allow-plugins": {"pestphp/pest-plugin": True}}
        return composer

    def process(
        self, spec: ApiSpecification, config: GeneratorConfig, code: GeneratedCode
    ) -> GeneratedCode:
        return code.with_additional_files([
            TaggedOutputFile(
                tag="composer",
                file=dump_manifest(self.manifest(spec, config)),
                path="composer.json",
            )
        ])


class PintGenerator:
    """Emits the Laravel Pint config; running Pint itself is left to the user."""

    def process(
        self, spec: ApiSpecification, config: GeneratorConfig, code: GeneratedCode
    ) -> GeneratedCode:
        return code.with_additional_files([
            TaggedOutputFile(tag="pint", file=dump_manifest({"preset": "laravel"}), path="pint.json")
        ])
