from pathlib import Path
from unittest.mock import MagicMock

from saloon_sdkgen.codegen import CodeGenerator, default_post_processors
from saloon_sdkgen.config import GeneratorConfig
from saloon_sdkgen.generator.composer import ComposerGenerator, PintGenerator
from saloon_sdkgen.generator.pest import PestTestGenerator
from saloon_sdkgen.generator.phpunit import PhpUnitTestGenerator
from saloon_sdkgen.parser.openapi import OpenApiParser
from saloon_sdkgen.parser.postman import PostmanParser
from saloon_sdkgen.writer import collect_output_files

FIXTURES = Path(__file__).parent / "fixtures"

CONFIG = GeneratorConfig(connector_name="Petstore", namespace="Acme\\SDK")


def _run(pest: bool = False):
    spec = OpenApiParser().parse(FIXTURES / "petstore.yaml")
    return CodeGenerator(CONFIG, default_post_processors(pest=pest)).run(spec)


class TestDefaultPostProcessors:
    def test_phpunit_by_default(self):
        processors = default_post_processors()
        assert [type(p) for p in processors] == [PhpUnitTestGenerator, ComposerGenerator, PintGenerator]
        assert processors[1].pest_enabled is False

    def test_pest(self):
        processors = default_post_processors(pest=True)
        assert isinstance(processors[0], PestTestGenerator)
        assert processors[1].pest_enabled is True


class TestCodeGenerator:
    def test_artifacts(self):
        code = _run()
        assert code.connector_class.fully_qualified_name == "Acme\\SDK\\Petstore"
        assert [c.class_type.name for c in code.resource_classes] == ["Resource", "Pets", "Owners", "Resource"]
        assert [c.class_type.name for c in code.request_classes] == [
            "ListPets", "CreatePet", "GetPet", "DeletePet", "ListOwners", "HealthCheck",
        ]
        assert list(code.dto_classes) == [
            "PaginatedResponseMetaDto", "Pet", "Address", "Owner", "Toy", "NewPet", "PetPaginatedResponseDto",
        ]
        assert {f.tag for f in code.additional_files} == {"phpunit", "composer", "pint"}

    def test_reruns_are_byte_identical(self):
        first = [(f.path, f.content) for f in collect_output_files(_run(), CONFIG)]
        second = [(f.path, f.content) for f in collect_output_files(_run(), CONFIG)]
        assert first == second

    def test_pest_reruns_are_byte_identical(self):
        first = [(f.path, f.content) for f in collect_output_files(_run(pest=True), CONFIG)]
        second = [(f.path, f.content) for f in collect_output_files(_run(pest=True), CONFIG)]
        assert first == second

    def test_endpoints_grouped_by_collection(self):
        code = _run()
        namespaces = {c.class_type.name: c.namespace.name for c in code.request_classes}
        assert namespaces["ListPets"] == namespaces["GetPet"] == "Acme\\SDK\\Requests\\Pets"
        assert namespaces["ListOwners"] == "Acme\\SDK\\Requests\\Owners"
        assert namespaces["HealthCheck"] == "Acme\\SDK\\Requests\\Resource"

    def test_registered_post_processors_run_in_order(self):
        spec = OpenApiParser().parse(FIXTURES / "petstore.yaml")
        calls = []

        def processor(name):
            mock = MagicMock()
            mock.process.side_effect = lambda spec, config, code: calls.append(name) or code
            return mock

        generator = CodeGenerator(CONFIG, [processor("first")])
        generator.register_post_processor(processor("second"))
        generator.run(spec)
        assert calls == ["first", "second"]

    def test_postman_spec(self):
        spec = PostmanParser().parse(FIXTURES / "sample.postman.json")
        code = CodeGenerator(CONFIG, default_post_processors()).run(spec)
        assert [c.class_type.name for c in code.request_classes] == [
            "ListUsers", "GetUser", "CreateUser", "Ping",
        ]
        assert code.dto_classes == {}
        paths = [f.path for f in code.additional_files]
        assert "tests/Stubs/Users/listUsers.json" in paths
        assert "tests/Feature/UsersTest.php" in paths
