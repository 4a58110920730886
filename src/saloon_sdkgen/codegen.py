"""Generation pipeline: specification in, GeneratedCode bundle out."""

import logging

from saloon_sdkgen.config import GeneratorConfig
from saloon_sdkgen.generator.base import GeneratedCode, PostProcessor
from saloon_sdkgen.generator.composer import ComposerGenerator, PintGenerator
from saloon_sdkgen.generator.connector import ConnectorGenerator
from saloon_sdkgen.generator.dto import DtoGenerator
from saloon_sdkgen.generator.pest import PestTestGenerator
from saloon_sdkgen.generator.phpunit import PhpUnitTestGenerator
from saloon_sdkgen.generator.request import RequestGenerator
from saloon_sdkgen.generator.resource import ResourceGenerator
from saloon_sdkgen.parser.base import ApiSpecification

logger = logging.getLogger(__name__)


def default_post_processors(pest: bool = False) -> list[PostProcessor]:
    tests = PestTestGenerator() if pest else PhpUnitTestGenerator()
    return [tests, ComposerGenerator(pest_enabled=pest), PintGenerator()]


class CodeGenerator:
    """Runs the class generators, then each post-processor, in a fixed order.

    DTOs come first because requests and tests look them up; the connector
    is generated before post-processors because tests need its constructor.
    """

    def __init__(self, config: GeneratorConfig, post_processors: list[PostProcessor] | None = None):
        self.config = config
        self.post_processors = list(post_processors or [])

    def register_post_processor(self, processor: PostProcessor) -> None:
        self.post_processors.append(processor)

    def run(self, spec: ApiSpecification) -> GeneratedCode:
        code = GeneratedCode()

        dto_generator = DtoGenerator(self.config)
        code = code.with_dto_classes(dto_generator.generate(spec), dto_generator.array_items)
        code = code.with_request_classes(RequestGenerator(self.config).generate(spec))
        code = code.with_resource_classes(ResourceGenerator(self.config).generate(spec))
        code = code.with_connector(ConnectorGenerator(self.config).generate(spec))
        logger.info(
            "Generated %d DTOs, %d requests, %d resources",
            len(code.dto_classes),
            len(code.request_classes),
            len(code.resource_classes),
        )

        for processor in self.post_processors:
            code = processor.process(spec, self.config, code)
            logger.debug("Post-processor %s done", type(processor).__name__)

        return code
