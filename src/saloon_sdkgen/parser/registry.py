"""Registry of specification parsers, keyed by the ``--type`` value."""

import logging
from pathlib import Path

from saloon_sdkgen.exceptions import ParserNotRegisteredError, SpecFileNotFoundError
from saloon_sdkgen.parser.base import ApiSpecification, SpecParser
from saloon_sdkgen.parser.openapi import OpenApiParser
from saloon_sdkgen.parser.postman import PostmanParser

logger = logging.getLogger(__name__)

_PARSERS: dict[str, type[SpecParser]] = {}


def _key(spec_type: str) -> str:
    return spec_type.strip().lower()


def register_parser(spec_type: str, parser_cls: type[SpecParser]) -> None:
    _PARSERS[_key(spec_type)] = parser_cls


def registered_parser_types() -> list[str]:
    return list(_PARSERS)


def get_parser(spec_type: str) -> SpecParser:
    key = _key(spec_type)
    if key not in _PARSERS:
        raise ParserNotRegisteredError(key, registered_parser_types())
    return _PARSERS[key]()


def parse_specification(spec_type: str, file_path: Path) -> ApiSpecification:
    """Parse ``file_path`` with the parser registered for ``spec_type``."""
    parser = get_parser(spec_type)
    file_path = Path(file_path)
    if not file_path.is_file():
        raise SpecFileNotFoundError(f"File not found: {file_path}")

    logger.debug("Parsing %s with %s", file_path, type(parser).__name__)
    return parser.parse(file_path)


register_parser("openapi", OpenApiParser)
register_parser("postman", PostmanParser)
