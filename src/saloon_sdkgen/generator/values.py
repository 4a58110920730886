"""Placeholder values used wherever generated code needs sample data.

Feature-test arguments, connector setup arguments and DTO test data all go
through :func:`value_for_type`, so fixtures and assertions agree.
"""

from typing import Any

from saloon_sdkgen.phpgen import export

SCALAR_TYPES = ("string", "int", "float", "bool")


def value_for_type(type_: str | None) -> Any:
    """Placeholder for a parameter of the given PHP type; DTO and unknown types get None."""
    type_ = (type_ or "").lstrip("?")
    if type_ == "string":
        return "test string"
    if type_ in ("int", "integer"):
        return 123
    if type_ in ("float", "float|int", "int|float"):
        return 123.45
    if type_ in ("bool", "boolean"):
        return True
    if type_ == "array":
        return []
    return None


def sample_value(type_: str | None, property_name: str = "") -> Any:
    """Like value_for_type, but strings are picked from the property name."""
    if (type_ or "").lstrip("?").split("|")[0] != "string":
        return value_for_type(type_)

    name = property_name.lower()
    if "email" in name:
        return "test@example.com"
    if "url" in name or "link" in name:
        return "https://example.com"
    if "phone" in name:
        return "+1234567890"
    if "id" in name:
        return "test-id-123"
    if "name" in name:
        return "Test Name"
    if "description" in name:
        return "Test description"
    return "test string"


def php_value(type_: str | None) -> str:
    """value_for_type rendered as PHP source."""
    return export(value_for_type(type_))


def php_array(data: dict[str, Any], indent: int = 2) -> str:
    """Render sample data as a PHP array literal, nested under ``indent`` levels."""
    return export(data, indent)
