"""Convert raw spec identifiers into safe PHP class, variable and namespace names.

Every function here is pure and total: any input string yields a valid
identifier, and the same input always yields the same output.

Examples:
  safe_class_name("user-profiles")        -> "UserProfiles"
  safe_class_name("2fa settings")         -> "N2faSettings"
  safe_variable_name("first_name")        -> "firstName"
  safe_variable_name(":id")               -> "id"
  safe_variable_name("class")             -> "classParam"
  dto_class_name("v1.ProfessionalLab")    -> "V1ProfessionalLab"
  dto_class_name("App\\Sdk\\Dto\\UserDto") -> "UserDto"
  path_based_name(GET /users/:id/posts)   -> "getUsersIdPosts"
"""

import re

from saloon_sdkgen.parser.base import Endpoint

# PHP reserved words (case-insensitive); none of them may be used as a class name.
_RESERVED_WORDS = frozenset({
    "__halt_compiler", "abstract", "and", "array", "as", "bool", "break",
    "callable", "case", "catch", "class", "clone", "const", "continue",
    "declare", "default", "die", "do", "echo", "else", "elseif", "empty",
    "enddeclare", "endfor", "endforeach", "endif", "endswitch", "endwhile",
    "enum", "eval", "exit", "extends", "false", "final", "finally", "float",
    "fn", "for", "foreach", "function", "global", "goto", "if", "implements",
    "include", "include_once", "instanceof", "insteadof", "int", "interface",
    "isset", "iterable", "list", "match", "mixed", "namespace", "never", "new",
    "null", "object", "or", "parent", "print", "private", "protected",
    "public", "readonly", "require", "require_once", "return", "self",
    "static", "string", "switch", "this", "throw", "trait", "true", "try",
    "unset", "use", "var", "void", "while", "xor", "yield",
})


def normalize(value: str) -> str:
    """Split a raw identifier into space separated words of [a-zA-Z0-9]."""
    value = value.replace(":", "")
    value = re.sub(r"([a-z])([A-Z])", r"\1 \2", value)
    value = re.sub(r"[-_.]", " ", value)
    value = re.sub(r"[^a-zA-Z0-9 ]", "", value)
    return " ".join(value.split())


def _studly(words: str) -> str:
    return "".join(word[0].upper() + word[1:] for word in words.split())


def safe_class_name(value: str) -> str:
    """PascalCase identifier that starts with a letter and is not a reserved word."""
    name = _studly(normalize(value))
    if not name:
        return "Unnamed"
    if name[0].isdigit():
        name = "N" + name
    if name.lower() in _RESERVED_WORDS:
        name += "Class"
    return name


def safe_variable_name(value: str) -> str:
    """lowerCamelCase identifier that starts with a letter and is not a reserved word."""
    name = _studly(normalize(value))
    if not name:
        return "unnamed"
    if name[0].isdigit():
        name = "n" + name
    name = name[0].lower() + name[1:]
    if name.lower() in _RESERVED_WORDS:
        name += "Param"
    return name


def dto_class_name(value: str) -> str:
    """Class name for a schema, whatever way the spec spelled it.

    Namespace-qualified names keep only their last segment; dotted and bare
    names go through the same rules as any class name, so the name a DTO is
    generated under always matches the name references resolve to.
    """
    return safe_class_name(value.rsplit("\\", 1)[-1])


def resource_class_name(value: str) -> str:
    return safe_class_name(value)


def request_class_name(value: str) -> str:
    return safe_class_name(value)


def path_based_name(endpoint: Endpoint) -> str:
    """Name an endpoint from its method and path when it has no operation name."""
    segments = " ".join(normalize(segment) for segment in endpoint.path_segments)
    return safe_variable_name(f"{endpoint.method.value.lower()} {segments}")


def unique_endpoint_names(endpoints: list[Endpoint]) -> list[Endpoint]:
    """Rename endpoints whose request class would clash within the same collection.

    The second ``getUser`` in a collection becomes ``getUser 2`` (class
    ``GetUser2``), the third ``getUser 3`` and so on.
    """
    seen: dict[tuple[str, str], int] = {}
    result = []
    for endpoint in endpoints:
        key = (safe_class_name(endpoint.collection or ""), request_class_name(endpoint.name))
        seen[key] = seen.get(key, 0) + 1
        if seen[key] > 1:
            endpoint = endpoint.model_copy(update={"name": f"{endpoint.name} {seen[key]}"})
        result.append(endpoint)
    return result


def kebab(value: str) -> str:
    """Lowercase, hyphen separated form used for composer package names."""
    return normalize(value).replace(" ", "-").lower()
