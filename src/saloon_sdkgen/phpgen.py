"""Structured builder for PHP source files.

Generators assemble a :class:`PhpFile` out of namespaces, classes, methods
and (promoted) parameters, then ``str(file)`` prints it. Building the class
shape as data keeps identifiers, imports, braces and commas correct by
construction; only method bodies are free text.

Type names are given fully qualified (``Saloon\\Http\\Request``) and the
printer shortens them against the namespace's ``use`` imports.
"""

from dataclasses import dataclass, field
from typing import Any

INDENT = "    "

# Types the printer never qualifies or imports.
BUILTIN_TYPES = frozenset({
    "array", "bool", "callable", "false", "float", "int", "iterable", "mixed",
    "never", "null", "object", "self", "static", "string", "true", "void",
})

_NO_VALUE = object()


@dataclass(frozen=True)
class Literal:
    """A raw PHP expression, printed as-is."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass
class Attribute:
    name: str
    args: list[Any] = field(default_factory=list)


@dataclass
class Parameter:
    name: str
    type: str | None = None
    nullable: bool = False
    promoted: bool = False
    visibility: str = "public"
    comments: list[str] = field(default_factory=list)
    attributes: list[Attribute] = field(default_factory=list)
    default: Any = _NO_VALUE

    @property
    def has_default(self) -> bool:
        return self.default is not _NO_VALUE

    def set_default(self, value: Any) -> "Parameter":
        self.default = value
        return self

    def add_comment(self, line: str) -> "Parameter":
        self.comments.append(line)
        return self

    def add_attribute(self, name: str, args: list[Any] | None = None) -> "Parameter":
        self.attributes.append(Attribute(name, list(args or [])))
        return self

    def attribute(self, name: str) -> Attribute | None:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None


@dataclass
class Property:
    name: str
    type: str | None = None
    nullable: bool = False
    visibility: str = "public"
    value: Any = _NO_VALUE
    comments: list[str] = field(default_factory=list)


@dataclass
class Method:
    name: str
    visibility: str = "public"
    static: bool = False
    return_type: str | None = None
    parameters: list[Parameter] = field(default_factory=list)
    body: list[str] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)

    def add_parameter(self, name: str, type: str | None = None) -> Parameter:
        parameter = Parameter(name=name, type=type)
        self.parameters.append(parameter)
        return parameter

    def add_promoted_parameter(self, name: str, type: str | None = None) -> Parameter:
        parameter = Parameter(name=name, type=type, promoted=True)
        self.parameters.append(parameter)
        return parameter

    def add_body(self, line: str) -> "Method":
        self.body.extend(line.split("\n"))
        return self

    def add_comment(self, line: str) -> "Method":
        self.comments.append(line)
        return self

    def promoted_parameters(self) -> list[Parameter]:
        return [p for p in self.parameters if p.promoted]


@dataclass
class ClassType:
    name: str
    extends: str | None = None
    implements: list[str] = field(default_factory=list)
    traits: list[str] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    abstract: bool = False
    properties: list[Property] = field(default_factory=list)
    methods: list[Method] = field(default_factory=list)

    def add_comment(self, line: str) -> "ClassType":
        self.comments.extend(line.split("\n"))
        return self

    def add_implement(self, name: str) -> "ClassType":
        self.implements.append(name)
        return self

    def add_trait(self, name: str) -> "ClassType":
        self.traits.append(name)
        return self

    def add_property(self, name: str, type: str | None = None) -> Property:
        prop = Property(name=name, type=type)
        self.properties.append(prop)
        return prop

    def add_method(self, name: str) -> Method:
        method = Method(name=name)
        self.methods.append(method)
        return method

    def get_method(self, name: str) -> Method | None:
        for method in self.methods:
            if method.name == name:
                return method
        return None


@dataclass
class PhpNamespace:
    name: str
    uses: dict[str, str | None] = field(default_factory=dict)
    classes: list[ClassType] = field(default_factory=list)

    def add_use(self, name: str, alias: str | None = None) -> "PhpNamespace":
        """Import a class; a short name already in use gets an alias instead."""
        name = name.lstrip("\\")
        if name in self.uses:
            return self
        if alias is None and short_name(name).lower() in self._taken_names():
            alias = self._free_alias(name)
        self.uses[name] = alias
        return self

    def add(self, class_type: ClassType) -> "PhpNamespace":
        # An earlier import with the class's own name would shadow it.
        for name, alias in self.uses.items():
            if alias is None and short_name(name).lower() == class_type.name.lower():
                self.uses[name] = self._free_alias(name, {class_type.name.lower()})
        self.classes.append(class_type)
        return self

    def _taken_names(self) -> set[str]:
        names = {(alias or short_name(name)).lower() for name, alias in self.uses.items()}
        names.update(c.name.lower() for c in self.classes)
        return names

    def _free_alias(self, name: str, extra: set[str] = frozenset()) -> str:
        parts = name.split("\\")
        base = parts[-1] + (parts[-2] if len(parts) > 1 else "")
        taken = self._taken_names() | extra
        alias, n = base, 2
        while alias.lower() in taken:
            alias, n = f"{base}{n}", n + 1
        return alias

    def resolve(self, name: str) -> str:
        """Print a class name relative to this namespace and its imports."""
        name = name.lstrip("\\")
        if name.lower() in BUILTIN_TYPES:
            return name
        if name in self.uses:
            return self.uses[name] or short_name(name)
        if name.rsplit("\\", 1)[0] == self.name and "\\" in name:
            return short_name(name)
        if "\\" not in name:
            return name
        return "\\" + name

    def resolve_type(self, type_: str, nullable: bool = False) -> str:
        parts = [self.resolve(part) for part in type_.lstrip("?").split("|")]
        if nullable and "mixed" not in parts and "null" not in parts:
            if len(parts) == 1:
                return "?" + parts[0]
            parts.append("null")
        return "|".join(parts)


@dataclass
class PhpFile:
    namespaces: list[PhpNamespace] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)

    def add_namespace(self, name: str) -> PhpNamespace:
        namespace = PhpNamespace(name=name)
        self.namespaces.append(namespace)
        return namespace

    @property
    def namespace(self) -> PhpNamespace:
        return self.namespaces[0]

    @property
    def class_type(self) -> ClassType:
        return self.namespace.classes[0]

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.namespace.name}\\{self.class_type.name}"

    def __str__(self) -> str:
        return Printer().print_file(self)


def short_name(name: str) -> str:
    return name.rsplit("\\", 1)[-1]


def export(value: Any, indent: int = 0) -> str:
    """Render a Python value as a PHP literal."""
    if isinstance(value, Literal):
        return value.value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"
    if isinstance(value, dict):
        if not value:
            return "[]"
        inner = INDENT * (indent + 1)
        lines = [f"{inner}{export(k)} => {export(v, indent + 1)}," for k, v in value.items()]
        return "[\n" + "\n".join(lines) + "\n" + INDENT * indent + "]"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(export(v, indent) for v in value) + "]"
    raise TypeError(f"Cannot export {type(value).__name__} to PHP")


def _docblock(lines: list[str], indent: str) -> list[str]:
    # Trim blank lines at both ends; nothing left means no docblock at all.
    while lines and not lines[0].strip():
        lines = lines[1:]
    while lines and not lines[-1].strip():
        lines = lines[:-1]
    if not lines:
        return []
    if len(lines) == 1 and indent:
        return [f"{indent}/** {lines[0]} */"]
    body = [f"{indent} * {line}".rstrip() for line in lines]
    return [f"{indent}/**", *body, f"{indent} */"]


class Printer:
    """Prints a PhpFile in PSR-12 layout."""

    def print_file(self, file: PhpFile) -> str:
        out = ["<?php", ""]
        out.extend(_docblock(file.comments, ""))
        for namespace in file.namespaces:
            out.extend(self.print_namespace(namespace))
        return "\n".join(out).rstrip("\n") + "\n"

    def print_namespace(self, ns: PhpNamespace) -> list[str]:
        out = [f"namespace {ns.name};", ""]
        if ns.uses:
            for name in sorted(ns.uses, key=str.lower):
                alias = ns.uses[name]
                out.append(f"use {name} as {alias};" if alias else f"use {name};")
            out.append("")
        for class_type in ns.classes:
            out.extend(self.print_class(class_type, ns))
            out.append("")
        return out

    def print_class(self, cls: ClassType, ns: PhpNamespace) -> list[str]:
        out = _docblock(list(cls.comments), "")
        header = ("abstract " if cls.abstract else "") + f"class {cls.name}"
        if cls.extends:
            header += f" extends {ns.resolve(cls.extends)}"
        if cls.implements:
            header += " implements " + ", ".join(ns.resolve(i) for i in cls.implements)
        out.extend([header, "{"])

        members: list[list[str]] = []
        if cls.traits:
            members.append([f"{INDENT}use {ns.resolve(t)};" for t in cls.traits])
        for prop in cls.properties:
            members.append(self.print_property(prop, ns))
        for method in cls.methods:
            members.append(self.print_method(method, ns))

        for i, member in enumerate(members):
            if i:
                out.append("")
            out.extend(member)
        out.append("}")
        return out

    def print_property(self, prop: Property, ns: PhpNamespace) -> list[str]:
        out = _docblock(list(prop.comments), INDENT)
        line = f"{INDENT}{prop.visibility} "
        if prop.type:
            line += ns.resolve_type(prop.type, prop.nullable) + " "
        line += f"${prop.name}"
        if prop.value is not _NO_VALUE:
            line += f" = {export(prop.value, 1)}"
        out.append(line + ";")
        return out

    def print_parameter(self, param: Parameter, ns: PhpNamespace) -> str:
        text = ""
        if param.promoted:
            text += f"{param.visibility} "
        if param.type:
            text += ns.resolve_type(param.type, param.nullable) + " "
        text += f"${param.name}"
        if param.has_default:
            text += f" = {export(param.default)}"
        return text

    def print_method(self, method: Method, ns: PhpNamespace) -> list[str]:
        out = _docblock(list(method.comments), INDENT)
        if len(out) == 1:
            # Single-line method docblocks still get the full form.
            out = [f"{INDENT}/**", f"{INDENT} * {method.comments[0].strip()}", f"{INDENT} */"]
        signature = f"{INDENT}{method.visibility} " + ("static " if method.static else "")
        signature += f"function {method.name}("

        multiline = any(p.promoted or p.comments or p.attributes for p in method.parameters)
        if multiline:
            out.append(signature)
            for param in method.parameters:
                out.extend(_docblock(list(param.comments), INDENT * 2))
                for attribute in param.attributes:
                    args = ", ".join(export(a) for a in attribute.args)
                    out.append(f"{INDENT * 2}#[{ns.resolve(attribute.name)}({args})]")
                out.append(f"{INDENT * 2}{self.print_parameter(param, ns)},")
            signature = f"{INDENT})"
        else:
            signature += ", ".join(self.print_parameter(p, ns) for p in method.parameters) + ")"

        if method.return_type:
            signature += ": " + ns.resolve_type(method.return_type)

        body = [f"{INDENT * 2}{line}".rstrip() for line in method.body]
        if multiline:
            out.append(signature + " {")
        else:
            out.extend([signature, f"{INDENT}{{"])
        out.extend(body)
        out.append(f"{INDENT}}}")
        return out
