"""OpenAPI / Swagger document parser.

Parses OpenAPI 3.x and Swagger 2.0 documents (YAML or JSON) into an
ApiSpecification.
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from saloon_sdkgen.exceptions import SpecParseError
from saloon_sdkgen.naming import path_based_name, unique_endpoint_names
from saloon_sdkgen.parser.base import (
    ApiSpecification,
    Components,
    Endpoint,
    Method,
    Parameter,
    Schema,
    SchemaRef,
    SecurityScheme,
    SpecParser,
)

logger = logging.getLogger(__name__)

_SCHEMA_KEYS = {
    "type": "type",
    "format": "format",
    "enum": "enum",
    "example": "example",
    "default": "default",
    "title": "title",
    "description": "description",
    "minimum": "minimum",
    "maximum": "maximum",
    "minLength": "min_length",
    "maxLength": "max_length",
    "minItems": "min_items",
}

_PRIMITIVE_TYPES = {
    "integer": "int",
    "string": "string",
    "boolean": "bool",
    "array": "array",
    "object": "array",
}

_JSON_CONTENT_TYPES = ("application/json", "application/vnd.api+json", "*/*")


def ref_name(ref: str) -> str:
    """Last segment of a JSON pointer: ``#/components/schemas/User`` -> ``User``."""
    return ref.rsplit("/", 1)[-1]


def primitive_type(schema: dict | None) -> str:
    """Parameter type for a raw schema node; references keep the schema name."""
    if not schema:
        return "mixed"
    if "$ref" in schema:
        return ref_name(schema["$ref"])
    type_ = schema.get("type")
    if isinstance(type_, list):
        type_ = next((t for t in type_ if t != "null"), None)
    if type_ == "number":
        return "float" if schema.get("format") in ("float", "double") else "float|int"
    return _PRIMITIVE_TYPES.get(type_, "mixed")


class OpenApiParser(SpecParser):
    def parse(self, file_path: Path) -> ApiSpecification:
        try:
            doc = yaml.safe_load(file_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise SpecParseError(f"Cannot read {file_path}: {e}") from e
        except yaml.YAMLError as e:
            raise SpecParseError(f"Invalid YAML/JSON in {file_path}: {e}") from e

        if not isinstance(doc, dict) or not ("openapi" in doc or "swagger" in doc):
            raise SpecParseError(f"{file_path} is not an OpenAPI or Swagger document")

        try:
            return _DocumentParser(doc, file_path.stem).parse()
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise SpecParseError(f"Malformed OpenAPI document {file_path}: {e}") from e


class _DocumentParser:
    """Walks one loaded document; holds it so references can be resolved."""

    def __init__(self, doc: dict, fallback_name: str):
        self.doc = doc
        self.fallback_name = fallback_name
        self.is_swagger2 = "swagger" in doc

    def parse(self) -> ApiSpecification:
        info = self.doc.get("info") or {}
        endpoints = self._parse_endpoints()
        logger.debug("Parsed %d OpenAPI operations", len(endpoints))
        return ApiSpecification(
            name=info.get("title") or self.fallback_name,
            description=info.get("description"),
            base_url=self._base_url(),
            endpoints=unique_endpoint_names(endpoints),
            components=Components(
                schemas={name: self._schema(node) for name, node in self._raw_schemas().items()},
                security_schemes=self._security_schemes(),
            ),
        )

    # -- document level ------------------------------------------------------

    def _base_url(self) -> str:
        if self.is_swagger2:
            host = self.doc.get("host")
            if not host:
                return self.doc.get("basePath", "")
            scheme = (self.doc.get("schemes") or ["https"])[0]
            return f"{scheme}://{host}{self.doc.get('basePath', '')}"
        servers = self.doc.get("servers") or []
        return servers[0].get("url", "") if servers else ""

    def _raw_schemas(self) -> dict[str, dict]:
        if self.is_swagger2:
            return self.doc.get("definitions") or {}
        return (self.doc.get("components") or {}).get("schemas") or {}

    def _security_schemes(self) -> dict[str, SecurityScheme]:
        if self.is_swagger2:
            raw = self.doc.get("securityDefinitions") or {}
        else:
            raw = (self.doc.get("components") or {}).get("securitySchemes") or {}

        schemes = {}
        for name, node in raw.items():
            type_ = node.get("type", "")
            scheme = node.get("scheme")
            if type_ == "basic":  # Swagger 2
                type_, scheme = "http", "basic"
            token_url = node.get("tokenUrl")
            for flow in (node.get("flows") or {}).values():
                token_url = token_url or flow.get("tokenUrl")
            schemes[name] = SecurityScheme(
                type=type_,
                name=node.get("name"),
                location=node.get("in"),
                scheme=scheme,
                bearer_format=node.get("bearerFormat"),
                token_url=token_url,
            )
        return schemes

    def _resolve(self, node: dict | None) -> dict:
        """Follow local ``$ref`` pointers until a concrete node is reached."""
        seen = set()
        while node and "$ref" in node:
            ref = node["$ref"]
            if ref in seen or not ref.startswith("#/"):
                return {}
            seen.add(ref)
            target: Any = self.doc
            for part in ref[2:].split("/"):
                target = target.get(part) if isinstance(target, dict) else None
            node = target
        return node or {}

    # -- schemas ---------------------------------------------------------------

    def _schema(self, node: dict) -> Schema | SchemaRef:
        if "$ref" in node:
            return SchemaRef(ref=ref_name(node["$ref"]))

        if "allOf" in node:
            parts = node["allOf"]
            if len(parts) == 1:
                return self._schema(parts[0])
            node = self._merge_all_of(node)

        values: dict[str, Any] = {
            field: node[key] for key, field in _SCHEMA_KEYS.items() if key in node
        }
        if values.get("type") is None and node.get("properties"):
            values["type"] = "object"
        types = values.get("type")
        values["nullable"] = bool(node.get("nullable")) or (isinstance(types, list) and "null" in types)
        values["properties"] = {
            name: self._schema(prop) for name, prop in (node.get("properties") or {}).items()
        }
        values["required"] = list(node.get("required") or [])
        if isinstance(node.get("items"), dict):
            values["items"] = self._schema(node["items"])
        return Schema(**values)

    def _merge_all_of(self, node: dict) -> dict:
        merged: dict[str, Any] = {"type": "object", "properties": {}, "required": []}
        for part in node["allOf"]:
            part = self._resolve(part)
            merged["properties"].update(part.get("properties") or {})
            merged["required"].extend(part.get("required") or [])
        for key, value in node.items():
            if key != "allOf":
                merged.setdefault(key, value)
        return merged

    # -- operations ------------------------------------------------------------

    def _parse_endpoints(self) -> list[Endpoint]:
        endpoints = []
        for path, path_item in (self.doc.get("paths") or {}).items():
            path_item = self._resolve(path_item)
            shared_params = path_item.get("parameters") or []
            for method_name, operation in path_item.items():
                try:
                    method = Method(method_name.upper())
                except ValueError:
                    continue
                endpoints.append(self._parse_operation(path, method, operation, shared_params))
        return endpoints

    def _parse_operation(
        self, path: str, method: Method, operation: dict, shared_params: list[dict]
    ) -> Endpoint:
        segments = [
            ":" + s[1:-1] if s.startswith("{") and s.endswith("}") else s
            for s in path.split("/")
            if s
        ]
        params: dict[str, list[Parameter]] = {"path": [], "query": [], "header": [], "body": []}

        by_key: dict[tuple[str, str], dict] = {}
        for raw in [*shared_params, *(operation.get("parameters") or [])]:
            raw = self._resolve(raw)
            by_key[(raw.get("in", "query"), raw["name"])] = raw

        body_schema = None
        for (location, name), raw in by_key.items():
            if location == "body":
                body_schema = raw.get("schema")
                continue
            if location == "formData":
                location = "body"
            if location not in params:
                continue
            schema = raw.get("schema") or raw  # Swagger 2 keeps the type inline
            required = raw.get("required", False) or location == "path"
            params[location].append(Parameter(
                name=name,
                type=primitive_type(schema),
                nullable=not required,
                description=raw.get("description"),
            ))

        request_body = self._resolve(operation.get("requestBody"))
        if request_body:
            body_schema = self._content_schema(request_body.get("content"))
        params["body"].extend(self._body_parameters(body_schema))

        response_raw = self._response_schema(operation.get("responses") or {})
        endpoint = Endpoint(
            name=operation.get("operationId") or operation.get("summary") or "",
            method=method,
            path_segments=segments,
            collection=(operation.get("tags") or [None])[0],
            description=operation.get("description") or operation.get("summary"),
            response=self._schema(response_raw) if response_raw else None,
            path_parameters=params["path"],
            body_parameters=params["body"],
            query_parameters=params["query"],
            header_parameters=params["header"],
            **self._response_dto(response_raw),
        )
        if not endpoint.name:
            endpoint = endpoint.model_copy(update={"name": path_based_name(endpoint)})
        return endpoint

    def _content_schema(self, content: dict | None) -> dict | None:
        if not content:
            return None
        for content_type in _JSON_CONTENT_TYPES:
            if content_type in content:
                return content[content_type].get("schema")
        # Fallback: first available schema
        for media in content.values():
            return (media or {}).get("schema")
        return None

    def _body_parameters(self, schema: dict | None) -> list[Parameter]:
        resolved = self._resolve(schema)
        if "allOf" in resolved:
            resolved = self._merge_all_of(resolved)
        required = resolved.get("required") or []
        return [
            Parameter(
                name=name,
                type=primitive_type(prop),
                nullable=name not in required or bool(prop.get("nullable")),
                description=prop.get("description"),
            )
            for name, prop in (resolved.get("properties") or {}).items()
        ]

    def _response_schema(self, responses: dict) -> dict | None:
        codes = [c for c in ("200", "201") if c in responses or int(c) in responses]
        codes += sorted(str(c) for c in responses if str(c).startswith("2") and str(c) not in codes)
        for code in codes:
            response = self._resolve(responses.get(code) or responses.get(int(code)))
            schema = response.get("schema") if self.is_swagger2 else self._content_schema(response.get("content"))
            if schema:
                return schema
        return None

    def _response_dto(self, schema: dict | None) -> dict[str, Any]:
        """Detect which DTO a response deserializes into, and how."""
        if not schema:
            return {}
        if "$ref" in schema:
            return {"response_dto": ref_name(schema["$ref"])}

        items = schema.get("items") or {}
        if schema.get("type") == "array" and "$ref" in items:
            return {"response_dto": ref_name(items["$ref"]), "response_dto_is_collection": True}

        properties = schema.get("properties") or {}
        data = properties.get("data") or {}
        if data.get("type") == "array" and "$ref" in (data.get("items") or {}):
            return {
                "response_dto": ref_name(data["items"]["$ref"]),
                "response_dto_path": "data",
                "response_dto_is_collection": True,
                "response_dto_is_paginated": "meta" in properties or "links" in properties,
            }
        if "$ref" in data:
            return {"response_dto": ref_name(data["$ref"]), "response_dto_path": "data"}
        return {}
