"""Postman Collection v2.1 parser.

Parses Postman exported JSON files into an ApiSpecification. Folders
become resource collections; the first saved example of a request is
kept as its sample response body.
"""

import json
import logging
from pathlib import Path
from typing import Any

from saloon_sdkgen.exceptions import SpecParseError
from saloon_sdkgen.naming import path_based_name, unique_endpoint_names
from saloon_sdkgen.parser.base import (
    ApiSpecification,
    Components,
    Endpoint,
    Method,
    Parameter,
    SecurityScheme,
    SpecParser,
)

logger = logging.getLogger(__name__)

# Headers Saloon sets itself or derives from the connector's authenticator.
_STANDARD_HEADERS = frozenset({"authorization", "content-type", "accept"})


class PostmanParser(SpecParser):
    def parse(self, file_path: Path) -> ApiSpecification:
        try:
            collection = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise SpecParseError(f"Cannot read {file_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise SpecParseError(f"Invalid JSON in {file_path}: {e}") from e

        if not isinstance(collection, dict) or "item" not in collection:
            raise SpecParseError(f"{file_path} is not a Postman collection")

        try:
            endpoints: list[Endpoint] = []
            _parse_items(collection["item"], endpoints, folder=None)
            info = collection.get("info") or {}
            variables = {v.get("key"): v.get("value") for v in collection.get("variable") or []}
            security = _security_scheme(collection.get("auth"))
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise SpecParseError(f"Malformed Postman collection {file_path}: {e}") from e

        logger.debug("Parsed %d Postman requests", len(endpoints))
        return ApiSpecification(
            name=info.get("name") or file_path.stem,
            description=_description(info.get("description")),
            base_url=str(variables.get("baseUrl") or ""),
            endpoints=unique_endpoint_names(endpoints),
            components=Components(security_schemes={"default": security} if security else {}),
        )


def _parse_items(items: list[dict], endpoints: list[Endpoint], folder: str | None) -> None:
    """Recursively parse items; the outermost folder names the collection."""
    for item in items:
        if "item" in item:
            _parse_items(item["item"], endpoints, folder or item.get("name"))
        elif "request" in item:
            endpoints.append(_parse_request(item, folder))


def _parse_request(item: dict, folder: str | None) -> Endpoint:
    req = item["request"]
    if isinstance(req, str):  # shorthand: the request is just a URL
        req = {"method": "GET", "url": req}
    url = req.get("url") or {}
    if isinstance(url, str):
        url = {"raw": url}

    segments = _path_segments(url)
    endpoint = Endpoint(
        name=item.get("name", ""),
        method=Method(req.get("method", "GET").upper()),
        path_segments=segments,
        collection=folder,
        description=_description(req.get("description")),
        response=_example_response(item.get("response") or []),
        path_parameters=_path_params(segments, url.get("variable") or []),
        body_parameters=_body_params(req.get("body")),
        query_parameters=_query_params(url.get("query") or []),
        header_parameters=_header_params(req.get("header") or []),
    )
    if not endpoint.name:
        endpoint = endpoint.model_copy(update={"name": path_based_name(endpoint)})
    return endpoint


def _path_segments(url: dict) -> list[str]:
    path = url.get("path")
    if path is None:
        raw = url.get("raw", "")
        raw = raw.split("?", 1)[0]
        if "://" in raw:
            raw = raw.split("://", 1)[1].partition("/")[2]
        elif raw.startswith("{{"):
            raw = raw.partition("/")[2]
        path = raw.split("/")
    elif isinstance(path, str):
        path = path.split("/")
    return [s for s in path if s and not s.startswith("{{")]


def _path_params(segments: list[str], variables: list[dict]) -> list[Parameter]:
    descriptions = {v.get("key"): _description(v.get("description")) for v in variables}
    return [
        Parameter(name=s[1:], type="string", description=descriptions.get(s[1:]))
        for s in segments
        if s.startswith(":")
    ]


def _query_params(query: list[dict]) -> list[Parameter]:
    return [
        Parameter(
            name=q["key"],
            type=infer_type(q.get("value")),
            nullable=True,
            description=_description(q.get("description")),
        )
        for q in query
        if q.get("key") and not q.get("disabled")
    ]


def _header_params(headers: list[dict]) -> list[Parameter]:
    return [
        Parameter(
            name=h["key"],
            type="string",
            nullable=True,
            description=_description(h.get("description")),
        )
        for h in headers
        if h.get("key") and h["key"].lower() not in _STANDARD_HEADERS and not h.get("disabled")
    ]


def _body_params(body: dict | None) -> list[Parameter]:
    if not body:
        return []
    mode = body.get("mode")
    if mode == "raw":
        data = _load_json(body.get("raw"))
        if not isinstance(data, dict):
            return []
        return [Parameter(name=k, type=infer_type(v), nullable=v is None) for k, v in data.items()]
    if mode in ("urlencoded", "formdata"):
        return [
            Parameter(name=f["key"], type=infer_type(f.get("value")), nullable=True)
            for f in body.get(mode) or []
            if f.get("key") and not f.get("disabled")
        ]
    return []


def _example_response(responses: list[dict]) -> Any:
    for response in responses:
        data = _load_json(response.get("body"))
        if data is not None:
            return data
    return None


def _security_scheme(auth: dict | None) -> SecurityScheme | None:
    if not auth:
        return None
    auth_type = auth.get("type")
    if auth_type in ("bearer", "basic"):
        return SecurityScheme(type="http", scheme=auth_type)
    if auth_type == "apikey":
        values = {a.get("key"): a.get("value") for a in auth.get("apikey") or []}
        return SecurityScheme(
            type="apiKey",
            name=values.get("key") or "X-API-Key",
            location="query" if values.get("in") == "query" else "header",
        )
    if auth_type == "oauth2":
        values = {a.get("key"): a.get("value") for a in auth.get("oauth2") or []}
        return SecurityScheme(type="oauth2", token_url=values.get("accessTokenUrl"))
    return None


def infer_type(value: Any) -> str:
    """PHP parameter type for a sample value."""
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, (list, dict)):
        return "array"
    if value is None:
        return "mixed"
    return "string"


def _load_json(text: Any) -> Any:
    if not isinstance(text, str) or not text.strip():
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def _description(value: Any) -> str | None:
    """Postman descriptions are either a string or ``{"content": ...}``."""
    if isinstance(value, dict):
        value = value.get("content")
    return value or None
