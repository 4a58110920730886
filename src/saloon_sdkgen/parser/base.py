"""Unified data models for parsed API specifications.

All parsers (OpenAPI, Postman) convert their input into these
standard models for downstream code generation.
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


class Method(str, Enum):
    """HTTP method of an endpoint, spelled the way Saloon's Method enum is."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    CONNECT = "CONNECT"

    @property
    def has_body(self) -> bool:
        return self in (Method.POST, Method.PUT, Method.PATCH)


class Parameter(BaseModel):
    """A single endpoint parameter (path, body, query or header)."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str  # primitive name (string / int / ...) or fully-qualified DTO class
    nullable: bool = False
    description: str | None = None


class SchemaRef(BaseModel):
    """A named pointer to another schema in ``Components.schemas``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ref: str


class Schema(BaseModel):
    """A (possibly recursive) JSON schema node."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: str | list[str] | None = None
    format: str | None = None
    properties: dict[str, Union["Schema", SchemaRef]] = {}
    required: list[str] = []
    nullable: bool = False
    items: Union["Schema", SchemaRef, None] = None
    enum: list[Any] | None = None
    example: Any = None
    default: Any = None
    title: str | None = None
    description: str | None = None
    minimum: float | None = None
    maximum: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    min_items: int | None = None


Schema.model_rebuild()


class SecurityScheme(BaseModel):
    """An authentication scheme declared by the specification."""

    model_config = ConfigDict(frozen=True)

    type: str  # apiKey / http / oauth2 / openIdConnect
    name: str | None = None
    location: str | None = None  # header / query / cookie (apiKey only)
    scheme: str | None = None  # bearer / basic (http only)
    bearer_format: str | None = None
    token_url: str | None = None


class Components(BaseModel):
    model_config = ConfigDict(frozen=True)

    schemas: dict[str, Schema] = {}
    security_schemes: dict[str, SecurityScheme] = {}


class Endpoint(BaseModel):
    """A single API operation with everything needed to generate its request."""

    model_config = ConfigDict(frozen=True)

    name: str
    method: Method
    path_segments: list[str]  # ":id" marks a path variable
    collection: str | None = None
    description: str | None = None
    response: Any = None  # Schema, SchemaRef, or a raw sample body
    response_dto: str | None = None
    response_dto_path: str | None = None
    response_dto_is_collection: bool = False
    response_dto_is_paginated: bool = False
    path_parameters: list[Parameter] = []
    body_parameters: list[Parameter] = []
    query_parameters: list[Parameter] = []
    header_parameters: list[Parameter] = []

    def all_parameters(self) -> list[Parameter]:
        return [
            *self.path_parameters,
            *self.body_parameters,
            *self.query_parameters,
            *self.header_parameters,
        ]


class ApiSpecification(BaseModel):
    """Root of the normalized model produced by every parser."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str | None = None
    base_url: str = ""
    endpoints: list[Endpoint] = Field(default_factory=list)
    components: Components | None = None


class SpecParser(ABC):
    """Turns a specification file of one format into an ApiSpecification."""

    @abstractmethod
    def parse(self, file_path: Path) -> ApiSpecification:
        ...
