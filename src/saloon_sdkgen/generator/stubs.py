"""JSON response stubs used as MockResponse fixtures by the generated tests.

Values are synthesized from the endpoint's response schema. Literal
``example``, ``default`` and ``enum`` values win; everything else is derived
from a per-endpoint counter, so regenerating yields byte-identical files.
"""

import json
import uuid
from typing import Any

from saloon_sdkgen.parser.base import Components, Endpoint, Schema, SchemaRef

MAX_DEPTH = 5

FIXED_DATE = "2024-01-01"
FIXED_DATE_TIME = "2024-01-01T00:00:00+00:00"

PAGINATION_META = {
    "current_page": 1,
    "per_page": 20,
    "total": 100,
    "last_page": 5,
}

PAGINATION_LINKS = {
    "first": "https://api.example.com/resource?page=1",
    "last": "https://api.example.com/resource?page=5",
    "prev": None,
    "next": "https://api.example.com/resource?page=2",
}


def dump_json(data: Any) -> str:
    return json.dumps(data, indent=4, ensure_ascii=False, default=str) + "\n"


class StubGenerator:
    def __init__(self, components: Components | None = None):
        self.components = components or Components()
        self.counter = 1

    def generate_stub_for_endpoint(self, endpoint: Endpoint) -> str:
        self.counter = 1
        if endpoint.response is None:
            return dump_json({"message": "Success"})

        if not isinstance(endpoint.response, (Schema, SchemaRef)):
            # Postman examples carry a literal body.
            return dump_json(endpoint.response)

        if endpoint.response_dto_is_paginated:
            return dump_json({
                "data": self._items(endpoint.response),
                "meta": dict(PAGINATION_META),
                "links": dict(PAGINATION_LINKS),
            })

        if endpoint.response_dto_is_collection:
            items = self._items(endpoint.response)
            if endpoint.response_dto_path:
                return dump_json({endpoint.response_dto_path: items})
            return dump_json(items)

        return dump_json(self.generate(endpoint.response))

    def _items(self, response: Schema | SchemaRef) -> list[Any]:
        item_schema = self._item_schema(response)
        items = []
        for i in range(1, 4):
            self.counter = i
            items.append(self.generate(item_schema))
        return items

    def _item_schema(self, response: Schema | SchemaRef) -> Schema | SchemaRef:
        schema = self.resolve(response)
        if schema is None:
            return response
        if schema.type == "array" and schema.items is not None:
            return schema.items
        data = schema.properties.get("data")
        if data is not None:
            data_schema = self.resolve(data)
            if data_schema is not None and data_schema.type == "array" and data_schema.items is not None:
                return data_schema.items
        return response

    def resolve(self, schema: Schema | SchemaRef | None) -> Schema | None:
        if isinstance(schema, SchemaRef):
            return self.components.schemas.get(schema.ref)
        return schema

    def generate(self, schema: Schema | SchemaRef | None, depth: int = 0) -> Any:
        if depth > MAX_DEPTH:
            return None
        schema = self.resolve(schema)
        if schema is None:
            return None

        if schema.example is not None:
            return schema.example
        if schema.default is not None:
            return schema.default
        if schema.enum:
            return schema.enum[0]

        type_ = schema.type[0] if isinstance(schema.type, list) else schema.type
        if type_ is None and schema.properties:
            type_ = "object"

        if type_ == "string":
            return self._string(schema)
        if type_ == "integer":
            return int(self._clamp(self.counter, schema, 1, 1000))
        if type_ == "number":
            return round(self._clamp(self.counter * 1.5, schema, 1.0, 1000.0), 2)
        if type_ == "boolean":
            return bool(self.counter % 2)
        if type_ == "array":
            return self._array(schema, depth)
        if type_ == "object":
            return self._object(schema, depth)
        return None

    def _clamp(self, value: float, schema: Schema, low: float, high: float) -> float:
        low = schema.minimum if schema.minimum is not None else low
        high = schema.maximum if schema.maximum is not None else max(high, low)
        return min(max(value, low), high)

    def _string(self, schema: Schema) -> str:
        if schema.format == "date":
            return FIXED_DATE
        if schema.format == "date-time":
            return FIXED_DATE_TIME
        if schema.format == "email":
            return f"test{self.counter}@example.com"
        if schema.format == "uuid":
            return str(uuid.uuid5(uuid.NAMESPACE_URL, f"stub-{self.counter}"))
        if schema.format in ("uri", "url"):
            return f"https://example.com/resource/{self.counter}"

        min_length = schema.min_length if schema.min_length is not None else 5
        max_length = schema.max_length if schema.max_length is not None else 50
        length = min(max(min_length, 10), max_length)
        return f"Sample text {self.counter}"[:length]

    def _array(self, schema: Schema, depth: int) -> list[Any]:
        count = min(schema.min_items if schema.min_items is not None else 2, 3)
        items = []
        for i in range(count):
            self.counter += 1
            if schema.items is not None:
                items.append(self.generate(schema.items, depth + 1))
            else:
                items.append(f"item_{i}")
        return items

    def _object(self, schema: Schema, depth: int) -> dict[str, Any]:
        result = {}
        for name, property_schema in schema.properties.items():
            self.counter += 1
            result[name] = self.generate(property_schema, depth + 1)
        return result
