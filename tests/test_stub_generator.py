import json

from saloon_sdkgen.generator.stubs import (
    FIXED_DATE,
    FIXED_DATE_TIME,
    MAX_DEPTH,
    StubGenerator,
)
from saloon_sdkgen.parser.base import Components, Endpoint, Method, Schema, SchemaRef

USER = Schema(
    type="object",
    properties={
        "id": Schema(type="integer"),
        "email": Schema(type="string", format="email"),
        "name": Schema(type="string"),
    },
)

COMPONENTS = Components(schemas={"User": USER})


def _endpoint(**extra) -> Endpoint:
    return Endpoint(name="listUsers", method=Method.GET, path_segments=["users"], **extra)


def _paginated_response() -> Schema:
    return Schema(
        type="object",
        properties={
            "data": Schema(type="array", items=SchemaRef(ref="User")),
            "meta": Schema(type="object"),
            "links": Schema(type="object"),
        },
    )


class TestEndpointStubs:
    def test_paginated_envelope(self):
        endpoint = _endpoint(
            response=_paginated_response(),
            response_dto="User",
            response_dto_path="data",
            response_dto_is_collection=True,
            response_dto_is_paginated=True,
        )
        stub = json.loads(StubGenerator(COMPONENTS).generate_stub_for_endpoint(endpoint))
        assert set(stub) == {"data", "meta", "links"}
        assert isinstance(stub["data"], list)
        assert len(stub["data"]) == 3
        assert set(stub["meta"]) >= {"current_page", "per_page", "total", "last_page"}
        assert set(stub["links"]) >= {"first", "last", "prev", "next"}
        assert set(stub["data"][0]) == {"id", "email", "name"}

    def test_collection_wrapped_at_path(self):
        endpoint = _endpoint(
            response=_paginated_response(),
            response_dto="User",
            response_dto_path="data",
            response_dto_is_collection=True,
        )
        stub = json.loads(StubGenerator(COMPONENTS).generate_stub_for_endpoint(endpoint))
        assert list(stub) == ["data"]
        assert len(stub["data"]) == 3

    def test_bare_collection(self):
        endpoint = _endpoint(
            response=Schema(type="array", items=SchemaRef(ref="User")),
            response_dto="User",
            response_dto_is_collection=True,
        )
        stub = json.loads(StubGenerator(COMPONENTS).generate_stub_for_endpoint(endpoint))
        assert isinstance(stub, list)
        assert [item["email"] for item in stub] == [
            "test3@example.com",
            "test4@example.com",
            "test5@example.com",
        ]

    def test_single_reference(self):
        endpoint = _endpoint(response=SchemaRef(ref="User"), response_dto="User")
        stub = json.loads(StubGenerator(COMPONENTS).generate_stub_for_endpoint(endpoint))
        assert stub == {"id": 2, "email": "test3@example.com", "name": "Sample tex"}

    def test_no_response(self):
        stub = StubGenerator().generate_stub_for_endpoint(_endpoint())
        assert json.loads(stub) == {"message": "Success"}

    def test_raw_sample_body_is_kept(self):
        endpoint = _endpoint(response={"data": [{"id": 1, "name": "Ada"}]})
        stub = json.loads(StubGenerator().generate_stub_for_endpoint(endpoint))
        assert stub == {"data": [{"id": 1, "name": "Ada"}]}

    def test_is_deterministic(self):
        endpoint = _endpoint(
            response=_paginated_response(),
            response_dto="User",
            response_dto_is_collection=True,
            response_dto_is_paginated=True,
        )
        first = StubGenerator(COMPONENTS).generate_stub_for_endpoint(endpoint)
        generator = StubGenerator(COMPONENTS)
        generator.generate_stub_for_endpoint(_endpoint(response=SchemaRef(ref="User")))
        second = generator.generate_stub_for_endpoint(endpoint)
        assert first == second

    def test_output_format(self):
        stub = StubGenerator().generate_stub_for_endpoint(_endpoint())
        assert stub == '{\n    "message": "Success"\n}\n'


class TestSchemaValues:
    def test_literal_values_win(self):
        generator = StubGenerator()
        assert generator.generate(Schema(type="string", example="ex")) == "ex"
        assert generator.generate(Schema(type="integer", default=7)) == 7
        assert generator.generate(Schema(type="string", enum=["active", "inactive"])) == "active"

    def test_string_formats(self):
        generator = StubGenerator()
        assert generator.generate(Schema(type="string", format="date")) == FIXED_DATE
        assert generator.generate(Schema(type="string", format="date-time")) == FIXED_DATE_TIME
        assert generator.generate(Schema(type="string", format="uri")) == "https://example.com/resource/1"
        uuid = generator.generate(Schema(type="string", format="uuid"))
        assert len(uuid) == 36
        assert generator.generate(Schema(type="string", format="uuid")) == uuid

    def test_string_length_bounds(self):
        generator = StubGenerator()
        assert generator.generate(Schema(type="string", max_length=4)) == "Samp"
        assert generator.generate(Schema(type="string", min_length=20)) == "Sample text 1"

    def test_numbers_are_clamped(self):
        generator = StubGenerator()
        assert generator.generate(Schema(type="integer", minimum=10)) == 10
        assert generator.generate(Schema(type="integer", maximum=0, minimum=-5)) == 0
        assert generator.generate(Schema(type="number")) == 1.5

    def test_array_item_count(self):
        generator = StubGenerator()
        assert generator.generate(Schema(type="array", items=Schema(type="integer"))) == [2, 3]
        assert len(generator.generate(Schema(type="array", min_items=10, items=Schema(type="integer")))) == 3
        assert generator.generate(Schema(type="array")) == ["item_0", "item_1"]

    def test_depth_cap_on_recursive_schema(self):
        node = Schema(type="object", properties={"child": SchemaRef(ref="Node")})
        generator = StubGenerator(Components(schemas={"Node": node}))
        value = generator.generate(SchemaRef(ref="Node"))

        depth = 0
        while value is not None:
            value = value["child"]
            depth += 1
        assert depth == MAX_DEPTH + 1

    def test_unknown_reference(self):
        assert StubGenerator().generate(SchemaRef(ref="Missing")) is None
