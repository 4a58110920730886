from saloon_sdkgen.config import GeneratorConfig
from saloon_sdkgen.generator.request import (
    RequestGenerator,
    request_parameters,
    resolve_endpoint_body,
)
from saloon_sdkgen.parser.base import ApiSpecification, Endpoint, Method, Parameter

CONFIG = GeneratorConfig(connector_name="Test API", namespace="Acme\\SDK")


def _get_user() -> Endpoint:
    return Endpoint(
        name="GetUser",
        method=Method.GET,
        path_segments=["users", ":id"],
        collection="Users",
        path_parameters=[Parameter(name="id", type="int")],
        query_parameters=[Parameter(name="fields", type="string", nullable=True)],
    )


def _create_user(**overrides) -> Endpoint:
    values = dict(
        name="createUser",
        method=Method.POST,
        path_segments=["users"],
        collection="Users",
        body_parameters=[
            Parameter(name="first_name", type="string"),
            Parameter(name="owner", type="Owner", nullable=True),
        ],
    )
    values.update(overrides)
    return Endpoint(**values)


class TestGetUserScenario:
    def test_resolve_endpoint_interpolates_path_variable(self):
        code = str(RequestGenerator(CONFIG).generate_request_class(_get_user()))
        assert 'return "/users/{$this->id}";' in code

    def test_constructor_takes_id_before_fields(self):
        file = RequestGenerator(CONFIG).generate_request_class(_get_user())
        constructor = file.class_type.get_method("__construct")
        assert [p.name for p in constructor.parameters] == ["id", "fields"]

        code = str(file)
        assert "protected int $id," in code
        assert "protected ?string $fields = null," in code
        assert code.index("$id,") < code.index("$fields = null,")

    def test_class_shape(self):
        file = RequestGenerator(CONFIG).generate_request_class(_get_user())
        assert file.namespace.name == "Acme\\SDK\\Requests\\Users"
        code = str(file)
        assert "class GetUser extends Request" in code
        assert "protected Method $method = Method::GET;" in code
        assert "use Saloon\\Enums\\Method;" in code
        assert "HasBody" not in code

    def test_default_query(self):
        code = str(RequestGenerator(CONFIG).generate_request_class(_get_user()))
        assert (
            "    public function defaultQuery(): array\n"
            "    {\n"
            "        return array_filter([\n"
            "            'fields' => $this->fields,\n"
            "        ]);\n"
            "    }\n"
        ) in code
        assert "defaultBody" not in code


class TestRequestGenerator:
    def test_body_request_uses_json_body(self):
        code = str(RequestGenerator(CONFIG).generate_request_class(_create_user()))
        assert "class CreateUser extends Request implements HasBody" in code
        assert "    use HasJsonBody;" in code
        assert "protected Method $method = Method::POST;" in code
        assert "'first_name' => $this->firstName," in code

    def test_dto_parameter_is_imported(self):
        code = str(RequestGenerator(CONFIG).generate_request_class(_create_user()))
        assert "use Acme\\SDK\\Dto\\Owner;" in code
        assert "protected ?Owner $owner = null," in code

    def test_parameter_docblocks(self):
        endpoint = _get_user().model_copy(update={
            "path_parameters": [Parameter(name="id", type="int", description="The user id")],
        })
        code = str(RequestGenerator(CONFIG).generate_request_class(endpoint))
        assert "/** @param int $id The user id */" in code

    def test_ignored_parameters(self):
        config = CONFIG.model_copy(update={
            "ignored_query_params": ["per_page"],
            "ignored_header_params": ["X-Request-Id"],
        })
        endpoint = _get_user().model_copy(update={
            "query_parameters": [
                Parameter(name="page", type="int", nullable=True),
                Parameter(name="per_page", type="int", nullable=True),
            ],
            "header_parameters": [Parameter(name="X-Request-Id", type="string", nullable=True)],
        })
        assert [p.name for p in request_parameters(endpoint, config)] == ["id", "page"]
        code = str(RequestGenerator(config).generate_request_class(endpoint))
        assert "per_page" not in code
        assert "defaultHeaders" not in code

    def test_single_dto_response(self):
        endpoint = _get_user().model_copy(update={"response_dto": "User", "response_dto_path": "data"})
        code = str(RequestGenerator(CONFIG).generate_request_class(endpoint))
        assert "use Acme\\SDK\\Dto\\User;" in code
        assert "use Saloon\\Http\\Response;" in code
        assert "public function createDtoFromResponse(Response $response): User" in code
        assert "return User::from($array['data']);" in code

    def test_collection_response(self):
        endpoint = _get_user().model_copy(update={
            "response_dto": "User",
            "response_dto_is_collection": True,
        })
        code = str(RequestGenerator(CONFIG).generate_request_class(endpoint))
        assert "@return User[]" in code
        assert "public function createDtoFromResponse(Response $response): array" in code
        assert "return array_map(fn($item) => User::from($item), $array);" in code

    def test_paginated_response(self):
        endpoint = _get_user().model_copy(update={
            "response_dto": "User",
            "response_dto_path": "data",
            "response_dto_is_collection": True,
            "response_dto_is_paginated": True,
        })
        code = str(RequestGenerator(CONFIG).generate_request_class(endpoint))
        assert "use Acme\\SDK\\Dto\\UserPaginatedResponseDto;" in code
        assert "): UserPaginatedResponseDto" in code
        assert "return UserPaginatedResponseDto::from($array);" in code

    def test_fallback_collection_namespace(self):
        endpoint = _get_user().model_copy(update={"collection": None})
        file = RequestGenerator(CONFIG).generate_request_class(endpoint)
        assert file.namespace.name == "Acme\\SDK\\Requests\\Resource"

    def test_generate_all_endpoints(self):
        spec = ApiSpecification(name="Test", endpoints=[_get_user(), _create_user()])
        classes = RequestGenerator(CONFIG).generate(spec)
        assert [c.class_type.name for c in classes] == ["GetUser", "CreateUser"]

    def test_parameter_in_path_and_body_is_declared_once(self):
        endpoint = Endpoint(
            name="updateUser",
            method=Method.PUT,
            path_segments=["users", ":id"],
            collection="Users",
            path_parameters=[Parameter(name="id", type="int")],
            body_parameters=[
                Parameter(name="id", type="int"),
                Parameter(name="name", type="string"),
            ],
        )
        assert [p.name for p in request_parameters(endpoint, CONFIG)] == ["id", "name"]
        code = str(RequestGenerator(CONFIG).generate_request_class(endpoint))
        assert code.count("protected int $id,") == 1
        assert "'id' => $this->id," in code
        assert 'return "/users/{$this->id}";' in code

    def test_no_constructor_without_parameters(self):
        endpoint = Endpoint(name="ping", method=Method.GET, path_segments=["ping"])
        file = RequestGenerator(CONFIG).generate_request_class(endpoint)
        assert file.class_type.get_method("__construct") is None
        assert "__construct" not in str(file)

    def test_dto_named_like_saloon_class_is_aliased(self):
        endpoint = _get_user().model_copy(update={"response_dto": "Response"})
        code = str(RequestGenerator(CONFIG).generate_request_class(endpoint))
        assert "use Saloon\\Http\\Response;" in code
        assert "use Acme\\SDK\\Dto\\Response as ResponseDto;" in code
        assert "public function createDtoFromResponse(Response $response): ResponseDto" in code
        assert "return ResponseDto::from($array);" in code

    def test_request_named_like_saloon_class(self):
        endpoint = Endpoint(name="method", method=Method.GET, path_segments=["method"])
        code = str(RequestGenerator(CONFIG).generate_request_class(endpoint))
        assert "use Saloon\\Enums\\Method as MethodEnums;" in code
        assert "class Method extends Request" in code
        assert "protected MethodEnums $method = MethodEnums::GET;" in code


class TestResolveEndpointBody:
    def test_static_path(self):
        endpoint = Endpoint(name="ping", method=Method.GET, path_segments=["ping"])
        assert resolve_endpoint_body(endpoint) == 'return "/ping";'

    def test_variable_names_are_camel_cased(self):
        endpoint = Endpoint(
            name="getComment",
            method=Method.GET,
            path_segments=["posts", ":post_id", "comments", ":comment_id"],
        )
        assert resolve_endpoint_body(endpoint) == (
            'return "/posts/{$this->postId}/comments/{$this->commentId}";'
        )
