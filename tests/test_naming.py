from saloon_sdkgen.naming import (
    dto_class_name,
    kebab,
    normalize,
    path_based_name,
    safe_class_name,
    safe_variable_name,
    unique_endpoint_names,
)
from saloon_sdkgen.parser.base import Endpoint, Method


def _make_endpoint(name: str, collection: str | None = None, path: str = "/users") -> Endpoint:
    return Endpoint(
        name=name,
        method=Method.GET,
        path_segments=[s for s in path.split("/") if s],
        collection=collection,
    )


class TestNormalize:
    def test_splits_camel_case_and_separators(self):
        assert normalize("userProfile_settings-v2.json") == "user Profile settings v2 json"

    def test_drops_colons_and_symbols(self):
        assert normalize(":id") == "id"
        assert normalize("price ($)") == "price"


class TestSafeClassName:
    def test_kebab_to_studly(self):
        assert safe_class_name("user-profiles") == "UserProfiles"

    def test_leading_digit_is_prefixed(self):
        assert safe_class_name("2fa settings") == "N2faSettings"

    def test_reserved_word_gets_suffix(self):
        assert safe_class_name("list") == "ListClass"

    def test_empty_input_has_fallback(self):
        assert safe_class_name("$$$") == "Unnamed"

    def test_is_deterministic(self):
        assert safe_class_name("get user") == safe_class_name("get user") == "GetUser"


class TestSafeVariableName:
    def test_snake_to_camel(self):
        assert safe_variable_name("first_name") == "firstName"

    def test_path_variable(self):
        assert safe_variable_name(":id") == "id"

    def test_reserved_word_gets_suffix(self):
        assert safe_variable_name("class") == "classParam"

    def test_leading_digit_is_prefixed(self):
        assert safe_variable_name("3d_model") == "n3dModel"


class TestDtoClassName:
    def test_dotted_name(self):
        assert dto_class_name("v1.ProfessionalLab") == "V1ProfessionalLab"

    def test_qualified_name_keeps_last_segment(self):
        assert dto_class_name("App\\Sdk\\Dto\\UserDto") == "UserDto"

    def test_bare_name_unchanged(self):
        assert dto_class_name("Pet") == "Pet"


class TestPathBasedName:
    def test_method_and_segments(self):
        endpoint = Endpoint(name="", method=Method.GET, path_segments=["users", ":id", "posts"])
        assert path_based_name(endpoint) == "getUsersIdPosts"


class TestUniqueEndpointNames:
    def test_duplicates_in_collection_are_numbered(self):
        endpoints = unique_endpoint_names([
            _make_endpoint("getUser", "Users"),
            _make_endpoint("get-user", "Users"),
            _make_endpoint("getUser", "Users"),
        ])
        assert [e.name for e in endpoints] == ["getUser", "get-user 2", "getUser 3"]

    def test_same_name_in_other_collection_is_kept(self):
        endpoints = unique_endpoint_names([
            _make_endpoint("list", "Users"),
            _make_endpoint("list", "Posts"),
        ])
        assert [e.name for e in endpoints] == ["list", "list"]


class TestKebab:
    def test_camel_case(self):
        assert kebab("VendorName") == "vendor-name"

    def test_spaces_and_hyphens(self):
        assert kebab("My API-Test") == "my-api-test"
