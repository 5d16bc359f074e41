"""
Parameter extraction: building controller method arguments from a request.
"""

from routewire.constants import ParameterType
from routewire.controller import ParameterMetadata, extract_parameters, get_field


# ============================================================================
# get_field
# ============================================================================

class TestGetField:

    def test_named_field(self, request_factory):
        req = request_factory(params={"id": "42"})
        assert get_field(req, "params", "id") == "42"

    def test_missing_field_returns_container(self, request_factory):
        req = request_factory(params={"id": "42"})
        assert get_field(req, "params", "other") == {"id": "42"}

    def test_falsy_field_returns_container(self, request_factory):
        req = request_factory(params={"id": ""})
        assert get_field(req, "params", "id") == {"id": ""}

    def test_missing_query_field_is_none(self, request_factory):
        req = request_factory()
        assert get_field(req, "query", "q") is None

    def test_query_without_name_is_none(self, request_factory):
        req = request_factory(query_string="q=1")
        assert get_field(req, "query", None) is None

    def test_request_attribute(self, request_factory):
        req = request_factory("POST", "/items")
        assert get_field(req, None, "method") == "POST"

    def test_request_without_name_is_request(self, request_factory):
        req = request_factory()
        assert get_field(req, None, None) is req


# ============================================================================
# extract_parameters
# ============================================================================

class TestExtractParameters:

    def test_no_params(self, request_factory, response, next_fn):
        req = request_factory()
        args = extract_parameters(req, response, next_fn, [])
        assert args == [req, response, next_fn]
        assert len(args) == 3

    def test_none_params(self, request_factory, response, next_fn):
        req = request_factory()
        assert extract_parameters(req, response, next_fn, None) == [req, response, next_fn]

    def test_params_by_name(self, request_factory, response, next_fn):
        req = request_factory(params={"id": "42"})
        params = [ParameterMetadata(0, ParameterType.PARAMS, "id")]
        assert extract_parameters(req, response, next_fn, params) == ["42", req, response, next_fn]

    def test_missing_query_yields_none(self, request_factory, response, next_fn):
        req = request_factory()
        assert req.query == {}
        params = [ParameterMetadata(0, ParameterType.QUERY, "q")]
        args = extract_parameters(req, response, next_fn, params)
        assert args[0] is None
        assert args[1:] == [req, response, next_fn]

    def test_query_value(self, request_factory, response, next_fn):
        req = request_factory(query_string="q=routers&tag=a&tag=b")
        params = [
            ParameterMetadata(0, ParameterType.QUERY, "q"),
            ParameterMetadata(1, ParameterType.QUERY, "tag"),
        ]
        args = extract_parameters(req, response, next_fn, params)
        assert args[:2] == ["routers", ["a", "b"]]

    def test_whole_body(self, request_factory, response, next_fn):
        req = request_factory("POST", "/items", json={"name": "widget"})
        params = [ParameterMetadata(0, ParameterType.BODY)]
        assert extract_parameters(req, response, next_fn, params)[0] is req.body

    def test_body_field(self, request_factory, response, next_fn):
        req = request_factory("POST", "/items", json={"name": "widget"})
        params = [ParameterMetadata(0, ParameterType.BODY, "name")]
        assert extract_parameters(req, response, next_fn, params)[0] == "widget"

    def test_body_field_on_list_body(self, request_factory, response, next_fn):
        req = request_factory("POST", "/items", json=["a", "b"])
        params = [ParameterMetadata(0, ParameterType.BODY, "count")]
        # list.count must not leak through as a field
        assert extract_parameters(req, response, next_fn, params)[0] == ["a", "b"]

    def test_body_field_on_raw_body(self, request_factory, response, next_fn):
        req = request_factory("POST", "/upload", body=b"\x00\x01")
        params = [ParameterMetadata(0, ParameterType.BODY, "decode")]
        assert extract_parameters(req, response, next_fn, params)[0] == b"\x00\x01"

    def test_headers_and_cookies(self, request_factory, response, next_fn):
        req = request_factory(headers=[("X-Token", "abc"), ("Cookie", "session=s1; theme=dark")])
        params = [
            ParameterMetadata(0, ParameterType.HEADERS, "x-token"),
            ParameterMetadata(1, ParameterType.COOKIES, "session"),
            ParameterMetadata(2, ParameterType.COOKIES),
        ]
        args = extract_parameters(req, response, next_fn, params)
        assert args[0] == "abc"
        assert args[1] == "s1"
        assert args[2] == {"session": "s1", "theme": "dark"}

    def test_request_response_next_bindings(self, request_factory, response, next_fn):
        req = request_factory()
        params = [
            ParameterMetadata(0, ParameterType.NEXT),
            ParameterMetadata(1, ParameterType.RESPONSE),
            ParameterMetadata(2, ParameterType.REQUEST),
        ]
        args = extract_parameters(req, response, next_fn, params)
        assert args == [next_fn, response, req, req, response, next_fn]

    def test_unknown_type_binds_response(self, request_factory, response, next_fn):
        req = request_factory()
        params = [ParameterMetadata(0, "mystery")]
        assert extract_parameters(req, response, next_fn, params)[0] is response

    def test_gaps_filled_with_none(self, request_factory, response, next_fn):
        req = request_factory(params={"id": "7"})
        params = [ParameterMetadata(2, ParameterType.PARAMS, "id")]
        args = extract_parameters(req, response, next_fn, params)
        assert args == [None, None, "7", req, response, next_fn]

    def test_unordered_params(self, request_factory, response, next_fn):
        req = request_factory(params={"a": "1", "b": "2"})
        params = [
            ParameterMetadata(1, ParameterType.PARAMS, "b"),
            ParameterMetadata(0, ParameterType.PARAMS, "a"),
        ]
        assert extract_parameters(req, response, next_fn, params)[:2] == ["1", "2"]
