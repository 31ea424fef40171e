from http import HTTPMethod

import httpx
import pytest

from restdocs import (
    ATTRIBUTE_NAME_URL_TEMPLATE,
    InvalidArgumentError,
    MultipartRequestBuilder,
    RequestBuilder,
    TemplateExpansionError,
    delete_from_template,
    delete_from_uri,
    get_from_template,
    get_from_uri,
    get_url_template,
    head_from_template,
    head_from_uri,
    multipart_from_template,
    multipart_from_uri,
    options_from_template,
    options_from_uri,
    patch_from_template,
    patch_from_uri,
    post_from_template,
    post_from_uri,
    put_from_template,
    put_from_uri,
    request_from_template,
    request_from_uri,
)

VERBS = [
    pytest.param("GET", get_from_template, get_from_uri, id="get"),
    pytest.param("POST", post_from_template, post_from_uri, id="post"),
    pytest.param("PUT", put_from_template, put_from_uri, id="put"),
    pytest.param("PATCH", patch_from_template, patch_from_uri, id="patch"),
    pytest.param("DELETE", delete_from_template, delete_from_uri, id="delete"),
    pytest.param("OPTIONS", options_from_template, options_from_uri, id="options"),
    pytest.param("HEAD", head_from_template, head_from_uri, id="head"),
]


def assert_template(builder: RequestBuilder, method: str):
    request = builder.build_request()
    assert request.get_attribute(ATTRIBUTE_NAME_URL_TEMPLATE) == "/{template}"
    assert request.path == "/t"
    assert request.method == method


def assert_uri(builder: RequestBuilder, method: str):
    request = builder.build_request()
    assert request.path == "/uri"
    assert request.method == method
    assert ATTRIBUTE_NAME_URL_TEMPLATE not in request.attributes


@pytest.mark.parametrize("method, from_template, from_uri", VERBS)
def test_template(method, from_template, from_uri):
    assert_template(from_template("/{template}", "t"), method)


@pytest.mark.parametrize("method, from_template, from_uri", VERBS)
def test_uri(method, from_template, from_uri):
    assert_uri(from_uri("/uri"), method)


@pytest.mark.parametrize("method, from_template, from_uri", VERBS)
def test_uri_as_httpx_url(method, from_template, from_uri):
    assert_uri(from_uri(httpx.URL("/uri")), method)


def test_request_template():
    assert_template(request_from_template("GET", "/{template}", "t"), "GET")


def test_request_uri():
    assert_uri(request_from_uri("GET", "/uri"), "GET")


def test_request_template_with_delete():
    builder = request_from_template(HTTPMethod.DELETE, "/{template}", "t")

    assert builder.method == "DELETE"
    assert builder.path == "/t"
    assert get_url_template(builder) == "/{template}"


def test_request_method_name_is_upper_cased():
    assert request_from_uri("patch", "/uri").method == "PATCH"


def test_request_accepts_extension_methods():
    builder = request_from_template("PROPFIND", "/dav/{name}", "file.txt")

    assert builder.method == "PROPFIND"
    assert get_url_template(builder) == "/dav/{name}"


def test_multipart_template():
    builder = multipart_from_template("/{template}", "t")

    assert isinstance(builder, MultipartRequestBuilder)
    assert_template(builder, "POST")


def test_multipart_uri():
    builder = multipart_from_uri("/uri")

    assert isinstance(builder, MultipartRequestBuilder)
    assert_uri(builder, "POST")


def test_template_is_recorded_unexpanded_with_several_variables():
    builder = get_from_template("/users/{user_id}/posts/{post_id:int}", 42, 7)

    assert builder.path == "/users/42/posts/7"
    assert get_url_template(builder) == "/users/{user_id}/posts/{post_id:int}"


def test_literal_template_is_recorded():
    builder = get_from_template("/health")

    assert builder.path == "/health"
    assert get_url_template(builder) == "/health"


def test_template_with_query_keeps_query_out_of_path():
    request = get_from_template("/search?q={query}", "rest docs").build_request()

    assert request.path == "/search"
    assert request.query_params == {"q": "rest docs"}
    assert get_url_template(request) == "/search?q={query}"


def test_uri_form_leaves_braces_alone():
    builder = get_from_uri("/{not-a-template}")

    assert get_url_template(builder) is None


def test_uri_builder_records_nothing_on_httpx_request():
    assert get_url_template(post_from_uri("/uri").to_httpx()) is None


def test_template_builder_carries_template_to_httpx_request():
    request = put_from_template("/items/{id}", 3).to_httpx()

    assert request.method == "PUT"
    assert request.url.path == "/items/3"
    assert get_url_template(request) == "/items/{id}"


def test_template_expansion_error_propagates():
    with pytest.raises(TemplateExpansionError, match="Not enough variable values available to expand 'b'"):
        get_from_template("/{a}/{b}", "x")


@pytest.mark.parametrize(
    "factory",
    [
        get_from_template,
        post_from_template,
        put_from_template,
        patch_from_template,
        delete_from_template,
        options_from_template,
        head_from_template,
        multipart_from_template,
    ],
)
def test_none_template_is_rejected(factory):
    with pytest.raises(InvalidArgumentError, match="URL template must not be None"):
        factory(None, "t")


@pytest.mark.parametrize(
    "factory",
    [
        get_from_uri,
        post_from_uri,
        put_from_uri,
        patch_from_uri,
        delete_from_uri,
        options_from_uri,
        head_from_uri,
        multipart_from_uri,
    ],
)
def test_none_uri_is_rejected(factory):
    with pytest.raises(InvalidArgumentError, match="URI must not be None"):
        factory(None)


def test_none_method_is_rejected():
    with pytest.raises(InvalidArgumentError, match="HTTP method must not be None"):
        request_from_template(None, "/{template}", "t")

    with pytest.raises(InvalidArgumentError, match="HTTP method must not be None"):
        request_from_uri(None, "/uri")


def test_invalid_argument_error_is_a_value_error():
    with pytest.raises(ValueError):
        get_from_uri(None)


def test_builders_use_given_uri_config(uri_config):
    scope = get_from_template("/users/{id}", 1, uri_config=uri_config).build_scope()

    assert scope["scheme"] == "https"
    assert scope["server"] == ("api.example.com", 443)


def test_each_call_returns_a_new_builder():
    first = get_from_template("/{template}", "a")
    second = get_from_template("/{template}", "b")

    assert first is not second
    assert first.path == "/a"
    assert second.path == "/b"


def test_default_headers_cannot_be_changed_through_a_builder():
    builder = get_from_template("/{template}", "t")

    with pytest.raises(TypeError):
        builder.uri_config.default_headers["X-Leak"] = "1"

    request = get_from_template("/{template}", "t").build_request()
    assert "x-leak" not in request.headers


def test_uri_config_cannot_be_replaced_through_a_builder():
    builder = get_from_uri("/uri")

    with pytest.raises(AttributeError):
        builder.uri_config = None
    with pytest.raises(AttributeError):
        builder.uri_config.host = "elsewhere.example.com"

    assert get_from_uri("/uri").build_scope()["server"] == ("localhost", 8080)
