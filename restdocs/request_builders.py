"""Factory functions for request builders that remember their URI template.

Each HTTP method has a pair of entry points: ``*_from_template`` expands a URI
template with positional values and records the original template on the
builder under ATTRIBUTE_NAME_URL_TEMPLATE, while ``*_from_uri`` takes an
already resolved URI and records nothing.

Examples:
    ```python
    from restdocs import get_from_template, get_url_template

    builder = get_from_template("/users/{id}", 42)
    builder.path                 # "/users/42"
    get_url_template(builder)    # "/users/{id}"
    ```
"""

import logging
from http import HTTPMethod
from typing import Any

import httpx

from restdocs.builders import MultipartRequestBuilder, RequestBuilder, normalize_method
from restdocs.config import UriConfig
from restdocs.exceptions import InvalidArgumentError
from restdocs.recorder import record_template
from restdocs.templates import expand_template

logger = logging.getLogger(__name__)

Method = str | HTTPMethod
Uri = str | httpx.URL


def request_from_template(
    method: Method,
    url_template: str,
    *uri_variables: Any,
    uri_config: UriConfig | None = None,
) -> RequestBuilder:
    """Create a builder for any HTTP method from a URI template.

    Args:
        method: The HTTP method, as a str or http.HTTPMethod
        url_template: The URI template, e.g. "/users/{id}"
        *uri_variables: Values for the template's placeholders, in order
        uri_config: Scheme, host and port for relative URIs; defaults to the
            process-wide UriConfig

    Returns:
        A RequestBuilder for the expanded URI carrying the original template

    Raises:
        InvalidArgumentError: If method or url_template is None
        TemplateExpansionError: If there are fewer values than placeholders
    """
    method = normalize_method(method)
    if url_template is None:
        raise InvalidArgumentError("URL template must not be None")

    url = expand_template(url_template, *uri_variables)
    logger.debug(f"Building {method} request for {url!r} from template {url_template!r}")
    builder = RequestBuilder(method, url, uri_config=uri_config)
    return record_template(builder, url_template)


def request_from_uri(
    method: Method, uri: Uri, *, uri_config: UriConfig | None = None
) -> RequestBuilder:
    """Create a builder for any HTTP method from a resolved URI.

    No template is recorded on the builder.

    Raises:
        InvalidArgumentError: If method or uri is None
    """
    method = normalize_method(method)
    if uri is None:
        raise InvalidArgumentError("URI must not be None")

    logger.debug(f"Building {method} request for {str(uri)!r}")
    return RequestBuilder(method, uri, uri_config=uri_config)


def get_from_template(
    url_template: str, *uri_variables: Any, uri_config: UriConfig | None = None
) -> RequestBuilder:
    """Create a GET builder from a URI template."""
    return request_from_template(
        HTTPMethod.GET, url_template, *uri_variables, uri_config=uri_config
    )


def get_from_uri(uri: Uri, *, uri_config: UriConfig | None = None) -> RequestBuilder:
    """Create a GET builder from a resolved URI."""
    return request_from_uri(HTTPMethod.GET, uri, uri_config=uri_config)


def post_from_template(
    url_template: str, *uri_variables: Any, uri_config: UriConfig | None = None
) -> RequestBuilder:
    """Create a POST builder from a URI template."""
    return request_from_template(
        HTTPMethod.POST, url_template, *uri_variables, uri_config=uri_config
    )


def post_from_uri(uri: Uri, *, uri_config: UriConfig | None = None) -> RequestBuilder:
    """Create a POST builder from a resolved URI."""
    return request_from_uri(HTTPMethod.POST, uri, uri_config=uri_config)


def put_from_template(
    url_template: str, *uri_variables: Any, uri_config: UriConfig | None = None
) -> RequestBuilder:
    """Create a PUT builder from a URI template."""
    return request_from_template(
        HTTPMethod.PUT, url_template, *uri_variables, uri_config=uri_config
    )


def put_from_uri(uri: Uri, *, uri_config: UriConfig | None = None) -> RequestBuilder:
    """Create a PUT builder from a resolved URI."""
    return request_from_uri(HTTPMethod.PUT, uri, uri_config=uri_config)


def patch_from_template(
    url_template: str, *uri_variables: Any, uri_config: UriConfig | None = None
) -> RequestBuilder:
    """Create a PATCH builder from a URI template."""
    return request_from_template(
        HTTPMethod.PATCH, url_template, *uri_variables, uri_config=uri_config
    )


def patch_from_uri(uri: Uri, *, uri_config: UriConfig | None = None) -> RequestBuilder:
    """Create a PATCH builder from a resolved URI."""
    return request_from_uri(HTTPMethod.PATCH, uri, uri_config=uri_config)


def delete_from_template(
    url_template: str, *uri_variables: Any, uri_config: UriConfig | None = None
) -> RequestBuilder:
    """Create a DELETE builder from a URI template."""
    return request_from_template(
        HTTPMethod.DELETE, url_template, *uri_variables, uri_config=uri_config
    )


def delete_from_uri(uri: Uri, *, uri_config: UriConfig | None = None) -> RequestBuilder:
    """Create a DELETE builder from a resolved URI."""
    return request_from_uri(HTTPMethod.DELETE, uri, uri_config=uri_config)


def options_from_template(
    url_template: str, *uri_variables: Any, uri_config: UriConfig | None = None
) -> RequestBuilder:
    """Create an OPTIONS builder from a URI template."""
    return request_from_template(
        HTTPMethod.OPTIONS, url_template, *uri_variables, uri_config=uri_config
    )


def options_from_uri(uri: Uri, *, uri_config: UriConfig | None = None) -> RequestBuilder:
    """Create an OPTIONS builder from a resolved URI."""
    return request_from_uri(HTTPMethod.OPTIONS, uri, uri_config=uri_config)


def head_from_template(
    url_template: str, *uri_variables: Any, uri_config: UriConfig | None = None
) -> RequestBuilder:
    """Create a HEAD builder from a URI template."""
    return request_from_template(
        HTTPMethod.HEAD, url_template, *uri_variables, uri_config=uri_config
    )


def head_from_uri(uri: Uri, *, uri_config: UriConfig | None = None) -> RequestBuilder:
    """Create a HEAD builder from a resolved URI."""
    return request_from_uri(HTTPMethod.HEAD, uri, uri_config=uri_config)


def multipart_from_template(
    url_template: str, *uri_variables: Any, uri_config: UriConfig | None = None
) -> MultipartRequestBuilder:
    """Create a multipart POST builder from a URI template.

    The original template is recorded just as for the other methods.
    """
    if url_template is None:
        raise InvalidArgumentError("URL template must not be None")

    url = expand_template(url_template, *uri_variables)
    logger.debug(f"Building multipart request for {url!r} from template {url_template!r}")
    builder = MultipartRequestBuilder(url, uri_config=uri_config)
    return record_template(builder, url_template)


def multipart_from_uri(
    uri: Uri, *, uri_config: UriConfig | None = None
) -> MultipartRequestBuilder:
    """Create a multipart POST builder from a resolved URI."""
    if uri is None:
        raise InvalidArgumentError("URI must not be None")

    logger.debug(f"Building multipart request for {str(uri)!r}")
    return MultipartRequestBuilder(uri, uri_config=uri_config)
