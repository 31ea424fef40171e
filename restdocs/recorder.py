"""Recording of the original URI template on requests.

Requests built from a URI template carry the unexpanded template as an
attribute so documentation can show ``/users/{id}`` instead of ``/users/42``.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from restdocs.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from restdocs.builders import RequestBuilder

ATTRIBUTE_NAME_URL_TEMPLATE = "restdocs.urlTemplate"

# Key of the attribute mapping in httpx.Request.extensions
HTTPX_ATTRIBUTES_EXTENSION = "restdocs.attributes"

# Key of the attribute mapping in an ASGI scope
SCOPE_ATTRIBUTES_KEY = "state"

B = TypeVar("B", bound="RequestBuilder")


def record_template(builder: B, url_template: str) -> B:
    """Attach the original URI template to a builder.

    Recording again replaces the previous value, so recording the same
    template twice leaves a single attribute with that template.

    Args:
        builder: The request builder to annotate
        url_template: The unexpanded template, e.g. "/users/{id}"

    Returns:
        The same builder, for chaining

    Raises:
        InvalidArgumentError: If url_template is None
    """
    if url_template is None:
        raise InvalidArgumentError("URL template must not be None")
    builder.set_attribute(ATTRIBUTE_NAME_URL_TEMPLATE, url_template)
    return builder


def get_url_template(request: Any) -> str | None:
    """Read the recorded URI template back from a request.

    Accepts a RequestBuilder, a built Request, an ASGI scope or an
    httpx.Request. Returns None when the request was built from a resolved
    URI and so has no template.
    """
    if isinstance(request, httpx.Request):
        attributes = request.extensions.get(HTTPX_ATTRIBUTES_EXTENSION) or {}
        return attributes.get(ATTRIBUTE_NAME_URL_TEMPLATE)

    if isinstance(request, Mapping):
        attributes = request.get(SCOPE_ATTRIBUTES_KEY) or {}
        return attributes.get(ATTRIBUTE_NAME_URL_TEMPLATE)

    return request.get_attribute(ATTRIBUTE_NAME_URL_TEMPLATE)
