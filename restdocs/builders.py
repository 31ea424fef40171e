"""In-progress HTTP requests for testing ASGI applications.

A RequestBuilder collects the method, URL, headers, parameters, body and
attributes of a request and finishes into an ASGI scope, a Request or an
httpx.Request.
"""

import json
import re
import secrets
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from restdocs.config import DEFAULT_URI_CONFIG, UriConfig
from restdocs.exceptions import InvalidArgumentError
from restdocs.recorder import HTTPX_ATTRIBUTES_EXTENSION, SCOPE_ATTRIBUTES_KEY
from restdocs.requests import Request

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

DEFAULT_CLIENT = ("127.0.0.1", 123)

_DEFAULT_PORTS = {"http": 80, "https": 443}
_METHOD_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def normalize_method(method: Any) -> str:
    """Turn a str or http.HTTPMethod into an upper-case method name.

    Raises:
        InvalidArgumentError: If method is None or not a valid HTTP token
    """
    if method is None:
        raise InvalidArgumentError("HTTP method must not be None")

    name = str(method).strip().upper()
    if not _METHOD_TOKEN.fullmatch(name):
        raise InvalidArgumentError(f"Invalid HTTP method: {method!r}")
    return name


def to_url(uri: Any) -> httpx.URL:
    """Accept a resolved URI as a str or httpx.URL.

    Raises:
        InvalidArgumentError: If uri is None or of another type
    """
    if uri is None:
        raise InvalidArgumentError("URI must not be None")
    if isinstance(uri, httpx.URL):
        return uri
    if isinstance(uri, str):
        return httpx.URL(uri)
    raise InvalidArgumentError(
        f"URI must be a str or httpx.URL, got {type(uri).__name__}"
    )


class RequestBuilder:
    """A mutable, not yet executed HTTP request.

    Mutators return the builder so calls can be chained:

    ```python
    builder = (
        RequestBuilder("POST", "/users")
        .set_json({"name": "Ada"})
        .add_header("X-Request-Id", "42")
    )
    request = builder.build_request()
    ```
    """

    def __init__(self, method: Any, url: Any, *, uri_config: UriConfig | None = None):
        self._method = normalize_method(method)
        self._url = to_url(url)
        self._uri_config = uri_config or DEFAULT_URI_CONFIG

        self._headers: list[tuple[str, str]] = []
        self._query_params: list[tuple[str, str]] = []
        self._form_params: list[tuple[str, str]] = []
        self._cookies: dict[str, str] = {}
        self._content: bytes | None = None
        self._content_type: str | None = None
        self._attributes: dict[str, Any] = {}
        self._root_path = ""
        self._secure: bool | None = None
        self._client: tuple[str, int] = DEFAULT_CLIENT

    @property
    def method(self) -> str:
        return self._method

    @property
    def url(self) -> httpx.URL:
        """The URL as given, before query parameters and defaults are applied."""
        return self._url

    @property
    def path(self) -> str:
        return self._url.path or "/"

    @property
    def uri_config(self) -> UriConfig:
        return self._uri_config

    @property
    def content_type(self) -> str | None:
        return self._content_type

    @property
    def attributes(self) -> Mapping[str, Any]:
        return MappingProxyType(self._attributes)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self._attributes.get(name, default)

    def has_attribute(self, name: str) -> bool:
        return name in self._attributes

    def set_attribute(self, name: str, value: Any) -> "RequestBuilder":
        if name is None:
            raise InvalidArgumentError("Attribute name must not be None")
        self._attributes[name] = value
        return self

    def add_header(self, name: str, value: Any) -> "RequestBuilder":
        if name.lower() == "content-type":
            return self.set_content_type(str(value))
        self._headers.append((name, str(value)))
        return self

    def add_headers(
        self, headers: Mapping[str, Any] | Iterable[tuple[str, Any]]
    ) -> "RequestBuilder":
        items = headers.items() if isinstance(headers, Mapping) else headers
        for name, value in items:
            self.add_header(name, value)
        return self

    def add_query_param(self, name: str, *values: Any) -> "RequestBuilder":
        self._query_params.extend((name, str(value)) for value in values or ("",))
        return self

    def add_form_param(self, name: str, *values: Any) -> "RequestBuilder":
        self._form_params.extend((name, str(value)) for value in values or ("",))
        return self

    def add_cookie(self, name: str, value: Any) -> "RequestBuilder":
        self._cookies[name] = str(value)
        return self

    def set_content(self, content: bytes | str) -> "RequestBuilder":
        self._content = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        return self

    def set_json(self, data: Any) -> "RequestBuilder":
        self.set_content(json.dumps(data))
        if self._content_type is None:
            self._content_type = JSON_CONTENT_TYPE
        return self

    def set_content_type(self, content_type: str) -> "RequestBuilder":
        self._content_type = content_type
        return self

    def set_accept(self, *media_types: str) -> "RequestBuilder":
        self._headers = [(k, v) for k, v in self._headers if k.lower() != "accept"]
        self._headers.append(("Accept", ", ".join(media_types)))
        return self

    def set_root_path(self, root_path: str) -> "RequestBuilder":
        """Set the path the application is mounted under, e.g. "/api".

        The request path must be the root path or lie under it.
        """
        if root_path and (not root_path.startswith("/") or root_path.endswith("/")):
            raise InvalidArgumentError(
                f"Root path must start with a '/' and must not end with one: {root_path!r}"
            )
        self._root_path = root_path
        return self

    def set_secure(self, secure: bool = True) -> "RequestBuilder":
        self._secure = secure
        return self

    def set_client(self, host: str, port: int) -> "RequestBuilder":
        self._client = (host, port)
        return self

    def resolved_url(self) -> httpx.URL:
        """The absolute URL the request targets, query parameters included."""
        url = self._url
        if not url.is_absolute_url:
            url = httpx.URL(self._uri_config.base_url).join(url)

        if self._secure is not None:
            url = url.copy_with(scheme="https" if self._secure else "http")

        if self._query_params:
            # Appended as-is so the existing query keeps its encoding
            extra = urlencode(self._query_params, quote_via=quote)
            query = url.query.decode("ascii")
            query = f"{query}&{extra}" if query else extra
            url = url.copy_with(query=query.encode("ascii"))

        return url

    def _encode_body(self) -> tuple[bytes, str | None]:
        if self._content is not None:
            return self._content, self._content_type
        if self._form_params:
            return (
                urlencode(self._form_params).encode("utf-8"),
                self._content_type or FORM_CONTENT_TYPE,
            )
        return b"", self._content_type

    def build_body(self) -> bytes:
        body, _ = self._encode_body()
        return body

    def _prepare(self) -> tuple[httpx.URL, list[tuple[str, str]], bytes]:
        url = self.resolved_url()

        path = url.path or "/"
        root = self._root_path
        if root and path != root and not path.startswith(root + "/"):
            raise InvalidArgumentError(
                f"Request path {path!r} is not under root path {root!r}"
            )

        body, content_type = self._encode_body()

        explicit = {name.lower() for name, _ in self._headers}
        headers = []
        if "host" not in explicit:
            headers.append(("host", url.netloc.decode("ascii")))
        for name, value in self._uri_config.default_headers:
            if name.lower() not in explicit:
                headers.append((name, value))
        headers.extend(self._headers)
        if content_type is not None:
            headers.append(("content-type", content_type))
        if body and "content-length" not in explicit:
            headers.append(("content-length", str(len(body))))
        if self._cookies:
            cookie = "; ".join(f"{name}={value}" for name, value in self._cookies.items())
            headers.append(("cookie", cookie))

        return url, headers, body

    def _scope(self, url: httpx.URL, headers: list[tuple[str, str]]) -> dict[str, Any]:
        return {
            "type": "http",
            "asgi": {"version": "3.0", "spec_version": "2.3"},
            "http_version": "1.1",
            "method": self._method,
            "scheme": url.scheme,
            "path": url.path or "/",
            "raw_path": url.raw_path.split(b"?", 1)[0] or b"/",
            "query_string": url.query,
            "root_path": self._root_path,
            "headers": [
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in headers
            ],
            "client": self._client,
            "server": (url.host, url.port or _DEFAULT_PORTS.get(url.scheme)),
            SCOPE_ATTRIBUTES_KEY: dict(self._attributes),
        }

    def build_scope(self) -> dict[str, Any]:
        """Build the ASGI HTTP connection scope for this request."""
        url, headers, _ = self._prepare()
        return self._scope(url, headers)

    def build_request(self) -> Request:
        """Finish the builder into a Request whose body can be read once or more."""
        url, headers, body = self._prepare()
        scope = self._scope(url, headers)

        async def receive() -> dict[str, Any]:
            return {"type": "http.request", "body": body, "more_body": False}

        return Request(scope, receive)

    def to_httpx(self) -> httpx.Request:
        """Finish the builder into an httpx.Request.

        The attributes travel in the request's extensions under
        HTTPX_ATTRIBUTES_EXTENSION so they remain readable from
        ``response.request`` after sending.
        """
        url, headers, body = self._prepare()
        return httpx.Request(
            self._method,
            url,
            headers=headers,
            content=body,
            extensions={HTTPX_ATTRIBUTES_EXTENSION: dict(self._attributes)},
        )

    def __repr__(self):
        return f"<{self.__class__.__name__} {self._method} {self._url}>"


class MultipartRequestBuilder(RequestBuilder):
    """A POST request with a multipart/form-data body.

    Form parameters become plain parts; files and parts are added with
    add_file() and add_part(). The body is encoded by httpx.
    """

    def __init__(self, url: Any, *, uri_config: UriConfig | None = None):
        super().__init__("POST", url, uri_config=uri_config)
        self._parts: list[tuple[str, tuple[str | None, bytes | str, str | None]]] = []
        self._boundary = secrets.token_hex(16)

    @property
    def boundary(self) -> str:
        return self._boundary

    @property
    def parts(self) -> list[tuple[str, tuple[str | None, bytes | str, str | None]]]:
        return list(self._parts)

    def add_file(
        self,
        name: str,
        content: bytes | str,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> "MultipartRequestBuilder":
        """Add a file part. The filename defaults to the part name."""
        self._parts.append((name, (filename or name, content, content_type)))
        return self

    def add_part(
        self, name: str, value: bytes | str, content_type: str | None = None
    ) -> "MultipartRequestBuilder":
        """Add a part without a filename, optionally with its own Content-Type."""
        self._parts.append((name, (None, value, content_type)))
        return self

    def _encode_body(self) -> tuple[bytes, str | None]:
        if self._content is not None:
            return self._content, self._content_type

        content_type = f"multipart/form-data; boundary={self._boundary}"
        parts = [(name, (None, value, None)) for name, value in self._form_params]
        parts.extend(self._parts)
        if not parts:
            return f"--{self._boundary}--\r\n".encode("ascii"), content_type

        encoded = httpx.Request(
            "POST",
            "http://multipart.invalid/",
            headers={"Content-Type": content_type},
            files=parts,
        )
        return encoded.read(), content_type
