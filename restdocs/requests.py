import json
from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType
from typing import Any
from urllib.parse import parse_qs

from python_multipart.multipart import parse_options_header

from restdocs.multipart import FileUpload, MultipartParser
from restdocs.recorder import SCOPE_ATTRIBUTES_KEY

Receive = Callable[[], Awaitable[dict[str, Any]]]


class Request:
    """A built request, read through its ASGI HTTP scope.

    This is what a finished RequestBuilder produces and what downstream tools,
    such as a documentation generator, inspect.
    """

    def __init__(self, scope: dict[str, Any], receive: Receive):
        if scope["type"] != "http":
            raise RuntimeError("Request only supports HTTP scope")

        self.scope = scope
        self._receive = receive
        self._body: bytes | None = None

    @property
    def method(self) -> str:
        return self.scope.get("method", "")

    @property
    def scheme(self) -> str:
        return self.scope.get("scheme", "")

    @property
    def path(self) -> str:
        return self.scope.get("path", "")

    @property
    def raw_path(self) -> bytes:
        return self.scope.get("raw_path") or self.path.encode("utf-8")

    @property
    def root_path(self) -> str:
        return self.scope.get("root_path", "")

    @property
    def query_string(self) -> str:
        return self.scope.get("query_string", b"").decode("latin-1")

    @property
    def query_params(self) -> dict:
        return {
            k: v if len(v) > 1 else v[0]
            for k, v in parse_qs(self.query_string, keep_blank_values=True).items()
        }

    @property
    def headers(self) -> dict:
        return {
            name.decode("latin-1").lower(): value.decode("latin-1")
            for name, value in self.scope.get("headers", [])
        }

    @property
    def cookies(self) -> dict:
        cookie_header = self.headers.get("cookie")
        if not cookie_header:
            return {}
        cookies = {}
        for cookie_pair in cookie_header.split(";"):
            cookie_pair = cookie_pair.strip()
            if "=" in cookie_pair:
                name, value = cookie_pair.split("=", 1)
                cookies[name.strip()] = value.strip()
            elif cookie_pair:  # cookie with no value
                cookies[cookie_pair] = ""
        return cookies

    @property
    def client(self):
        return self.scope.get("client")

    @property
    def server(self):
        return self.scope.get("server")

    @property
    def http_version(self) -> str:
        return self.scope.get("http_version", "")

    @property
    def url(self) -> str:
        host = self.headers.get("host", "")
        url = f"{self.scheme}://{host}{self.path}"
        if self.query_string:
            url += f"?{self.query_string}"
        return url

    @property
    def attributes(self) -> Mapping[str, Any]:
        return MappingProxyType(self.scope.get(SCOPE_ATTRIBUTES_KEY) or {})

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    async def body(self) -> bytes:
        """Return the whole request body.

        The body is read from the receive channel once and cached, so it can be
        read again and parsed as a form afterwards.
        """
        if self._body is None:
            chunks = bytearray()
            async for chunk in self.read():
                chunks.extend(chunk)
            self._body = bytes(chunks)
        return self._body

    async def read(self):
        """Async generator yielding the request body in the chunks it arrives in."""
        if self._body is not None:
            yield self._body
            return

        more_body = True
        while more_body:
            message = await self._receive()
            if message["type"] != "http.request":
                break
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            more_body = message.get("more_body", False)

    async def text(self, encoding: str = "utf-8") -> str:
        data = await self.body()
        return data.decode(encoding)

    async def json(self, encoding: str = "utf-8"):
        text_data = await self.text(encoding=encoding)
        return json.loads(text_data) if text_data else None

    async def form(self, encoding: str = "utf-8") -> dict[str, list[str | FileUpload]]:
        """Parse an urlencoded or multipart body into lists of values per name."""
        content_type_header = self.headers.get("content-type", "")

        if content_type_header.startswith("application/x-www-form-urlencoded"):
            body = await self.text(encoding=encoding)
            return parse_qs(body, keep_blank_values=True)

        if content_type_header.startswith("multipart/form-data"):
            _, params = parse_options_header(content_type_header.encode("latin-1"))
            boundary = params.get(b"boundary")
            if not boundary:
                raise ValueError("Multipart form missing boundary.")
            charset = params.get(b"charset", encoding.encode()).decode()

            body = await self.body()

            async def replay_body() -> dict[str, Any]:
                return {"type": "http.request", "body": body, "more_body": False}

            return await MultipartParser(boundary, charset).parse(replay_body)

        raise RuntimeError(
            f"Cannot parse form data for Content-Type '{content_type_header}'. "
            f"Expected 'application/x-www-form-urlencoded' or 'multipart/form-data'."
        )

    def __repr__(self):
        return (
            f"<Request {self.method} {self.scheme}://"
            f"{self.headers.get('host', '')}{self.path}>"
        )
