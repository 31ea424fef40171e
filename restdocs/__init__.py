from restdocs.builders import MultipartRequestBuilder, RequestBuilder
from restdocs.config import DEFAULT_URI_CONFIG, UriConfig, load_uri_config
from restdocs.exceptions import (
    InvalidArgumentError,
    RestDocsConfigError,
    RestDocsException,
    TemplateExpansionError,
)
from restdocs.recorder import ATTRIBUTE_NAME_URL_TEMPLATE, get_url_template, record_template
from restdocs.request_builders import (
    delete_from_template,
    delete_from_uri,
    get_from_template,
    get_from_uri,
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
from restdocs.requests import Request
from restdocs.templates import expand_template
from restdocs.test_client import create_test_client, perform

__all__ = [
    "ATTRIBUTE_NAME_URL_TEMPLATE",
    "DEFAULT_URI_CONFIG",
    "InvalidArgumentError",
    "MultipartRequestBuilder",
    "Request",
    "RequestBuilder",
    "RestDocsConfigError",
    "RestDocsException",
    "TemplateExpansionError",
    "UriConfig",
    "create_test_client",
    "delete_from_template",
    "delete_from_uri",
    "expand_template",
    "get_from_template",
    "get_from_uri",
    "get_url_template",
    "head_from_template",
    "head_from_uri",
    "load_uri_config",
    "multipart_from_template",
    "multipart_from_uri",
    "options_from_template",
    "options_from_uri",
    "patch_from_template",
    "patch_from_uri",
    "perform",
    "post_from_template",
    "post_from_uri",
    "put_from_template",
    "put_from_uri",
    "record_template",
    "request_from_template",
    "request_from_uri",
]
