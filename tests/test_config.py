import pytest

from restdocs.config import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_URI_CONFIG,
    UriConfig,
    load_config,
    load_raw_config,
    load_uri_config,
)
from restdocs.exceptions import RestDocsConfigError


def test_defaults():
    config = UriConfig()

    assert config.scheme == "http"
    assert config.host == "localhost"
    assert config.port == 8080
    assert config.base_url == "http://localhost:8080"


@pytest.mark.parametrize(
    "config, base_url",
    [
        (UriConfig(scheme="http", host="example.com", port=80), "http://example.com"),
        (UriConfig(scheme="https", host="example.com", port=443), "https://example.com"),
        (UriConfig(scheme="https", host="example.com", port=8443), "https://example.com:8443"),
    ],
)
def test_base_url_omits_default_ports(config, base_url):
    assert config.base_url == base_url


def test_with_methods_return_copies():
    config = UriConfig()

    changed = config.with_scheme("https").with_host("api.example.com").with_port(443)

    assert changed.base_url == "https://api.example.com"
    assert config.base_url == "http://localhost:8080"


def test_missing_file_gives_defaults(tmp_path):
    assert load_raw_config(tmp_path / DEFAULT_CONFIG_FILE) == {}
    assert load_uri_config(tmp_path / DEFAULT_CONFIG_FILE) == UriConfig()


def test_empty_file_gives_defaults(tmp_path):
    config_path = tmp_path / DEFAULT_CONFIG_FILE
    config_path.write_text("")

    assert load_uri_config(config_path) == UriConfig()


def test_load_uri_config(tmp_path):
    config_path = tmp_path / DEFAULT_CONFIG_FILE
    config_path.write_text(
        """uris:
  scheme: https
  host: api.example.com
  port: 443
headers:
  Accept: application/json
"""
    )

    config = load_uri_config(config_path)

    assert config == UriConfig(
        scheme="https",
        host="api.example.com",
        port=443,
        default_headers={"Accept": "application/json"},
    )


def test_environment_variables_are_substituted(tmp_path, monkeypatch):
    monkeypatch.setenv("DOCS_HOST", "docs.example.com")
    config_path = tmp_path / DEFAULT_CONFIG_FILE
    config_path.write_text("uris:\n  host: ${DOCS_HOST}\n")

    assert load_config(config_path) == {"uris": {"host": "docs.example.com"}}
    assert load_uri_config(config_path).host == "docs.example.com"


def test_missing_environment_variable(tmp_path, monkeypatch):
    monkeypatch.delenv("DOCS_HOST", raising=False)
    config_path = tmp_path / DEFAULT_CONFIG_FILE
    config_path.write_text("uris:\n  host: ${DOCS_HOST}\n")

    with pytest.raises(RestDocsConfigError, match="DOCS_HOST"):
        load_config(config_path)


def test_non_mapping_file(tmp_path):
    config_path = tmp_path / DEFAULT_CONFIG_FILE
    config_path.write_text("- just\n- a list\n")

    with pytest.raises(RestDocsConfigError, match="Expected a dictionary"):
        load_raw_config(config_path)


def test_invalid_yaml(tmp_path):
    config_path = tmp_path / DEFAULT_CONFIG_FILE
    config_path.write_text("uris: [unclosed\n")

    with pytest.raises(RestDocsConfigError, match="Error loading configuration"):
        load_raw_config(config_path)


@pytest.mark.parametrize(
    "content, message",
    [
        ("uris:\n  scheme: ftp\n", "Unsupported URI scheme"),
        ("uris:\n  port: abc\n", "Invalid port"),
        ("uris:\n  port: 70000\n", "Port out of range"),
        ("uris: localhost\n", "'uris' configuration must be a dictionary"),
        ("headers: [Accept]\n", "'headers' configuration must be a dictionary"),
    ],
)
def test_invalid_uri_config(tmp_path, content, message):
    config_path = tmp_path / DEFAULT_CONFIG_FILE
    config_path.write_text(content)

    with pytest.raises(RestDocsConfigError, match=message):
        load_uri_config(config_path)


def test_default_headers_are_stored_as_pairs():
    config = UriConfig(default_headers={"Accept": "application/json"})

    assert config.default_headers == (("Accept", "application/json"),)
    assert config == UriConfig(default_headers=[("Accept", "application/json")])


def test_uri_config_is_hashable():
    config = UriConfig(default_headers={"Accept": "application/json"})

    assert hash(config) == hash(UriConfig(default_headers={"Accept": "application/json"}))
    assert len({config, UriConfig(default_headers=[("Accept", "application/json")])}) == 1


def test_with_default_headers():
    config = DEFAULT_URI_CONFIG.with_default_headers({"X-Api-Version": "2"})

    assert config.default_headers == (("X-Api-Version", "2"),)
    assert DEFAULT_URI_CONFIG.default_headers == ()
