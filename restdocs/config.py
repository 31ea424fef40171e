import logging
import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, TypedDict

import yaml

from restdocs.exceptions import RestDocsConfigError

logger = logging.getLogger(__name__)

# Default config file name
DEFAULT_CONFIG_FILE = "restdocs.config.yaml"

DEFAULT_SCHEME = "http"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080

_DEFAULT_PORTS = {"http": 80, "https": 443}


class UrisConfig(TypedDict, total=False):
    scheme: str
    host: str
    port: int


class RestDocsConfig(TypedDict, total=False):
    uris: UrisConfig
    headers: dict[str, str]


@dataclass(frozen=True)
class UriConfig:
    """Where built requests appear to be sent.

    Relative request URIs are resolved against these values, which also end up
    in the ASGI scope's ``server`` entry and in the ``Host`` header.

    ``default_headers`` may be given as a mapping or as pairs and is stored as
    a tuple of pairs, so a UriConfig is hashable and can be shared between
    builders without any of them changing it.
    """

    scheme: str = DEFAULT_SCHEME
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    default_headers: tuple[tuple[str, str], ...] = ()

    def __post_init__(self):
        headers = self.default_headers
        items = headers.items() if isinstance(headers, Mapping) else headers
        object.__setattr__(
            self,
            "default_headers",
            tuple((str(name), str(value)) for name, value in items),
        )

    @property
    def netloc(self) -> str:
        if _DEFAULT_PORTS.get(self.scheme) == self.port:
            return self.host
        return f"{self.host}:{self.port}"

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.netloc}"

    def with_scheme(self, scheme: str) -> "UriConfig":
        return replace(self, scheme=scheme)

    def with_host(self, host: str) -> "UriConfig":
        return replace(self, host=host)

    def with_port(self, port: int) -> "UriConfig":
        return replace(self, port=port)

    def with_default_headers(
        self, headers: Mapping[str, str] | Iterable[tuple[str, str]]
    ) -> "UriConfig":
        return replace(self, default_headers=headers)


# Used by builders that are given no UriConfig
DEFAULT_URI_CONFIG = UriConfig()


def load_raw_config(config_path: str | Path) -> dict[str, Any]:
    """
    Load a configuration file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Dictionary containing the configuration, empty if the file does not exist.

    Raises:
        RestDocsConfigError: If the configuration file could not be loaded.
    """
    try:
        config_path_obj = Path(config_path)
        if not config_path_obj.exists():
            logger.debug(f"No configuration file at {config_path_obj}, using defaults")
            return {}

        with open(config_path_obj) as f:
            config = yaml.safe_load(f)

        if config is None:  # Empty file
            config = {}

        if not isinstance(config, dict):
            raise RestDocsConfigError(
                f"Invalid configuration format in {config_path}. Expected a dictionary."
            )

        logger.debug(f"Loaded configuration from {config_path_obj}")
        return config
    except Exception as e:
        if isinstance(e, RestDocsConfigError):
            raise
        raise RestDocsConfigError(
            f"Error loading configuration from {config_path}: {str(e)}"
        ) from e


def _substitute_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """
    Substitute environment variables in configuration values.

    Supports ${VAR_NAME} syntax.

    Raises:
        RestDocsConfigError: If a referenced environment variable is missing
    """
    env_pattern = re.compile(r"\$\{([^}]+)\}")

    def replace_env_var(match):
        env_var = match.group(1)
        env_value = os.getenv(env_var)
        if env_value is None:
            raise RestDocsConfigError(
                f"Required environment variable '{env_var}' is not set"
            )
        return env_value

    def substitute_value(value: Any) -> Any:
        if isinstance(value, str):
            return env_pattern.sub(replace_env_var, value)
        elif isinstance(value, dict):
            return {k: substitute_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [substitute_value(item) for item in value]
        else:
            return value

    return substitute_value(config)


def load_config(config_path: str | Path) -> RestDocsConfig:
    """
    Load a configuration file and substitute environment variables.

    Args:
        config_path: Path to the configuration file

    Returns:
        Processed configuration dictionary

    Raises:
        RestDocsConfigError: If the configuration is invalid
    """
    config = load_raw_config(config_path)
    return _substitute_env_vars(config)


def uri_config_from_dict(config: RestDocsConfig) -> UriConfig:
    """Build a UriConfig from the ``uris`` and ``headers`` sections of a config.

    Example config:

    ```yaml
    uris:
      scheme: https
      host: api.example.com
      port: 443
    headers:
      Accept: application/json
    ```
    """
    uris = config.get("uris") or {}
    if not isinstance(uris, dict):
        raise RestDocsConfigError("'uris' configuration must be a dictionary")

    headers = config.get("headers") or {}
    if not isinstance(headers, dict):
        raise RestDocsConfigError("'headers' configuration must be a dictionary")

    scheme = str(uris.get("scheme", DEFAULT_SCHEME)).lower()
    if scheme not in _DEFAULT_PORTS:
        raise RestDocsConfigError(f"Unsupported URI scheme: {scheme}")

    port = uris.get("port", DEFAULT_PORT)
    try:
        port = int(port)
    except (TypeError, ValueError) as e:
        raise RestDocsConfigError(f"Invalid port {port!r}: {e}") from e
    if not 0 < port < 65536:
        raise RestDocsConfigError(f"Port out of range: {port}")

    return UriConfig(
        scheme=scheme,
        host=str(uris.get("host", DEFAULT_HOST)),
        port=port,
        default_headers=headers,
    )


def load_uri_config(config_path: str | Path = DEFAULT_CONFIG_FILE) -> UriConfig:
    """Load a UriConfig from a YAML file, falling back to defaults."""
    return uri_config_from_dict(load_config(config_path))
