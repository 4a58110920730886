"""Generator configuration.

A :class:`GeneratorConfig` is built once per run, either directly or via
:func:`load_config`, which layers CLI values over an optional YAML file::

    # sdkgen.yaml
    resource_namespace_suffix: Resource
    request_namespace_suffix: Requests
    dto_namespace_suffix: Dto
    fallback_resource_name: Misc
    ignored_query_params: [after, order_by, per_page]
    ignored_header_params: [X-Request-Id]
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from saloon_sdkgen.exceptions import ConfigError

logger = logging.getLogger(__name__)

SDK_SUB_NAMESPACE = "SDK"

DEFAULT_IGNORED_QUERY_PARAMS = ["after", "order_by", "per_page"]


class GeneratorConfig(BaseModel):
    """Parameters shared by every generator in a run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    connector_name: str
    namespace: str
    resource_namespace_suffix: str = "Resource"
    request_namespace_suffix: str = "Requests"
    dto_namespace_suffix: str = "Dto"
    ignored_query_params: list[str] = []
    ignored_body_params: list[str] = []
    ignored_header_params: list[str] = []
    fallback_resource_name: str = "Resource"

    @property
    def root_namespace(self) -> str:
        """Namespace without the generated ``\\SDK`` segment.

        This is what composer autoloads from ``src/`` and what the generated
        tests live under (``Tests\\<root>``).
        """
        suffix = "\\" + SDK_SUB_NAMESPACE
        if self.namespace.endswith(suffix):
            return self.namespace[: -len(suffix)]
        return self.namespace

    @property
    def dto_namespace(self) -> str:
        return f"{self.namespace}\\{self.dto_namespace_suffix}"

    @property
    def request_namespace(self) -> str:
        return f"{self.namespace}\\{self.request_namespace_suffix}"

    @property
    def resource_namespace(self) -> str:
        return f"{self.namespace}\\{self.resource_namespace_suffix}"


def sdk_namespace(namespace: str) -> str:
    """Append the fixed ``SDK`` sub-namespace to a user supplied root."""
    return namespace.strip().rstrip("\\") + "\\" + SDK_SUB_NAMESPACE


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(path: Path | None = None, **overrides: Any) -> GeneratorConfig:
    """Build a GeneratorConfig from an optional YAML file plus explicit overrides.

    Overrides whose value is None are ignored so CLI options that were not
    given do not clobber file values.
    """
    values: dict[str, Any] = {"ignored_query_params": list(DEFAULT_IGNORED_QUERY_PARAMS)}
    if path is not None:
        values.update(_read_config_file(path))
        logger.debug("Loaded generator config from %s", path)

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return GeneratorConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid generator config: {e}") from e
