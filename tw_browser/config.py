"""Browser configuration.

Timeouts and retry tuning can be loaded from a YAML file:

    master_timeout: 5.0
    server_timeout: 16.0
    master_servers:
      - master1.teeworlds.com:8300
    token_policy:
      min_timeout: 0.035
      burst_growth: 1.2
    request_policy:
      burst_growth: 2.0
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .errors import ConfigError
from .transport.retry_policy import RetryPolicy, request_retry_policy, token_retry_policy

# Defaults that have been deemed to work with a rather low packet loss
DEFAULT_MASTER_TIMEOUT = 5.0
DEFAULT_SERVER_TIMEOUT = 16.0


@dataclass
class BrowserConfig:
    """Configuration for server discovery."""
    master_timeout: float = DEFAULT_MASTER_TIMEOUT
    server_timeout: float = DEFAULT_SERVER_TIMEOUT
    # None = built-in master server table
    master_servers: Optional[list[str]] = None
    token_policy: RetryPolicy = field(default_factory=token_retry_policy)
    request_policy: RetryPolicy = field(default_factory=request_retry_policy)


def load_config(file_path: Union[str, Path]) -> BrowserConfig:
    """Load a BrowserConfig from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigError: If the YAML is malformed or contains invalid fields.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    if file_path.suffix not in (".yaml", ".yml"):
        raise ConfigError(f"Expected .yaml or .yml file, got: {file_path.suffix}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed config file {file_path}: {e}") from e

    if data is None:
        return BrowserConfig()

    return parse_config_data(data, source=str(file_path))


def parse_config_data(data: dict, source: str = "<inline>") -> BrowserConfig:
    """Build a BrowserConfig from a dictionary (already loaded YAML).

    Raises:
        ConfigError: If fields are unknown or malformed.
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a YAML mapping, got {type(data).__name__}")

    _reject_unknown(data, {f.name for f in fields(BrowserConfig)}, "config", source)

    config = BrowserConfig()

    for name in ("master_timeout", "server_timeout"):
        if name in data:
            setattr(config, name, _positive_number(data[name], name, source))

    if "master_servers" in data:
        servers = data["master_servers"]
        if not isinstance(servers, list) or not all(isinstance(s, str) for s in servers):
            raise ConfigError(f"'master_servers' must be a list of strings in {source}")
        config.master_servers = list(servers)

    if "token_policy" in data:
        config.token_policy = _parse_policy(
            data["token_policy"], config.token_policy, "token_policy", source
        )
    if "request_policy" in data:
        config.request_policy = _parse_policy(
            data["request_policy"], config.request_policy, "request_policy", source
        )

    return config


def _parse_policy(data: Any, default: RetryPolicy, context: str, source: str) -> RetryPolicy:
    if not isinstance(data, dict):
        raise ConfigError(f"'{context}' must be a mapping in {source}")

    _reject_unknown(data, {f.name for f in fields(RetryPolicy)}, context, source)

    values = {f.name: getattr(default, f.name) for f in fields(RetryPolicy)}
    for name, value in data.items():
        values[name] = _positive_number(value, f"{context}.{name}", source)

    try:
        return RetryPolicy(**values)
    except ValueError as e:
        raise ConfigError(f"Invalid '{context}' in {source}: {e}") from e


def _positive_number(value: Any, context: str, source: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"'{context}' must be a positive number in {source}, got {value!r}")
    return float(value)


def _reject_unknown(data: dict, known: set[str], context: str, source: str) -> None:
    """Check that a mapping only contains known fields."""
    for key in data:
        if key not in known:
            raise ConfigError(f"Unknown field '{key}' in {context} ({source})")
