from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .aws_api import DEFAULT_AWS_BINARY
from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("ssm-connect.yaml")
INVENTORY_SOURCES = ("cli", "sdk")


@dataclass(slots=True, frozen=True)
class ConnectConfig:
    profile: str | None = None
    region: str | None = None
    aws_binary: str = DEFAULT_AWS_BINARY
    source: str = "cli"


DEFAULT_CONNECT_CONFIG = ConnectConfig()


def load_connect_config(config_path: str | Path | None = None) -> ConnectConfig:
    path = Path(config_path).expanduser() if config_path else DEFAULT_CONFIG_PATH
    if not path.is_file():
        logger.debug("No config file at %s, using defaults", path)
        return DEFAULT_CONNECT_CONFIG

    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as error:
        raise ConfigError(f"Cannot load {path}: {error}") from error
    logger.debug("Loaded config from %s", path)

    source = _coerce_text(_safe_mapping_get(loaded, "source"), fallback=DEFAULT_CONNECT_CONFIG.source)
    if source not in INVENTORY_SOURCES:
        logger.warning("Ignoring unknown inventory source %r in %s", source, path)
        source = DEFAULT_CONNECT_CONFIG.source

    return ConnectConfig(
        profile=_coerce_text(_safe_mapping_get(loaded, "profile"), fallback=None),
        region=_coerce_text(_safe_mapping_get(loaded, "region"), fallback=None),
        aws_binary=_coerce_text(
            _safe_mapping_get(loaded, "aws_binary"),
            fallback=DEFAULT_CONNECT_CONFIG.aws_binary,
        ),
        source=source,
    )


def _coerce_text(value: Any, fallback: str | None) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return fallback
    text = str(value).strip()
    return text or fallback


def _safe_mapping_get(mapping: Any, key: str, fallback: Any = None) -> Any:
    try:
        return mapping[key]
    except (KeyError, TypeError, IndexError):
        return fallback
