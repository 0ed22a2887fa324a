# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Application configuration.

Values come from a YAML file (camelCase keys) and can be overridden with
``WEBAPP_<UPPER_SNAKE_KEY>`` environment variables. When the file does not
exist the defaults are written to it so operators have something to edit.
"""

from __future__ import annotations

import logging
import os
import secrets
import warnings
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from webapp.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(os.getenv("WEBAPP_CONFIG", "./config/config.yaml"))

_TRUE = {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class AppConfig:
    app_name: str = "WebApp"
    bind_address: str = ":3000"
    db_connector: str = ""
    data_directory: str = "./data/"
    log_directory: str = "./log/"
    log_level: str = "info"
    open_registration: bool = False
    default_language: str = "en"
    secret_key: str = ""
    cookie_secure: bool = False

    def bind_host_port(self) -> Tuple[str, int]:
        host, _, port = self.bind_address.rpartition(":")
        try:
            port_num = int(port)
        except ValueError as e:
            raise ConfigError(f"Invalid bindAddress {self.bind_address!r}") from e
        return (host or "0.0.0.0", port_num)

    def to_yaml(self) -> str:
        doc = {_camel(k): v for k, v in asdict(self).items()}
        return yaml.safe_dump(doc, sort_keys=False, allow_unicode=True)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)


_FIELDS = {f.name: f for f in fields(AppConfig)}
_BY_CAMEL = {_camel(name): name for name in _FIELDS}


def _coerce(name: str, value: Any) -> Any:
    if isinstance(_FIELDS[name].default, bool):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE
    return "" if value is None else str(value)


def _from_mapping(raw: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        name = _BY_CAMEL.get(str(key)) or (str(key) if str(key) in _FIELDS else None)
        if name is None:
            logger.warning("Ignoring unknown configuration key %r", key)
            continue
        out[name] = _coerce(name, value)
    return out


def _from_env(environ: Dict[str, str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for name in _FIELDS:
        value = environ.get(f"WEBAPP_{name.upper()}")
        if value is not None:
            out[name] = _coerce(name, value)
    return out


def save_config(config: AppConfig, path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(config.to_yaml(), encoding="utf-8")
        os.chmod(path, 0o600)
    except OSError as e:
        logger.warning("Unable to save configuration to file %s: %s", path, e)


def load_config(path: Optional[Path] = None, *, environ: Optional[Dict[str, str]] = None) -> AppConfig:
    path = Path(path or DEFAULT_CONFIG_PATH)
    environ = dict(os.environ if environ is None else environ)

    if path.exists():
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Unable to read configuration {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Configuration {path} must be a mapping")
        config = AppConfig(**_from_mapping(raw))
    else:
        logger.info("Configuration file %s not found, using default configuration", path)
        config = AppConfig(secret_key=secrets.token_urlsafe(32))
        save_config(config, path)

    config = replace(config, **_from_env(environ))

    if not config.secret_key:
        warnings.warn(
            "secretKey is not configured. Using an ephemeral key; sessions will not survive a restart.",
            RuntimeWarning,
            stacklevel=2,
        )
        config = replace(config, secret_key=secrets.token_urlsafe(32))
    return config
