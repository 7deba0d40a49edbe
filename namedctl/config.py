"""Environment-driven configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .parser.loader import find_rndc_conf, load_rndc_conf

log = logging.getLogger(__name__)

DEFAULT_RNDC_BIN = "/usr/sbin/rndc"
DEFAULT_BIND_ZONE_DIR = "/var/cache/bind"
DEFAULT_RNDC_TIMEOUT = 30.0


@dataclass(frozen=True)
class AppConfig:
    """Settings for the rndc transport and the HTTP app."""

    rndc_bin: str = DEFAULT_RNDC_BIN
    rndc_conf: Path | None = None
    rndc_server: str | None = None
    rndc_port: int | None = None
    rndc_key: str | None = None
    rndc_timeout: float = DEFAULT_RNDC_TIMEOUT
    bind_zone_dir: str = DEFAULT_BIND_ZONE_DIR
    log_level: str = "INFO"


def _parse_int(name: str, value: str | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def load_config(environ=None) -> AppConfig:
    """Build an AppConfig from environment variables.

    When an rndc.conf is available (``RNDC_CONF`` or one of the standard
    locations) its ``options`` block supplies the server, port and key
    that are not set explicitly. A broken rndc.conf is fatal.
    """
    if environ is None:
        environ = os.environ

    timeout = environ.get("RNDC_TIMEOUT")
    try:
        rndc_timeout = float(timeout) if timeout else DEFAULT_RNDC_TIMEOUT
    except ValueError:
        raise ValueError(f"RNDC_TIMEOUT must be a number, got {timeout!r}") from None

    server = environ.get("RNDC_SERVER") or None
    port = _parse_int("RNDC_PORT", environ.get("RNDC_PORT"))
    key = environ.get("RNDC_KEY") or None

    conf_path = environ.get("RNDC_CONF")
    rndc_conf = Path(conf_path) if conf_path else find_rndc_conf()
    if rndc_conf is not None:
        conf = load_rndc_conf(rndc_conf)
        log.info("Loaded %s (%d keys, %d servers)", rndc_conf, len(conf.keys), len(conf.servers))
        server = server or conf.options.default_server
        port = port if port is not None else conf.options.default_port
        key = key or conf.options.default_key
        if key is not None and key not in conf.keys:
            log.warning("Key %r is not defined in %s", key, rndc_conf)
    else:
        log.info("No rndc.conf found; using rndc defaults")

    return AppConfig(
        rndc_bin=environ.get("RNDC_BIN") or DEFAULT_RNDC_BIN,
        rndc_conf=rndc_conf,
        rndc_server=server,
        rndc_port=port,
        rndc_key=key,
        rndc_timeout=rndc_timeout,
        bind_zone_dir=environ.get("BIND_ZONE_DIR") or DEFAULT_BIND_ZONE_DIR,
        log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
    )
