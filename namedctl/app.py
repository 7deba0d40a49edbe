"""Flask app factory."""

from __future__ import annotations

import logging

from flask import Flask

from .api import api_bp
from .config import AppConfig, load_config
from .patch import ZoneLocks
from .rndc import RndcExecutor

log = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None, executor: RndcExecutor | None = None) -> Flask:
    """Create and configure the Flask app.

    Without arguments the configuration comes from the environment and
    commands go to the real rndc binary.
    """
    if config is None:
        config = load_config()

    app = Flask(__name__)

    app.config["NAMEDCTL"] = config
    app.config["RNDC_EXECUTOR"] = executor or RndcExecutor(config)

    # Serializes read-modify-write cycles per zone within this process
    app.config["ZONE_LOCKS"] = ZoneLocks()

    app.register_blueprint(api_bp)

    log.info("Using %s (server %s)", config.rndc_bin, config.rndc_server or "default")
    return app
