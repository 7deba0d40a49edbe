#!/usr/bin/env python3
"""Entry point for namedctl.

Usage:
    python run.py                        # rndc settings from the environment
    RNDC_CONF=/etc/bind/rndc.conf python run.py
"""

import logging
import os

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(levelname)s %(name)s: %(message)s",
)

from namedctl.app import create_app


def main():
    app = create_app()

    config = app.config["NAMEDCTL"]
    if config.rndc_conf:
        print(f"Using rndc configuration: {config.rndc_conf}")

    host = os.environ.get("HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "5000"))
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    print(f"Starting server at http://{host}:{port}")
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
