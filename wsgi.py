"""WSGI entry point for Gunicorn.

**Run with a single worker.**
Zone modifications are serialized with in-process locks. Separate
worker processes each hold their own locks, so two workers could
interleave a read-modify-write on the same zone and lose an update.
Use threads for concurrency instead.

Example:
    gunicorn -w 1 --threads 4 "wsgi:application"
    gunicorn -w 1 --threads 4 -b 0.0.0.0:5000 "wsgi:application"

Configuration is read from the environment (RNDC_CONF, RNDC_SERVER,
RNDC_KEY, ...), see namedctl/config.py.
"""
import logging
import os

from namedctl.app import create_app

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

application = create_app()
