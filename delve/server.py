"""
project: Delve
module: server.py
License: MIT

Server bootstrap helpers: schema creation, logging configuration and the
development server entry point.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from delve import app, create_app


def start_server(host="0.0.0.0", port=5000, debug: bool = False):  # pragma: no cover (runtime only)
    """Ensure tables exist, configure logging and run the Flask dev server."""
    create_app()
    configure_logging()
    app.run(host=host, port=port, debug=debug)


def configure_logging(log_dir: str | None = None) -> str:
    """Configure logging to both console and a rotating file.

    The file path defaults to instance/app.log. Retains a few backups to avoid
    growth. Returns the log file path.
    """
    log_dir = log_dir or app.instance_path
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        pass
    log_path = os.path.join(log_dir, "app.log")

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(fmt)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(fmt)

    # Avoid duplicate handlers if reconfigured
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    root.addHandler(file_handler)
    root.addHandler(console)
    return log_path
