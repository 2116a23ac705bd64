"""
project: Delve
module: __init__.py
License: MIT

Flask application and core extensions setup.

This module wires together the Flask app and SQLAlchemy. Configuration is
sourced from environment variables with reasonable defaults for development.
A local `instance/` directory is used for SQLite, the rotating log file and
other runtime data.
"""

import logging
import os
import uuid
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy

# Load .env if present so `SECRET_KEY`, `DATABASE_URL`, `DELVE_*` etc. can be
# supplied without exporting shell variables during development.
load_dotenv()

app = Flask(__name__, instance_relative_config=True)

try:
    os.makedirs(app.instance_path, exist_ok=True)
except OSError:
    # Read-only installs still work with an explicit DATABASE_URL
    pass

secret_key = os.getenv("SECRET_KEY", "dev-secret-change-me")
database_url = os.getenv("DATABASE_URL")

# During pytest runs, isolate to a separate database file
if not database_url:
    is_pytest = bool(os.getenv("PYTEST_CURRENT_TEST"))
    db_filename = "delve_test.db" if is_pytest else "delve.db"
    db_path = Path(app.instance_path) / db_filename
    database_url = f"sqlite:///{db_path.as_posix()}"

app.config.update(
    SECRET_KEY=secret_key,
    SQLALCHEMY_DATABASE_URI=database_url,
    SQLALCHEMY_TRACK_MODIFICATIONS=False,
    # World generation overrides; None means "use WorldConfig default / DELVE_* env"
    WORLD_MIN_AREA_SIZE=None,
    WORLD_MAX_AREA_SIZE=None,
    WORLD_ENFORCE_CONNECTIVITY=None,
    WORLD_CACHE_MAX=int(os.getenv("DELVE_WORLD_CACHE_MAX", "8")),
)

engine_opts = {}
if database_url.startswith("sqlite:///"):
    engine_opts["connect_args"] = {
        "timeout": 10,  # busy timeout (seconds) for sqlite
        "check_same_thread": False,
    }
db = SQLAlchemy(app, session_options={"expire_on_commit": False}, engine_options=engine_opts)


from delve.routes.world_api import bp_world  # noqa: E402

app.register_blueprint(bp_world)


def create_app():
    """Return the Flask app instance, ensuring the schema exists."""
    from delve.models import world_save  # noqa: F401

    with app.app_context():
        db.create_all()
    return app


@app.errorhandler(500)
def internal_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.exception("Unhandled exception (id=%s)", error_id)
    return jsonify({"error": "internal server error", "error_id": error_id}), 500
