"""
FLASK APP — TOTP enrolment page + JSON API
==========================================

- `create_app()` builds the Flask app, enables CORS and registers the API
  blueprint from routes.py
- `/` and `/otp` show the QR code page for the enrolment that the CLI
  `new` command is waiting on (app.config["PENDING_ENROLMENT"])

Environment (loaded from .env when present):
- TOTP_DB_PATH     : SQLite secret store
- TOTP_ISSUER      : default issuer label
- TOTP_SECRET_KEY  : Flask secret key
"""
import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify, render_template
from flask_cors import CORS

from totp_core.exceptions import OTPConfigurationError
from totp_database.db_manager import default_db_path

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_ISSUER = "MyDemoApp"


def create_app(db_path=None, issuer=None, pending_enrolment=None):
    app = Flask(__name__)
    app.secret_key = os.getenv("TOTP_SECRET_KEY", "totp_demo_secret_key")
    app.config["TOTP_DB_PATH"] = db_path or default_db_path()
    app.config["TOTP_ISSUER"] = issuer or os.getenv("TOTP_ISSUER", DEFAULT_ISSUER)
    app.config["PENDING_ENROLMENT"] = pending_enrolment

    # Frontends served from another origin call the JSON API
    CORS(app)

    from totp_backend.routes import otp_bp

    app.register_blueprint(otp_bp)

    @app.errorhandler(OTPConfigurationError)
    def configuration_error(exc):
        return jsonify({"error": str(exc), "field": exc.field}), 400

    @app.route("/")
    @app.route("/otp")
    def enrolment_page():
        """QR code page for the account currently being enrolled."""
        pending = app.config.get("PENDING_ENROLMENT")
        if not pending:
            return jsonify({"error": "No enrolment in progress"}), 404
        return render_template("otp.html", **pending)

    logger.debug("App created (db=%s)", app.config["TOTP_DB_PATH"])
    return app
