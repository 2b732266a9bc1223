"""
FLASK APP FACTORY - TOTP BACKEND SERVER
=======================================

Stateless JSON API around twofactorauth.TwoFactorAuth.

- create_app() reads the engine configuration from TWOFACTORAUTH_* environment
  variables; an explicit mapping overrides them (tests use this).
- CORS is enabled so a browser frontend on another origin can call the API.
- The configured engine lives in app.extensions["twofactorauth"].

Run locally:
    flask --app twofactorauth_backend.app:create_app run
"""

import logging
import os

from flask import Flask
from flask_cors import CORS

from twofactorauth import TwoFactorAuth
from twofactorauth.logging_setup import setup_logging
from twofactorauth.otp_core import DEFAULT_ALGORITHM, DEFAULT_DIGITS, DEFAULT_TIME_STEP

logger = logging.getLogger(__name__)


def _config_from_env():
    return {
        "TWOFACTORAUTH_ISSUER": os.getenv("TWOFACTORAUTH_ISSUER"),
        "TWOFACTORAUTH_DIGITS": int(os.getenv("TWOFACTORAUTH_DIGITS", DEFAULT_DIGITS)),
        "TWOFACTORAUTH_PERIOD": int(os.getenv("TWOFACTORAUTH_PERIOD", DEFAULT_TIME_STEP)),
        "TWOFACTORAUTH_ALGORITHM": os.getenv("TWOFACTORAUTH_ALGORITHM", DEFAULT_ALGORITHM),
        "TWOFACTORAUTH_LOG_LEVEL": os.getenv("TWOFACTORAUTH_LOG_LEVEL", "INFO"),
    }


def create_app(config=None, **providers):
    """
    Build the Flask app.

    Arguments:
        config: mapping that overrides values read from the environment
        providers: qrcode_provider / rng_provider / time_provider passed on
            to TwoFactorAuth
    """
    app = Flask(__name__)
    app.config.update(_config_from_env())
    if config:
        app.config.update(config)

    setup_logging(app.config["TWOFACTORAUTH_LOG_LEVEL"])
    CORS(app)

    # Fails fast on invalid digits / period / algorithm
    app.extensions["twofactorauth"] = TwoFactorAuth(
        issuer=app.config["TWOFACTORAUTH_ISSUER"],
        digits=app.config["TWOFACTORAUTH_DIGITS"],
        period=app.config["TWOFACTORAUTH_PERIOD"],
        algorithm=app.config["TWOFACTORAUTH_ALGORITHM"],
        **providers,
    )

    from .routes import otp_bp
    app.register_blueprint(otp_bp)

    logger.info("TOTP backend ready: %r", app.extensions["twofactorauth"])
    return app
