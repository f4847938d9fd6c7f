"""Application factory and app-wide configuration."""

import logging
from typing import Any, Mapping, Optional

from flask import Flask
from flask_cors import CORS

from mortgage_invest.app.api.routes import api_bp
from mortgage_invest.config import load_config

logger = logging.getLogger(__name__)


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Build the Flask app instance."""
    app = Flask(__name__)
    app.config.update(load_config(overrides))

    logging.basicConfig(level=app.config["LOG_LEVEL"])

    CORS(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=True,
    )

    app.register_blueprint(api_bp, url_prefix="/api")
    logger.info("mortgage-invest API ready, max horizon %s years", app.config["MAX_YEARS"])
    return app
