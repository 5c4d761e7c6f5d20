from __future__ import annotations

import logging

from flask import Flask
from flask_cors import CORS

from splitease.api.routes import api_bp
from splitease.config import Config


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(config_object: type = Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    CORS(app)  # the UI is served from another origin

    app.register_blueprint(api_bp)
    return app
