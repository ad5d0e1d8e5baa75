# Overview: Application factory. The Flask app carries configuration and CLI
# commands; the access-control core itself has no web surface.

import logging

from flask import Flask, current_app

from .access import AccessController, Principal
from .config import Config


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    logging.getLogger(__name__).setLevel(app.config["LOG_LEVEL"])

    # Opens the durable store and creates missing tables/seed rows
    app.extensions["access"] = AccessController.from_config(app.config)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def get_access() -> AccessController:
    """AccessController of the current app."""
    return current_app.extensions["access"]


__all__ = ["create_app", "get_access", "AccessController", "Principal"]
