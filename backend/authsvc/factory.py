"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from authsvc.core.config import DEFAULT_JWT_SECRET, AuthSettings, BaseConfig, get_config
from authsvc.core.logger import configure_logging, init_app as init_logging


def _check_secrets(app: Flask) -> None:
    """Refuse to boot a production app signing tokens with the placeholder secret."""
    if app.config.get("TESTING") or app.config.get("DEBUG"):
        return
    if app.config.get("JWT_SECRET") == DEFAULT_JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set to a non-default value in production.")


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application."""

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"), app.config.get("LOG_FORMAT", "json"))
    _check_secrets(app)

    from authsvc.api.deps import AUTH_SETTINGS_KEY

    app.extensions[AUTH_SETTINGS_KEY] = AuthSettings.from_config(app.config)

    from authsvc.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from authsvc.core import cors

    cors.init_app(app)

    from authsvc.api import init_app as init_api

    init_api(app)

    from authsvc.core import errors

    errors.init_app(app)

    from authsvc import cli as app_cli

    app_cli.init_app(app)

    return app
