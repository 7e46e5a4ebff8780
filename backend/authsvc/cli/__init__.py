"""``flask`` CLI command groups."""

from __future__ import annotations

from flask import Flask

from .auth import auth_cli


def init_app(app: Flask) -> None:
    app.cli.add_command(auth_cli)
