"""Flask CLI commands for auth housekeeping."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from authsvc.api.deps import build_auth_service
from authsvc.services._shared.base import ServiceContext
from authsvc.services._shared.errors import ServiceError

LOGGER = logging.getLogger(__name__)


@click.group("auth")
def auth_cli() -> None:
    """Authentication maintenance commands."""


@auth_cli.command("purge-expired")
@with_appcontext
def purge_expired_command() -> None:
    """Delete expired sessions and password resets."""
    service = build_auth_service(ServiceContext(request_id="cli"))
    try:
        result = service.purge_expired()
    except ServiceError as exc:
        raise click.ClickException(f"Purge failed: {exc}") from exc
    LOGGER.info(
        "auth.purge_expired sessions=%s password_resets=%s",
        result.sessions,
        result.password_resets,
        extra={"event": "purge_expired"},
    )
    click.echo(f"Removed {result.sessions} expired sessions.")
    click.echo(f"Removed {result.password_resets} expired password resets.")
