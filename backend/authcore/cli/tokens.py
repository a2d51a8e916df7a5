"""Flask CLI commands for refresh-token and session-cache maintenance."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from authcore.api.deps import build_maintenance_service

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    """Raise logging verbosity for the maintenance service when requested."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.getLogger("authcore.services.maintenance").setLevel(level)
    LOGGER.setLevel(level)


@click.group("tokens")
@click.option("--verbose", is_flag=True, help="Enable verbose logging.")
def tokens_cli(verbose: bool) -> None:
    """Token store maintenance; schedule these with cron or similar."""
    _configure_logging(verbose)


@tokens_cli.command("purge-expired")
@with_appcontext
def purge_expired_command() -> None:
    """Delete refresh tokens past their expiry."""
    removed = build_maintenance_service().purge_expired_tokens()
    click.echo(f"Purged {removed} expired refresh token(s).")


@tokens_cli.command("purge-sessions")
@with_appcontext
def purge_sessions_command() -> None:
    """Drop every cached ``session:*`` entry."""
    removed = build_maintenance_service().purge_session_cache()
    click.echo(f"Purged {removed} session cache key(s).")
