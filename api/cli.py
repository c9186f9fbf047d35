"""
Administrative commands, available through the Flask CLI:

    flask --app api tokens list Tamara
    flask --app api tokens sweep
"""
import click
from flask import current_app
from flask.cli import AppGroup

from models.token_store import StoreError

tokens_cli = AppGroup("tokens", help="Inspect and prune refresh tokens.")


@tokens_cli.command("list")
@click.argument("username")
def list_tokens(username):
    """Print the refresh tokens issued to USERNAME, oldest first."""
    store = current_app.extensions["token_store"]
    for token in store.tokens_of(username):
        record = store.get(token)
        if record is None:  # swept in between
            continue
        state = "revoked" if record.revoked else f"expires {record.expires_at:%Y-%m-%d %H:%M:%S}"
        click.echo(f"{token}\t{state}")


@tokens_cli.command("sweep")
def sweep_tokens():
    """Delete revoked and expired refresh tokens now."""
    try:
        removed = current_app.extensions["token_store"].sweep()
    except StoreError as exc:
        raise click.ClickException("Sweep failed: refresh token store unavailable") from exc
    click.echo(f"Removed {removed} refresh tokens")
