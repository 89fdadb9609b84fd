"""Flask CLI commands: ``flask loterias update [GAME]`` and ``flask loterias unblock``."""

from __future__ import annotations

import click
import requests
from flask import Flask, current_app
from flask.cli import AppGroup

from loterias.games import Game

ADMIN_TIMEOUT_SECONDS = 10

loterias_cli = AppGroup("loterias", help="Lottery results reconciliation.")


@loterias_cli.command("update")
@click.argument("game", required=False, type=click.Choice(Game.codes()))
def update_command(game: str | None) -> None:
    """Reconcile one game (or all games) in the foreground."""

    updater = current_app.extensions["lottery_updater"]
    outcomes = [updater.update_one(Game(game))] if game else updater.update_all()
    for o in outcomes:
        click.echo(
            f"{o.game.value}: {o.action.value} local={o.local_contest} remote={o.remote_contest} "
            f"saved={o.saved} abandoned={len(o.abandoned)}" + (f" error={o.error}" if o.error else "")
        )


@loterias_cli.command("unblock")
@click.option("--server", default=None, help="Base URL of the running service (defaults to SERVER_URL).")
def unblock_command(server: str | None) -> None:
    """Clear the upstream block state held by the running server."""

    # The block deadline lives in the server process, not in this one.
    base = (server or current_app.config["SERVER_URL"]).rstrip("/")
    try:
        resp = requests.delete(f"{base}/admin/block", timeout=ADMIN_TIMEOUT_SECONDS)
    except requests.RequestException as exc:
        raise click.ClickException(f"Could not reach {base}: {exc}") from exc

    if resp.status_code != 200:
        raise click.ClickException(f"{base} answered {resp.status_code} to the unblock request")
    click.echo(f"Block state cleared on {base}")


def register_cli(app: Flask) -> None:
    app.cli.add_command(loterias_cli)
