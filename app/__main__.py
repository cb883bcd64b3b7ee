"""Process entry point: ``python -m app`` (or the ``oauth2-client-sample`` script).

Client ID/secret and endpoints come from the environment (see
app/core/config.py); only the listen address is taken from flags.
"""

from __future__ import annotations

import click
import uvicorn

from app.core.config import SETTINGS


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option(
    "--port",
    type=int,
    default=SETTINGS.port,
    show_default=True,
    help="Port to listen on (defaults to $PORT)",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=SETTINGS.log_level,
    show_default=True,
    help="Uvicorn log level",
)
def main(host: str, port: int, log_level: str) -> None:
    """Serve the OAuth 2.0 authorization code client."""
    click.echo(f"Listening on {host}:{port}")
    uvicorn.run("app.main:app", host=host, port=port, log_level=log_level)


if __name__ == "__main__":
    main()
