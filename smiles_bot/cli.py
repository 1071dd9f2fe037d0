from __future__ import annotations

import html
import logging
import re
from typing import Optional

import click
from pydantic import ValidationError

from .command_parser import InvalidSearchArguments, parse_search_args
from .config import Settings, get_settings
from .formatter import HEADERS, NO_RESULTS, format_direction
from .search import SearchTimeout

_TAGS = re.compile(r"</?[bi]>")


def _plain(text: str) -> str:
    return html.unescape(_TAGS.sub("", text))


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.INFO,
        handlers=[logging.FileHandler(settings.log_file), logging.StreamHandler()],
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc


@click.group()
def cli() -> None:
    """Command line interface."""


@cli.command()
def bot() -> None:
    """Run the Telegram bot (long polling)."""
    from .bot import run_bot

    settings = _load_settings()
    if not settings.telegram_token:
        raise click.ClickException("Invalid configuration: TOKEN is not set")
    configure_logging(settings)
    run_bot(settings)


@cli.command()
@click.argument("origin")
@click.argument("destination")
@click.argument("departure")
@click.argument("return_date", metavar="RETURN")
@click.argument("days")
@click.option(
    "--response-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Read flight search responses from this JSON file (dev only)",
)
def search(
    origin: str,
    destination: str,
    departure: str,
    return_date: str,
    days: str,
    response_file: Optional[str],
) -> None:
    """Run one search and print the result, without Telegram."""
    from .bot import search_sync

    try:
        plan = parse_search_args([origin, destination, departure, return_date, days])
    except InvalidSearchArguments as exc:
        raise click.ClickException(str(exc)) from exc

    settings = _load_settings()
    if response_file:
        settings = settings.model_copy(update={"response_file": response_file})
    try:
        report = search_sync(settings, plan)
    except SearchTimeout as exc:
        raise click.ClickException(f"Search timed out: {exc}") from exc

    for direction in report.directions():
        click.echo(_plain(HEADERS[direction.direction]))
        click.echo(_plain(format_direction(direction) or NO_RESULTS))


if __name__ == "__main__":
    cli()
