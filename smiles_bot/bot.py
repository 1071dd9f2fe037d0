from __future__ import annotations

import asyncio
import logging

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import Application, CommandHandler, ContextTypes

from .command_parser import USAGE, InvalidSearchArguments, parse_search_args
from .config import Settings
from .formatter import HEADERS, NO_RESULTS, format_direction, format_searching
from .models import SearchPlan, SearchReport
from .search import SearchTimeout, run_search
from .smiles_client import SmilesClient

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Error: La búsqueda superó el tiempo límite"
FAILURE_MESSAGE = "Error: No se pudo completar la búsqueda"


def search_sync(settings: Settings, plan: SearchPlan) -> SearchReport:
    """Run one search for *plan* with a fresh client."""
    with SmilesClient.from_settings(settings) as client:
        return run_search(
            plan,
            client,
            max_workers=settings.max_workers,
            timeout_s=settings.search_timeout_s,
        )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(USAGE)


async def search_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle ``/search ORIGEN DESTINO SALIDA REGRESO DIAS``."""
    settings: Settings = context.bot_data["settings"]
    message = update.message
    args = list(context.args or [])

    try:
        plan = parse_search_args(args)
    except InvalidSearchArguments as exc:
        await message.reply_text(str(exc))
        return

    await message.reply_text(format_searching(plan), parse_mode=ParseMode.HTML)

    try:
        report = await asyncio.to_thread(search_sync, settings, plan)
    except SearchTimeout as exc:
        logger.warning("Search %s-%s timed out: %s", plan.origin, plan.destination, exc)
        await message.reply_text(TIMEOUT_MESSAGE)
        return
    except Exception:
        logger.exception("search command failed")
        await message.reply_text(FAILURE_MESSAGE)
        return

    for direction in report.directions():
        await message.reply_text(HEADERS[direction.direction], parse_mode=ParseMode.HTML)
        body = format_direction(direction) or NO_RESULTS
        await message.reply_text(body, parse_mode=ParseMode.HTML)


def build_application(settings: Settings) -> Application:
    app = Application.builder().token(settings.telegram_token).build()
    app.bot_data["settings"] = settings
    app.add_handler(CommandHandler(["start", "help"], help_command))
    app.add_handler(CommandHandler("search", search_command))
    return app


def run_bot(settings: Settings) -> None:
    """Start long polling; blocks until interrupted."""
    app = build_application(settings)
    logger.info("Bot started, polling for commands")
    app.run_polling()


__all__ = [
    "FAILURE_MESSAGE",
    "TIMEOUT_MESSAGE",
    "build_application",
    "run_bot",
    "search_command",
    "search_sync",
]
