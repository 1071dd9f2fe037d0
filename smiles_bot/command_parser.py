from __future__ import annotations

import re
from datetime import date, datetime
from typing import Sequence

from .models import SearchPlan

DATE_LAYOUT = "%Y-%m-%d"
DATE_SHAPE = re.compile(r"\d{4}-\d{2}-\d{2}")
MAX_DAYS = 10

USAGE = "Uso: /search ORIGEN DESTINO AAAA-MM-DD AAAA-MM-DD DIAS"


class InvalidSearchArguments(ValueError):
    """Invalid ``/search`` arguments; ``str(exc)`` is the user message."""


def _parse_date(raw: str) -> date:
    if not DATE_SHAPE.fullmatch(raw):
        raise ValueError(f"{raw!r} is not YYYY-MM-DD")
    return datetime.strptime(raw, DATE_LAYOUT).date()


def parse_search_args(args: Sequence[str]) -> SearchPlan:
    """Validate the five ``/search`` arguments and build a :class:`SearchPlan`.

    Rules are checked in order and the first failure raises
    :class:`InvalidSearchArguments` with the Spanish message for the user.
    """
    if len(args) < 5:
        raise InvalidSearchArguments(f"Error: {USAGE}")

    origin, destination, out_raw, ret_raw, days_raw = args[:5]

    if len(origin) != 3:
        raise InvalidSearchArguments(
            f"Error: El aeropuerto de origen {origin} no es válido"
        )
    if len(destination) != 3:
        raise InvalidSearchArguments(
            f"Error: El aeropuerto de destino {destination} no es válido"
        )

    try:
        first_outbound = _parse_date(out_raw)
    except ValueError:
        raise InvalidSearchArguments(
            f"Error: La fecha de salida {out_raw} no es válida"
        ) from None
    try:
        first_return = _parse_date(ret_raw)
    except ValueError:
        raise InvalidSearchArguments(
            f"Error: La fecha de regreso {ret_raw} no es válida"
        ) from None

    try:
        days = int(days_raw)
    except ValueError:
        raise InvalidSearchArguments(
            f"Error: La cantidad de días {days_raw} no es válida"
        ) from None
    if days > MAX_DAYS:
        raise InvalidSearchArguments(
            f"Error: La cantidad de días no puede ser mayor a {MAX_DAYS}"
        )
    if days < 1:
        raise InvalidSearchArguments(
            "Error: La cantidad de días debe ser mayor a 0"
        )

    return SearchPlan(
        origin=origin.upper(),
        destination=destination.upper(),
        first_outbound=first_outbound,
        first_return=first_return,
        days=days,
    )


def validate_parameters(args: Sequence[str]) -> str:
    """Return ``""`` when *args* are valid, else the user-facing error."""
    try:
        parse_search_args(args)
    except InvalidSearchArguments as exc:
        return str(exc)
    return ""


__all__ = [
    "DATE_LAYOUT",
    "MAX_DAYS",
    "USAGE",
    "InvalidSearchArguments",
    "parse_search_args",
    "validate_parameters",
]
