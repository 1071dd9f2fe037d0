from __future__ import annotations

import html
from typing import List, Optional

from .fare_reducer import cheapest_of_day
from .models import BoardingTax, DayOutcome, Direction, DirectionReport, SearchPlan, Winner

DATE_LAYOUT = "%Y-%m-%d"
BULLET = "<b>●</b>"

HEADERS = {
    Direction.OUTBOUND: "<b>VUELOS DE IDA</b>",
    Direction.RETURN: "<b>VUELOS DE VUELTA</b>",
}

NO_RESULTS = "<i>No se encontraron vuelos SMILES_CLUB</i>"


def format_searching(plan: SearchPlan) -> str:
    origin = html.escape(plan.origin)
    destination = html.escape(plan.destination)
    return f"<i>Buscando... <b>{origin} - {destination}</b></i>"


def format_day_line(winner: Winner) -> str:
    f = winner.flight
    return (
        f"{BULLET} {f.departure_date.strftime(DATE_LAYOUT)}: "
        f"{html.escape(f.departure_airport)} - {html.escape(f.arrival_airport)}, "
        f"{html.escape(f.cabin)}, {html.escape(f.airline)}, "
        f"{f.stops} escalas, {winner.miles} millas"
    )


def format_winner_line(winner: Winner, tax: Optional[BoardingTax]) -> str:
    if tax is None:
        return f"{format_day_line(winner)}, tasas e impuestos no disponibles"
    return f"{format_day_line(winner)}, {tax.total:.6f} de Tasas e impuestos"


def format_failed_day(outcome: DayOutcome) -> str:
    day = outcome.query.date.strftime(DATE_LAYOUT)
    return f"{BULLET} {day}: <i>no se pudo consultar</i>"


def format_direction(report: DirectionReport) -> str:
    """Per-day lines in query-date order followed by the winner line.

    Returns ``""`` when no day had an eligible fare and none failed.
    """
    lines: List[str] = []
    for outcome in report.outcomes:
        if outcome.result is None:
            lines.append(format_failed_day(outcome))
            continue
        best = cheapest_of_day(outcome.result)
        if best is not None:
            lines.append(format_day_line(best))

    if report.winner is not None:
        lines.append(format_winner_line(report.winner, report.tax))

    return "\n".join(lines)


__all__ = [
    "HEADERS",
    "NO_RESULTS",
    "format_day_line",
    "format_direction",
    "format_failed_day",
    "format_searching",
    "format_winner_line",
]
