from __future__ import annotations

import logging
from typing import Iterable, Optional

from .models import SMILES_CLUB, DayResult, Fare, Flight, Winner

logger = logging.getLogger(__name__)


def smiles_club_fare(flight: Flight) -> Optional[Fare]:
    """Return the first ``SMILES_CLUB`` fare of *flight*, if any."""
    for fare in flight.fares:
        if fare.type == SMILES_CLUB:
            return fare
    logger.debug("%s fare not found for flight %s", SMILES_CLUB, flight.uid)
    return None


def cheapest_of_day(day: DayResult) -> Optional[Winner]:
    """Cheapest eligible flight of one day; ties keep the first flight."""
    best: Optional[Winner] = None
    for flight in day.flights:
        fare = smiles_club_fare(flight)
        if fare is None:
            continue
        if best is None or fare.miles < best.miles:
            best = Winner(flight=flight, fare=fare, query_date=day.query_date)
    return best


def pick_winner(days: Iterable[DayResult]) -> Optional[Winner]:
    """Cheapest eligible flight across *days*.

    Ties go to the earliest query date, so the result does not depend on
    the order of *days*.
    """
    best: Optional[Winner] = None
    for day in sorted(days, key=lambda d: d.query_date):
        candidate = cheapest_of_day(day)
        if candidate is None:
            continue
        if best is None or candidate.miles < best.miles:
            best = candidate
    return best


__all__ = ["cheapest_of_day", "pick_winner", "smiles_club_fare"]
