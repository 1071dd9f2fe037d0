"""Fan-out of one ``/search`` command over the Smiles API.

Every outbound and return day is queried concurrently; the results are
put back in query-date order per direction before the fare reducer picks
the cheapest itinerary and its boarding tax is looked up.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import timedelta
from typing import Dict, List, Protocol, Sequence, Tuple

from .fare_reducer import pick_winner
from .models import (
    SMILES_CLUB,
    BoardingTax,
    DayOutcome,
    DayQuery,
    DayResult,
    Direction,
    DirectionReport,
    Fare,
    Flight,
    SearchPlan,
    SearchReport,
)
from .smiles_client import SmilesClientError

logger = logging.getLogger(__name__)


class SearchTimeout(RuntimeError):
    """The search did not finish before its deadline."""


class FlightSource(Protocol):
    def search_flights(self, query: DayQuery) -> DayResult: ...

    def boarding_tax(
        self, flight: Flight, fare: Fare, *, timeout: float | None = None
    ) -> BoardingTax: ...


def expand_plan(plan: SearchPlan) -> Tuple[List[DayQuery], List[DayQuery]]:
    """Return ``(outbound, inbound)`` queries, ``plan.days`` of each."""
    outbound = [
        DayQuery(
            date=plan.first_outbound + timedelta(days=k),
            origin=plan.origin,
            destination=plan.destination,
            direction=Direction.OUTBOUND,
        )
        for k in range(plan.days)
    ]
    # airports swapped for the way back
    inbound = [
        DayQuery(
            date=plan.first_return + timedelta(days=k),
            origin=plan.destination,
            destination=plan.origin,
            direction=Direction.RETURN,
        )
        for k in range(plan.days)
    ]
    return outbound, inbound


def _remaining(deadline: float) -> float:
    return max(0.0, deadline - time.monotonic())


def fetch_days(
    client: FlightSource,
    queries: Sequence[DayQuery],
    *,
    max_workers: int,
    deadline: float,
) -> List[DayOutcome]:
    """Run every query concurrently and wait for all of them.

    A query that fails with :class:`SmilesClientError` yields an outcome
    with ``error`` set. Outcomes keep the order of *queries*.
    """
    executor = ThreadPoolExecutor(
        max_workers=max(1, min(max_workers, len(queries)))
    )
    futures = [executor.submit(client.search_flights, q) for q in queries]
    try:
        _, not_done = wait(futures, timeout=_remaining(deadline))
        if not_done:
            raise SearchTimeout(
                f"{len(not_done)} of {len(futures)} queries still pending"
            )
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    outcomes: List[DayOutcome] = []
    for query, future in zip(queries, futures):
        try:
            result = future.result()
        except SmilesClientError as exc:
            logger.warning(
                "  Failed to fetch %s->%s on %s: %s",
                query.origin,
                query.destination,
                query.date,
                exc,
            )
            outcomes.append(DayOutcome(query=query, error=str(exc)))
        else:
            outcomes.append(DayOutcome(query=query, result=result))
    return outcomes


def reduce_direction(
    client: FlightSource,
    direction: Direction,
    outcomes: Sequence[DayOutcome],
    *,
    deadline: float,
) -> DirectionReport:
    """Pick the direction's winner and fetch its boarding tax."""
    ordered = sorted(outcomes, key=lambda o: o.query.date)
    days = [o.result for o in ordered if o.result is not None]
    report = DirectionReport(direction=direction, outcomes=ordered)

    report.winner = pick_winner(days)
    if report.winner is None:
        logger.info("No %s fares found for %s", SMILES_CLUB, direction.value)
        return report

    remaining = _remaining(deadline)
    if remaining <= 0:
        raise SearchTimeout(f"deadline passed before {direction.value} tax lookup")

    try:
        report.tax = client.boarding_tax(
            report.winner.flight, report.winner.fare, timeout=remaining
        )
    except SmilesClientError as exc:
        logger.warning(
            "  Failed to fetch boarding tax for %s: %s",
            report.winner.flight.uid,
            exc,
        )
    return report


def run_search(
    plan: SearchPlan,
    client: FlightSource,
    *,
    max_workers: int = 20,
    timeout_s: float = 30.0,
) -> SearchReport:
    """Run the whole search for *plan* and return one report per direction."""
    deadline = time.monotonic() + timeout_s
    logger.info(
        "Searching %s <-> %s, %d day(s) from %s / %s",
        plan.origin,
        plan.destination,
        plan.days,
        plan.first_outbound,
        plan.first_return,
    )

    outbound_q, inbound_q = expand_plan(plan)
    outcomes = fetch_days(
        client, outbound_q + inbound_q, max_workers=max_workers, deadline=deadline
    )

    by_direction: Dict[Direction, List[DayOutcome]] = {d: [] for d in Direction}
    for outcome in outcomes:
        by_direction[outcome.query.direction].append(outcome)

    outbound = reduce_direction(
        client, Direction.OUTBOUND, by_direction[Direction.OUTBOUND], deadline=deadline
    )
    inbound = reduce_direction(
        client, Direction.RETURN, by_direction[Direction.RETURN], deadline=deadline
    )
    return SearchReport(plan=plan, outbound=outbound, inbound=inbound)


__all__ = [
    "FlightSource",
    "SearchTimeout",
    "expand_plan",
    "fetch_days",
    "reduce_direction",
    "run_search",
]
