"""Data models used throughout the project."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

SMILES_CLUB = "SMILES_CLUB"


class Direction(enum.Enum):
    OUTBOUND = "outbound"
    RETURN = "return"


@dataclass(frozen=True, slots=True)
class SearchPlan:
    origin: str
    destination: str
    first_outbound: date
    first_return: date
    days: int


@dataclass(frozen=True, slots=True)
class DayQuery:
    date: date
    origin: str
    destination: str
    direction: Direction


@dataclass(slots=True)
class Fare:
    uid: str
    type: str
    miles: int


@dataclass(slots=True)
class Flight:
    uid: str
    departure_airport: str
    departure_date: datetime
    arrival_airport: str
    cabin: str
    airline: str
    stops: int
    fares: List[Fare] = field(default_factory=list)


@dataclass(slots=True)
class DayResult:
    query_date: date
    flights: List[Flight] = field(default_factory=list)


@dataclass(slots=True)
class Winner:
    flight: Flight
    fare: Fare
    query_date: date

    @property
    def miles(self) -> int:
        return self.fare.miles


@dataclass(slots=True)
class BoardingTax:
    total: Decimal


@dataclass(slots=True)
class DayOutcome:
    """Result of one fan-out task: either ``result`` or ``error`` is set."""

    query: DayQuery
    result: Optional[DayResult] = None
    error: Optional[str] = None


@dataclass(slots=True)
class DirectionReport:
    direction: Direction
    outcomes: List[DayOutcome]
    winner: Optional[Winner] = None
    tax: Optional[BoardingTax] = None


@dataclass(slots=True)
class SearchReport:
    plan: SearchPlan
    outbound: DirectionReport
    inbound: DirectionReport

    def directions(self) -> List[DirectionReport]:
        return [self.outbound, self.inbound]
