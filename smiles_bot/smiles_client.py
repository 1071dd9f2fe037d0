from __future__ import annotations

import datetime as dt
import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any
from urllib.parse import urlencode

import requests

from .config import Settings
from .models import (
    SMILES_CLUB,
    BoardingTax,
    DayQuery,
    DayResult,
    Fare,
    Flight,
)

logger = logging.getLogger(__name__)

SEARCH_PATH = "/v1/airlines/search"
BOARDING_TAX_PATH = "/v1/airlines/flight/boardingtax"

# Fixed part of the search query, sent in this order.
SEARCH_PARAMS = [
    ("adults", "1"),
    ("cabinType", "all"),
    ("children", "0"),
    ("currencyCode", "ARS"),
    ("infants", "0"),
    ("isFlexibleDateChecked", "false"),
    ("tripType", "2"),
    ("forceCongener", "true"),
    ("r", "ar"),
]

BOARDING_TAX_PARAMS = [
    ("adults", "1"),
    ("children", "0"),
    ("infants", "0"),
    ("highlightText", SMILES_CLUB),
]


class SmilesClientError(RuntimeError):
    """Błąd w komunikacji z API Smiles."""


class SmilesTransportError(SmilesClientError):
    """Request failed, returned a non-200 status or an empty body."""


class SmilesDecodeError(SmilesClientError):
    """Response body is not JSON of the expected shape."""


def build_search_url(
    host: str, departure_date: str, origin: str, destination: str
) -> str:
    params = SEARCH_PARAMS + [
        ("departureDate", departure_date),
        ("originAirportCode", origin),
        ("destinationAirportCode", destination),
    ]
    return f"https://{host}{SEARCH_PATH}?{urlencode(params)}"


def build_boarding_tax_url(host: str, flight_uid: str, fare_uid: str) -> str:
    params = BOARDING_TAX_PARAMS + [
        ("type", "SEGMENT_1"),
        ("uid", flight_uid),
        ("fareuid", fare_uid),
    ]
    return f"https://{host}{BOARDING_TAX_PATH}?{urlencode(params)}"


class SmilesClient:
    """
    Klient API Smiles: wyszukiwarka lotów i opłaty lotniskowe.

    One instance wraps one ``requests.Session`` and is shared by every
    fetch of a single ``/search`` command.
    """

    def __init__(
        self,
        api_key: str,
        *,
        flight_search_host: str,
        boarding_tax_host: str,
        region: str = "ARGENTINA",
        site_url: str = "https://www.smiles.com.ar",
        user_agent: str = "Mozilla/5.0",
        timeout: float = 15.0,
        session: requests.Session | None = None,
        response_file: str | None = None,
    ) -> None:
        self.api_key = api_key
        self.flight_search_host = flight_search_host
        self.boarding_tax_host = boarding_tax_host
        self.region = region
        self.site_url = site_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = session or requests.Session()
        # dev mode: flight searches read this file instead of calling the API
        self.response_file = response_file

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmilesClient":
        return cls(
            settings.smiles_api_key,
            flight_search_host=settings.flight_search_host,
            boarding_tax_host=settings.boarding_tax_host,
            region=settings.region,
            site_url=settings.site_url,
            user_agent=settings.user_agent,
            timeout=settings.request_timeout_s,
            response_file=settings.response_file,
        )

    def __enter__(self) -> "SmilesClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    # ──────────────────────────────────────────────────────────

    def build_headers(self, authority: str) -> dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "region": self.region,
            "origin": self.site_url,
            "referer": self.site_url,
            "channel": "web",
            "authority": authority,
            "user-agent": self.user_agent,
        }

    def fetch_json(
        self, url: str, authority: str, *, timeout: float | None = None
    ) -> Any:
        """GET *url* and return the decoded JSON body.

        *timeout* can only shorten the client-wide request timeout.
        """
        timeout = self.timeout if timeout is None else min(self.timeout, timeout)
        try:
            resp = self.session.get(
                url, headers=self.build_headers(authority), timeout=timeout
            )
        except requests.RequestException as exc:
            raise SmilesTransportError(f"Request to {authority} failed: {exc}") from exc

        if resp.status_code != 200:
            raise SmilesTransportError(
                f"HTTP {resp.status_code} – {resp.text[:120]}"
            )
        if not resp.content:
            raise SmilesTransportError(f"Empty response from {authority}")

        try:
            return resp.json()
        except ValueError as exc:
            raise SmilesDecodeError(f"Invalid JSON from {authority}: {exc}") from exc

    def search_flights(self, query: DayQuery) -> DayResult:
        """Return every flight offered for *query*'s date and route."""
        url = build_search_url(
            self.flight_search_host,
            query.date.isoformat(),
            query.origin,
            query.destination,
        )
        logger.debug("Searching %s -> %s on %s", query.origin, query.destination, query.date)
        if self.response_file:
            data = self._read_response_file()
        else:
            data = self.fetch_json(url, self.flight_search_host)
        try:
            segment = data["requestedFlightSegmentList"][0]
            flights = [self._to_flight(item) for item in segment["flightList"]]
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise SmilesDecodeError(
                f"Unexpected flight search payload for {query.date}: {exc!r}"
            ) from exc
        return DayResult(query_date=query.date, flights=flights)

    def boarding_tax(
        self, flight: Flight, fare: Fare, *, timeout: float | None = None
    ) -> BoardingTax:
        url = build_boarding_tax_url(self.boarding_tax_host, flight.uid, fare.uid)
        data = self.fetch_json(url, self.boarding_tax_host, timeout=timeout)
        try:
            money = data["totals"]["total"]["money"]
            total = Decimal(str(money))
        except (KeyError, TypeError, InvalidOperation) as exc:
            raise SmilesDecodeError(
                f"Unexpected boarding tax payload for {flight.uid}: {exc!r}"
            ) from exc
        return BoardingTax(total=total)

    def _read_response_file(self) -> Any:
        logger.info("Reading flight search response from %s", self.response_file)
        try:
            with open(self.response_file, "r", encoding="utf-8") as fh:
                return json.load(fh)
        except OSError as exc:
            raise SmilesTransportError(
                f"Cannot read response file {self.response_file}: {exc}"
            ) from exc
        except ValueError as exc:
            raise SmilesDecodeError(
                f"Invalid JSON in {self.response_file}: {exc}"
            ) from exc

    @staticmethod
    def _to_fare(item: dict) -> Fare:
        return Fare(
            uid=str(item["uid"]),
            type=item["type"],
            miles=int(item["miles"]),
        )

    def _to_flight(self, item: dict) -> Flight:
        """Mapuje rekord JSON na obiekt Flight."""
        departure = item["departure"]
        return Flight(
            uid=str(item["uid"]),
            departure_airport=departure["airport"]["code"],
            departure_date=dt.datetime.fromisoformat(departure["date"]),
            arrival_airport=item["arrival"]["airport"]["code"],
            cabin=item.get("cabin") or "",
            airline=(item.get("airline") or {}).get("name", ""),
            stops=int(item.get("stops", 0)),
            fares=[self._to_fare(f) for f in item.get("fareList") or []],
        )


__all__ = [
    "SmilesClient",
    "SmilesClientError",
    "SmilesDecodeError",
    "SmilesTransportError",
    "build_boarding_tax_url",
    "build_search_url",
]
