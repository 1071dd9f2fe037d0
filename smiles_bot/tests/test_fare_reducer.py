import random
from datetime import date, datetime, timedelta

from smiles_bot.fare_reducer import cheapest_of_day, pick_winner, smiles_club_fare
from smiles_bot.models import DayResult, Fare, Flight


def make_flight(uid, miles, fare_type="SMILES_CLUB", day=date(2025, 5, 10)):
    fares = [Fare(f"{uid}-s", "SMILES", miles + 10000)]
    if fare_type:
        fares.append(Fare(f"{uid}-c", fare_type, miles))
    return Flight(
        uid=uid,
        departure_airport="EZE",
        departure_date=datetime.combine(day, datetime.min.time()),
        arrival_airport="PUJ",
        cabin="ECONOMIC",
        airline="GOL",
        stops=0,
        fares=fares,
    )


def make_days(miles_per_day, start=date(2025, 5, 10)):
    days = []
    for i, miles in enumerate(miles_per_day):
        d = start + timedelta(days=i)
        flights = [] if miles is None else [make_flight(f"F{i}", miles, day=d)]
        days.append(DayResult(query_date=d, flights=flights))
    return days


def test_smiles_club_fare_takes_first_club_fare():
    flight = make_flight("F1", 30000)
    flight.fares.append(Fare("late", "SMILES_CLUB", 100))
    assert smiles_club_fare(flight).uid == "F1-c"


def test_flight_without_club_fare_is_skipped():
    flight = make_flight("F1", 30000, fare_type=None)
    assert smiles_club_fare(flight) is None
    day = DayResult(date(2025, 5, 10), [flight])
    assert cheapest_of_day(day) is None


def test_cheapest_of_day_ignores_non_club_fares():
    cheap_non_club = make_flight("F1", 1000, fare_type="SMILES_MONEY")
    club = make_flight("F2", 40000)
    best = cheapest_of_day(DayResult(date(2025, 5, 10), [cheap_non_club, club]))
    assert best.flight.uid == "F2"
    assert best.miles == 40000


def test_cheapest_of_day_tie_keeps_first_flight():
    day = DayResult(
        date(2025, 5, 10), [make_flight("F1", 30000), make_flight("F2", 30000)]
    )
    assert cheapest_of_day(day).flight.uid == "F1"


def test_pick_winner_selects_global_minimum():
    days = make_days([40000, 25000, 27000])
    winner = pick_winner(days)
    assert winner.miles == 25000
    assert winner.query_date == date(2025, 5, 11)
    for day in days:
        assert winner.miles <= cheapest_of_day(day).miles


def test_pick_winner_tie_goes_to_earliest_date():
    days = make_days([30000, 20000, 20000])
    assert pick_winner(days).query_date == date(2025, 5, 11)
    assert pick_winner(list(reversed(days))).query_date == date(2025, 5, 11)


def test_pick_winner_independent_of_order():
    days = make_days([31000, 29000, 29000, 35000, None, 29500])
    expected = pick_winner(days)
    rng = random.Random(7)
    for _ in range(10):
        shuffled = days[:]
        rng.shuffle(shuffled)
        got = pick_winner(shuffled)
        assert (got.query_date, got.miles) == (expected.query_date, expected.miles)


def test_no_winner_when_no_club_fares():
    days = [
        DayResult(d.query_date, [make_flight("X", 1000, fare_type=None)])
        for d in make_days([1, 1, 1])
    ]
    assert pick_winner(days) is None
    assert pick_winner([]) is None
