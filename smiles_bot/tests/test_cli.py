from decimal import Decimal
from unittest.mock import patch

from click.testing import CliRunner

from smiles_bot.cli import cli
from smiles_bot.config import get_settings
from smiles_bot.models import (
    BoardingTax,
    DayOutcome,
    DayQuery,
    DayResult,
    Direction,
    DirectionReport,
    SearchPlan,
    SearchReport,
)


def empty_report(plan):
    out = DayOutcome(
        DayQuery(plan.first_outbound, plan.origin, plan.destination, Direction.OUTBOUND),
        result=DayResult(plan.first_outbound, []),
    )
    back = DayOutcome(
        DayQuery(plan.first_return, plan.destination, plan.origin, Direction.RETURN),
        error="HTTP 500",
    )
    return SearchReport(
        plan=plan,
        outbound=DirectionReport(Direction.OUTBOUND, [out]),
        inbound=DirectionReport(Direction.RETURN, [back], tax=BoardingTax(Decimal("1"))),
    )


def test_search_command_prints_plain_text(monkeypatch):
    monkeypatch.setenv("TOKEN", "abc")
    get_settings.cache_clear()

    with patch("smiles_bot.bot.search_sync", side_effect=lambda s, plan: empty_report(plan)):
        result = CliRunner().invoke(
            cli, ["search", "EZE", "PUJ", "2025-05-10", "2025-05-20", "1"]
        )
    get_settings.cache_clear()

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        "VUELOS DE IDA",
        "No se encontraron vuelos SMILES_CLUB",
        "VUELOS DE VUELTA",
        "● 2025-05-20: no se pudo consultar",
    ]


def test_search_command_invalid_args(monkeypatch):
    monkeypatch.setenv("TOKEN", "abc")
    get_settings.cache_clear()

    result = CliRunner().invoke(
        cli, ["search", "EZE", "PUJ", "2025-05-10", "2025-05-20", "11"]
    )
    get_settings.cache_clear()

    assert result.exit_code != 0
    assert "no puede ser mayor a 10" in result.output


def test_bot_command_fails_without_token(monkeypatch):
    monkeypatch.delenv("TOKEN", raising=False)
    get_settings.cache_clear()

    with patch("smiles_bot.bot.run_bot") as run_bot:
        result = CliRunner().invoke(cli, ["bot"])
    get_settings.cache_clear()

    assert result.exit_code != 0
    assert "Invalid configuration" in result.output
    run_bot.assert_not_called()


def test_search_command_runs_without_token(monkeypatch):
    monkeypatch.delenv("TOKEN", raising=False)
    get_settings.cache_clear()

    with patch(
        "smiles_bot.bot.search_sync", side_effect=lambda s, plan: empty_report(plan)
    ) as search_sync:
        result = CliRunner().invoke(
            cli, ["search", "EZE", "PUJ", "2025-05-10", "2025-05-20", "1"]
        )
    get_settings.cache_clear()

    assert result.exit_code == 0, result.output
    settings, plan = search_sync.call_args[0]
    assert settings.telegram_token is None
    assert isinstance(plan, SearchPlan)
    assert (plan.origin, plan.destination, plan.days) == ("EZE", "PUJ", 1)


def test_search_command_response_file(monkeypatch, tmp_path):
    monkeypatch.delenv("SMILES_RESPONSE_FILE", raising=False)
    get_settings.cache_clear()
    path = tmp_path / "search.json"
    path.write_text("{}", encoding="utf-8")

    with patch(
        "smiles_bot.bot.search_sync", side_effect=lambda s, plan: empty_report(plan)
    ) as search_sync:
        result = CliRunner().invoke(
            cli,
            [
                "search",
                "EZE",
                "PUJ",
                "2025-05-10",
                "2025-05-20",
                "1",
                "--response-file",
                str(path),
            ],
        )
    get_settings.cache_clear()

    assert result.exit_code == 0, result.output
    assert search_sync.call_args[0][0].response_file == str(path)
