import json

import pytest
from click.testing import CliRunner

from loan_schedule.main import cli

BASE_ARGS = [
    "-p", "10m",
    "-t", "36",
    "-s", "2023-07-14",
    "--payment-day", "20",
    "--method", "floating_differentiated",
    "--deferment", "6",
    "--rate", "2023-07-14:9.90",
    "--rate", "2023-10-01:9.28",
]


@pytest.fixture
def runner():
    return CliRunner()


def test_schedule_prints_table(runner):
    result = runner.invoke(cli, ["schedule"] + BASE_ARGS)
    assert result.exit_code == 0, result.output
    assert "Total payments" in result.output
    assert "2023-08-20" in result.output
    assert "333333.43" in result.output


def test_schedule_json_export(runner, tmp_path):
    out = tmp_path / "schedule.json"
    result = runner.invoke(
        cli,
        ["schedule"] + BASE_ARGS + ["--adjustment", "2024-03-01:-500k:early repayment", "--output", str(out)],
    )
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["loan"]["calculationMethod"] == "floating_differentiated"
    assert len(data["schedule"]) == 36
    assert data["schedule"][0]["principalDue"] == 0
    assert data["schedule"][-1]["remainingBalance"] == 0
    assert data["totals"]["totalPayments"] > 10_000_000 - 500_000


def test_summary(runner):
    result = runner.invoke(cli, ["summary"] + BASE_ARGS)
    assert result.exit_code == 0, result.output
    assert "Overpayment" in result.output
    assert "Period\tDate" not in result.output


def test_summary_rejects_non_json_output(runner, tmp_path):
    result = runner.invoke(cli, ["summary"] + BASE_ARGS + ["--output", str(tmp_path / "totals.csv")])
    assert result.exit_code != 0


def test_bare_rate_applies_from_start(runner):
    result = runner.invoke(cli, ["summary", "-p", "1000000", "-t", "1", "-s", "2024-01-15", "-r", "12"])
    assert result.exit_code == 0, result.output
    assert "1010191.78" in result.output


def test_day_count_option(runner):
    result = runner.invoke(
        cli, ["summary", "-p", "1000000", "-t", "1", "-s", "2024-01-15", "-r", "12", "--day-count", "act/360"]
    )
    assert result.exit_code == 0, result.output
    assert "10333.33" in result.output


def test_engine_error_is_reported(runner):
    result = runner.invoke(
        cli, ["schedule", "-p", "1000", "-t", "6", "-s", "2024-01-15", "-r", "12", "--deferment", "6"]
    )
    assert result.exit_code == 1
    assert "deferment" in result.output


def test_bad_rate_string(runner):
    result = runner.invoke(cli, ["schedule", "-p", "1000", "-t", "6", "-s", "2024-01-15", "-r", "2024-01-15:abc"])
    assert result.exit_code == 2
    assert "Invalid numeric value" in result.output


@pytest.mark.parametrize(
    "env", [{"LOAN_SCHEDULE_TOLERANCE": "abc"}, {"LOAN_SCHEDULE_DAY_COUNT": "30/360"}]
)
def test_bad_environment_setting(runner, env):
    result = runner.invoke(cli, ["summary", "-p", "1000", "-t", "6", "-s", "2024-01-15", "-r", "12"], env=env)
    assert result.exit_code == 1
    assert "LOAN_SCHEDULE_" in result.output
