"""Tests for the command-line interface."""

import csv
import json

import pytest
from click.testing import CliRunner

from mortgage_calc.main import cli

DETAILS = ["--price", "250,000", "--deposit", "30,000", "--income", "45,000", "--term", "25"]


@pytest.fixture
def runner():
    return CliRunner()


def test_summary(runner):
    result = runner.invoke(cli, ["summary", *DETAILS, "--rate", "4.5"])

    assert result.exit_code == 0, result.output
    assert "£1222.83" in result.output
    assert "£220,000" in result.output
    assert "88.0%" in result.output
    assert "Scenario comparison" not in result.output


def test_summary_with_comparison_rate(runner):
    result = runner.invoke(cli, ["summary", *DETAILS, "--rate", "4.5", "--rate-b", "5.2"])

    assert result.exit_code == 0, result.output
    assert "Scenario comparison" in result.output


def test_summary_json_export(runner, tmp_path):
    path = tmp_path / "summary.json"
    result = runner.invoke(cli, ["summary", *DETAILS, "--rate", "4.5", "--output", str(path)])

    assert result.exit_code == 0, result.output
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["loan_amount"] == 220000
    assert data["has_scenario_b"] is False
    assert data["scenario_b"] is None
    assert data["inputs"]["propertyPrice"] == "250,000"
    assert [p["month"] for p in data["schedule"]["last"]] == [298, 299, 300]


def test_summary_rejects_other_export_formats(runner, tmp_path):
    result = runner.invoke(cli, ["summary", *DETAILS, "--rate", "4.5", "--output", str(tmp_path / "s.csv")])

    assert result.exit_code == 2


def test_invalid_price(runner):
    result = runner.invoke(cli, ["summary", "--price", "abc", "--income", "45000", "--term", "25", "--rate", "4.5"])

    assert result.exit_code == 2
    assert "valid property price" in result.output


def test_invalid_rate(runner):
    result = runner.invoke(cli, ["summary", *DETAILS, "--rate", "0"])

    assert result.exit_code == 2
    assert "valid interest rate" in result.output


def test_blank_price_is_incomplete(runner):
    result = runner.invoke(cli, ["summary", "--price", "", "--income", "45000", "--term", "25", "--rate", "4.5"])

    assert result.exit_code == 2
    assert "To continue" in result.output


def test_schedule_snapshot(runner):
    result = runner.invoke(cli, ["schedule", *DETAILS, "--rate", "4.5"])

    assert result.exit_code == 0, result.output
    assert "First months" in result.output
    assert "Final months" in result.output


def test_schedule_csv_export(runner, tmp_path):
    path = tmp_path / "schedule.csv"
    result = runner.invoke(cli, ["schedule", *DETAILS, "--rate", "4.5", "--output", str(path)])

    assert result.exit_code == 0, result.output
    with path.open(encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Month", "Principal", "Interest", "Balance"]
    assert len(rows) == 301
    assert float(rows[-1][3]) == 0.0


def test_schedule_json_export(runner, tmp_path):
    path = tmp_path / "schedule.json"
    result = runner.invoke(cli, ["schedule", *DETAILS, "--rate", "4.5", "--output", str(path)])

    assert result.exit_code == 0, result.output
    schedule = json.loads(path.read_text(encoding="utf-8"))["schedule"]
    assert len(schedule) == 300


def test_compare(runner):
    result = runner.invoke(cli, ["compare", *DETAILS, "--rate-a", "4.5", "--rate-b", "5.2"])

    assert result.exit_code == 0, result.output
    assert "Scenario A" in result.output
    assert "Scenario B" in result.output


def test_compare_without_loan(runner):
    args = ["compare", "--price", "200000", "--deposit", "200000", "--income", "45000", "--term", "25"]
    result = runner.invoke(cli, [*args, "--rate-a", "4.5", "--rate-b", "5.2"])

    assert result.exit_code == 2
    assert "Scenario B needs a loan amount" in result.output
