import json
import shutil
from pathlib import Path

from typer.testing import CliRunner

from fsim_core.cli import app
from fsim_core.io.state import load_state


runner = CliRunner()
FIXTURE = Path(__file__).parent / "data" / "state.json"


def _copy_fixture(tmp_path: Path) -> Path:
    path = tmp_path / "state.json"
    shutil.copy(FIXTURE, path)
    return path


def test_cli_init_and_validate(tmp_path: Path):
    state_path = tmp_path / "sample.json"
    result_init = runner.invoke(app, ["init", "--out", str(state_path), "--start", "2025-01"])
    assert result_init.exit_code == 0, result_init.stdout
    assert state_path.exists()

    data = load_state(state_path)
    assert all(sc.start_month == "2025-01" for sc in data.scenarios)

    result_validate = runner.invoke(app, ["validate", "--data", str(state_path)])
    assert result_validate.exit_code == 0, result_validate.stdout
    assert "OK:" in result_validate.stdout


def test_cli_validate_rejects_broken_file(tmp_path: Path):
    broken = tmp_path / "broken.json"
    broken.write_text(json.dumps({"situations": []}))
    result = runner.invoke(app, ["validate", "--data", str(broken)])
    assert result.exit_code != 0


def test_cli_simulate_json_and_csv(tmp_path: Path):
    state_path = _copy_fixture(tmp_path)
    json_path = tmp_path / "ledger.json"
    csv_path = tmp_path / "ledger.csv"

    result_json = runner.invoke(
        app,
        ["simulate", "--data", str(state_path), "--scenario", "alt", "--format", "json", "--out", str(json_path)],
    )
    assert result_json.exit_code == 0, result_json.stdout
    rows = json.loads(json_path.read_text())
    assert [r["month"] for r in rows] == ["2024-02", "2024-03", "2024-04", "2024-05"]
    assert [r["balance"] for r in rows] == [1300, 700, 1000, 1500]

    result_csv = runner.invoke(
        app,
        ["simulate", "--data", str(state_path), "--scenario", "base", "--format", "csv", "--out", str(csv_path)],
    )
    assert result_csv.exit_code == 0, result_csv.stdout
    assert csv_path.read_text().splitlines()[0].startswith("month,balance,income")


def test_cli_simulate_unknown_scenario(tmp_path: Path):
    state_path = _copy_fixture(tmp_path)
    result = runner.invoke(app, ["simulate", "--data", str(state_path), "--scenario", "nope"])
    assert result.exit_code != 0


def test_cli_paint_toggles_on_and_off(tmp_path: Path):
    state_path = _copy_fixture(tmp_path)
    args = ["paint", "--data", str(state_path), "--scenario", "base", "--situation", "car", "--anchor", "2024-02"]

    result_on = runner.invoke(app, args + ["--current", "2024-03"])
    assert result_on.exit_code == 0, result_on.stdout
    assert "add: 2 active month(s) for car" in result_on.stdout
    entries = [e for e in load_state(state_path).scenario("base").entries if e.situation_id == "car"]
    assert [(e.start_month, e.end_month) for e in entries] == [("2024-02", "2024-03")]

    result_off = runner.invoke(app, args)
    assert result_off.exit_code == 0, result_off.stdout
    assert "remove: 1 active month(s) for car" in result_off.stdout
    entries = [e for e in load_state(state_path).scenario("base").entries if e.situation_id == "car"]
    assert [(e.start_month, e.end_month) for e in entries] == [("2024-03", "2024-03")]


def test_cli_paint_effect_to_separate_file(tmp_path: Path):
    state_path = _copy_fixture(tmp_path)
    out_path = tmp_path / "painted.json"
    result = runner.invoke(
        app,
        [
            "paint",
            "--data",
            str(state_path),
            "--scenario",
            "base",
            "--situation",
            "job",
            "--effect",
            "rent",
            "--anchor",
            "2024-02",
            "--mode",
            "remove",
            "--out",
            str(out_path),
        ],
    )
    assert result.exit_code == 0, result.stdout
    painted = load_state(out_path).scenario("base")
    assert [(e.effect_id, e.start_month, e.end_month) for e in painted.effect_entries] == [
        ("rent", "2024-02", "2024-02")
    ]
    assert load_state(state_path).scenario("base").effect_entries == []


def test_cli_compare_and_breakdown(tmp_path: Path):
    state_path = _copy_fixture(tmp_path)
    compare_path = tmp_path / "compare.json"

    result_compare = runner.invoke(app, ["compare", "--data", str(state_path), "--out", str(compare_path)])
    assert result_compare.exit_code == 0, result_compare.stdout
    summaries = {s["scenario_id"]: s for s in json.loads(compare_path.read_text())}
    assert summaries["alt"]["min_balance"] == 700
    assert summaries["alt"]["goal_reached_month"] == "2024-05"
    assert summaries["base"]["final_balance"] == 1900

    result_breakdown = runner.invoke(
        app, ["breakdown", "--data", str(state_path), "--scenario", "alt", "--month", "2024-03"]
    )
    assert result_breakdown.exit_code == 0, result_breakdown.stdout
    assert "March 2024" in result_breakdown.stdout
    assert "Price (one-time)" in result_breakdown.stdout


def test_cli_validate_reports_bad_schema_version(tmp_path: Path):
    broken = tmp_path / "broken.json"
    broken.write_text(json.dumps({"schemaVersion": None, "situations": [], "scenarios": []}))
    result = runner.invoke(app, ["validate", "--data", str(broken)])
    assert result.exit_code == 2
    assert not isinstance(result.exception, TypeError)
