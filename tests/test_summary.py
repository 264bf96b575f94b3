from pathlib import Path

import pandas as pd

from fsim_core.io.state import load_state
from fsim_core.services.simulator import simulate_scenario
from fsim_core.services.summary import actual_vs_planned, compare_scenarios, ledger_frame, summarize_scenario

DATA = Path(__file__).parent / "data" / "state.json"


def _alt():
    data = load_state(DATA)
    scenario = data.scenario("alt")
    return data, scenario, simulate_scenario(scenario, data.situations)


def test_summary_of_scenario_with_dip_and_goal():
    _, scenario, rows = _alt()
    assert [r.balance for r in rows] == [1300, 700, 1000, 1500]

    summary = summarize_scenario(scenario, rows)
    assert summary.final_balance == 1500
    assert summary.min_balance == 700
    assert summary.min_balance_month == "2024-03"
    assert summary.goal_reached_month == "2024-05"
    assert summary.sustainable_ranges == [("2024-02", "2024-05")]
    assert summary.has_variance
    assert summary.negative_months == 0


def test_summary_without_dip_keeps_initial_balance_as_minimum():
    data = load_state(DATA)
    scenario = data.scenario("base")
    summary = summarize_scenario(scenario, simulate_scenario(scenario, data.situations))
    assert summary.min_balance == 1000
    assert summary.min_balance_month is None
    assert summary.goal_reached_month is None


def test_actual_vs_planned():
    _, scenario, rows = _alt()
    df = actual_vs_planned(scenario, rows)
    assert list(df.columns) == ["month", "actual", "planned", "deviation"]
    assert df.to_dict(orient="records") == [
        {"month": "2024-03", "actual": 500.0, "planned": 700.0, "deviation": -200.0}
    ]


def test_ledger_frame_columns():
    _, _, rows = _alt()
    df = ledger_frame(rows)
    assert list(df.columns[:3]) == ["month", "balance", "income"]
    assert len(df) == 4
    assert df["expenses"].tolist() == [200, 1100, 200, 0]


def test_compare_scenarios_on_shared_axis():
    data = load_state(DATA)
    df = compare_scenarios(data.scenarios, data.situations)
    assert df.index.name == "month"
    assert list(df.index) == ["2024-01", "2024-02", "2024-03", "2024-04", "2024-05"]
    assert list(df.columns) == ["base", "alt"]
    assert df.loc["2024-03", "base"] == 1900
    assert df.loc["2024-03", "alt"] == 700
    assert pd.isna(df.loc["2024-01", "alt"])
    assert pd.isna(df.loc["2024-05", "base"])


def test_compare_without_scenarios():
    assert compare_scenarios([], []).empty
