from __future__ import annotations

import dataclasses
from typing import Iterable, List, Sequence

import numpy as np
import pandas as pd

from fsim_core.domain.models import MonthlyBalance, Scenario, ScenarioSummary, Situation
from fsim_core.domain.months import months_between, months_to_ranges
from fsim_core.services import simulator


def summarize_scenario(scenario: Scenario, rows: Sequence[MonthlyBalance]) -> ScenarioSummary:
    final_balance = rows[-1].balance if rows else scenario.initial_balance

    min_balance = scenario.initial_balance
    min_balance_month = None
    for row in rows:
        if row.balance < min_balance:
            min_balance = row.balance
            min_balance_month = row.month

    goal_reached_month = None
    if scenario.goal_balance is not None:
        goal_reached_month = next((r.month for r in rows if r.balance >= scenario.goal_balance), None)

    sustainable = months_to_ranges(r.month for r in rows if r.recurring_net >= 0)

    return ScenarioSummary(
        scenario_id=scenario.id,
        name=scenario.name,
        start_month=scenario.start_month,
        end_month=scenario.end_month,
        initial_balance=scenario.initial_balance,
        final_balance=final_balance,
        min_balance=min_balance,
        min_balance_month=min_balance_month,
        goal_balance=scenario.goal_balance,
        goal_reached_month=goal_reached_month,
        sustainable_ranges=[tuple(r) for r in sustainable],
        has_variance=any(r.balance_min != r.balance_max for r in rows),
        negative_months=sum(1 for r in rows if r.balance < 0),
    )


def ledger_frame(rows: Sequence[MonthlyBalance]) -> pd.DataFrame:
    columns = [f.name for f in dataclasses.fields(MonthlyBalance)]
    return pd.DataFrame([dataclasses.asdict(r) for r in rows], columns=columns)


def actual_vs_planned(scenario: Scenario, rows: Sequence[MonthlyBalance]) -> pd.DataFrame:
    """Observed savings balances next to the simulated balance of the same month."""
    planned = {r.month: r.balance for r in rows}
    records = [
        {
            "month": p.month,
            "actual": p.balance,
            "planned": planned[p.month],
            "deviation": p.balance - planned[p.month],
        }
        for p in scenario.savings_balance_points
        if p.month in planned
    ]
    df = pd.DataFrame(records, columns=["month", "actual", "planned", "deviation"])
    return df.sort_values("month").reset_index(drop=True)


def compare_scenarios(scenarios: Iterable[Scenario], situations: Iterable[Situation]) -> pd.DataFrame:
    """
    Balance of every scenario on one shared month axis:
    - Index spans the earliest scenario start to the latest scenario end.
    - One column per scenario id, NaN outside that scenario's own axis.
    """
    scenarios = list(scenarios)
    if not scenarios:
        return pd.DataFrame()

    results = simulator.simulate_all(scenarios, situations)
    start = min(s.start_month for s in scenarios)
    end = max(s.end_month for s in scenarios)
    index = pd.Index(months_between(start, end), name="month")

    columns: List[pd.Series] = []
    for scenario in scenarios:
        rows = results[scenario.id]
        series = pd.Series([r.balance for r in rows], index=[r.month for r in rows], dtype=float, name=scenario.id)
        columns.append(series.reindex(index, fill_value=np.nan))
    return pd.concat(columns, axis=1)
