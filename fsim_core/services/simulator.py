from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Set, Tuple

import numpy as np

from fsim_core.domain.models import (
    ONE_TIME,
    VARIANCE_BOTH,
    VARIANCE_DOWN,
    VARIANCE_UP,
    FinancialEffect,
    MonthlyBalance,
    Scenario,
    Situation,
)
from fsim_core.domain.months import clip_to_axis, range_to_months


def disabled_months_by_effect(scenario: Scenario) -> Dict[Tuple[str, str], Set[str]]:
    """Axis-clipped disabled months keyed by (situation_id, effect_id)."""
    disabled: Dict[Tuple[str, str], Set[str]] = defaultdict(set)
    end = scenario.end_month
    for entry in scenario.effect_entries:
        months = range_to_months(entry.start_month, entry.end_month)
        disabled[(entry.situation_id, entry.effect_id)].update(clip_to_axis(months, scenario.start_month, end))
    return dict(disabled)


def amount_bounds(effect: FinancialEffect) -> Tuple[float, float]:
    """
    Lowest and highest amount of one effect.
    The direction says where the amount may deviate: "+" higher, "-" lower, "±" both.
    """
    v = (effect.variance_percent or 0.0) / 100.0
    direction = effect.variance_direction or VARIANCE_BOTH
    up = direction in (VARIANCE_UP, VARIANCE_BOTH)
    down = direction in (VARIANCE_DOWN, VARIANCE_BOTH)
    high = effect.amount * (1 + v) if up else effect.amount
    low = effect.amount * (1 - v) if down else effect.amount
    return low, high


def variance_bounds(effect: FinancialEffect) -> Tuple[float, float]:
    """Signed (pessimistic, optimistic) contributions; a higher expense is the pessimistic side."""
    low, high = amount_bounds(effect)
    if effect.is_income:
        return low, high
    return -high, -low


def simulate_scenario(scenario: Scenario, situations: Iterable[Situation]) -> List[MonthlyBalance]:
    """
    Deterministic monthly ledger over the scenario axis.
    - Entries active in a month contribute all of their situation's enabled effects.
    - One-time effects fire on the first month of each entry range.
    - recurring_net ignores one-time effects; balance_min/max follow the variance band.
    """
    situation_map = {s.id: s for s in situations}
    months = scenario.axis()
    disabled = disabled_months_by_effect(scenario)

    n = len(months)
    income = np.zeros(n)
    expenses = np.zeros(n)
    recurring_net = np.zeros(n)
    income_low = np.zeros(n)
    income_high = np.zeros(n)
    expense_low = np.zeros(n)
    expense_high = np.zeros(n)

    for i, month in enumerate(months):
        for entry in scenario.entries:
            if not entry.covers(month):
                continue
            situation = situation_map.get(entry.situation_id)
            if situation is None:
                continue

            for effect in situation.effects:
                if month in disabled.get((entry.situation_id, effect.id), ()):
                    continue
                if effect.kind == ONE_TIME and month != entry.start_month:
                    continue

                low, high = amount_bounds(effect)
                if effect.is_income:
                    income[i] += effect.amount
                    income_low[i] += low
                    income_high[i] += high
                else:
                    expenses[i] += effect.amount
                    expense_low[i] += low
                    expense_high[i] += high
                if effect.is_recurring:
                    recurring_net[i] += effect.amount if effect.is_income else -effect.amount

    # band tracks are summed per side like the nominal track, so zero variance reproduces it exactly
    net = income - expenses
    net_min = income_low - expense_high
    net_max = income_high - expense_low
    balance = _running_balance(scenario.initial_balance, net)
    balance_min = _running_balance(scenario.initial_balance, net_min)
    balance_max = _running_balance(scenario.initial_balance, net_max)

    return [
        MonthlyBalance(
            month=month,
            balance=float(balance[i]),
            income=float(income[i]),
            expenses=float(expenses[i]),
            net=float(net[i]),
            recurring_net=float(recurring_net[i]),
            balance_min=float(balance_min[i]),
            balance_max=float(balance_max[i]),
        )
        for i, month in enumerate(months)
    ]


def _running_balance(initial: float, nets: np.ndarray) -> np.ndarray:
    # cumsum adds left to right, so each value is exactly the previous balance plus that month's net
    return np.cumsum(np.concatenate(([float(initial)], nets)))[1:]


def simulate_all(scenarios: Iterable[Scenario], situations: Iterable[Situation]) -> Dict[str, List[MonthlyBalance]]:
    situations = list(situations)
    return {scenario.id: simulate_scenario(scenario, situations) for scenario in scenarios}
