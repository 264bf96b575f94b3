from __future__ import annotations

from typing import Optional

from fsim_core.domain.models import (
    EXPENSE,
    INCOME,
    ONE_TIME,
    RECURRING,
    AppData,
    FinancialEffect,
    Scenario,
    ScenarioEntry,
    Situation,
)
from fsim_core.domain.months import add_months, current_month
from fsim_core.services.painting import IdFactory, new_id


def build_sample_data(start: Optional[str] = None, id_factory: IdFactory = new_id) -> AppData:
    """
    Starter data set: six situations and three 24-month scenarios
    (status quo, job change after six months, a sabbatical with one-off events).
    """
    start = start or current_month()
    end = add_months(start, 23)

    def effect(label: str, kind: str, category: str, amount: float) -> FinancialEffect:
        return FinancialEffect(id=id_factory(), label=label, kind=kind, category=category, amount=amount)

    def entry(situation_id: str, first: str, last: str) -> ScenarioEntry:
        return ScenarioEntry(id=id_factory(), situation_id=situation_id, start_month=first, end_month=last)

    full_time = Situation(
        id="sit-full-time",
        name="Full-time job",
        description="Monthly salary from full-time employment",
        category="Income",
        color="#4f8aff",
        effects=[effect("Salary", RECURRING, INCOME, 3200)],
    )
    rent = Situation(
        id="sit-rent",
        name="Rent",
        description="Monthly rent including utilities",
        category="Fixed costs",
        color="#fb7185",
        effects=[effect("Rent", RECURRING, EXPENSE, 900)],
    )
    living = Situation(
        id="sit-living",
        name="Living costs",
        description="Groceries, leisure, clothing",
        category="Variable costs",
        color="#f97316",
        effects=[effect("Living costs", RECURRING, EXPENSE, 600)],
    )
    part_time = Situation(
        id="sit-part-time",
        name="Part-time job",
        description="Income from part-time work",
        category="Income",
        color="#06b6d4",
        effects=[effect("Salary (part-time)", RECURRING, INCOME, 1400)],
    )
    car = Situation(
        id="sit-car",
        name="Car purchase",
        description="One-off vehicle purchase",
        category="One-off events",
        color="#f59e0b",
        effects=[effect("Purchase price", ONE_TIME, EXPENSE, 12000)],
    )
    tax = Situation(
        id="sit-tax-refund",
        name="Tax refund",
        description="Yearly tax refund",
        category="One-off events",
        color="#22c55e",
        effects=[effect("Refund", ONE_TIME, INCOME, 1500)],
    )

    status_quo = Scenario(
        id="scen-status-quo",
        name="Status quo",
        color="#4f8aff",
        initial_balance=8000,
        start_month=start,
        duration_months=24,
        entries=[
            entry(full_time.id, start, end),
            entry(rent.id, start, end),
            entry(living.id, start, end),
        ],
    )

    switch = add_months(start, 6)
    job_change = Scenario(
        id="scen-job-change",
        name="Job change",
        color="#22c55e",
        initial_balance=8000,
        start_month=start,
        duration_months=24,
        entries=[
            entry(full_time.id, start, add_months(start, 5)),
            entry(part_time.id, switch, end),
            entry(rent.id, start, end),
            entry(living.id, start, end),
        ],
    )

    tax_month = add_months(start, 2)
    car_month = add_months(start, 5)
    sabbatical = Scenario(
        id="scen-sabbatical",
        name="Sabbatical",
        color="#a78bfa",
        initial_balance=8000,
        start_month=start,
        duration_months=24,
        entries=[
            entry(rent.id, start, end),
            entry(living.id, start, end),
            entry(tax.id, tax_month, tax_month),
            entry(car.id, car_month, car_month),
        ],
    )

    return AppData(
        situations=[full_time, rent, living, part_time, car, tax],
        scenarios=[status_quo, job_change, sabbatical],
    )
