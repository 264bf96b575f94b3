from fsim_core.domain.models import FinancialEffect, Scenario, ScenarioEffectEntry, ScenarioEntry, Situation
from fsim_core.services.breakdown import get_month_breakdown

JOB = Situation(
    id="job",
    name="Job",
    color="#4f8aff",
    effects=[
        FinancialEffect("salary", "Salary", "recurring", "income", 3000),
        FinancialEffect("signing", "Signing bonus", "one-time", "income", 1000),
        FinancialEffect("commute", "Commute", "recurring", "expense", 150),
    ],
)
RENT = Situation(id="rent", name="Rent", effects=[FinancialEffect("rent", "Rent", "recurring", "expense", 900)])


def _scenario() -> Scenario:
    return Scenario(
        id="sc",
        name="Test",
        start_month="2024-01",
        duration_months=6,
        entries=[
            ScenarioEntry("e1", "job", "2024-02", "2024-05"),
            ScenarioEntry("e2", "rent", "2024-01", "2024-06"),
            ScenarioEntry("e3", "ghost", "2024-01", "2024-06"),
        ],
        effect_entries=[ScenarioEffectEntry("o1", "job", "commute", "2024-04", "2024-05")],
    )


def test_first_month_of_entry_includes_one_time_effects():
    result = get_month_breakdown(_scenario(), [JOB, RENT], "2024-02")
    assert [line.situation_id for line in result.situations] == ["job", "rent"]

    job = result.situations[0]
    assert [e.effect_id for e in job.effects] == ["salary", "signing", "commute"]
    assert job.effects[1].is_one_time
    assert job.total_income == 4000
    assert job.total_expense == 150
    assert result.total_income == 4000
    assert result.total_expense == 1050
    assert result.net == 2950


def test_disabled_effects_and_later_months():
    result = get_month_breakdown(_scenario(), [JOB, RENT], "2024-04")
    job = result.situations[0]
    assert [e.effect_id for e in job.effects] == ["salary"]
    assert result.net == 3000 - 900


def test_lines_by_side():
    result = get_month_breakdown(_scenario(), [JOB, RENT], "2024-03")
    assert [line.situation_id for line in result.income_lines()] == ["job"]
    assert [line.situation_id for line in result.expense_lines()] == ["job", "rent"]


def test_month_without_active_situations():
    result = get_month_breakdown(_scenario(), [JOB], "2024-06")
    assert result.situations == []
    assert result.net == 0


def test_month_outside_axis_is_empty():
    result = get_month_breakdown(_scenario(), [JOB, RENT], "2024-09")
    assert result.situations == []
    assert result.total_income == 0 and result.total_expense == 0
