from __future__ import annotations

from typing import Dict, Iterable

from fsim_core.domain.models import ONE_TIME, EffectLine, MonthBreakdown, Scenario, Situation, SituationLine
from fsim_core.services.simulator import disabled_months_by_effect


def get_month_breakdown(scenario: Scenario, situations: Iterable[Situation], month: str) -> MonthBreakdown:
    """
    Contributing effects of one month grouped per situation, using the simulator's
    activity and override rules. Amounts are nominal, without the variance band.
    """
    breakdown = MonthBreakdown(month=month, situations=[])
    if not scenario.in_axis(month):
        return breakdown

    situation_map = {s.id: s for s in situations}
    disabled = disabled_months_by_effect(scenario)
    lines: Dict[str, SituationLine] = {}

    for entry in scenario.entries:
        if not entry.covers(month):
            continue
        situation = situation_map.get(entry.situation_id)
        if situation is None:
            continue

        for effect in situation.effects:
            if month in disabled.get((situation.id, effect.id), ()):
                continue
            is_one_time = effect.kind == ONE_TIME
            if is_one_time and month != entry.start_month:
                continue

            line = lines.get(situation.id)
            if line is None:
                line = SituationLine(situation_id=situation.id, name=situation.name, color=situation.color, effects=[])
                lines[situation.id] = line
            line.effects.append(
                EffectLine(
                    effect_id=effect.id,
                    label=effect.label,
                    category=effect.category,
                    amount=effect.amount,
                    is_one_time=is_one_time,
                )
            )
            if effect.is_income:
                line.total_income += effect.amount
                breakdown.total_income += effect.amount
            else:
                line.total_expense += effect.amount
                breakdown.total_expense += effect.amount

    breakdown.situations = list(lines.values())
    return breakdown
