from __future__ import annotations

import dataclasses
import logging
from typing import Dict, List, Optional, Set, Tuple

from fsim_core.domain.models import AppData, Scenario, ScenarioEffectEntry, ScenarioEntry
from fsim_core.domain.months import is_month
from fsim_core.services.painting import (
    IdFactory,
    effect_disabled_months,
    new_id,
    remove_situation,
    situation_active_months,
    to_effect_entries,
    to_scenario_entries,
)

logger = logging.getLogger(__name__)


def duplicate_situation(data: AppData, situation_id: str, id_factory: IdFactory = new_id) -> AppData:
    """Insert a copy of a situation right after it, with fresh situation and effect ids."""
    index = next((i for i, s in enumerate(data.situations) if s.id == situation_id), None)
    if index is None:
        return data

    source = data.situations[index]
    copy = dataclasses.replace(
        source,
        id=id_factory(),
        name=f"{source.name} (copy)",
        effects=[dataclasses.replace(e, id=id_factory()) for e in source.effects],
    )
    situations = list(data.situations)
    situations.insert(index + 1, copy)
    logger.info("Duplicated situation %r as %s", source.name, copy.id)
    return AppData(situations=situations, scenarios=list(data.scenarios))


def delete_situation(data: AppData, situation_id: str) -> AppData:
    """Remove a situation together with its entries and overrides in every scenario."""
    logger.info("Deleting situation %s", situation_id)
    return AppData(
        situations=[s for s in data.situations if s.id != situation_id],
        scenarios=[remove_situation(sc, situation_id) for sc in data.scenarios],
    )


def reorder_situations(data: AppData, from_index: int, to_index: int) -> AppData:
    """Move one situation to a new position; out-of-range indexes raise IndexError."""
    situations = list(data.situations)
    moved = situations.pop(from_index)
    situations.insert(to_index, moved)
    return AppData(situations=situations, scenarios=list(data.scenarios))


def resize_scenario(
    scenario: Scenario,
    start_month: Optional[str] = None,
    duration_months: Optional[int] = None,
    id_factory: IdFactory = new_id,
) -> Scenario:
    """
    Move or resize the scenario axis and clip every entry and override to it.
    Situations and overrides left with no month inside the new axis disappear.
    """
    start_month = scenario.start_month if start_month is None else start_month
    duration_months = scenario.duration_months if duration_months is None else duration_months
    if not is_month(start_month):
        raise ValueError(f"Invalid start month: {start_month!r}")
    if duration_months < 1:
        raise ValueError(f"Duration must be at least one month, got {duration_months}")

    resized = dataclasses.replace(scenario, start_month=start_month, duration_months=duration_months)

    active: Dict[str, Set[str]] = {}
    entries: List[ScenarioEntry] = []
    for situation_id in dict.fromkeys(e.situation_id for e in scenario.entries):
        active[situation_id] = situation_active_months(resized, situation_id, clip=True)
        entries.extend(to_scenario_entries(situation_id, active[situation_id], id_factory))

    effect_entries: List[ScenarioEffectEntry] = []
    keys: List[Tuple[str, str]] = list(dict.fromkeys((e.situation_id, e.effect_id) for e in scenario.effect_entries))
    for situation_id, effect_id in keys:
        disabled = effect_disabled_months(resized, situation_id, effect_id, clip=True)
        effect_entries.extend(
            to_effect_entries(situation_id, effect_id, disabled & active.get(situation_id, set()), id_factory)
        )

    logger.info(
        "Resized scenario %s to %s + %d month(s): %d entries, %d overrides",
        scenario.id,
        start_month,
        duration_months,
        len(entries),
        len(effect_entries),
    )
    return dataclasses.replace(resized, entries=entries, effect_entries=effect_entries)
