from __future__ import annotations

import dataclasses
import logging
import uuid
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Set

from fsim_core.domain.models import Scenario, ScenarioEffectEntry, ScenarioEntry
from fsim_core.domain.months import clip_to_axis, expand_ranges, months_to_ranges

logger = logging.getLogger(__name__)

ADD = "add"
REMOVE = "remove"
PAINT_MODES = (ADD, REMOVE)

IdFactory = Callable[[], str]


def new_id() -> str:
    return uuid.uuid4().hex


def _check_mode(mode: str) -> None:
    if mode not in PAINT_MODES:
        raise ValueError(f"Unknown paint mode: {mode!r}")


def situation_active_months(scenario: Scenario, situation_id: str, clip: bool = False) -> Set[str]:
    months = expand_ranges(
        (e.start_month, e.end_month) for e in scenario.entries if e.situation_id == situation_id
    )
    if clip:
        return clip_to_axis(months, scenario.start_month, scenario.end_month)
    return months


def effect_disabled_months(
    scenario: Scenario, situation_id: str, effect_id: str, clip: bool = False
) -> Set[str]:
    months = expand_ranges(
        (e.start_month, e.end_month)
        for e in scenario.effect_entries
        if e.situation_id == situation_id and e.effect_id == effect_id
    )
    if clip:
        return clip_to_axis(months, scenario.start_month, scenario.end_month)
    return months


def effect_active_months(scenario: Scenario, situation_id: str, effect_id: str) -> Set[str]:
    """Months in which the effect actually applies: situation active and not disabled."""
    active = situation_active_months(scenario, situation_id, clip=True)
    return active - effect_disabled_months(scenario, situation_id, effect_id)


def to_scenario_entries(
    situation_id: str, months: Iterable[str], id_factory: IdFactory = new_id
) -> List[ScenarioEntry]:
    return [
        ScenarioEntry(id=id_factory(), situation_id=situation_id, start_month=r.start_month, end_month=r.end_month)
        for r in months_to_ranges(months)
    ]


def to_effect_entries(
    situation_id: str, effect_id: str, months: Iterable[str], id_factory: IdFactory = new_id
) -> List[ScenarioEffectEntry]:
    return [
        ScenarioEffectEntry(
            id=id_factory(),
            situation_id=situation_id,
            effect_id=effect_id,
            start_month=r.start_month,
            end_month=r.end_month,
        )
        for r in months_to_ranges(months)
    ]


def paint_situation(
    scenario: Scenario,
    situation_id: str,
    painted_months: Iterable[str],
    mode: str,
    id_factory: IdFactory = new_id,
) -> Scenario:
    """
    Commit a brush gesture on a situation row.
    - Adds or removes the painted months from the committed active set.
    - Clips to the scenario axis and rebuilds the situation's entries from the minimal ranges.
    - Prunes the situation's effect overrides to the new active set.
    Returns a new scenario; entries of other situations are kept as they are.
    """
    _check_mode(mode)
    painted = set(painted_months)
    active = situation_active_months(scenario, situation_id)
    if mode == ADD:
        active |= painted
    else:
        active -= painted
    active = clip_to_axis(active, scenario.start_month, scenario.end_month)

    other_entries = [e for e in scenario.entries if e.situation_id != situation_id]
    new_entries = to_scenario_entries(situation_id, active, id_factory)

    other_overrides = [e for e in scenario.effect_entries if e.situation_id != situation_id]
    disabled_by_effect: Dict[str, Set[str]] = defaultdict(set)
    for entry in scenario.effect_entries:
        if entry.situation_id == situation_id:
            disabled_by_effect[entry.effect_id].update(expand_ranges([(entry.start_month, entry.end_month)]))

    pruned: List[ScenarioEffectEntry] = []
    for effect_id, disabled in disabled_by_effect.items():
        pruned.extend(to_effect_entries(situation_id, effect_id, disabled & active, id_factory))

    logger.info(
        "Painted situation %s (%s, %d month(s)) in scenario %s: %d range(s)",
        situation_id,
        mode,
        len(painted),
        scenario.id,
        len(new_entries),
    )
    return dataclasses.replace(
        scenario,
        entries=other_entries + new_entries,
        effect_entries=other_overrides + pruned,
    )


def paint_effect(
    scenario: Scenario,
    situation_id: str,
    effect_id: str,
    painted_months: Iterable[str],
    mode: str,
    id_factory: IdFactory = new_id,
) -> Scenario:
    """
    Commit a brush gesture on an effect row. "add" re-enables the effect, "remove" disables it.
    Only months where the situation is active can change; the rest of the gesture is ignored.
    """
    _check_mode(mode)
    active = situation_active_months(scenario, situation_id)
    if not active:
        logger.debug("Situation %s has no active months; effect paint ignored", situation_id)
        return scenario

    painted = set(painted_months)
    disabled = effect_disabled_months(scenario, situation_id, effect_id)
    if mode == ADD:
        disabled -= painted
    else:
        disabled |= painted & active
    disabled = clip_to_axis(disabled & active, scenario.start_month, scenario.end_month)

    others = [
        e for e in scenario.effect_entries if not (e.situation_id == situation_id and e.effect_id == effect_id)
    ]
    new_overrides = to_effect_entries(situation_id, effect_id, disabled, id_factory)

    logger.info(
        "Painted effect %s/%s (%s, %d month(s)) in scenario %s: %d disabled range(s)",
        situation_id,
        effect_id,
        mode,
        len(painted),
        scenario.id,
        len(new_overrides),
    )
    return dataclasses.replace(scenario, effect_entries=others + new_overrides)


def remove_situation(scenario: Scenario, situation_id: str) -> Scenario:
    return dataclasses.replace(
        scenario,
        entries=[e for e in scenario.entries if e.situation_id != situation_id],
        effect_entries=[e for e in scenario.effect_entries if e.situation_id != situation_id],
    )
