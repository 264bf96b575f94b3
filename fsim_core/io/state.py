from __future__ import annotations

import dataclasses
import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Set, Tuple

from fsim_core.domain.models import (
    DEFAULT_SITUATION_CATEGORY,
    Annotation,
    AppData,
    FinancialEffect,
    SavingsBalancePoint,
    Scenario,
    ScenarioEffectEntry,
    ScenarioEntry,
    Situation,
)
from fsim_core.domain.months import expand_ranges
from fsim_core.services.painting import IdFactory, new_id, situation_active_months, to_effect_entries

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 5
REQUIRED_KEYS = ("situations", "scenarios")


def validate_payload(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise ValueError("State payload must be a JSON object")
    missing = [key for key in REQUIRED_KEYS if key not in payload]
    if missing:
        raise ValueError(f"Missing keys in state payload: {missing}")
    for key in REQUIRED_KEYS:
        if not isinstance(payload[key], list):
            raise ValueError(f"'{key}' must be a list")


def _effect_from_json(item: Dict[str, Any]) -> FinancialEffect:
    variance = item.get("variancePercent")
    return FinancialEffect(
        id=str(item["id"]),
        label=str(item.get("label", "")),
        kind=str(item["type"]),
        category=str(item["category"]),
        amount=float(item["amount"]),
        variance_percent=float(variance) if variance is not None else None,
        variance_direction=item.get("varianceDirection"),
    )


def _situation_from_json(item: Dict[str, Any]) -> Situation:
    category = item.get("category")
    category = category.strip() if isinstance(category, str) else ""
    return Situation(
        id=str(item["id"]),
        name=str(item.get("name", "")),
        description=str(item.get("description", "") or ""),
        category=category or DEFAULT_SITUATION_CATEGORY,
        color=str(item.get("color", "")),
        effects=[_effect_from_json(e) for e in item.get("effects", []) or []],
    )


def _scenario_from_json(item: Dict[str, Any]) -> Scenario:
    goal = item.get("goalBalance")
    return Scenario(
        id=str(item["id"]),
        name=str(item.get("name", "")),
        color=str(item.get("color", "")),
        initial_balance=float(item.get("initialBalance", 0.0)),
        start_month=str(item["startMonth"]),
        duration_months=int(item["durationMonths"]),
        entries=[
            ScenarioEntry(
                id=str(e["id"]),
                situation_id=str(e["situationId"]),
                start_month=str(e["startMonth"]),
                end_month=str(e["endMonth"]),
            )
            for e in item.get("entries", []) or []
        ],
        effect_entries=[
            ScenarioEffectEntry(
                id=str(e["id"]),
                situation_id=str(e["situationId"]),
                effect_id=str(e["effectId"]),
                start_month=str(e["startMonth"]),
                end_month=str(e["endMonth"]),
            )
            for e in item.get("effectEntries", []) or []
        ],
        savings_balance_points=[
            SavingsBalancePoint(id=str(p["id"]), month=str(p["month"]), balance=float(p["balance"]))
            for p in item.get("savingsBalancePoints", []) or []
        ],
        goal_balance=float(goal) if goal is not None else None,
        annotations=[
            Annotation(id=str(a["id"]), month=str(a["month"]), text=str(a.get("text", "")))
            for a in item.get("annotations", []) or []
        ],
    )


def data_from_json(payload: Dict[str, Any]) -> AppData:
    """
    Build AppData from the camelCase JSON form.
    Files older than the current schema stored effect windows as "active" windows;
    those are converted to disabled windows on the way in.
    """
    validate_payload(payload)
    try:
        situations = [_situation_from_json(s) for s in payload["situations"]]
        scenarios = [_scenario_from_json(s) for s in payload["scenarios"]]
        schema_version = int(payload.get("schemaVersion", SCHEMA_VERSION))
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Malformed state payload: {exc!r}") from exc

    if schema_version < SCHEMA_VERSION:
        logger.info("Migrating legacy effect windows to disabled windows")
        scenarios = [migrate_legacy_effect_entries(s) for s in scenarios]
    return AppData(situations=situations, scenarios=scenarios)


def _effect_to_json(effect: FinancialEffect) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": effect.id,
        "label": effect.label,
        "type": effect.kind,
        "category": effect.category,
        "amount": effect.amount,
    }
    if effect.variance_percent is not None:
        payload["variancePercent"] = effect.variance_percent
    if effect.variance_direction is not None:
        payload["varianceDirection"] = effect.variance_direction
    return payload


def _scenario_to_json(scenario: Scenario) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": scenario.id,
        "name": scenario.name,
        "color": scenario.color,
        "initialBalance": scenario.initial_balance,
        "startMonth": scenario.start_month,
        "durationMonths": scenario.duration_months,
        "entries": [
            {"id": e.id, "situationId": e.situation_id, "startMonth": e.start_month, "endMonth": e.end_month}
            for e in scenario.entries
        ],
        "effectEntries": [
            {
                "id": e.id,
                "situationId": e.situation_id,
                "effectId": e.effect_id,
                "startMonth": e.start_month,
                "endMonth": e.end_month,
            }
            for e in scenario.effect_entries
        ],
        "savingsBalancePoints": [
            {"id": p.id, "month": p.month, "balance": p.balance} for p in scenario.savings_balance_points
        ],
        "annotations": [{"id": a.id, "month": a.month, "text": a.text} for a in scenario.annotations],
    }
    if scenario.goal_balance is not None:
        payload["goalBalance"] = scenario.goal_balance
    return payload


def data_to_json(data: AppData) -> Dict[str, Any]:
    return {
        "schemaVersion": SCHEMA_VERSION,
        "situations": [
            {
                "id": s.id,
                "name": s.name,
                "description": s.description,
                "category": s.category,
                "color": s.color,
                "effects": [_effect_to_json(e) for e in s.effects],
            }
            for s in data.situations
        ],
        "scenarios": [_scenario_to_json(s) for s in data.scenarios],
    }


def migrate_legacy_effect_entries(scenario: Scenario, id_factory: IdFactory = new_id) -> Scenario:
    if not scenario.effect_entries:
        return scenario

    legacy_active: Dict[Tuple[str, str], Set[str]] = defaultdict(set)
    for entry in scenario.effect_entries:
        legacy_active[(entry.situation_id, entry.effect_id)] |= expand_ranges([(entry.start_month, entry.end_month)])

    disabled_entries: List[ScenarioEffectEntry] = []
    for (situation_id, effect_id), active_override in legacy_active.items():
        situation_active = situation_active_months(scenario, situation_id)
        disabled_entries.extend(
            to_effect_entries(situation_id, effect_id, situation_active - active_override, id_factory)
        )
    return dataclasses.replace(scenario, effect_entries=disabled_entries)


def load_state(path: str | Path) -> AppData:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    data = data_from_json(payload)
    logger.debug("Loaded %d situation(s), %d scenario(s) from %s", len(data.situations), len(data.scenarios), path)
    return data


def save_state(path: str | Path, data: AppData) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data_to_json(data), f, indent=2, ensure_ascii=False)
    return path
