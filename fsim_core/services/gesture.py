from __future__ import annotations

import dataclasses
from typing import Optional, Set, Union

from fsim_core.domain.models import Scenario
from fsim_core.domain.months import months_between, sort_months
from fsim_core.services import painting


@dataclasses.dataclass(frozen=True)
class PaintTarget:
    situation_id: str
    effect_id: Optional[str] = None  # None paints the situation row itself

    @property
    def is_effect(self) -> bool:
        return self.effect_id is not None


@dataclasses.dataclass(frozen=True)
class Idle:
    pass


@dataclasses.dataclass(frozen=True)
class Painting:
    target: PaintTarget
    anchor: str
    current: str
    mode: str  # "add" or "remove", fixed at press time

    def span(self) -> Set[str]:
        start, end = sort_months(self.anchor, self.current)
        return set(months_between(start, end))


GestureState = Union[Idle, Painting]


def committed_months(scenario: Scenario, target: PaintTarget) -> Set[str]:
    if target.is_effect:
        return painting.effect_active_months(scenario, target.situation_id, target.effect_id)
    return painting.situation_active_months(scenario, target.situation_id, clip=True)


class PaintGesture:
    """
    Two-state brush gesture over a scenario timeline.

    ``press`` moves Idle -> Painting and fixes the mode from the anchor cell,
    ``hover`` only moves the live end of the range, and ``release`` is the one
    transition that commits (Painting -> Idle).
    """

    def __init__(self) -> None:
        self.state: GestureState = Idle()

    @property
    def is_painting(self) -> bool:
        return isinstance(self.state, Painting)

    def press(self, scenario: Scenario, target: PaintTarget, month: str) -> Optional[Painting]:
        if self.is_painting:
            return None
        if target.is_effect:
            active = painting.situation_active_months(scenario, target.situation_id, clip=True)
            if month not in active:
                return None
        is_active = month in committed_months(scenario, target)
        mode = painting.REMOVE if is_active else painting.ADD
        self.state = Painting(target=target, anchor=month, current=month, mode=mode)
        return self.state

    def hover(self, target: PaintTarget, month: str) -> None:
        state = self.state
        if isinstance(state, Painting) and state.target == target:
            self.state = dataclasses.replace(state, current=month)

    def preview(self, scenario: Scenario, target: PaintTarget, month: str) -> bool:
        if target.is_effect:
            if month not in painting.situation_active_months(scenario, target.situation_id, clip=True):
                return False
        committed = month in committed_months(scenario, target)
        state = self.state
        if not isinstance(state, Painting) or state.target != target:
            return committed
        start, end = sort_months(state.anchor, state.current)
        in_range = start <= month <= end
        if state.mode == painting.ADD:
            return committed or in_range
        return committed and not in_range

    def release(self, scenario: Scenario, id_factory: painting.IdFactory = painting.new_id) -> Scenario:
        state = self.state
        if not isinstance(state, Painting):
            return scenario
        self.state = Idle()
        months = state.span()
        if state.target.is_effect:
            return painting.paint_effect(
                scenario, state.target.situation_id, state.target.effect_id, months, state.mode, id_factory
            )
        return painting.paint_situation(scenario, state.target.situation_id, months, state.mode, id_factory)

    def cancel(self) -> None:
        self.state = Idle()
