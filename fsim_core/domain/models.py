from __future__ import annotations

import dataclasses
from typing import List, Optional, Tuple

from fsim_core.domain.months import axis_end, axis_months

RECURRING = "recurring"
ONE_TIME = "one-time"
INCOME = "income"
EXPENSE = "expense"

VARIANCE_UP = "+"
VARIANCE_DOWN = "-"
VARIANCE_BOTH = "±"

DEFAULT_SITUATION_CATEGORY = "Uncategorized"
SITUATION_CATEGORY_SUGGESTIONS = (
    "Income",
    "Fixed costs",
    "Variable costs",
    "Saving & investing",
    "One-off events",
    DEFAULT_SITUATION_CATEGORY,
)
SITUATION_COLORS = (
    "#4f8aff",
    "#22c55e",
    "#f59e0b",
    "#ec4899",
    "#a78bfa",
    "#06b6d4",
    "#f97316",
    "#14b8a6",
    "#fb7185",
    "#84cc16",
)


@dataclasses.dataclass(frozen=True)
class FinancialEffect:
    id: str
    label: str
    kind: str  # "recurring" or "one-time"
    category: str  # "income" or "expense"
    amount: float  # always >= 0, category decides the sign
    variance_percent: Optional[float] = None  # 0..100
    variance_direction: Optional[str] = None  # "+", "-" or "±"

    @property
    def is_income(self) -> bool:
        return self.category == INCOME

    @property
    def is_recurring(self) -> bool:
        return self.kind == RECURRING


@dataclasses.dataclass(frozen=True)
class Situation:
    id: str
    name: str
    category: str = DEFAULT_SITUATION_CATEGORY
    color: str = SITUATION_COLORS[0]
    effects: List[FinancialEffect] = dataclasses.field(default_factory=list)
    description: str = ""

    def effect(self, effect_id: str) -> Optional[FinancialEffect]:
        for effect in self.effects:
            if effect.id == effect_id:
                return effect
        return None


@dataclasses.dataclass(frozen=True)
class ScenarioEntry:
    id: str
    situation_id: str
    start_month: str
    end_month: str  # inclusive

    def covers(self, month: str) -> bool:
        return self.start_month <= month <= self.end_month


@dataclasses.dataclass(frozen=True)
class ScenarioEffectEntry:
    """Window during which one effect of an active situation is disabled."""

    id: str
    situation_id: str
    effect_id: str
    start_month: str
    end_month: str  # inclusive

    def covers(self, month: str) -> bool:
        return self.start_month <= month <= self.end_month


@dataclasses.dataclass(frozen=True)
class SavingsBalancePoint:
    id: str
    month: str
    balance: float


@dataclasses.dataclass(frozen=True)
class Annotation:
    id: str
    month: str
    text: str


@dataclasses.dataclass(frozen=True)
class Scenario:
    id: str
    name: str
    start_month: str
    duration_months: int
    initial_balance: float = 0.0
    color: str = SITUATION_COLORS[0]
    entries: List[ScenarioEntry] = dataclasses.field(default_factory=list)
    effect_entries: List[ScenarioEffectEntry] = dataclasses.field(default_factory=list)
    savings_balance_points: List[SavingsBalancePoint] = dataclasses.field(default_factory=list)
    goal_balance: Optional[float] = None
    annotations: List[Annotation] = dataclasses.field(default_factory=list)

    @property
    def end_month(self) -> str:
        return axis_end(self.start_month, self.duration_months)

    def axis(self) -> List[str]:
        return axis_months(self.start_month, self.duration_months)

    def in_axis(self, month: str) -> bool:
        return self.start_month <= month <= self.end_month


@dataclasses.dataclass(frozen=True)
class MonthlyBalance:
    month: str
    balance: float
    income: float
    expenses: float
    net: float
    recurring_net: float  # net without one-time effects
    balance_min: float  # pessimistic track
    balance_max: float  # optimistic track


@dataclasses.dataclass
class AppData:
    situations: List[Situation]
    scenarios: List[Scenario]

    def situation(self, situation_id: str) -> Optional[Situation]:
        return next((s for s in self.situations if s.id == situation_id), None)

    def scenario(self, scenario_id: str) -> Optional[Scenario]:
        return next((s for s in self.scenarios if s.id == scenario_id), None)

    def replace_scenario(self, scenario: Scenario) -> "AppData":
        scenarios = [scenario if s.id == scenario.id else s for s in self.scenarios]
        return AppData(situations=list(self.situations), scenarios=scenarios)


@dataclasses.dataclass(frozen=True)
class EffectLine:
    effect_id: str
    label: str
    category: str
    amount: float
    is_one_time: bool


@dataclasses.dataclass
class SituationLine:
    situation_id: str
    name: str
    color: str
    effects: List[EffectLine]
    total_income: float = 0.0
    total_expense: float = 0.0


@dataclasses.dataclass
class MonthBreakdown:
    month: str
    situations: List[SituationLine]
    total_income: float = 0.0
    total_expense: float = 0.0

    @property
    def net(self) -> float:
        return self.total_income - self.total_expense

    def income_lines(self) -> List[SituationLine]:
        return [line for line in self.situations if line.total_income > 0]

    def expense_lines(self) -> List[SituationLine]:
        return [line for line in self.situations if line.total_expense > 0]


@dataclasses.dataclass
class ScenarioSummary:
    scenario_id: str
    name: str
    start_month: str
    end_month: str
    initial_balance: float
    final_balance: float
    min_balance: float
    min_balance_month: Optional[str]  # None when nothing dips below the start
    goal_balance: Optional[float] = None
    goal_reached_month: Optional[str] = None
    sustainable_ranges: List[Tuple[str, str]] = dataclasses.field(default_factory=list)
    has_variance: bool = False
    negative_months: int = 0


@dataclasses.dataclass(frozen=True)
class SyncConfig:
    data_file: str = "/data/state.json"
    max_payload_bytes: int = 5 * 1024 * 1024
    retry_ms: int = 2000
    poll_seconds: float = 1.0
