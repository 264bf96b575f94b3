from fsim_core.domain.models import (  # noqa: F401
    Annotation,
    AppData,
    FinancialEffect,
    MonthBreakdown,
    MonthlyBalance,
    SavingsBalancePoint,
    Scenario,
    ScenarioEffectEntry,
    ScenarioEntry,
    ScenarioSummary,
    Situation,
    SyncConfig,
)
from fsim_core.domain.months import MonthRange  # noqa: F401

__all__ = [
    "Annotation",
    "AppData",
    "FinancialEffect",
    "MonthBreakdown",
    "MonthRange",
    "MonthlyBalance",
    "SavingsBalancePoint",
    "Scenario",
    "ScenarioEffectEntry",
    "ScenarioEntry",
    "ScenarioSummary",
    "Situation",
    "SyncConfig",
]
