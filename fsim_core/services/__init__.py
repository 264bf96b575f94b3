from fsim_core.services.breakdown import get_month_breakdown  # noqa: F401
from fsim_core.services.gesture import PaintGesture, PaintTarget  # noqa: F401
from fsim_core.services.painting import paint_effect, paint_situation  # noqa: F401
from fsim_core.services.simulator import simulate_all, simulate_scenario  # noqa: F401
from fsim_core.services.summary import compare_scenarios, summarize_scenario  # noqa: F401

__all__ = [
    "get_month_breakdown",
    "PaintGesture",
    "PaintTarget",
    "paint_effect",
    "paint_situation",
    "simulate_all",
    "simulate_scenario",
    "compare_scenarios",
    "summarize_scenario",
]
