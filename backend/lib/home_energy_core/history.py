from typing import Dict, List, Sequence
from .models import MonthlyUsage


def _change_pct(prev: float, curr: float) -> float:
    if prev == 0:
        return 0.0
    return (curr - prev) / prev * 100


def summarize_history(history: Sequence[MonthlyUsage]) -> Dict:
    """
    Simple averages and month-over-month trends for a history series
    supplied by the caller (oldest first). Nothing here is stored.
    """
    months: List[Dict] = []
    for i, m in enumerate(history):
        prev = history[i - 1] if i > 0 else None
        months.append({
            "month": m.month,
            "units": m.units,
            "cost": m.cost,
            "cost_per_unit": m.cost / m.units if m.units else 0.0,
            "cost_change_pct": _change_pct(prev.cost, m.cost) if prev else 0.0,
        })

    if len(history) >= 2:
        prev, latest = history[-2], history[-1]
        unit_change = _change_pct(prev.units, latest.units)
        cost_change = _change_pct(prev.cost, latest.cost)
    else:
        unit_change = cost_change = 0.0

    count = len(history)
    return {
        "count": count,
        "avg_units": sum(m.units for m in history) / count if count else 0.0,
        "avg_cost": sum(m.cost for m in history) / count if count else 0.0,
        "unit_change_pct": unit_change,
        "cost_change_pct": cost_change,
        "months": months,
    }
