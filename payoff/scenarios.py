# payoff/scenarios.py
import math
from typing import Any, Dict, Iterable
from .optimization import run_simulation
from .utils import safe_amount

def _months_key(m: float) -> float:
    return m if m is not None else math.inf

def _saved(base: float, scen: float) -> float:
    # an unbounded baseline against a finite scenario counts as unbounded savings
    if math.isinf(base) and math.isinf(scen):
        return 0.0
    return max(0.0, base - scen)

def compare_strategies(accounts: Iterable[Any], budget: Any, **kwargs) -> Dict[str, Any]:
    """
    Run avalanche and snowball on the same accounts and budget.
    If the budget itself is rejected, the SimulationError is returned under "error".
    """
    accounts = list(accounts)
    aval = run_simulation(accounts, budget, "avalanche", **kwargs)
    if not aval.ok:
        return {"error": aval}
    snow = run_simulation(accounts, budget, "snowball", **kwargs)

    best = min(
        [aval, snow],
        key=lambda r: (r.total_interest, _months_key(r.total_months)),
    )
    worst = snow if best is aval else aval
    return {
        "avalanche": aval,
        "snowball": snow,
        "best_strategy": best.strategy,
        "interest_savings": round(_saved(worst.total_interest, best.total_interest), 2),
        "months_saved": _saved(_months_key(worst.total_months), _months_key(best.total_months)),
    }

def compare_extra_payment(accounts: Iterable[Any], budget: Any, extra: float = 0.0,
                          strategy: str = "avalanche", **kwargs) -> Dict[str, Any]:
    accounts = list(accounts)
    base = run_simulation(accounts, budget, strategy, **kwargs)
    if not base.ok:
        return {"error": base}
    scenario = run_simulation(accounts, base.monthly_budget + max(0.0, safe_amount(extra)), strategy, **kwargs)
    return {
        "baseline": base,
        "scenario": scenario,
        "interest_savings": round(_saved(base.total_interest, scenario.total_interest), 2),
        "months_saved": _saved(_months_key(base.total_months), _months_key(scenario.total_months)),
    }
