# payoff/plan_utils.py
import math
from typing import List, Union
import pandas as pd
from .schemas import SimulationError, SimulationResult
from .utils import format_months, money

SCHEDULE_COLUMNS = ["month", "account_id", "name", "payment", "interest", "principal",
                    "ending_balance", "total_paid_month", "month_interest_total"]

def plan_to_dataframe(result: Union[SimulationResult, SimulationError]) -> pd.DataFrame:
    rows = []
    for m in getattr(result, "months", None) or []:
        for a in m.allocations:
            rows.append({
                "month": m.month_index,
                "account_id": a.account_id,
                "name": a.name,
                "payment": a.payment,
                "interest": a.interest_accrued,
                "principal": a.principal_reduction,
                "ending_balance": a.ending_balance,
                "total_paid_month": m.total_paid,
                "month_interest_total": m.total_interest,
            })
    if not rows:
        return pd.DataFrame(columns=SCHEDULE_COLUMNS)
    return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)

def accounts_to_dataframe(result: SimulationResult) -> pd.DataFrame:
    """Payoff table in payment order; zero-balance accounts are left out."""
    rows = []
    for d in result.per_account:
        if d.payment_order is None:
            continue
        months = d.months_to_payoff
        rows.append({
            "Order": d.payment_order,
            "Account": d.name,
            "Balance": money(d.initial_balance),
            "APR (%)": d.apr,
            "Months": math.ceil(months) if months is not None and math.isfinite(months) else None,
            "Time to payoff": format_months(months),
            "Interest": money(d.total_interest),
            "Total paid": money(d.total_paid),
        })
    df = pd.DataFrame(rows, columns=["Order", "Account", "Balance", "APR (%)", "Months",
                                     "Time to payoff", "Interest", "Total paid"])
    return df.sort_values("Order").reset_index(drop=True)

def simulate_total_balance_series(result: SimulationResult) -> List[float]:
    """Total owed at the start, then after each simulated month."""
    start = sum(d.initial_balance for d in result.per_account if d.initial_balance > 0)
    series = [round(start, 2)]
    for m in result.months:
        series.append(round(max(0.0, series[-1] + m.total_interest - m.total_paid), 2))
    return series
