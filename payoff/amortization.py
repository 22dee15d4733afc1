# payoff/amortization.py
import math
from typing import Optional
from .config import get_settings
from .schemas import PayoffEstimate
from .utils import safe_amount

def monthly_rate(apr: float) -> float:
    # apr is a percent: 24 -> 0.02 per month
    return max(0.0, safe_amount(apr)) / 100.0 / 12.0

def minimum_payment(balance: float, apr: float,
                    min_percent: Optional[float] = None, min_fixed: Optional[float] = None) -> float:
    """
    Card-issuer style minimum: the higher of a fixed floor or
    `min_percent` of the balance plus this month's interest, but never
    more than the balance plus that interest.
    """
    s = get_settings()
    balance = safe_amount(balance)
    if balance <= 0:
        return 0.0
    pct = s.min_percent if min_percent is None else safe_amount(min_percent)
    fixed = s.min_fixed if min_fixed is None else safe_amount(min_fixed)
    interest = balance * monthly_rate(apr)
    percent_based = balance * (pct / 100.0) + interest
    return min(max(fixed, percent_based), balance + interest)

def payoff_time(balance: float, apr: float, payment: float, max_months: Optional[int] = None) -> PayoffEstimate:
    """
    Months and interest to clear one card paying the same amount every month.
    Returns math.inf in both fields when the payment can never clear the balance.
    """
    s = get_settings()
    ceiling = s.single_card_max_months if max_months is None else int(max_months)
    bal = safe_amount(balance)
    if bal <= 0:
        return PayoffEstimate(months=0, total_interest=0.0)
    payment = safe_amount(payment)
    if payment <= 0:
        return PayoffEstimate(months=math.inf, total_interest=math.inf)

    r = monthly_rate(apr)
    if r > 0 and payment <= bal * r:
        return PayoffEstimate(months=math.inf, total_interest=math.inf)

    months = 0
    total_interest = 0.0
    while bal > s.epsilon and months < ceiling:
        months += 1
        interest = bal * r
        total_interest += interest
        bal += interest
        bal -= min(payment, bal)
        if bal < 0:
            bal = 0.0

    if bal > s.epsilon:
        return PayoffEstimate(months=math.inf, total_interest=math.inf)
    return PayoffEstimate(months=months, total_interest=total_interest)
