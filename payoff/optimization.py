# payoff/optimization.py
import math
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union
from .config import get_settings
from .schemas import (
    Allocation, DebtAccount, RepaymentMonth, SimulationError, SimulationRequest, SimulationResult,
)
from .amortization import minimum_payment, monthly_rate
from .utils import format_months, money, round_cents, safe_amount

logger = logging.getLogger(__name__)

SimulationOutcome = Union[SimulationResult, SimulationError]

def normalize_strategy(strategy: Any) -> str:
    strat = str(strategy or "").strip().lower()
    if strat.startswith("snow"):
        return "snowball"
    if strat and not strat.startswith("aval"):
        logger.warning("Unknown payoff strategy %r, using avalanche", strategy)
    return "avalanche"

def strategy_key(strategy: str, balance_of: Callable[[DebtAccount], float]) -> Callable[[DebtAccount], Tuple]:
    """Sort key for one strategy; python's stable sort keeps input order on full ties."""
    if strategy == "snowball":
        return lambda d: (balance_of(d), -d.apr)
    return lambda d: (-d.apr, balance_of(d))

def _clone_accounts(accounts: Iterable[Any]) -> List[DebtAccount]:
    out = []
    for a in accounts:
        data = a.model_dump() if isinstance(a, DebtAccount) else dict(a)
        out.append(DebtAccount(**data))
    return out

def _validate_budget(budget: Any) -> Optional[float]:
    if isinstance(budget, bool):
        return None
    try:
        b = float(budget)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(b) or b <= 0:
        return None
    return b

def _assign_payment_order(active: List[DebtAccount], strategy: str) -> None:
    ranked = sorted(active, key=strategy_key(strategy, lambda d: d.current_balance))
    for i, d in enumerate(ranked, start=1):
        d.payment_order = i

def run_simulation(accounts: Iterable[Any], monthly_budget: Any, strategy: str = "avalanche", *,
                   max_months: Optional[int] = None,
                   min_percent: Optional[float] = None,
                   min_fixed: Optional[float] = None) -> SimulationOutcome:
    """
    Month-by-month payoff of several cards sharing one fixed monthly budget.

    Every live card gets its minimum; whatever the budget has left over goes to
    the strategy's current target (highest APR for avalanche, smallest balance
    for snowball), re-chosen each month. Validation problems come back as a
    SimulationError instead of raising.
    """
    s = get_settings()
    eps = s.epsilon
    ceiling = s.max_months if max_months is None else int(max_months)
    strat = normalize_strategy(strategy)

    budget = _validate_budget(monthly_budget)
    if budget is None:
        logger.info("Rejected payoff simulation: invalid monthly budget %r", monthly_budget)
        return SimulationError(kind="invalid_budget", message="Please enter a valid monthly payment amount.")

    ds = _clone_accounts(accounts)
    for d in ds:
        # working balances are kept in whole cents
        d.current_balance = round_cents(max(0.0, d.initial_balance))
        d.months_to_payoff = None
        d.total_interest = 0.0
        d.total_paid = 0.0
        d.payment_order = None
    active = [d for d in ds if d.current_balance > eps]

    def _min_for(d: DebtAccount, balance: float) -> float:
        return minimum_payment(balance, d.apr, min_percent, min_fixed)

    min_total = sum(_min_for(d, d.current_balance) for d in active)
    if round_cents(budget) < round_cents(min_total):
        logger.info("Rejected payoff simulation: budget %.2f below minimums %.2f", budget, min_total)
        return SimulationError(
            kind="below_minimums",
            message=f"Your monthly payment must be at least {money(min_total)} to cover all minimum payments.",
            minimum_total=round_cents(min_total),
        )

    _assign_payment_order(active, strat)
    for d in ds:
        if d.current_balance <= eps:
            d.current_balance = 0.0
            d.months_to_payoff = 0

    key = strategy_key(strat, lambda d: d.current_balance)
    months: List[RepaymentMonth] = []
    total_interest = 0.0
    mi = 0

    while mi < ceiling and any(d.current_balance > eps for d in active):
        mi += 1
        live = sorted((d for d in active if d.current_balance > eps), key=key)
        target = live[0]

        # minimums are set on the statement balance, before this month's interest posts
        minimums: Dict[int, float] = {id(d): _min_for(d, d.current_balance) for d in live}

        month_interest = 0.0
        interest_by: Dict[int, float] = {}
        for d in live:
            interest = round_cents(d.current_balance * monthly_rate(d.apr))
            d.current_balance += interest
            d.total_interest += interest
            interest_by[id(d)] = interest
            month_interest += interest
        total_interest += month_interest

        remaining = budget
        reserved = sum(minimums[id(d)] for d in live[1:])
        allocs: List[Allocation] = []
        for d in live:
            minimum = minimums[id(d)]
            if d is target:
                surplus = remaining - reserved
                pay = min(d.current_balance, max(minimum, surplus), remaining)
            else:
                pay = min(d.current_balance, minimum, remaining)
            pay = min(max(0.0, round_cents(pay)), d.current_balance)
            remaining = max(0.0, remaining - pay)

            d.current_balance -= pay
            d.total_paid += pay
            if d.current_balance <= eps:
                d.current_balance = 0.0
                if d.months_to_payoff is None:
                    d.months_to_payoff = mi
            allocs.append(Allocation(
                account_id=d.id, name=d.name, payment=pay,
                interest_accrued=interest_by[id(d)],
                principal_reduction=max(0.0, pay - interest_by[id(d)]),
                ending_balance=round_cents(d.current_balance),
            ))

        months.append(RepaymentMonth(
            month_index=mi, allocations=allocs,
            total_interest=round_cents(month_interest),
            total_paid=round_cents(sum(a.payment for a in allocs)),
        ))

    warning = None
    unresolved = [d for d in active if d.current_balance > eps]
    if unresolved:
        for d in unresolved:
            d.months_to_payoff = math.inf
        warning = f"Payment too low to guarantee full payoff within {format_months(ceiling)}."
        logger.warning("Payoff ceiling of %d months reached with %d account(s) unpaid", ceiling, len(unresolved))

    for d in ds:
        d.total_interest = round_cents(d.total_interest)
        d.total_paid = round_cents(d.total_paid)
        d.current_balance = round_cents(d.current_balance)

    total_months = max((d.months_to_payoff for d in active), default=0)
    total_interest = round_cents(total_interest)
    total_paid = round_cents(sum(d.initial_balance for d in active) + total_interest)
    logger.debug("%s payoff: %s months, interest %.2f over %d account(s)",
                 strat, total_months, total_interest, len(active))

    return SimulationResult(
        strategy=strat,
        monthly_budget=budget,
        total_months=total_months,
        total_interest=total_interest,
        total_paid=total_paid,
        per_account=ds,
        months=months,
        warning=warning,
    )

def simulate(request: SimulationRequest, **kwargs) -> SimulationOutcome:
    return run_simulation(request.accounts, request.monthly_budget, request.strategy, **kwargs)

def compute_avalanche_plan(accounts: Iterable[Any], budget: Any, **kwargs) -> SimulationOutcome:
    return run_simulation(accounts, budget, "avalanche", **kwargs)

def compute_snowball_plan(accounts: Iterable[Any], budget: Any, **kwargs) -> SimulationOutcome:
    return run_simulation(accounts, budget, "snowball", **kwargs)
