# payoff/credit_cards.py
import calendar
import datetime
from typing import Any, Iterable, List, Mapping, Optional
from .schemas import CardBill, CardPayment, CreditCardSummary, DebtAccount, PaymentStats
from .utils import safe_amount

CREDIT_CARD_TYPE = "credit card"
HIGH_UTILIZATION = 75.0
MODERATE_UTILIZATION = 30.0
STATEMENT_MIN_RATE = 0.02
BILL_MATCH_DAYS = 30

def _get(obj: Any, key: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return getattr(obj, key, default)

def credit_cards_from_accounts(accounts: Iterable[Any]) -> List[DebtAccount]:
    """Pick the credit cards out of a generic account list, ready for run_simulation."""
    cards = []
    for acc in accounts:
        if str(_get(acc, "type", "")).strip().lower() != CREDIT_CARD_TYPE:
            continue
        cards.append(DebtAccount(
            id=_get(acc, "id"),
            name=_get(acc, "name", ""),
            balance=_get(acc, "current_balance", 0.0),
            apr=_get(acc, "apr", 0.0),
        ))
    return cards

def utilization_tier(utilization: float) -> str:
    if utilization >= HIGH_UTILIZATION:
        return "high"
    if utilization >= MODERATE_UTILIZATION:
        return "moderate"
    return "healthy"

def summarize_credit_cards(cards: Iterable[Any]) -> CreditCardSummary:
    cards = list(cards)
    owed = sum(safe_amount(_get(c, "current_balance", 0.0)) for c in cards)
    limit = sum(safe_amount(_get(c, "credit_limit", 0.0)) for c in cards)
    util = (owed / limit) * 100.0 if limit > 0 else 0.0
    return CreditCardSummary(
        total_owed=round(owed, 2),
        total_limit=round(limit, 2),
        available_credit=round(max(0.0, limit - owed), 2),
        utilization=util,
        utilization_tier=utilization_tier(util),
    )

def _matching_bill(payment: CardPayment, bills: List[CardBill]) -> Optional[CardBill]:
    # bills are sorted newest first, so the first hit is the latest statement in the window
    window_end = payment.date + datetime.timedelta(days=BILL_MATCH_DAYS)
    for b in bills:
        if b.account_id == payment.account_id and payment.date <= b.due_date <= window_end:
            return b
    return None

def payment_stats(payments: Iterable[Any], bills: Iterable[Any],
                  since: Optional[datetime.date] = None,
                  today: Optional[datetime.date] = None) -> PaymentStats:
    """
    How card payments compare with their statements.

    Each payment is matched to a bill for the same card due within 30 days
    after it. A payment within 10% of a 2% minimum counts as minimum-only, one
    within 5% of the statement counts as a full payment. The average rate is
    total payments over total matched statement amounts, in percent.
    Passing `today` without `since` limits the payments to the six months before it.
    """
    pays = [p if isinstance(p, CardPayment) else CardPayment(**p) for p in payments]
    stmts = [b if isinstance(b, CardBill) else CardBill(**b) for b in bills]
    stmts.sort(key=lambda b: b.due_date, reverse=True)
    if since is None and today is not None:
        since = last_six_months(today)
    if since is not None:
        pays = [p for p in pays if p.date >= since]

    total_payments = sum(p.amount for p in pays)
    total_statement = 0.0
    min_only = 0
    full = 0
    for p in pays:
        bill = _matching_bill(p, stmts)
        if bill is None or bill.amount <= 0:
            continue
        total_statement += bill.amount
        min_due = bill.amount * STATEMENT_MIN_RATE
        if abs(p.amount - min_due) / min_due < 0.1:
            min_only += 1
        if abs(p.amount - bill.amount) / bill.amount < 0.05:
            full += 1

    rate = (total_payments / total_statement) * 100.0 if total_statement > 0 else 0.0
    return PaymentStats(average_payment_rate=rate, min_payments_only=min_only, full_payments=full)

def last_six_months(today: Optional[datetime.date] = None) -> datetime.date:
    today = today or datetime.date.today()
    month = today.month - 6
    year = today.year
    if month <= 0:
        month += 12
        year -= 1
    day = min(today.day, calendar.monthrange(year, month)[1])
    return datetime.date(year, month, day)
