# payoff/schemas.py
import datetime
from typing import Any, List, Literal, Optional, Union
from pydantic import AliasChoices, BaseModel, Field, field_validator
from .utils import safe_amount

Strategy = Literal["avalanche", "snowball"]
Months = Union[int, float]  # float only for the math.inf "never paid off" sentinel

class DebtAccount(BaseModel):
    """
    One revolving balance in a payoff simulation.

    Input only needs id/name/balance/apr; the rest is working state and results
    filled in on the simulator's own copy. `apr` is a percent (24 means 24%).
    Malformed numbers (None, text, NaN, inf) are treated as zero so one bad row
    cannot poison the other accounts.
    """
    id: Optional[Union[int, str]] = None
    name: str = ""
    initial_balance: float = Field(default=0.0, validation_alias=AliasChoices("initial_balance", "balance"))
    apr: float = 0.0
    current_balance: Optional[float] = None
    months_to_payoff: Optional[Months] = None
    total_interest: float = 0.0
    total_paid: float = 0.0
    payment_order: Optional[int] = None

    @field_validator("initial_balance", mode="before")
    @classmethod
    def _coerce_balance(cls, v: Any) -> float:
        return safe_amount(v)

    @field_validator("apr", mode="before")
    @classmethod
    def _coerce_apr(cls, v: Any) -> float:
        # negative rates make no sense for a debt
        return max(0.0, safe_amount(v))

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @property
    def balance(self) -> float:
        return self.initial_balance

class SimulationRequest(BaseModel):
    accounts: List[DebtAccount] = Field(default_factory=list)
    monthly_budget: Optional[float] = None
    strategy: Strategy = "avalanche"

    @field_validator("monthly_budget", mode="before")
    @classmethod
    def _coerce_budget(cls, v: Any) -> Optional[float]:
        # unparseable budgets are reported by the simulator, not raised here
        try:
            return None if v is None else float(v)
        except (TypeError, ValueError):
            return None

    @field_validator("strategy", mode="before")
    @classmethod
    def _normalize_strategy(cls, v: Any) -> str:
        return str(v or "avalanche").strip().lower()

# Per-month schedule (one Allocation per live account per month)
class Allocation(BaseModel):
    account_id: Optional[Union[int, str]] = None
    name: str
    payment: float
    interest_accrued: float
    principal_reduction: float
    ending_balance: float

class RepaymentMonth(BaseModel):
    month_index: int
    allocations: List[Allocation]
    total_interest: float
    total_paid: float

class SimulationResult(BaseModel):
    ok: Literal[True] = True
    strategy: Strategy
    monthly_budget: float
    total_months: Months
    total_interest: float
    total_paid: float
    per_account: List[DebtAccount]
    months: List[RepaymentMonth] = Field(default_factory=list)
    warning: Optional[str] = None

class SimulationError(BaseModel):
    ok: Literal[False] = False
    kind: Literal["invalid_budget", "below_minimums"]
    message: str
    minimum_total: Optional[float] = None

class PayoffEstimate(BaseModel):
    months: Months
    total_interest: float

# Credit card portfolio analytics
class CreditCardSummary(BaseModel):
    total_owed: float
    total_limit: float
    available_credit: float
    utilization: float  # percent
    utilization_tier: Literal["healthy", "moderate", "high"]

class CardPayment(BaseModel):
    account_id: Union[int, str]
    amount: float
    date: datetime.date

class CardBill(BaseModel):
    account_id: Union[int, str]
    amount: float
    due_date: datetime.date

class PaymentStats(BaseModel):
    average_payment_rate: float  # percent of matched statement amounts
    min_payments_only: int
    full_payments: int
