import math
import pytest
from payoff.schemas import DebtAccount, SimulationRequest
from payoff.amortization import minimum_payment
from payoff.optimization import (
    compute_avalanche_plan, compute_snowball_plan, normalize_strategy, run_simulation, simulate,
)

def sample_debts():
    return [
        DebtAccount(id="a", name="Card A", balance=1000, apr=24),
        DebtAccount(id="b", name="Card B", balance=500, apr=12),
    ]

def by_id(result):
    return {d.id: d for d in result.per_account}

def test_two_card_avalanche_pays_high_apr_first():
    res = compute_avalanche_plan(sample_debts(), 200)
    assert res.ok
    cards = by_id(res)
    assert cards["a"].payment_order == 1
    assert cards["b"].payment_order == 2
    assert math.isfinite(cards["a"].months_to_payoff)
    assert math.isfinite(cards["b"].months_to_payoff)
    assert cards["a"].months_to_payoff <= cards["b"].months_to_payoff
    assert res.total_interest > 0
    assert res.total_months == max(cards["a"].months_to_payoff, cards["b"].months_to_payoff)
    assert res.warning is None
    assert all(d.current_balance == 0 for d in res.per_account)

def test_snowball_orders_smallest_balance_first():
    res = compute_snowball_plan(sample_debts(), 200)
    cards = by_id(res)
    assert cards["b"].payment_order == 1
    assert cards["a"].payment_order == 2
    assert cards["b"].months_to_payoff <= cards["a"].months_to_payoff

def test_avalanche_interest_not_worse_than_snowball():
    aval = compute_avalanche_plan(sample_debts(), 200)
    snow = compute_snowball_plan(sample_debts(), 200)
    assert aval.total_interest <= snow.total_interest + 1e-6

def test_tie_breaks():
    same_apr = [
        DebtAccount(id="big", balance=800, apr=18),
        DebtAccount(id="small", balance=300, apr=18),
    ]
    assert by_id(run_simulation(same_apr, 300, "avalanche"))["small"].payment_order == 1

    same_balance = [
        DebtAccount(id="low", balance=400, apr=10),
        DebtAccount(id="high", balance=400, apr=20),
    ]
    assert by_id(run_simulation(same_balance, 300, "snowball"))["high"].payment_order == 1

def test_zero_apr_single_card():
    res = run_simulation([{"id": 1, "name": "Store card", "balance": 1200, "apr": 0}], 100, "avalanche")
    assert res.total_months == 12
    assert res.total_interest == 0
    assert res.total_paid == 1200

def test_zero_apr_payoff_is_ceil_of_balance_over_payment():
    res = run_simulation([{"balance": 1000, "apr": 0}], 300)
    assert res.total_months == math.ceil(1000 / 300)
    assert res.per_account[0].total_interest == 0

def test_conservation_per_account():
    res = run_simulation(sample_debts(), 200, "snowball")
    paid_in_schedule = {}
    for m in res.months:
        for a in m.allocations:
            paid_in_schedule[a.account_id] = paid_in_schedule.get(a.account_id, 0.0) + a.payment
    for d in res.per_account:
        assert d.total_interest >= 0
        assert d.total_paid == pytest.approx(d.initial_balance + d.total_interest, abs=0.01)
        assert paid_in_schedule[d.id] == pytest.approx(d.total_paid, abs=0.01)
    assert res.total_paid == pytest.approx(1500 + res.total_interest, abs=0.01)

def test_monotonic_in_budget():
    prev = None
    for budget in (60, 100, 200, 350, 800):
        res = run_simulation(sample_debts(), budget, "avalanche")
        assert res.ok
        if prev is not None:
            assert res.total_months <= prev.total_months
            assert res.total_interest <= prev.total_interest + 1e-9
        prev = res

def test_budget_never_exceeded_in_any_month():
    res = run_simulation(sample_debts(), 120, "avalanche")
    assert all(m.total_paid <= 120 + 0.01 for m in res.months)

def test_deterministic():
    first = run_simulation(sample_debts(), 175, "snowball")
    second = run_simulation(sample_debts(), 175, "snowball")
    assert first.model_dump() == second.model_dump()

def test_caller_accounts_not_mutated():
    debts = sample_debts()
    raw = [{"id": 1, "balance": 700, "apr": 19.99}]
    run_simulation(debts, 200)
    run_simulation(raw, 200)
    assert all(d.current_balance is None and d.months_to_payoff is None for d in debts)
    assert all(d.total_interest == 0 and d.payment_order is None for d in debts)
    assert raw == [{"id": 1, "balance": 700, "apr": 19.99}]

def test_below_minimums_rejected_by_one_cent():
    debts = sample_debts()
    min_total = sum(minimum_payment(d.initial_balance, d.apr) for d in debts)
    assert min_total == pytest.approx(55.0)

    res = run_simulation(debts, round(min_total, 2) - 0.01)
    assert not res.ok
    assert res.kind == "below_minimums"
    assert res.minimum_total == pytest.approx(55.0)
    assert "$55.00" in res.message

    assert run_simulation(debts, round(min_total, 2)).ok

def test_budget_below_first_month_interest_is_rejected():
    res = run_simulation([{"balance": 5000, "apr": 20}], 50)
    assert res.kind == "below_minimums"
    assert res.minimum_total == pytest.approx(133.33)
    assert "$133.33" in res.message

@pytest.mark.parametrize("budget", [0, -10, None, "abc", float("nan"), float("inf")])
def test_invalid_budget(budget):
    res = run_simulation(sample_debts(), budget)
    assert not res.ok
    assert res.kind == "invalid_budget"
    assert res.minimum_total is None

def test_ceiling_marks_unpaid_accounts_infinite():
    debts = [
        DebtAccount(id="big", balance=10000, apr=18),
        DebtAccount(id="tiny", balance=30, apr=0),
    ]
    res = run_simulation(debts, 275, max_months=24)
    assert res.ok
    cards = by_id(res)
    assert cards["tiny"].months_to_payoff == 2
    assert math.isinf(cards["big"].months_to_payoff)
    assert math.isinf(res.total_months)
    assert res.warning == "Payment too low to guarantee full payoff within 2 years."
    assert len(res.months) == 24

def test_zero_and_malformed_balances_are_skipped():
    debts = [
        {"id": "paid", "balance": 0, "apr": 22},
        {"id": "nan", "balance": float("nan"), "apr": 15},
        {"id": "bad-apr", "balance": 400, "apr": "n/a"},
    ]
    res = run_simulation(debts, 100)
    cards = by_id(res)
    assert len(res.per_account) == 3
    assert cards["paid"].payment_order is None and cards["paid"].months_to_payoff == 0
    assert cards["nan"].payment_order is None and cards["nan"].initial_balance == 0
    assert cards["bad-apr"].payment_order == 1
    assert cards["bad-apr"].total_interest == 0
    assert res.total_months == 4
    assert res.total_paid == 400

def test_no_debt_returns_empty_result():
    res = run_simulation([{"balance": 0, "apr": 10}], 100)
    assert res.ok
    assert res.total_months == 0
    assert res.total_interest == 0
    assert res.months == []

def test_simulate_request_and_strategy_normalizing():
    req = SimulationRequest(accounts=sample_debts(), monthly_budget="200", strategy=" Snowball ")
    res = simulate(req)
    assert res.strategy == "snowball"
    assert simulate(SimulationRequest(accounts=sample_debts(), monthly_budget="lots")).kind == "invalid_budget"
    assert normalize_strategy("snow") == "snowball"
    assert normalize_strategy("whatever") == "avalanche"
    assert normalize_strategy(None) == "avalanche"

def test_first_month_posts_interest_before_paying_minimums():
    res = compute_avalanche_plan(sample_debts(), 200)
    first = {a.account_id: a for a in res.months[0].allocations}
    assert first["a"].interest_accrued == pytest.approx(20.00)
    assert first["b"].interest_accrued == pytest.approx(5.00)
    # B's minimum is set on its 500.00 statement balance, not the 505.00 after interest
    assert first["b"].payment == pytest.approx(25.00)
    assert first["a"].payment == pytest.approx(175.00)
    assert first["a"].ending_balance == pytest.approx(845.00)
    assert first["b"].ending_balance == pytest.approx(480.00)

def test_dust_balance_is_treated_as_paid_off():
    res = run_simulation([{"id": "dust", "balance": 0.003, "apr": 10}, {"id": "card", "balance": 100, "apr": 10}], 100)
    assert res.ok
    cards = by_id(res)
    assert cards["dust"].payment_order is None
    assert cards["dust"].months_to_payoff == 0
    assert cards["card"].payment_order == 1
    assert res.total_months == cards["card"].months_to_payoff == 2

    alone = run_simulation([{"balance": 0.003, "apr": 10}], 100)
    assert alone.ok
    assert alone.total_months == 0
    assert alone.months == []

@pytest.mark.parametrize("balance", [100.006, 100.004])
def test_sub_cent_balance_is_never_overpaid(balance):
    res = run_simulation([{"balance": balance, "apr": 0}], 100)
    d = res.per_account[0]
    assert d.current_balance == 0
    assert d.total_paid <= d.initial_balance + 0.005
    assert sum(a.payment for m in res.months for a in m.allocations) == pytest.approx(round(balance, 2))

def test_short_ceiling_warning_uses_months():
    res = run_simulation([{"balance": 10000, "apr": 18}], 300, max_months=6)
    assert math.isinf(res.total_months)
    assert res.warning == "Payment too low to guarantee full payoff within 6 months."
