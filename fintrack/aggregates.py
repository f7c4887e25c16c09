"""Derived figures for the dashboard, budget and goal views.

Every function here is pure: it takes a snapshot of the collections (and an
optional ``today`` for deterministic results) and returns a new value.
"""
import math
from collections import defaultdict
from datetime import date, datetime, timedelta
from functools import reduce
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

from fintrack.domain import EXPENSE, INCOME, BudgetCategory, SavingsGoal, Transaction
from fintrack.filters import by_month

OVER_BUDGET = "over-budget"
NEAR_LIMIT = "near-limit"
ON_TRACK = "on-track"

COMPLETED = "completed"
OVERDUE = "overdue"
UPCOMING = "upcoming"
ACTIVE = "active"

NEAR_LIMIT_PERCENT = 80
ON_TRACK_PERCENT = 50
UPCOMING_WINDOW_DAYS = 30

ONE_DAY = timedelta(days=1)

DateLike = Union[date, datetime]


class MonthlyTotals(NamedTuple):
    income: float
    expenses: float
    balance: float
    income_count: int
    expense_count: int


class BudgetUsage(NamedTuple):
    spent: float
    percentage: float       # clamped to [0, 100] for progress bars
    raw_percentage: float   # unclamped, drives the status
    remaining: float
    status: Optional[str]


class GoalProgress(NamedTuple):
    percentage: float
    raw_percentage: float
    days_remaining: Optional[int]
    status: Optional[str]


class BudgetUtilization(NamedTuple):
    total_limit: float
    total_spent: float
    percentage: int


def _today(today: Optional[DateLike]) -> date:
    if today is None:
        return date.today()
    if isinstance(today, datetime):
        return today.date()
    return today


def current_month(today: Optional[DateLike] = None) -> str:
    return _today(today).strftime("%Y-%m")


def is_current_month(value: str, today: Optional[DateLike] = None) -> bool:
    """Compare the ``YYYY-MM`` prefix of ``value`` with the current month.

    The comparison is lexical, so a date that is not in ``YYYY-MM-DD`` form
    simply fails to match instead of raising.
    """
    if not isinstance(value, str):
        return False
    return value[:7] == current_month(today)


def parse_date(value: str) -> Optional[date]:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def clamp_percentage(value: float) -> float:
    return min(100.0, max(0.0, value))


def income_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.type == INCOME, trans))


def expense_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.type == EXPENSE, trans))


def current_month_transactions(
    trans: Iterable[Transaction], today: Optional[DateLike] = None
) -> Tuple[Transaction, ...]:
    return tuple(filter(by_month(current_month(today)), trans))


def total_amount(trans: Iterable[Transaction]) -> float:
    return reduce(lambda acc, t: acc + t.amount, trans, 0)


def monthly_totals(
    trans: Iterable[Transaction], today: Optional[DateLike] = None
) -> MonthlyTotals:
    monthly = current_month_transactions(trans, today)
    incomes = income_transactions(monthly)
    expenses = expense_transactions(monthly)
    income = total_amount(incomes)
    spent = total_amount(expenses)
    return MonthlyTotals(
        income=income,
        expenses=spent,
        balance=income - spent,
        income_count=len(incomes),
        expense_count=len(expenses),
    )


def budget_spent(
    budget: BudgetCategory, trans: Iterable[Transaction], today: Optional[DateLike] = None
) -> float:
    """Live spending for a budget; the stored ``spent`` field is ignored."""
    return total_amount(
        t for t in expense_transactions(current_month_transactions(trans, today))
        if t.category == budget.name
    )


def budget_status(raw_percentage: float) -> Optional[str]:
    # 50-80% is deliberately left without a label
    if raw_percentage >= 100:
        return OVER_BUDGET
    if raw_percentage >= NEAR_LIMIT_PERCENT:
        return NEAR_LIMIT
    if raw_percentage < ON_TRACK_PERCENT:
        return ON_TRACK
    return None


def budget_usage(
    budget: BudgetCategory, trans: Iterable[Transaction], today: Optional[DateLike] = None
) -> BudgetUsage:
    spent = budget_spent(budget, trans, today)
    raw = spent * 100 / budget.limit if budget.limit > 0 else 0.0
    return BudgetUsage(
        spent=spent,
        percentage=clamp_percentage(raw),
        raw_percentage=raw,
        remaining=budget.limit - spent,
        status=budget_status(raw),
    )


def days_remaining(deadline: str, today: Optional[DateLike] = None) -> Optional[int]:
    """Whole days from today's midnight to the deadline's midnight, rounded up."""
    target = parse_date(deadline)
    if target is None:
        return None
    return math.ceil((target - _today(today)) / ONE_DAY)


def goal_progress(goal: SavingsGoal, today: Optional[DateLike] = None) -> GoalProgress:
    raw = goal.current_amount * 100 / goal.target_amount if goal.target_amount > 0 else 0.0
    days = days_remaining(goal.deadline, today)

    status = None
    if raw >= 100:
        status = COMPLETED
    elif days is not None and days < 0:
        status = OVERDUE
    elif days is not None and days <= UPCOMING_WINDOW_DAYS:
        status = UPCOMING

    return GoalProgress(
        percentage=clamp_percentage(raw),
        raw_percentage=raw,
        days_remaining=days,
        status=status,
    )


def goal_state(goal: SavingsGoal, today: Optional[DateLike] = None) -> str:
    status = goal_progress(goal, today).status
    if status in (COMPLETED, OVERDUE):
        return status
    return ACTIVE


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def total_budget_utilization(
    budgets: Iterable[BudgetCategory],
    trans: Iterable[Transaction],
    today: Optional[DateLike] = None,
) -> BudgetUtilization:
    budgets = tuple(budgets)
    monthly = current_month_transactions(trans, today)
    total_limit = sum(b.limit for b in budgets)
    total_spent = sum(budget_spent(b, monthly, today) for b in budgets)
    percentage = round_half_up(total_spent * 100 / total_limit) if total_limit > 0 else 0
    return BudgetUtilization(total_limit, total_spent, percentage)


def spending_by_category(
    trans: Iterable[Transaction], today: Optional[DateLike] = None
) -> List[Tuple[str, float]]:
    totals: Dict[str, float] = defaultdict(float)
    for t in expense_transactions(current_month_transactions(trans, today)):
        totals[t.category] += t.amount
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)
