from datetime import date, timedelta
from typing import Optional, Tuple

from fintrack.domain import (
    EXPENSE,
    INCOME,
    BudgetCategory,
    SavingsGoal,
    Transaction,
    generate_id,
)


def _day(today: date, offset: int) -> str:
    return (today + timedelta(days=offset)).isoformat()


def sample_transactions(today: Optional[date] = None) -> Tuple[Transaction, ...]:
    today = today or date.today()
    return (
        Transaction(generate_id(), INCOME, 3500, "Salary", _day(today, 0), "Monthly salary"),
        Transaction(generate_id(), EXPENSE, 1200, "Bills & Utilities", _day(today, 0), "Rent payment"),
        Transaction(generate_id(), EXPENSE, 45.50, "Food & Dining", _day(today, -1), "Grocery shopping"),
        Transaction(generate_id(), EXPENSE, 25, "Transportation", _day(today, -2), "Gas station"),
    )


def sample_budgets() -> Tuple[BudgetCategory, ...]:
    return (
        BudgetCategory(generate_id(), "Food & Dining", 400, "#ef4444"),
        BudgetCategory(generate_id(), "Transportation", 200, "#f97316"),
        BudgetCategory(generate_id(), "Entertainment", 150, "#22c55e"),
    )


def sample_goals(today: Optional[date] = None) -> Tuple[SavingsGoal, ...]:
    today = today or date.today()
    return (
        SavingsGoal(generate_id(), "Emergency Fund", 5000, _day(today, 90), "#22c55e", current_amount=1250),
        SavingsGoal(generate_id(), "Vacation", 2000, _day(today, 180), "#3b82f6", current_amount=450),
    )
