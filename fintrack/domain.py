from dataclasses import asdict, dataclass, fields
from typing import NamedTuple, Optional, Tuple
from uuid import uuid4

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

NEUTRAL_COLOR = "#6b7280"


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str          # "income" or "expense"
    amount: float      # always positive, sign comes from type
    category: str
    date: str          # "YYYY-MM-DD"
    description: str = ""


@dataclass(frozen=True)
class BudgetCategory:
    id: str
    name: str
    limit: float
    color: str
    spent: float = 0.0  # legacy, recomputed from transactions


@dataclass(frozen=True)
class SavingsGoal:
    id: str
    name: str
    target_amount: float
    deadline: str      # "YYYY-MM-DD"
    color: str
    current_amount: float = 0.0


class CategoryInfo(NamedTuple):
    name: str
    color: str


EXPENSE_CATEGORIES = (
    CategoryInfo("Food & Dining", "#ef4444"),
    CategoryInfo("Transportation", "#f97316"),
    CategoryInfo("Shopping", "#eab308"),
    CategoryInfo("Entertainment", "#22c55e"),
    CategoryInfo("Bills & Utilities", "#3b82f6"),
    CategoryInfo("Healthcare", "#8b5cf6"),
    CategoryInfo("Education", "#06b6d4"),
    CategoryInfo("Other", NEUTRAL_COLOR),
)

INCOME_CATEGORIES = (
    CategoryInfo("Salary", "#22c55e"),
    CategoryInfo("Freelance", "#3b82f6"),
    CategoryInfo("Investment", "#8b5cf6"),
    CategoryInfo("Gift", "#f59e0b"),
    CategoryInfo("Other", NEUTRAL_COLOR),
)

BUDGET_COLORS = (
    "#ef4444", "#f97316", "#eab308", "#22c55e",
    "#3b82f6", "#8b5cf6", "#06b6d4", "#ec4899",
)


def categories_for(kind: Optional[str]) -> Tuple[CategoryInfo, ...]:
    if kind == INCOME:
        return INCOME_CATEGORIES
    if kind == EXPENSE:
        return EXPENSE_CATEGORIES
    return EXPENSE_CATEGORIES + INCOME_CATEGORIES


def category_color(name: str, kind: Optional[str] = None) -> str:
    """Display color for a category name, gray when the catalog has no match."""
    for cat in categories_for(kind):
        if cat.name == name:
            return cat.color
    return NEUTRAL_COLOR


def generate_id() -> str:
    return uuid4().hex


def to_record(entity) -> dict:
    return asdict(entity)


def _from_record(cls, record: dict):
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in record.items() if k in known})


def transaction_from_record(record: dict) -> Transaction:
    return _from_record(Transaction, record)


def budget_from_record(record: dict) -> BudgetCategory:
    return _from_record(BudgetCategory, record)


def goal_from_record(record: dict) -> SavingsGoal:
    return _from_record(SavingsGoal, record)
