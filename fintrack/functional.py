import math
from abc import ABC, abstractmethod
from datetime import date
from typing import Callable, Generic, Iterable, Optional, TypeVar

from fintrack.domain import (
    EXPENSE,
    TRANSACTION_TYPES,
    BudgetCategory,
    SavingsGoal,
    Transaction,
    category_color,
    generate_id,
)

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')

DEFAULT_GOAL_COLOR = "#22c55e"


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def find_by_id(items: Iterable[T], item_id: str) -> Maybe[T]:
    for item in items:
        if item.id == item_id:
            return Some(item)
    return Nothing()


def _missing_fields() -> Left:
    return Left({
        "error": "missing_field",
        "message": "Please fill in all required fields",
    })


def parse_amount(value) -> Optional[float]:
    """Positive finite float from user input, or None."""
    if isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(amount) or math.isinf(amount) or amount <= 0:
        return None
    return amount


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _valid_iso_date(value) -> bool:
    try:
        date.fromisoformat(value)
    except (TypeError, ValueError):
        return False
    return len(value) == 10


def validate_transaction(
    kind: str,
    amount,
    category: str,
    description: str = "",
    on: Optional[str] = None,
) -> Either[dict, Transaction]:
    """Build a new Transaction from form input or explain why it is rejected."""
    if _is_blank(amount) or _is_blank(category):
        return _missing_fields()

    if kind not in TRANSACTION_TYPES:
        return Left({
            "error": "invalid_type",
            "message": f"Unknown transaction type {kind!r}",
            "type": kind,
        })

    value = parse_amount(amount)
    if value is None:
        return Left({
            "error": "invalid_amount",
            "message": "Please enter a valid amount",
            "amount": amount,
        })

    on = on or date.today().isoformat()
    if not _valid_iso_date(on):
        return Left({
            "error": "invalid_date",
            "message": f"Date {on!r} is not in YYYY-MM-DD format",
            "date": on,
        })

    return Right(Transaction(
        id=generate_id(),
        type=kind,
        amount=value,
        category=category.strip(),
        date=on,
        description=description or "",
    ))


def validate_budget(
    name: str,
    limit,
    budgets: Iterable[BudgetCategory],
    color: Optional[str] = None,
) -> Either[dict, BudgetCategory]:
    if _is_blank(name) or _is_blank(limit):
        return _missing_fields()

    value = parse_amount(limit)
    if value is None:
        return Left({
            "error": "invalid_amount",
            "message": "Please enter a valid limit amount",
            "limit": limit,
        })

    name = name.strip()
    if any(b.name == name for b in budgets):
        return Left({
            "error": "duplicate_budget",
            "message": "Budget category already exists",
            "name": name,
        })

    return Right(BudgetCategory(
        id=generate_id(),
        name=name,
        limit=value,
        color=color or category_color(name, EXPENSE),
        spent=0.0,
    ))


def validate_goal(
    name: str,
    target_amount,
    deadline: str,
    color: Optional[str] = None,
) -> Either[dict, SavingsGoal]:
    if _is_blank(name) or _is_blank(target_amount) or _is_blank(deadline):
        return _missing_fields()

    value = parse_amount(target_amount)
    if value is None:
        return Left({
            "error": "invalid_amount",
            "message": "Please enter a valid target amount",
            "target_amount": target_amount,
        })

    if not _valid_iso_date(deadline):
        return Left({
            "error": "invalid_date",
            "message": f"Date {deadline!r} is not in YYYY-MM-DD format",
            "date": deadline,
        })

    return Right(SavingsGoal(
        id=generate_id(),
        name=name.strip(),
        target_amount=value,
        deadline=deadline,
        color=color or DEFAULT_GOAL_COLOR,
        current_amount=0.0,
    ))


def validate_contribution(amount) -> Either[dict, float]:
    value = parse_amount(amount)
    if value is None:
        return Left({
            "error": "invalid_amount",
            "message": "Please enter a valid amount",
            "amount": amount,
        })
    return Right(value)
