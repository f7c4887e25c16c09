from dataclasses import replace
from typing import Tuple, TypeVar

from fintrack.domain import SavingsGoal

T = TypeVar("T")


def prepend(items: Tuple[T, ...], item: T) -> Tuple[T, ...]:
    return (item,) + items


def append(items: Tuple[T, ...], item: T) -> Tuple[T, ...]:
    return items + (item,)


def update_by_id(items: Tuple[T, ...], item_id: str, **patch) -> Tuple[T, ...]:
    return tuple(
        replace(item, **patch) if item.id == item_id else item
        for item in items
    )


def remove_by_id(items: Tuple[T, ...], item_id: str) -> Tuple[T, ...]:
    return tuple(filter(lambda item: item.id != item_id, items))


def contains_id(items: Tuple[T, ...], item_id: str) -> bool:
    return any(item.id == item_id for item in items)


def contribute(goal: SavingsGoal, amount: float) -> SavingsGoal:
    return replace(goal, current_amount=goal.current_amount + amount)


def replace_by_id(items: Tuple[T, ...], updated: T) -> Tuple[T, ...]:
    return tuple(updated if item.id == updated.id else item for item in items)
