from typing import Callable, Iterable, Tuple

from fintrack.domain import Transaction

ALL = "all"


def by_type(kind: str):
    def _filter(t: Transaction) -> bool:
        return kind == ALL or t.type == kind

    return _filter


def by_search(text: str):
    needle = text.strip().lower()

    def _filter(t: Transaction) -> bool:
        if not needle:
            return True
        return needle in (t.description or "").lower() or needle in (t.category or "").lower()

    return _filter


def by_month(month: str):
    def _filter(t: Transaction) -> bool:
        return isinstance(t.date, str) and t.date[:7] == month

    return _filter


def filter_transactions(
    trans: Iterable[Transaction], *preds: Callable[[Transaction], bool]
) -> Tuple[Transaction, ...]:
    return tuple(t for t in trans if all(p(t) for p in preds))
