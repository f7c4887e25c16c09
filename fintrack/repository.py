"""Persisted collections of transactions, budgets and goals."""

import logging
from typing import Any, Callable, Generic, Iterable, List, Optional, Tuple, TypeVar

from fintrack import transforms
from fintrack.domain import (
    budget_from_record,
    goal_from_record,
    to_record,
    transaction_from_record,
)
from fintrack.functional import Maybe, Nothing, Some, find_by_id
from fintrack.store import KeyValueStore

T = TypeVar("T")

TRANSACTIONS = "transactions"
BUDGETS = "budgets"
GOALS = "goals"

logger = logging.getLogger(__name__)


class Collection(Generic[T]):
    """An ordered list of entities stored under one key.

    Every mutation is a single ``store.update``: the current list is read,
    a pure transform is applied and the result written back under the
    store's lock, so the next ``read`` anywhere sees it and no concurrent
    mutation is lost.

    Records that no longer decode are skipped on read with a warning and
    carried through mutations untouched.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        from_record: Callable[[dict], T],
        prepend: bool = False,
    ):
        self.store = store
        self.key = key
        self._from_record = from_record
        self._prepend = prepend

    def _decode(self, records) -> Tuple[Tuple[T, ...], List[Any]]:
        items, unreadable = [], []
        for record in records or []:
            try:
                items.append(self._from_record(record))
            except (TypeError, ValueError, AttributeError) as exc:
                logger.warning("%s: skipping unreadable record %r: %s", self.key, record, exc)
                unreadable.append(record)
        return tuple(items), unreadable

    def _mutate(self, change: Callable[[Tuple[T, ...]], Optional[Iterable[T]]]) -> bool:
        def _apply(records):
            items, unreadable = self._decode(records)
            updated = change(items)
            if updated is None:
                return None
            return [to_record(item) for item in updated] + unreadable

        return self.store.update(self.key, _apply, []) is not None

    def read(self) -> Tuple[T, ...]:
        return self._decode(self.store.get(self.key, []))[0]

    def get(self, item_id: str) -> Maybe[T]:
        return find_by_id(self.read(), item_id)

    def append(self, item: T) -> None:
        add = transforms.prepend if self._prepend else transforms.append
        self._mutate(lambda items: add(items, item))
        logger.info("%s: added %s", self.key, item.id)

    def replace_all(self, items: Iterable[T]) -> None:
        items = tuple(items)
        self.store.set(self.key, [to_record(item) for item in items])
        logger.info("%s: replaced with %d item(s)", self.key, len(items))

    def update_by_id(self, item_id: str, **patch) -> None:
        def _change(items):
            if not transforms.contains_id(items, item_id):
                return None
            return transforms.update_by_id(items, item_id, **patch)

        if not self._mutate(_change):
            logger.debug("%s: update of unknown id %s ignored", self.key, item_id)
            return
        logger.info("%s: updated %s (%s)", self.key, item_id, ", ".join(sorted(patch)))

    def modify(self, item_id: str, change: Callable[[T], T]) -> Maybe[T]:
        """Replace one entity with ``change(entity)`` in a single write.

        Returns the stored result, or Nothing when the id is unknown.
        """
        written: List[T] = []

        def _change(items):
            found = find_by_id(items, item_id)
            if found.is_none():
                return None
            written.append(change(found.get_or_else(None)))
            return transforms.replace_by_id(items, written[-1])

        if not self._mutate(_change):
            logger.debug("%s: change of unknown id %s ignored", self.key, item_id)
            return Nothing()
        logger.info("%s: updated %s", self.key, item_id)
        return Some(written[-1])

    def remove_by_id(self, item_id: str) -> None:
        def _change(items):
            if not transforms.contains_id(items, item_id):
                return None
            return transforms.remove_by_id(items, item_id)

        if not self._mutate(_change):
            logger.debug("%s: removal of unknown id %s ignored", self.key, item_id)
            return
        logger.info("%s: removed %s", self.key, item_id)

    def subscribe(self, listener: Callable[[Tuple[T, ...]], None]) -> Callable:
        """Call ``listener`` with the decoded list after every write.

        Returns the callable registered with the store, for ``unsubscribe``.
        """
        def _decoded(records):
            listener(self._decode(records)[0])

        self.store.subscribe(self.key, _decoded)
        return _decoded

    def unsubscribe(self, registered: Callable) -> None:
        self.store.unsubscribe(self.key, registered)

    def __len__(self) -> int:
        return len(self.read())


class Repository:
    """The three collections the app works with, sharing one store."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.transactions = Collection(store, TRANSACTIONS, transaction_from_record, prepend=True)
        self.budgets = Collection(store, BUDGETS, budget_from_record)
        self.goals = Collection(store, GOALS, goal_from_record)

    @property
    def bus(self):
        return self.store.bus
