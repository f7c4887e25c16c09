import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from fintrack.aggregates import NEAR_LIMIT, OVER_BUDGET

__all__ = [
    'STORE_CHANGED', 'TRANSACTION_ADDED', 'BUDGET_ALERT',
    'Event', 'EventBus', 'budget_alert_handler',
]

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = list(self._subscribers.get(name, ()))
        if not handlers:
            return []

        event = Event(
            name=name,
            ts=datetime.now().isoformat(),
            payload=payload
        )
        logger.debug("publish %s to %d handler(s)", name, len(handlers))
        return [handler(event, payload) for handler in handlers]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, ()):
            self._subscribers[name].remove(handler)

    def subscriber_count(self, name: str) -> int:
        return len(self._subscribers.get(name, ()))


STORE_CHANGED = "STORE_CHANGED"
TRANSACTION_ADDED = "TRANSACTION_ADDED"
BUDGET_ALERT = "BUDGET_ALERT"


def budget_alert_handler(event: Event, payload: dict) -> dict:
    """Turn a budget usage snapshot into an alert message when it needs attention."""
    status = payload.get("status")
    name = payload.get("budget", "")
    spent = payload.get("spent", 0)
    limit = payload.get("limit", 0)

    if status == OVER_BUDGET:
        return {
            "alert": f"Over budget for {name}: {spent:,.2f} / {limit:,.2f}",
            "budget": name,
            "status": status,
        }
    if status == NEAR_LIMIT:
        return {
            "alert": f"Approaching the {name} budget: {spent:,.2f} / {limit:,.2f}",
            "budget": name,
            "status": status,
        }
    return {}
