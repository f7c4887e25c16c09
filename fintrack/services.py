import logging
from dataclasses import replace
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from fintrack import aggregates
from fintrack.domain import EXPENSE, BudgetCategory, SavingsGoal, Transaction
from fintrack.events import BUDGET_ALERT, TRANSACTION_ADDED, EventBus, budget_alert_handler
from fintrack.filters import ALL, by_search, by_type, filter_transactions
from fintrack.functional import (
    Either,
    Left,
    Right,
    validate_budget,
    validate_contribution,
    validate_goal,
    validate_transaction,
)
from fintrack.repository import Repository
from fintrack.sample_data import sample_budgets, sample_goals, sample_transactions
from fintrack.transforms import contribute

logger = logging.getLogger(__name__)

ALERT_STATUSES = (aggregates.NEAR_LIMIT, aggregates.OVER_BUDGET)


def resolve_category(category: str, budgets: Iterable[BudgetCategory]) -> str:
    """Snap a typed category onto an existing budget name.

    Budget spending is matched by exact name, so "food & dining " would
    silently miss the "Food & Dining" budget. Matching ignores case and
    surrounding whitespace; unmatched categories are kept as typed.
    """
    wanted = category.strip().casefold()
    for budget in budgets:
        if budget.name.strip().casefold() == wanted:
            return budget.name
    return category.strip()


class FinanceService:
    """Facade used by the UI: validated writes plus the derived dashboard figures.

    Every write is validated first and returns an Either; a Left means nothing
    was stored and carries a message fit for a toast.
    """

    def __init__(self, repository: Repository, bus: Optional[EventBus] = None):
        self.repository = repository
        self.bus = bus or repository.bus
        self.alerts: List[dict] = []
        if not self.bus.subscriber_count(BUDGET_ALERT):
            self.bus.subscribe(BUDGET_ALERT, budget_alert_handler)

    def _rejected(self, action: str, result: Either) -> Either:
        logger.warning("%s rejected: %s", action, result.get_error()["message"])
        return result

    # transactions

    def add_transaction(
        self,
        kind: str,
        amount,
        category: str,
        description: str = "",
        on: Optional[str] = None,
    ) -> Either[dict, Transaction]:
        budgets = self.repository.budgets.read()
        result = validate_transaction(kind, amount, category, description, on)
        if result.is_left():
            return self._rejected("transaction", result)

        t = result.get_or_else(None)
        resolved = resolve_category(t.category, budgets)
        if resolved != t.category:
            t = replace(t, category=resolved)

        self.repository.transactions.append(t)
        self.bus.publish(TRANSACTION_ADDED, {"id": t.id, "type": t.type, "amount": t.amount})
        if t.type == EXPENSE:
            self._check_budget(t, budgets)
        return Right(t)

    def _check_budget(self, t: Transaction, budgets: Iterable[BudgetCategory]) -> None:
        budget = next((b for b in budgets if b.name == t.category), None)
        if budget is None:
            return
        # usage for the month the expense was booked in
        usage = aggregates.budget_usage(
            budget, self.repository.transactions.read(), aggregates.parse_date(t.date)
        )
        if usage.status not in ALERT_STATUSES:
            return
        results = self.bus.publish(BUDGET_ALERT, {
            "budget": budget.name,
            "status": usage.status,
            "spent": usage.spent,
            "limit": budget.limit,
        })
        self.alerts.extend(r for r in results if r.get("alert"))

    def pop_alerts(self) -> List[dict]:
        alerts, self.alerts = self.alerts, []
        return alerts

    def delete_transaction(self, transaction_id: str) -> None:
        self.repository.transactions.remove_by_id(transaction_id)

    def list_transactions(self, kind: str = ALL, search: str = "") -> tuple:
        return filter_transactions(
            self.repository.transactions.read(), by_type(kind), by_search(search)
        )

    # budgets

    def add_budget(self, name: str, limit, color: Optional[str] = None) -> Either[dict, BudgetCategory]:
        result = validate_budget(name, limit, self.repository.budgets.read(), color)
        if result.is_left():
            return self._rejected("budget", result)
        budget = result.get_or_else(None)
        self.repository.budgets.append(budget)
        return result

    def delete_budget(self, budget_id: str) -> None:
        self.repository.budgets.remove_by_id(budget_id)

    # goals

    def add_goal(
        self, name: str, target_amount, deadline: str, color: Optional[str] = None
    ) -> Either[dict, SavingsGoal]:
        result = validate_goal(name, target_amount, deadline, color)
        if result.is_left():
            return self._rejected("goal", result)
        self.repository.goals.append(result.get_or_else(None))
        return result

    def contribute(self, goal_id: str, amount) -> Either[dict, SavingsGoal]:
        goals = self.repository.goals
        result = validate_contribution(amount).bind(
            lambda value: goals.modify(goal_id, lambda goal: contribute(goal, value))
            .map(Right)
            .get_or_else(Left({
                "error": "goal_not_found",
                "message": f"Savings goal {goal_id} does not exist",
                "goal_id": goal_id,
            }))
        )
        if result.is_left():
            return self._rejected("contribution", result)
        return result

    def delete_goal(self, goal_id: str) -> None:
        self.repository.goals.remove_by_id(goal_id)

    # bulk

    def load_sample_data(self, today: Optional[date] = None) -> None:
        self.repository.transactions.replace_all(sample_transactions(today))
        self.repository.budgets.replace_all(sample_budgets())
        self.repository.goals.replace_all(sample_goals(today))
        logger.info("Sample data loaded")

    def is_empty(self) -> bool:
        repo = self.repository
        return not (len(repo.transactions) or len(repo.budgets) or len(repo.goals))

    # derived

    def dashboard(self, today: Optional[date] = None) -> Dict[str, Any]:
        transactions = self.repository.transactions.read()
        budgets = self.repository.budgets.read()
        goals = self.repository.goals.read()
        return {
            "totals": aggregates.monthly_totals(transactions, today),
            "utilization": aggregates.total_budget_utilization(budgets, transactions, today),
            "budgets": [(b, aggregates.budget_usage(b, transactions, today)) for b in budgets],
            "goals": [(g, aggregates.goal_progress(g, today)) for g in goals],
            "spending": aggregates.spending_by_category(transactions, today),
        }
