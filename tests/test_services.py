from datetime import date, timedelta

from fintrack.aggregates import COMPLETED, OVER_BUDGET
from fintrack.domain import EXPENSE, INCOME
from fintrack.events import TRANSACTION_ADDED
from fintrack.repository import Repository
from fintrack.services import FinanceService, resolve_category
from fintrack.store import InMemoryStore

TODAY = date(2025, 6, 15)
ON = TODAY.isoformat()


def make_service():
    return FinanceService(Repository(InMemoryStore()))


def test_add_transaction_stores_at_head_and_publishes():
    svc = make_service()
    added = []
    svc.bus.subscribe(TRANSACTION_ADDED, lambda event, payload: added.append(payload["id"]) or {})

    first = svc.add_transaction(INCOME, 100, "Salary", on=ON).get_or_else(None)
    second = svc.add_transaction(EXPENSE, "25", "Shopping", "Socks", ON).get_or_else(None)

    assert [t.id for t in svc.repository.transactions.read()] == [second.id, first.id]
    assert added == [first.id, second.id]


def test_rejected_transaction_writes_nothing():
    svc = make_service()
    result = svc.add_transaction(EXPENSE, "-3", "Food")
    assert result.is_left()
    assert result.get_error()["message"] == "Please enter a valid amount"
    assert svc.repository.transactions.read() == ()


def test_category_is_resolved_against_budget_names():
    svc = make_service()
    svc.add_budget("Food & Dining", 400)

    t = svc.add_transaction(EXPENSE, 40, "  food & dining", on=ON).get_or_else(None)

    assert t.category == "Food & Dining"
    usage = svc.dashboard(TODAY)["budgets"][0][1]
    assert usage.spent == 40


def test_resolve_category_keeps_unknown_names():
    assert resolve_category(" Pets ", ()) == "Pets"


def test_duplicate_budget_rejected():
    svc = make_service()
    assert svc.add_budget("Food", 100).is_right()
    result = svc.add_budget("Food", 200)
    assert result.get_error()["error"] == "duplicate_budget"
    assert len(svc.repository.budgets) == 1


def test_over_budget_expense_raises_alert():
    svc = make_service()
    svc.add_budget("Food", 100)

    svc.add_transaction(EXPENSE, 50, "Food", on=ON)
    assert svc.pop_alerts() == []

    svc.add_transaction(EXPENSE, 70, "Food", on=ON)
    alerts = svc.pop_alerts()
    assert len(alerts) == 1
    assert alerts[0]["status"] == OVER_BUDGET
    assert svc.pop_alerts() == []


def test_income_never_raises_alert():
    svc = make_service()
    svc.add_budget("Food", 10)
    svc.add_transaction(INCOME, 500, "Food", on=ON)
    assert svc.pop_alerts() == []


def test_services_sharing_a_repository_raise_one_alert():
    repo = Repository(InMemoryStore())
    first = FinanceService(repo)
    second = FinanceService(repo)
    first.add_budget("Food", 100)

    second.add_transaction(EXPENSE, 120, "Food", on=ON)

    assert len(second.pop_alerts()) == 1
    assert first.pop_alerts() == []


def test_alert_follows_the_month_of_the_expense():
    svc = make_service()
    svc.add_budget("Food", 100)

    svc.add_transaction(EXPENSE, 120, "Food", on="2024-01-10")

    assert [a["status"] for a in svc.pop_alerts()] == [OVER_BUDGET]
    assert svc.dashboard(TODAY)["budgets"][0][1].spent == 0


def test_contribute_adds_to_current_amount():
    svc = make_service()
    goal = svc.add_goal("Vacation", 1000, (TODAY + timedelta(days=90)).isoformat()).get_or_else(None)

    svc.contribute(goal.id, 600)
    updated = svc.contribute(goal.id, "400").get_or_else(None)

    assert updated.current_amount == 1000
    stored = svc.repository.goals.get(goal.id).get_or_else(None)
    assert stored.current_amount == 1000
    assert svc.dashboard(TODAY)["goals"][0][1].status == COMPLETED


def test_contribute_rejects_bad_amount_and_unknown_goal():
    svc = make_service()
    goal = svc.add_goal("Car", 500, "2030-01-01").get_or_else(None)

    assert svc.contribute(goal.id, 0).get_error()["error"] == "invalid_amount"
    assert svc.contribute("missing", 10).get_error()["error"] == "goal_not_found"
    assert svc.repository.goals.read()[0].current_amount == 0


def test_deletes_are_noops_for_unknown_ids():
    svc = make_service()
    t = svc.add_transaction(EXPENSE, 5, "Food", on=ON).get_or_else(None)
    svc.delete_transaction("missing")
    svc.delete_budget("missing")
    svc.delete_goal("missing")
    assert [x.id for x in svc.repository.transactions.read()] == [t.id]

    svc.delete_transaction(t.id)
    assert svc.repository.transactions.read() == ()


def test_list_transactions_filters():
    svc = make_service()
    svc.add_transaction(INCOME, 3500, "Salary", "Monthly salary", ON)
    svc.add_transaction(EXPENSE, 1200, "Bills & Utilities", "Rent payment", ON)

    assert [t.category for t in svc.list_transactions(EXPENSE)] == ["Bills & Utilities"]
    assert [t.category for t in svc.list_transactions(search="salary")] == ["Salary"]
    assert len(svc.list_transactions()) == 2


def test_load_sample_data_replaces_everything():
    svc = make_service()
    svc.add_transaction(EXPENSE, 5, "Food", on=ON)
    assert not svc.is_empty()

    svc.load_sample_data(TODAY)

    repo = svc.repository
    assert len(repo.transactions) == 4
    assert len(repo.budgets) == 3
    assert len(repo.goals) == 2
    assert all(t.category != "Food" for t in repo.transactions.read())


def test_dashboard_on_sample_data():
    svc = make_service()
    svc.load_sample_data(TODAY)

    summary = svc.dashboard(TODAY)
    totals = summary["totals"]
    assert totals.income == 3500
    assert totals.balance == totals.income - totals.expenses
    assert summary["utilization"].total_limit == 750
    assert [b.name for b, _ in summary["budgets"]] == ["Food & Dining", "Transportation", "Entertainment"]
    assert [p.days_remaining for _, p in summary["goals"]] == [90, 180]
    assert summary["spending"][0] == ("Bills & Utilities", 1200)


def test_dashboard_empty():
    summary = make_service().dashboard(TODAY)
    assert summary["totals"].balance == 0
    assert summary["utilization"].percentage == 0
    assert summary["budgets"] == []
    assert summary["goals"] == []
    assert summary["spending"] == []
