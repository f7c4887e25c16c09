from datetime import date

from fintrack.aggregates import monthly_totals
from fintrack.domain import EXPENSE, INCOME, BudgetCategory, SavingsGoal, Transaction
from fintrack.repository import BUDGETS, GOALS, TRANSACTIONS, Repository
from fintrack.store import InMemoryStore, JsonFileStore
from fintrack.transforms import contribute


def make_repo():
    return Repository(InMemoryStore())


def make_tx(id, amount=10.0):
    return Transaction(id=id, type=EXPENSE, amount=amount, category="Food", date="2025-06-01")


def test_collections_start_empty():
    repo = make_repo()
    assert repo.transactions.read() == ()
    assert repo.budgets.read() == ()
    assert repo.goals.read() == ()
    assert len(repo.transactions) == 0


def test_transactions_append_at_head():
    repo = make_repo()
    repo.transactions.append(make_tx("t1"))
    repo.transactions.append(make_tx("t2"))

    ids = [t.id for t in repo.transactions.read()]
    assert ids == ["t2", "t1"]
    assert ids.count("t2") == 1


def test_budgets_and_goals_append_at_tail():
    repo = make_repo()
    repo.budgets.append(BudgetCategory("b1", "Food", 100, "#fff"))
    repo.budgets.append(BudgetCategory("b2", "Fun", 50, "#fff"))
    assert [b.id for b in repo.budgets.read()] == ["b1", "b2"]


def test_records_are_stored_under_their_keys():
    repo = make_repo()
    repo.transactions.append(make_tx("t1"))
    repo.goals.append(SavingsGoal("g1", "Car", 1000, "2026-01-01", "#000"))

    assert repo.store.get(TRANSACTIONS)[0]["id"] == "t1"
    assert repo.store.get(GOALS)[0]["target_amount"] == 1000
    assert repo.store.get(BUDGETS) is None


def test_remove_by_id():
    repo = make_repo()
    repo.transactions.replace_all([make_tx("t1"), make_tx("t2")])
    repo.transactions.remove_by_id("t1")
    assert [t.id for t in repo.transactions.read()] == ["t2"]


def test_remove_unknown_id_is_a_noop():
    repo = make_repo()
    repo.transactions.append(make_tx("t1"))
    heard = []
    repo.transactions.subscribe(heard.append)

    repo.transactions.remove_by_id("missing")

    assert [t.id for t in repo.transactions.read()] == ["t1"]
    assert heard == []


def test_update_by_id_patches_one_entity():
    repo = make_repo()
    repo.goals.replace_all([
        SavingsGoal("g1", "Car", 1000, "2026-01-01", "#000"),
        SavingsGoal("g2", "Trip", 500, "2026-01-01", "#000"),
    ])
    repo.goals.update_by_id("g2", current_amount=125.0)
    repo.goals.update_by_id("missing", current_amount=1.0)

    goals = repo.goals.read()
    assert goals[0].current_amount == 0
    assert goals[1].current_amount == 125.0


def test_get_returns_maybe():
    repo = make_repo()
    repo.transactions.append(make_tx("t1", 42))
    assert repo.transactions.get("t1").get_or_else(None).amount == 42
    assert repo.transactions.get("t2").is_none()


def test_consecutive_mutations_see_each_other():
    repo = make_repo()
    repo.transactions.replace_all([make_tx("t1"), make_tx("t2"), make_tx("t3")])
    repo.transactions.remove_by_id("t1")
    repo.transactions.remove_by_id("t3")
    assert [t.id for t in repo.transactions.read()] == ["t2"]


def test_subscribers_receive_decoded_entities():
    repo = make_repo()
    heard = []
    registered = repo.transactions.subscribe(heard.append)

    repo.transactions.append(make_tx("t1"))
    repo.transactions.unsubscribe(registered)
    repo.transactions.append(make_tx("t2"))

    assert len(heard) == 1
    assert heard[0] == (make_tx("t1"),)


def test_two_repositories_on_one_store_share_state():
    store = InMemoryStore()
    writer, reader = Repository(store), Repository(store)
    writer.transactions.append(
        Transaction("t1", INCOME, 5, "Gift", "2025-06-01", "Birthday")
    )
    assert reader.transactions.read()[0].description == "Birthday"


def test_repositories_on_one_json_file_keep_both_writes(tmp_path):
    path = tmp_path / "store.json"
    first = Repository(JsonFileStore(path))
    second = Repository(JsonFileStore(path))

    first.transactions.append(make_tx("t1"))
    second.transactions.append(make_tx("t2"))
    first.transactions.remove_by_id("missing")

    stored = Repository(JsonFileStore(path)).transactions.read()
    assert [t.id for t in stored] == ["t2", "t1"]
    assert [t.id for t in first.transactions.read()] == ["t2", "t1"]


def test_unreadable_record_is_skipped_and_kept():
    repo = make_repo()
    bad = {"id": "bad", "type": EXPENSE, "amount": 5, "date": "2025-06-01"}
    repo.store.set(TRANSACTIONS, [bad, {"id": "t1", "type": EXPENSE, "amount": 10.0,
                                         "category": "Food", "date": "2025-06-01"}])

    assert [t.id for t in repo.transactions.read()] == ["t1"]
    assert len(repo.transactions) == 1
    assert monthly_totals(repo.transactions.read(), date(2025, 6, 15)).expenses == 10.0

    repo.transactions.append(make_tx("t2"))
    assert [r["id"] for r in repo.store.get(TRANSACTIONS)] == ["t2", "t1", "bad"]


def test_modify_replaces_one_entity():
    repo = make_repo()
    repo.goals.replace_all([
        SavingsGoal("g1", "Car", 1000, "2026-01-01", "#000"),
        SavingsGoal("g2", "Trip", 500, "2026-01-01", "#000"),
    ])

    changed = repo.goals.modify("g2", lambda goal: contribute(goal, 50))

    assert changed.get_or_else(None).current_amount == 50
    assert [g.current_amount for g in repo.goals.read()] == [0, 50]
    assert repo.goals.modify("missing", lambda goal: contribute(goal, 1)).is_none()
