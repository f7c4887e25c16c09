import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st

import pandas as pd
import plotly.express as px
from datetime import date

from fintrack import config
from fintrack.aggregates import (
    COMPLETED,
    NEAR_LIMIT,
    ON_TRACK,
    OVER_BUDGET,
    OVERDUE,
    UPCOMING,
)
from fintrack.domain import (
    BUDGET_COLORS,
    EXPENSE,
    EXPENSE_CATEGORIES,
    INCOME,
    INCOME_CATEGORIES,
    category_color,
)
from fintrack.filters import ALL
from fintrack.formatting import format_currency, format_date, format_percentage
from fintrack.repository import Repository
from fintrack.services import FinanceService
from fintrack.store import JsonFileStore

st.set_page_config(page_title="Finance Tracker", layout="wide")

config.configure_logging()


@st.cache_resource
def get_store() -> JsonFileStore:
    config.ensure_data_directories()
    return JsonFileStore(config.STORE_PATH)


if "service" not in st.session_state:
    st.session_state.service = FinanceService(Repository(get_store()))

service: FinanceService = st.session_state.service
repo = service.repository

if "flash" not in st.session_state:
    st.session_state.flash = []


def flash(kind: str, message: str) -> None:
    st.session_state.flash.append((kind, message))


def report(result, success: str) -> bool:
    if result.is_left():
        st.error(result.get_error()["message"])
        return False
    flash("success", success)
    for alert in service.pop_alerts():
        flash("warning", alert["alert"])
    return True


for kind, message in st.session_state.flash:
    getattr(st, kind)(message)
st.session_state.flash = []


BUDGET_BADGES = {
    OVER_BUDGET: "🔴 Over budget",
    NEAR_LIMIT: "🟠 Near limit",
    ON_TRACK: "🟢 On track",
}

GOAL_BADGES = {
    COMPLETED: "✅ Completed",
    OVERDUE: "⏰ Overdue",
    UPCOMING: "📅 Due soon",
}


def transactions_frame(transactions) -> pd.DataFrame:
    rows = [
        {
            "Date": format_date(t.date),
            "Type": t.type.title(),
            "Category": t.category,
            "Description": t.description,
            "Amount": t.amount if t.type == INCOME else -t.amount,
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=["Date", "Type", "Category", "Description", "Amount"])


st.sidebar.markdown("### 💰 Finance Tracker")
menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "🧾 Transactions", "📋 Budgets", "🎯 Goals"]
)

if service.is_empty():
    st.sidebar.info("No data yet.")
    if st.sidebar.button("Load sample data"):
        service.load_sample_data()
        flash("success", "Sample data loaded! Explore the app features.")
        st.rerun()


if menu == "🏠 Dashboard":
    st.title("🏠 Dashboard")
    summary = service.dashboard()
    totals = summary["totals"]
    utilization = summary["utilization"]

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Balance", format_currency(totals.balance), help="This month")
    with k2:
        st.metric("Income", format_currency(totals.income))
        st.caption(f"{totals.income_count} transactions")
    with k3:
        st.metric("Expenses", format_currency(totals.expenses))
        st.caption(f"{totals.expense_count} transactions")
    with k4:
        st.metric("Budget Used", f"{utilization.percentage}%")
        st.caption(
            f"{format_currency(utilization.total_spent)} of {format_currency(utilization.total_limit)}"
        )

    col_budgets, col_goals = st.columns(2)
    with col_budgets:
        st.subheader("Budget Overview")
        if not summary["budgets"]:
            st.info("No budgets defined")
        for budget, usage in summary["budgets"]:
            st.markdown(f"**{budget.name}** {BUDGET_BADGES.get(usage.status, '')}")
            st.progress(usage.percentage / 100)
            st.caption(f"{format_currency(usage.spent)} / {format_currency(budget.limit)}")

    with col_goals:
        st.subheader("Savings Goals")
        if not summary["goals"]:
            st.info("No savings goals yet")
        for goal, progress in summary["goals"]:
            st.markdown(f"**{goal.name}** {GOAL_BADGES.get(progress.status, '')}")
            st.progress(progress.percentage / 100)
            st.caption(
                f"{format_currency(goal.current_amount)} / {format_currency(goal.target_amount)}"
                f" · Target: {format_date(goal.deadline)}"
            )

    if summary["spending"]:
        df_cat = pd.DataFrame(summary["spending"], columns=["Category", "Total"])
        fig_cat = px.pie(
            df_cat,
            values="Total",
            names="Category",
            title="Spending by Category (this month)",
            color="Category",
            color_discrete_map={c: category_color(c, EXPENSE) for c in df_cat["Category"]},
        )
        fig_cat.update_layout(height=350)
        st.plotly_chart(fig_cat, use_container_width=True)

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")

    st.subheader("➕ Add Transaction")
    kind = st.radio("Type", [EXPENSE, INCOME], horizontal=True, format_func=str.title)
    catalog = EXPENSE_CATEGORIES if kind == EXPENSE else INCOME_CATEGORIES
    with st.form("transaction_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
            on = st.date_input("Date", value=date.today())
        with col2:
            category = st.selectbox("Category", [c.name for c in catalog])
            description = st.text_input("Description (optional)")
        submitted = st.form_submit_button("Add Transaction")

    if submitted:
        result = service.add_transaction(kind, amount, category, description, on.isoformat())
        if report(result, f"{kind.title()} added successfully"):
            st.rerun()

    st.divider()

    col_filter, col_search = st.columns([1, 3])
    with col_filter:
        selected = st.selectbox("Show", [ALL, INCOME, EXPENSE], format_func=str.title)
    with col_search:
        search = st.text_input("Search", placeholder="Description or category")

    if not len(repo.transactions):
        st.info("No transactions yet. Add your first one above.")
    else:
        shown = service.list_transactions(selected, search)
        if not shown:
            st.info("No transactions match your filters.")
        for t in shown:
            c1, c2, c3 = st.columns([4, 2, 1])
            with c1:
                st.markdown(f"**{t.description or t.category}**")
                st.caption(f"{t.category} · {format_date(t.date)}")
            with c2:
                sign = "+" if t.type == INCOME else "-"
                st.markdown(f"{sign}{format_currency(t.amount)}")
            with c3:
                if st.button("🗑", key=f"del_tx_{t.id}"):
                    service.delete_transaction(t.id)
                    flash("success", "Transaction deleted")
                    st.rerun()

        df = transactions_frame(shown)
        st.download_button(
            "⬇️ Download CSV",
            df.to_csv(index=False),
            file_name="transactions.csv",
            mime="text/csv"
        )

elif menu == "📋 Budgets":
    st.title("📋 Budget Categories")

    with st.form("budget_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            name = st.selectbox("Category", [c.name for c in EXPENSE_CATEGORIES])
        with col2:
            limit = st.number_input("Monthly limit", min_value=0.0, step=10.0, format="%.2f")
        submitted = st.form_submit_button("Add Budget")

    if submitted:
        if report(service.add_budget(name, limit), "Budget category created successfully"):
            st.rerun()

    summary = service.dashboard()
    if not summary["budgets"]:
        st.info("No budgets set up yet. Create budget categories to track your spending limits.")
    for budget, usage in summary["budgets"]:
        c1, c2 = st.columns([5, 1])
        with c1:
            st.markdown(f"**{budget.name}** {BUDGET_BADGES.get(usage.status, '')}")
            st.progress(usage.percentage / 100)
            left = "left" if usage.remaining >= 0 else "over"
            st.caption(
                f"{format_currency(usage.spent)} of {format_currency(budget.limit)}"
                f" · {format_currency(abs(usage.remaining))} {left}"
                f" · {format_percentage(usage.raw_percentage)}"
            )
        with c2:
            if st.button("🗑", key=f"del_budget_{budget.id}"):
                service.delete_budget(budget.id)
                flash("success", "Budget category deleted")
                st.rerun()

elif menu == "🎯 Goals":
    st.title("🎯 Savings Goals")

    with st.form("goal_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Goal name")
            target = st.number_input("Target amount", min_value=0.0, step=50.0, format="%.2f")
        with col2:
            deadline = st.date_input("Target date", value=None)
            color = st.selectbox("Color", BUDGET_COLORS)
        submitted = st.form_submit_button("Add Goal")

    if submitted:
        result = service.add_goal(name, target, deadline.isoformat() if deadline else "", color)
        if report(result, "Savings goal created successfully"):
            st.rerun()

    summary = service.dashboard()
    if not summary["goals"]:
        st.info("No savings goals yet. Start saving toward something.")
    for goal, progress in summary["goals"]:
        with st.expander(f"{goal.name} {GOAL_BADGES.get(progress.status, '')}", expanded=True):
            st.progress(progress.percentage / 100)
            days = progress.days_remaining
            when = "no valid deadline" if days is None else (
                f"{abs(days)} days overdue" if days < 0 else f"{days} days left"
            )
            st.caption(
                f"{format_currency(goal.current_amount)} / {format_currency(goal.target_amount)}"
                f" ({format_percentage(progress.raw_percentage)} complete)"
                f" · {format_date(goal.deadline)} · {when}"
            )
            c1, c2, c3 = st.columns([2, 1, 1])
            with c1:
                contribution = st.number_input(
                    "Amount to add", min_value=0.0, step=10.0, key=f"amt_{goal.id}"
                )
            with c2:
                if st.button("Contribute", key=f"add_{goal.id}"):
                    if report(service.contribute(goal.id, contribution), "Contribution added successfully"):
                        st.rerun()
            with c3:
                if st.button("🗑 Delete", key=f"del_goal_{goal.id}"):
                    service.delete_goal(goal.id)
                    flash("success", "Savings goal deleted")
                    st.rerun()
