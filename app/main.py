import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date, timedelta

import pandas as pd
import plotly.express as px
import streamlit as st

from core import config
from core.domain import ExpenseCategory
from core.services import error_notification
from core.session import close_session, get_service, get_store, get_user, open_session
from core.summary import category_breakdown, overview, summarize_budget

config.configure_logging()

st.set_page_config(page_title="Budget Tracker", layout="wide")

open_session(st.session_state, seed_path=config.get_seed_path())
store = get_store(st.session_state)
service = get_service(st.session_state)

CUR = config.CURRENCY
STATUS_ICON = {"nominal": "🟢", "warning": "🟠", "critical": "🔴"}


def money(value) -> str:
    return f"{CUR}{float(value):,.2f}"


def notify(result):
    """Show the outcome of a service call as a toast; True on success."""
    if result.is_left():
        n = error_notification(result.get_error())
        st.toast(f"**{n.title}**: {n.description}", icon="⚠️")
        return False
    n = result.get_or_else(None)
    st.toast(f"**{n.title}**: {n.description}", icon="✅")
    for alert in service.drain_alerts():
        st.toast(alert["alert"], icon="🚨")
    return True


def budget_form(key: str, budget=None):
    today = date.today()
    with st.form(key, clear_on_submit=budget is None):
        name = st.text_input("Budget Name", value=budget.name if budget else "",
                             placeholder="e.g., October 2024 - Groceries")
        limit = st.number_input("Limit Amount", min_value=0.0, step=0.01, format="%.2f",
                                value=float(budget.limit) if budget else 0.0)
        c1, c2 = st.columns(2)
        with c1:
            start = st.date_input("Start Date", value=budget.start_date if budget else today)
        with c2:
            end = st.date_input("End Date", value=budget.end_date if budget else today + timedelta(days=30))
        submitted = st.form_submit_button("Update Budget" if budget else "Create Budget")

    if submitted:
        form = {"name": name, "limit": limit, "start_date": start, "end_date": end}
        if notify(service.submit_budget(form, budget.id if budget else None)):
            st.rerun()


def expense_form(key: str, default_budget_id=None, expense=None):
    budgets = store.budgets
    if not budgets:
        st.info("Create a budget before adding expenses")
        return
    ids = [b.id for b in budgets]
    selected = expense.budget_id if expense else default_budget_id
    categories = [""] + list(ExpenseCategory.choices())
    current_cat = expense.category.value if expense and expense.category is not ExpenseCategory.UNCATEGORIZED else ""

    with st.form(key, clear_on_submit=expense is None):
        budget_id = st.selectbox(
            "Budget", ids,
            index=ids.index(selected) if selected in ids else 0,
            format_func=lambda bid: store.get_budget(bid).map(lambda b: b.name).get_or_else(bid),
        )
        amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f",
                                 value=float(expense.amount) if expense else 0.0)
        description = st.text_input("Description", value=expense.description if expense else "",
                                    placeholder="e.g., Weekly grocery shopping")
        c1, c2 = st.columns(2)
        with c1:
            category = st.selectbox("Category (Optional)", categories, index=categories.index(current_cat))
        with c2:
            spent_at = st.date_input("Date Spent", value=expense.spent_at if expense else date.today(),
                                     max_value=date.today())
        submitted = st.form_submit_button("Update Expense" if expense else "Add Expense")

    if submitted:
        form = {
            "budget_id": budget_id,
            "amount": amount,
            "description": description,
            "spent_at": spent_at,
            "category": category or None,
            "receipt": expense.receipt if expense else None,
        }
        if notify(service.submit_expense(form, expense.id if expense else None)):
            st.rerun()


def confirm_delete(key: str, label: str) -> bool:
    """Two-step delete: tick the box, then press the button."""
    confirmed = st.checkbox(f"Yes, delete this {label}", key=f"confirm_{key}")
    return st.button(f"🗑 Delete {label}", key=f"del_{key}", disabled=not confirmed)


user = get_user(st.session_state)
st.sidebar.markdown("### 👤 Profile")
st.sidebar.caption(user.email)

menu = st.sidebar.radio("Menu", ["💰 Budgets", "🧾 Budget Detail", "👤 Profile"])

if menu == "💰 Budgets":
    st.title("💰 My Budgets")
    st.caption("Track and manage your spending across different categories")

    ov = overview(store)
    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Total Budget", money(ov.total_budget))
    with k2:
        st.metric("Total Spent", money(ov.total_spent))
    with k3:
        st.metric("Total Remaining", money(ov.total_remaining))

    with st.expander("➕ Add New Budget"):
        budget_form("new_budget")

    if not store.budgets:
        st.info("No budgets yet. Create your first budget to start tracking expenses.")

    summaries = [summarize_budget(store, b) for b in store.budgets]
    if summaries:
        chart_df = pd.DataFrame([
            {"Budget": s.budget.name, "Spent": float(s.spent), "Limit": float(s.budget.limit)}
            for s in summaries
        ])
        fig = px.bar(chart_df, x="Budget", y=["Spent", "Limit"], barmode="group",
                     title="Spent vs Limit", template="plotly_dark")
        st.plotly_chart(fig, use_container_width=True)

    for s in summaries:
        b = s.budget
        with st.container(border=True):
            st.subheader(f"{STATUS_ICON[s.status.value]} {b.name}")
            st.caption(f"{b.start_date:%b %d, %Y} - {b.end_date:%b %d, %Y}")
            st.progress(s.progress / 100, text=f"{money(s.spent)} of {money(b.limit)} ({s.progress:.1f}%)")
            if s.over_budget:
                st.error(f"Over budget: {money(abs(s.remaining))}")
            else:
                st.success(f"Remaining: {money(s.remaining)}")

            with st.expander("✏️ Edit"):
                budget_form(f"edit_budget_{b.id}", budget=b)
            if confirm_delete(f"budget_{b.id}", "budget"):
                if notify(service.remove_budget(b.id)):
                    st.rerun()

elif menu == "🧾 Budget Detail":
    if not store.budgets:
        st.info("Budget not found")
        st.stop()

    budget_id = st.selectbox(
        "Budget", [b.id for b in store.budgets],
        format_func=lambda bid: store.get_budget(bid).map(lambda b: b.name).get_or_else(bid),
    )
    found = store.get_budget(budget_id)
    if found.is_none():
        st.info("Budget not found")
        st.stop()

    budget = found.get_or_else(None)
    s = summarize_budget(store, budget)
    expenses = store.get_budget_expenses(budget.id)

    st.title(f"🧾 {budget.name}")
    st.caption(f"{budget.start_date:%B %d, %Y} - {budget.end_date:%B %d, %Y}")

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Budget Limit", money(budget.limit))
    with k2:
        st.metric("Total Spent", money(s.spent))
    with k3:
        st.metric("Over Budget" if s.over_budget else "Remaining", money(abs(s.remaining)))
    st.progress(s.progress / 100, text=f"Budget Progress {s.progress:.1f}%")

    st.header("Expenses")
    with st.expander("➕ Add Expense"):
        expense_form("new_expense", default_budget_id=budget.id)

    if expenses:
        df = pd.DataFrame([
            {
                "Date": e.spent_at.strftime("%b %d, %Y"),
                "Description": e.description + (" 🧾" if e.receipt else ""),
                "Category": "" if e.category is ExpenseCategory.UNCATEGORIZED else e.category.value,
                "Amount": money(e.amount),
            }
            for e in expenses
        ])
        col_table, col_chart = st.columns([3, 2])
        with col_table:
            st.dataframe(df, hide_index=True, use_container_width=True)
        with col_chart:
            breakdown = pd.DataFrame(category_breakdown(expenses), columns=["Category", "Total"])
            breakdown["Total"] = breakdown["Total"].astype(float)
            fig = px.pie(breakdown, values="Total", names="Category", title="Category Distribution")
            fig.update_layout(height=300)
            st.plotly_chart(fig, use_container_width=True)

        for e in expenses:
            with st.expander(f"{e.spent_at:%b %d} · {e.description} · {money(e.amount)}"):
                expense_form(f"edit_expense_{e.id}", expense=e)
                if confirm_delete(f"expense_{e.id}", "expense"):
                    if notify(service.remove_expense(e.id)):
                        st.rerun()
    else:
        st.info("No expenses recorded yet. Add your first expense to start tracking.")

elif menu == "👤 Profile":
    st.title("👤 User Profile")
    st.subheader("Account Information")
    st.markdown(f"**Email**  \n{user.email}")
    st.markdown(f"**Account Created**  \n{user.created_at:%B %d, %Y}")
    st.button("Change Password (Coming Soon)", disabled=True)

    st.divider()
    if st.button("🚪 End Session"):
        close_session(st.session_state)
        st.rerun()
