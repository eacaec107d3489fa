"""
Streamlit Frontend for Expense Tracker

A thin layer over ExpenseStore: it reads store state, collects form
input, validates it and calls store mutators. It holds no expense
state of its own.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Invalid input never reaches the store
3. Explicit confirmation before deleting
4. Visual feedback for all operations
"""

from datetime import date

import streamlit as st

from expense_tracker.audit import AuditLogger
from expense_tracker.config import get_settings
from expense_tracker.models.expense import Expense, ExpenseCategory
from expense_tracker.models.validation import ExpenseFormInput
from expense_tracker.presentation import (
    category_totals,
    format_amount,
    format_section_date,
    group_by_day,
)
from expense_tracker.services.storage import InMemoryAuditSink
from expense_tracker.store import ExpenseStore, create_store
from expense_tracker.validation import (
    ExpenseInputValidator,
    InvalidExpenseInput,
    get_user_friendly_summary,
)


# Events kept in memory for the Activity page
AUDIT_TRAIL_SIZE = 200

# Page configuration
st.set_page_config(
    page_title="Expenses",
    page_icon="💰",
    layout="centered",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .summary-card {
        padding: 24px;
        background-color: #e7f1ff;
        border-radius: 16px;
        text-align: center;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.6em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_components() -> tuple[ExpenseStore, InMemoryAuditSink]:
    """Get or create the store and its audit sink (cached)."""
    sink = InMemoryAuditSink(max_events=AUDIT_TRAIL_SIZE)
    store = create_store(audit_logger=AuditLogger(sink))
    return store, sink


def main():
    """Main application entry point."""
    store, sink = get_components()
    settings = get_settings().app

    st.sidebar.title("💰 Expenses")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📋 Expenses", "➕ Add Expense", "📊 This Month", "🕘 Activity"],
        index=0,
    )

    if page == "📋 Expenses":
        render_expenses_page(store, settings.currency_symbol)
    elif page == "➕ Add Expense":
        render_expense_form(store)
    elif page == "📊 This Month":
        render_month_page(store, settings.currency_symbol)
    elif page == "🕘 Activity":
        render_activity_page(sink)


def render_summary_card(total, symbol: str):
    st.markdown(f"""
    <div class="summary-card">
        <div>Total Expenses</div>
        <div class="big-number">{format_amount(total, symbol)}</div>
    </div>
    """, unsafe_allow_html=True)


def render_expenses_page(store: ExpenseStore, symbol: str):
    """Render the expense list grouped by day."""
    st.title("📋 Expenses")
    render_summary_card(store.total_expenses, symbol)

    editing_id = st.session_state.get("editing_id")
    if editing_id:
        editing = next((e for e in store.expenses if str(e.id) == editing_id), None)
        if editing:
            render_expense_form(store, editing)
            return
        st.session_state.editing_id = None

    if not store.expenses:
        st.markdown("### No Expenses Yet")
        st.markdown("Use **Add Expense** to record your first expense.")
        return

    for day, expenses in group_by_day(store.expenses).items():
        st.subheader(format_section_date(day))
        for expense in expenses:
            render_expense_row(store, expense, symbol)


def render_expense_row(store: ExpenseStore, expense: Expense, symbol: str):
    col1, col2, col3, col4 = st.columns([5, 2, 1, 1])

    with col1:
        st.markdown(f"**{expense.description}**  \n{expense.category.label}")
    with col2:
        st.markdown(f"**{format_amount(expense.amount, symbol)}**")
    with col3:
        if st.button("✏️", key=f"edit-{expense.id}", help="Edit"):
            st.session_state.editing_id = str(expense.id)
            st.rerun()
    with col4:
        if st.button("🗑️", key=f"delete-{expense.id}", help="Delete"):
            st.session_state.confirm_delete_id = str(expense.id)

    if st.session_state.get("confirm_delete_id") == str(expense.id):
        st.warning(f"Are you sure you want to delete '{expense.description}'?")
        yes, no = st.columns(2)
        with yes:
            if st.button("Delete", key=f"confirm-{expense.id}", type="primary"):
                store.delete_expense(expense)
                st.session_state.confirm_delete_id = None
                st.rerun()
        with no:
            if st.button("Cancel", key=f"cancel-{expense.id}"):
                st.session_state.confirm_delete_id = None
                st.rerun()


def render_expense_form(store: ExpenseStore, existing: Expense = None):
    """Render the add/edit form. Only validated expenses reach the store."""
    validator = ExpenseInputValidator()
    defaults = (
        ExpenseInputValidator.form_for(existing) if existing else ExpenseFormInput()
    )
    categories = ExpenseCategory.ordered()

    st.title("✏️ Edit Expense" if existing else "➕ Add Expense")

    with st.form("expense_form", clear_on_submit=existing is None):
        description = st.text_input("Description", value=defaults.description)
        amount = st.text_input("Amount", value=defaults.amount, placeholder="0.00")
        category = st.selectbox(
            "Category",
            options=categories,
            index=categories.index(defaults.category),
            format_func=lambda c: c.label,
        )
        max_day = None if get_settings().app.allow_future_dates else date.today()
        day = st.date_input("Date", value=defaults.date, max_value=max_day)
        notes = st.text_area("Notes (Optional)", value=defaults.notes)

        submitted = st.form_submit_button("Update" if existing else "Save", type="primary")

    if existing and st.button("Cancel"):
        st.session_state.editing_id = None
        st.rerun()

    if not submitted:
        return

    form = ExpenseFormInput(
        amount=amount,
        description=description,
        category=category,
        date=day,
        notes=notes,
    )
    try:
        expense = validator.build_expense(form, existing=existing)
    except InvalidExpenseInput as e:
        st.error(get_user_friendly_summary(e.result))
        return

    if existing:
        store.update_expense(expense)
        st.session_state.editing_id = None
        st.rerun()
    else:
        store.add_expense(expense)
        st.success(f"Saved '{expense.description}'")


def render_month_page(store: ExpenseStore, symbol: str):
    """Render this month's expenses and per-category totals."""
    today = date.today()
    st.title(f"📊 {today:%B %Y}")

    month = store.expenses_for_month(today)
    if not month:
        st.info("No expenses recorded this month.")
        return

    st.markdown("### By Category")
    for category, total in category_totals(month).items():
        st.markdown(f"- {category.label}: **{format_amount(total, symbol)}**")

    st.markdown("### All Time by Category")
    for category in ExpenseCategory.ordered():
        total = store.total_for_category(category)
        if total:
            st.markdown(f"- {category.label}: {format_amount(total, symbol)}")


def render_activity_page(sink: InMemoryAuditSink):
    """Render recent store activity from the audit trail."""
    st.title("🕘 Activity")

    events = sink.get_recent_events(limit=50)
    if not events:
        st.info("No activity yet.")
        return

    for event in events:
        line = f"`{event.timestamp:%H:%M:%S}` {event.description}"
        if event.severity.value == "error":
            st.error(line + (f": {event.error_message}" if event.error_message else ""))
        elif event.severity.value == "warning":
            st.warning(line)
        else:
            st.markdown(line)


if __name__ == "__main__":
    main()
