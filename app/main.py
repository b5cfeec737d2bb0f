"""
Streamlit Frontend for Worth-It Tracker

A quick log of money spent and media watched, each rated
"worth it" or not.

DESIGN PRINCIPLES:
1. One form per log, two inputs at most
2. The list always shows what storage holds (reloaded after every change)
3. Clear error messages when a save or delete fails
4. Works offline: remote storage falls back to the local store

Swiping a row to delete it is a touch gesture. A front end that can
report pointer events drives it through `components.controller`
(SwipeController); this Streamlit page has no pointer events and
deletes through the 🗑️ button instead. Both paths end in storage.
"""

import asyncio
from typing import Optional

import streamlit as st

from worthit.audit import AuditLogger
from worthit.config import get_settings, validate_all_settings
from worthit.models.entry import CollectionKind, Entry
from worthit.orchestrator import AppComponents, EntryLogFlow, create_app_components
from worthit.services.storage import EntryStorageInterface, create_storage
from worthit.ui import MessageLevel, format_currency, format_date, worth_label


# Page configuration
st.set_page_config(
    page_title="Worth It?",
    page_icon="👍",
    layout="centered",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .entry-row {
        padding: 8px 12px;
        border-bottom: 1px solid #eee;
    }
    .worth-yes {
        color: #28a745;
    }
    .worth-no {
        color: #dc3545;
    }
    .big-number {
        font-size: 2em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def run_action(components: AppComponents, coro, action: str):
    """
    Run a UI action, reporting unexpected failures instead of crashing
    the page. Storage failures are already handled by the flows.
    """
    try:
        return run_async(coro)
    except Exception as e:
        components.audit_logger.log_error(type(e).__name__, str(e), {"action": action})
        st.error(f"Error: {str(e)}")
        return None


@st.cache_resource
def get_shared_resources() -> tuple[EntryStorageInterface, AuditLogger]:
    """Storage and audit trail, shared by every browser session."""
    audit_logger = AuditLogger()
    return create_storage(get_settings(), audit_logger=audit_logger), audit_logger


def get_components() -> AppComponents:
    """
    Get this session's components.

    Messages, rendered rows and swipe state belong to one browser
    session, so they live in session_state around the shared storage.
    """
    if "components" not in st.session_state:
        storage, audit_logger = get_shared_resources()
        st.session_state.components = create_app_components(
            storage=storage,
            audit_logger=audit_logger,
        )
    return st.session_state.components


def show_messages(components: AppComponents) -> None:
    """Show and clear pending success/error messages."""
    for message in components.notifier.drain():
        if message.level is MessageLevel.ERROR:
            st.error(message.text)
        else:
            st.success(message.text)


def main():
    """Main application entry point."""
    components = get_components()

    # Sidebar navigation
    st.sidebar.title("👍 Worth It?")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["💸 Finances", "🎬 Media", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Log what you bought or watched
        2. Rate it 👍 or 👎
        3. Tap the rating later to change your mind
        4. Remove an entry with 🗑️ (swipe left on touch front ends)
        """
    )
    st.sidebar.caption(f"Storage: {components.storage.name}")

    # Route to appropriate page
    if page == "💸 Finances":
        render_log_page(components, CollectionKind.FINANCE)
    elif page == "🎬 Media":
        render_log_page(components, CollectionKind.MEDIA)
    elif page == "⚙️ Settings":
        render_settings_page(components)


def render_log_page(components: AppComponents, kind: CollectionKind):
    """Render the form, list and statistics of one log."""
    flow = components.flow
    is_finance = kind is CollectionKind.FINANCE

    st.title("💸 Finances" if is_finance else "🎬 Media")

    with st.form(f"{kind.value}-form", clear_on_submit=True):
        description = st.text_input(
            "What did you buy?" if is_finance else "What did you watch?",
            max_chars=500,
        )
        cost: Optional[float] = None
        if is_finance:
            cost = st.number_input("Amount", min_value=0.0, step=0.5, format="%.2f")
        worth_it = st.toggle("Worth it", value=True)
        submitted = st.form_submit_button("Add")

    if submitted:
        run_action(
            components,
            flow.add_entry(kind, description, worth_it=worth_it, cost=cost),
            "add_entry",
        )

    entries = run_async(flow.load_entries(kind))
    csv_data = run_async(flow.export_csv(kind)) if entries else None
    show_messages(components)

    render_entry_list(components, kind)

    st.markdown("---")
    render_statistics(flow, kind)

    if csv_data is not None:
        st.download_button(
            "⬇️ Export CSV",
            data=csv_data,
            file_name=f"{kind.collection_name}.csv",
            mime="text/csv",
        )


def render_entry_list(components: AppComponents, kind: CollectionKind):
    """Render the rows of a log with toggle and delete buttons."""
    display = components.display
    flow = components.flow
    app_settings = get_settings().app
    currency = app_settings.currency_symbol

    rows = display.rows(kind)
    if not rows:
        st.info(
            "📋 Nothing logged yet. Use the form above to add your first entry."
        )
        return

    for row in rows:
        entry: Optional[Entry] = display.entry_for_row(row)
        if entry is None:
            continue

        if kind is CollectionKind.FINANCE:
            date_col, desc_col, cost_col, worth_col, delete_col = st.columns([2, 5, 2, 1, 1])
            cost_col.write(format_currency(entry.cost, currency))
        else:
            date_col, desc_col, worth_col, delete_col = st.columns([2, 7, 1, 1])

        date_col.write(format_date(entry.timestamp, app_settings.date_format))
        desc_col.write(entry.description)

        if worth_col.button(worth_label(entry.worth_it), key=f"toggle-{row.row_id}"):
            run_action(components, flow.toggle_worth_it(kind, entry.id, entry.worth_it), "toggle")
            st.rerun()

        if delete_col.button("🗑️", key=f"delete-{row.row_id}"):
            run_action(components, flow.delete_entry(kind, entry.id), "delete_entry")
            st.rerun()


def render_statistics(flow: EntryLogFlow, kind: CollectionKind):
    """Render the summary of a log."""
    stats = run_async(flow.statistics(kind))
    if stats.count == 0:
        return

    st.markdown("### 📊 Summary")
    currency = get_settings().app.currency_symbol

    if kind is CollectionKind.FINANCE:
        col1, col2, col3 = st.columns(3)
        col1.metric("Total spent", format_currency(stats.total, currency))
        col2.metric("Worth it", format_currency(stats.worth_it_total, currency))
        col3.metric("Not worth it", format_currency(stats.not_worth_it_total, currency))
        st.caption(f"Average spend: {format_currency(stats.average_spend, currency)}")
    else:
        col1, col2 = st.columns(2)
        col1.metric("Watched", stats.count)
        col2.metric("Worth it", f"{stats.worth_it_percentage:.0f}%")


def render_settings_page(components: AppComponents):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("GitHub (JSON file)", "github"),
        ("REST API", "rest_api"),
        ("Google Sheets", "google_sheets"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.warning(f"⚠️ {name} - {error}")

    st.markdown(f"Active storage: **{components.storage.name}**")

    if status.get("github") and st.button("🔑 Check GitHub token"):
        from worthit.services.storage.github import GitHubJsonStorage

        github = GitHubJsonStorage(get_settings().github)
        if run_action(components, github.check_token(), "check_token"):
            st.success("GitHub accepted the token")
        else:
            st.error("GitHub rejected the token")

    st.markdown("---")
    st.markdown("### Sync")
    st.markdown(
        "Entries saved while the remote store was unreachable stay on this "
        "device. Upload them to the remote store:"
    )
    if st.button("🔄 Sync local data"):
        report = run_action(components, components.flow.sync_local_to_remote(), "sync")
        if report is not None:
            for kind, result in report.results.items():
                st.write(f"{kind.label}: {result.synced} synced")
    show_messages(components)

    st.markdown("---")
    st.markdown("### Recent activity")
    events = components.audit_logger.recent(limit=10)
    if not events:
        st.caption("No activity yet.")
    for event in events:
        st.caption(
            f"{event.timestamp:%d/%m/%y %H:%M} · {event.event_type.value} · {event.description}"
        )

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
