"""
Streamlit Frontend for FinanceTracker

This is the rendering surface. It holds no business rules: every click is
dispatched as a command to the TrackerApp, and every screen is drawn from
controller state.

DESIGN PRINCIPLES:
1. One TrackerApp per browser session, kept in st.session_state
2. Each interaction runs on a fresh event loop, and background refreshes
   are awaited before that loop closes
3. Notices become toasts
4. Destructive actions need a second, explicit click
"""

import asyncio

import streamlit as st

from financetracker.app import TrackerApp, create_app
from financetracker.config import get_settings, validate_all_settings
from financetracker.controllers import PageDirection, View
from financetracker.models.chat import ChatMessage, Sender
from financetracker.models.notice import NoticeLevel
from financetracker.notices import configure_logging
from financetracker.services.checkout import BillingInterval


# Page configuration
st.set_page_config(
    page_title="FinanceTracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .usage-normal { color: #28a745; }
    .usage-warning { color: #ffc107; }
    .usage-danger { color: #dc3545; }
    .empty-state { color: #6c757d; font-style: italic; }
    .txn-inflow { color: #28a745; font-weight: bold; }
    .txn-outflow { color: #dc3545; font-weight: bold; }
</style>
""", unsafe_allow_html=True)


VIEW_LABELS = {
    View.CHAT: "💬 Chat",
    View.DASHBOARD: "📊 Dashboard",
    View.TRANSACTIONS: "📜 Transactions",
    View.ACCOUNTS: "🏦 Accounts",
    View.SUBSCRIPTION: "⭐ Plan",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def dispatch(app: TrackerApp, command: str, payload: dict = None):
    """Run one command, then let any background refresh finish."""
    async def _run():
        result = await app.commands.dispatch(command, payload)
        await app.wait_background()
        return result
    return run_async(_run())


def _confirm_from_state(_: str) -> bool:
    return bool(st.session_state.pop("delete_confirmed", False))


def get_app() -> TrackerApp:
    """Get or create this browser session's TrackerApp."""
    if "tracker_app" not in st.session_state:
        configure_logging(get_settings().app.log_level)
        app = create_app(confirm=_confirm_from_state)
        run_async(app.start())
        st.session_state.tracker_app = app
    return st.session_state.tracker_app


def show_notices(app: TrackerApp):
    for notice in app.notifier.drain():
        icon = "✅" if notice.level == NoticeLevel.SUCCESS else "⚠️"
        st.toast(notice.message, icon=icon)


def main():
    """Main application entry point."""
    app = get_app()

    if not app.session.is_authenticated() or app.router.is_anonymous:
        render_auth_page(app)
    else:
        render_app(app)

    show_notices(app)


# =============================================================================
# AUTH
# =============================================================================

def render_auth_page(app: TrackerApp):
    st.title("💰 FinanceTracker")
    st.markdown("Track your money by just telling me what you spent.")

    login_tab, register_tab = st.tabs(["Login", "Create account"])

    with login_tab:
        with st.form("login-form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Login", type="primary")
        if submitted:
            with st.spinner("Signing in..."):
                outcome = dispatch(app, "login", {"email": email, "password": password})
            if outcome.success:
                st.rerun()
            st.error(outcome.error)

    with register_tab:
        with st.form("register-form"):
            col1, col2 = st.columns(2)
            with col1:
                first_name = st.text_input("First name")
            with col2:
                last_name = st.text_input("Last name")
            email = st.text_input("Email", key="reg-email")
            password = st.text_input("Password", type="password", key="reg-password")
            submitted = st.form_submit_button("Create account", type="primary")
        if submitted:
            with st.spinner("Creating your account..."):
                outcome = dispatch(app, "register", {
                    "email": email,
                    "password": password,
                    "first_name": first_name,
                    "last_name": last_name,
                })
            if outcome.success:
                st.rerun()
            st.error(outcome.error)


# =============================================================================
# APP SHELL
# =============================================================================

def render_app(app: TrackerApp):
    user = app.session.user
    sub = app.dashboard.subscription

    st.sidebar.title("💰 FinanceTracker")
    st.sidebar.markdown(f"**{user.display_name}** · `{sub.badge if sub else 'Free'}`")
    st.sidebar.markdown("---")

    views = list(VIEW_LABELS)
    current = app.router.active_view or View.CHAT
    choice = st.sidebar.radio(
        "Navigate to:",
        views,
        index=views.index(current),
        format_func=lambda v: VIEW_LABELS[v],
    )
    if choice != current:
        dispatch(app, "switch_view", {"view": choice.value})
        st.rerun()

    st.sidebar.markdown("---")
    if st.sidebar.button("Logout"):
        dispatch(app, "logout")
        st.rerun()

    with st.sidebar.expander("Connection"):
        status = validate_all_settings()
        for name, label in (("api", "Backend"), ("paypal", "PayPal"), ("app", "App")):
            if status.get(name, False):
                st.success(f"✅ {label}")
            else:
                st.error(f"❌ {label} - {status.get(f'{name}_error', 'Not configured')}")
        st.caption(get_settings().api.url_for(""))

    if current == View.CHAT:
        render_chat(app)
    elif current == View.DASHBOARD:
        render_dashboard(app)
    elif current == View.TRANSACTIONS:
        render_transactions(app)
    elif current == View.ACCOUNTS:
        render_accounts(app)
    elif current == View.SUBSCRIPTION:
        render_subscription(app)


# =============================================================================
# CHAT
# =============================================================================

def render_chat(app: TrackerApp):
    st.title("💬 Chat")
    st.caption('Try: "I spent 2000 on lunch" or upload a receipt.')

    for entry in app.chat.transcript.entries:
        role = "user" if entry.sender == Sender.USER else "assistant"
        with st.chat_message(role):
            if isinstance(entry, ChatMessage):
                for line in entry.lines:
                    st.markdown(line)
            else:
                st.markdown("…")

    app_settings = get_settings().app
    uploaded = st.file_uploader(
        "Attach a receipt",
        type=app_settings.supported_formats_list,
        key=f"receipt-upload-{st.session_state.get('upload_nonce', 0)}",
    )
    if uploaded is not None and app.chat.pending_image is None:
        if uploaded.size > app_settings.max_upload_size_bytes:
            st.error(f"Image too large. Max size: {app_settings.max_upload_size_mb}MB")
        else:
            app.chat.attach_image_bytes(uploaded.getvalue(), uploaded.type)
    if app.chat.pending_image is not None:
        st.image(app.chat.pending_image.data_uri, width=160)
        col1, col2 = st.columns(2)
        # Streamlit never submits an empty chat input, so an uncaptioned
        # receipt goes through its own button
        if col1.button("Send receipt", type="primary", disabled=not app.chat.send_enabled):
            _send(app, "")
        if col2.button("Remove image"):
            dispatch(app, "remove_image")
            _reset_uploader()
            st.rerun()

    text = st.chat_input("Type a message...", disabled=not app.chat.send_enabled)
    if text is not None:
        _send(app, text)


def _send(app: TrackerApp, text: str):
    had_image = app.chat.pending_image is not None
    with st.spinner("Thinking..."):
        dispatch(app, "send_message", {"text": text})
    if had_image:
        _reset_uploader()
    st.rerun()


def _reset_uploader():
    st.session_state.upload_nonce = st.session_state.get("upload_nonce", 0) + 1


# =============================================================================
# DASHBOARD
# =============================================================================

def render_dashboard(app: TrackerApp):
    st.title("📊 This Week")
    snap = app.dashboard.snapshot()

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Income", snap["income"])
    col2.metric("Expenses", snap["expense"])
    col3.metric("Net", snap["net"])
    col4.metric("Transactions", snap["tx_count"])

    st.subheader("Accounts")
    _render_account_cards(app.dashboard.accounts, app.dashboard.accounts_empty_message)

    st.subheader("Recent transactions")
    _render_rows(app, app.dashboard.recent or [], app.dashboard.recent_empty_message)


def _render_account_cards(cards, empty_message):
    if empty_message:
        st.markdown(f'<p class="empty-state">{empty_message}</p>', unsafe_allow_html=True)
        return
    for card in cards or []:
        col1, col2, col3 = st.columns([1, 2, 2])
        col1.caption(card.account_type)
        col2.markdown(f"**{card.name}**")
        col3.markdown(card.balance_text)


def _render_rows(app: TrackerApp, rows, empty_message):
    if empty_message:
        st.markdown(f'<p class="empty-state">{empty_message}</p>', unsafe_allow_html=True)
        return
    for row in rows:
        col1, col2, col3 = st.columns([4, 2, 1])
        col1.markdown(f"**{row.item}**  \n{row.meta}")
        col2.markdown(
            f'<span class="txn-{row.direction.value}">{row.amount_text}</span>',
            unsafe_allow_html=True,
        )
        if row.deletable and col3.button("🗑", key=f"del-{row.id}"):
            st.session_state.pending_delete = row.id
            st.rerun()


# =============================================================================
# TRANSACTIONS
# =============================================================================

def render_transactions(app: TrackerApp):
    st.title("📜 Transactions")
    browser = app.transactions

    pending = st.session_state.get("pending_delete")
    if pending:
        st.warning("Delete this transaction?")
        col1, col2 = st.columns(2)
        if col1.button("Yes, delete", type="primary"):
            st.session_state.delete_confirmed = True
            st.session_state.pending_delete = None
            dispatch(app, "delete_transaction", {"transaction_id": pending})
            st.rerun()
        if col2.button("Cancel"):
            st.session_state.pending_delete = None
            st.rerun()

    if browser.error_message:
        st.error(browser.error_message)
    _render_rows(app, browser.rows, browser.empty_message)

    col1, col2, col3 = st.columns([1, 2, 1])
    if col1.button("← Previous", disabled=not browser.prev_enabled):
        dispatch(app, "load_transactions", {"direction": PageDirection.PREV.value})
        st.rerun()
    col2.markdown(f"<center>{browser.page_label}</center>", unsafe_allow_html=True)
    if col3.button("Next →", disabled=not browser.next_enabled):
        dispatch(app, "load_transactions", {"direction": PageDirection.NEXT.value})
        st.rerun()


# =============================================================================
# ACCOUNTS
# =============================================================================

def render_accounts(app: TrackerApp):
    st.title("🏦 Accounts")
    _render_account_cards(app.accounts.cards, app.accounts.empty_message)


# =============================================================================
# PLAN
# =============================================================================

def render_subscription(app: TrackerApp):
    st.title("⭐ Your Plan")
    lines = app.dashboard.subscription_lines()
    if not lines:
        st.info("Plan details are not available right now.")
        return

    icon = "⭐" if lines["badge"] == "PRO" else "🆓"
    st.markdown(f"### {icon} {lines['plan_title']}")
    st.caption(lines["status_line"])

    for label, usage_key, pct_key, severity_key in (
        ("Transactions", "tx_usage", "tx_pct", "tx_severity"),
        ("OCR Uploads", "ocr_usage", "ocr_pct", "ocr_severity"),
    ):
        st.markdown(
            f'{label}: <span class="usage-{lines[severity_key]}">{lines[usage_key]}</span>',
            unsafe_allow_html=True,
        )
        st.progress(int(lines[pct_key]))

    if lines["badge"] != "PRO":
        st.markdown("---")
        col1, col2 = st.columns(2)
        for col, interval, label in (
            (col1, BillingInterval.MONTHLY, "Go Pro (Monthly)"),
            (col2, BillingInterval.YEARLY, "Go Pro (Yearly)"),
        ):
            if col.button(label):
                url = dispatch(app, "subscribe", {"interval": interval.value})
                st.link_button("Continue to PayPal", url)


if __name__ == "__main__":
    main()
