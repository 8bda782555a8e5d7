"""
Tests for FinanceTracker

Test strategy:
1. Unit tests for individual components (models, result classification)
2. Integration tests for flows (with a fake HTTP transport)
3. No real API calls in tests
"""

import pytest
from datetime import datetime
from decimal import Decimal

from pydantic import ValidationError

from financetracker.models.chat import ChatMessage, PendingImage, Sender
from financetracker.models.finance import (
    Direction,
    PaginationCursor,
    Session,
    SubscriptionUsage,
    SubscriptionView,
    Transaction,
    UsageSeverity,
    User,
    WeeklySummary,
)
from financetracker.models.notice import NoticeBuilder, NoticeKind, NoticeLevel
from financetracker.models.results import (
    Ok,
    QuotaExceeded,
    Rejected,
    TransportError,
    classify,
)
from financetracker.notices import Notifier


class TestSessionModel:
    """Tests for the token/user pairing."""

    def test_anonymous_session(self):
        """Test that an empty session is anonymous."""
        session = Session()
        assert not session.is_authenticated

    def test_authenticated_session(self):
        """Test that token plus user is authenticated."""
        session = Session(token="abc", user=User(id="1", first_name="Ava"))
        assert session.is_authenticated

    def test_token_without_user_rejected(self):
        """Test that a half-populated session cannot be built."""
        with pytest.raises(ValidationError):
            Session(token="abc")

    def test_user_without_token_rejected(self):
        """Test the other half."""
        with pytest.raises(ValidationError):
            Session(user=User(id="1"))

    def test_empty_token_rejected(self):
        """Test that an empty token is not a token."""
        with pytest.raises(ValidationError):
            Session(token="", user=User(id="1"))

    def test_user_id_coerced_to_string(self):
        """Test that numeric ids from the backend become strings."""
        assert User(id=42).id == "42"

    def test_display_name_falls_back(self):
        """Test that a user without a first name is greeted as User."""
        assert User(id="1").display_name == "User"


class TestTransactionModel:
    """Tests for lenient transaction parsing."""

    def test_full_transaction(self):
        """Test parsing a well-formed transaction."""
        tx = Transaction.model_validate({
            "id": 7,
            "item": "lunch",
            "amount": "2000",
            "direction": "outflow",
            "category": "food",
            "created_at": "2025-01-05T10:00:00Z",
        })
        assert tx.id == "7"
        assert tx.amount == Decimal("2000")
        assert tx.direction == Direction.OUTFLOW
        assert tx.created_at == datetime.fromisoformat("2025-01-05T10:00:00+00:00")

    def test_unknown_direction_is_outflow(self):
        """Test that anything but inflow renders as an expense."""
        assert Transaction(direction="sideways").direction == Direction.OUTFLOW
        assert Transaction(direction="inflow").is_inflow

    def test_missing_amount_is_zero(self):
        """Test that a null amount does not break rendering."""
        assert Transaction(amount=None).amount == Decimal("0")

    def test_null_text_fields_use_defaults(self):
        """Test that null item and category do not fail the row."""
        tx = Transaction.model_validate({"item": None, "category": None, "amount": 5})
        assert tx.item == ""
        assert tx.category == "uncategorized"

    def test_bad_date_is_none(self):
        """Test that an unparseable timestamp is dropped."""
        assert Transaction(created_at="yesterday").created_at is None

    def test_weekly_summary_net(self):
        """Test that net is income minus expense."""
        summary = WeeklySummary(total_income="5000", total_expense="2000", tx_count="3")
        assert summary.net == Decimal("3000")
        assert summary.tx_count == 3


class TestSubscriptionView:
    """Tests for plan usage derivation."""

    def test_free_plan_percentages(self):
        """Test usage percentages against free limits."""
        view = SubscriptionView.from_usage(SubscriptionUsage(tx_count=50, ocr_count=1))
        assert not view.is_pro
        assert view.tx_limit == 100
        assert view.ocr_limit == 3
        assert view.tx_pct == 50.0
        assert view.ocr_pct == pytest.approx(33.333, rel=1e-3)
        assert view.badge == "Free"

    def test_percentage_clamped_to_100(self):
        """Test that overuse never draws past a full bar."""
        view = SubscriptionView.from_usage(SubscriptionUsage(tx_count=150, ocr_count=7))
        assert view.tx_pct == 100.0
        assert view.ocr_pct == 100.0
        assert view.tx_severity == UsageSeverity.DANGER

    def test_active_pro_is_unlimited(self):
        """Test that active paid plans show the nominal bar."""
        view = SubscriptionView.from_usage(
            SubscriptionUsage(plan_name="pro", status="active", tx_count=500)
        )
        assert view.is_pro
        assert view.tx_limit is None
        assert view.tx_pct == 10.0
        assert view.tx_limit_label == "∞"
        assert view.badge == "PRO"
        assert view.plan_title == "Pro Plan"

    def test_cancelled_pro_is_free(self):
        """Test that a paid plan that is not active gets free limits."""
        view = SubscriptionView.from_usage(
            SubscriptionUsage(plan_name="pro", status="cancelled", tx_count=10)
        )
        assert not view.is_pro
        assert view.tx_limit == 100

    def test_blank_plan_defaults(self):
        """Test that blank plan fields fall back to free/active."""
        usage = SubscriptionUsage(plan_name="", status=None, tx_count="junk")
        assert usage.plan_name == "free"
        assert usage.status == "active"
        assert usage.tx_count == 0

    @pytest.mark.parametrize("pct,expected", [
        (0, UsageSeverity.NORMAL),
        (50, UsageSeverity.NORMAL),
        (51, UsageSeverity.WARNING),
        (80, UsageSeverity.WARNING),
        (81, UsageSeverity.DANGER),
    ])
    def test_severity_tiers(self, pct, expected):
        """Test the bar colour thresholds."""
        assert UsageSeverity.for_percentage(pct) == expected


class TestPaginationCursor:
    """Tests for the immutable page cursor."""

    def test_offset(self):
        """Test that offset is page times page size."""
        assert PaginationCursor(page=2, page_size=20).offset == 40

    def test_previous_at_first_page_stays(self):
        """Test that the cursor never goes negative."""
        cursor = PaginationCursor(page=0, page_size=20)
        assert cursor.previous() is cursor
        assert not cursor.has_previous

    def test_next_returns_new_cursor(self):
        """Test that moving does not mutate."""
        cursor = PaginationCursor(page=0, page_size=20)
        moved = cursor.next()
        assert moved.page == 1
        assert cursor.page == 0

    def test_negative_page_rejected(self):
        """Test the page floor."""
        with pytest.raises(ValidationError):
            PaginationCursor(page=-1)


class TestResultClassification:
    """Tests for turning backend JSON into result variants."""

    def test_success_is_ok(self):
        """Test success:true."""
        result = classify({"success": True, "message": "hi"})
        assert isinstance(result, Ok)
        assert result.get("message") == "hi"

    def test_upgrade_required_is_quota(self):
        """Test the quota signal."""
        result = classify({"success": False, "upgrade_required": True, "error": "Limit hit"})
        assert isinstance(result, QuotaExceeded)
        assert result.message == "Limit hit"

    def test_plain_failure_is_rejected(self):
        """Test success:false without the quota flag."""
        result = classify({"success": False, "error": "Bad input"})
        assert type(result) is Rejected
        assert result.message == "Bad input"

    def test_missing_success_is_rejected(self):
        """Test that an object without success counts as a failure."""
        result = classify({"message": "??"})
        assert type(result) is Rejected
        assert result.message is None

    def test_non_object_is_transport_error(self):
        """Test that a list body is a protocol failure."""
        assert isinstance(classify(["nope"]), TransportError)


class TestChatModels:
    """Tests for chat entries and pending images."""

    def test_message_lines(self):
        """Test that multi-line text renders line by line."""
        message = ChatMessage(text="a\nb", sender=Sender.BOT)
        assert message.lines == ["a", "b"]

    def test_message_is_frozen(self):
        """Test that messages cannot be edited after creation."""
        message = ChatMessage(text="a", sender=Sender.USER)
        with pytest.raises(ValidationError):
            message.text = "b"

    def test_pending_image_from_bytes(self):
        """Test encoding raw bytes as a data URI."""
        image = PendingImage.from_bytes(b"\x89PNG", "image/png")
        assert image.data_uri.startswith("data:image/png;base64,")
        assert image.mime_type == "image/png"

    def test_pending_image_requires_data_uri(self):
        """Test that plain URLs are rejected."""
        with pytest.raises(ValidationError):
            PendingImage(data_uri="https://example.com/receipt.png")


class TestNotices:
    """Tests for notice construction."""

    def test_session_expired_notice(self):
        """Test the expiry wording and level."""
        notice = NoticeBuilder.session_expired("/api/summary")
        assert notice.kind == NoticeKind.SESSION_EXPIRED
        assert notice.level == NoticeLevel.ERROR
        assert notice.message == "Session expired. Please login again."
        assert notice.details["endpoint"] == "/api/summary"

    def test_delete_failed_uses_backend_error(self):
        """Test that the backend reason is shown when given."""
        assert NoticeBuilder.delete_failed("t-1", "Not yours").message == "Not yours"
        assert NoticeBuilder.delete_failed("t-1").message == "Delete failed"

    def test_log_dict_is_flat_strings(self):
        """Test log serialisation."""
        log_dict = NoticeBuilder.login_succeeded("Ava").to_log_dict()
        assert log_dict["kind"] == "login_succeeded"
        assert log_dict["message"] == "Welcome back, Ava!"
        assert isinstance(log_dict["notice_id"], str)


class TestNotifier:
    """Tests for the notice sink."""

    def test_history_and_drain(self):
        """Test that drained notices are forgotten."""
        notifier = Notifier()
        notifier.transaction_deleted("t-1")
        notifier.delete_failed("t-2")
        assert [n.kind for n in notifier.drain()] == [
            NoticeKind.TRANSACTION_DELETED,
            NoticeKind.DELETE_FAILED,
        ]
        assert notifier.history == []

    def test_failing_listener_does_not_break_emit(self):
        """Test that a broken toast renderer is logged, not raised."""
        seen = []

        def broken(notice):
            raise RuntimeError("render failed")

        notifier = Notifier(listeners=[broken, seen.append])
        notice = notifier.checkout_redirect("P-1", "https://paypal.test")

        assert seen == [notice]
        assert notifier.history == [notice]
