"""Unit tests for the storefront account page renderer."""

import uuid
from datetime import datetime, timezone

from services.store_credit_service.models import HistoryActionType, StoreCreditHistory
from services.store_credit_service.templates.account import render_store_credit_page


def _entry(action_type, amount, reason, day):
    return StoreCreditHistory(
        id=uuid.uuid4(),
        store_credit_id=uuid.uuid4(),
        amount=amount,
        credits=amount,
        reason=reason,
        action_type=action_type,
        created_at=datetime(2026, 1, day, 12, 0, tzinfo=timezone.utc),
    )


def test_renders_balance_and_history_rows():
    html = render_store_credit_page(
        customer_name="Ada Lovelace",
        balance_credits=12.5,
        balance_amount=25.0,
        history=[
            _entry(HistoryActionType.DEDUCT, 5.0, "Order #1", 2),
            _entry(HistoryActionType.ADD, 30.0, "Refund", 1),
        ],
    )

    assert "Ada Lovelace" in html
    assert "25.00" in html
    assert "12.50 credits" in html
    assert "-5.00" in html
    assert "+30.00" in html
    assert html.index("Order #1") < html.index("Refund")


def test_escapes_user_supplied_text():
    html = render_store_credit_page(
        customer_name="<b>Eve</b>",
        balance_credits=1,
        balance_amount=1,
        history=[_entry(HistoryActionType.ADD, 1.0, "<script>alert(1)</script>", 1)],
    )

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "&lt;b&gt;Eve&lt;/b&gt;" in html


def test_empty_history_message():
    html = render_store_credit_page(
        customer_name="New Customer", balance_credits=0, balance_amount=0, history=[]
    )
    assert "No store credit transactions yet." in html
