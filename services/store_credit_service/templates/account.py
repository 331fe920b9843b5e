"""
Storefront account page showing a customer's store credit.

Usage:
    from services.store_credit_service.templates.account import render_store_credit_page

    html = render_store_credit_page(
        customer_name="Jane Doe",
        balance_credits=12.5,
        balance_amount=25.0,
        history=entries,
    )
"""

from html import escape
from typing import Iterable, Optional

from services.store_credit_service.models import HistoryActionType, StoreCreditHistory

# ─── Color presets ────────────────────────────────────────────────────
COLOR_ADD = "#059669"
COLOR_DEDUCT = "#dc2626"


def format_money(value: float, currency_id: Optional[str] = None) -> str:
    suffix = f" {escape(currency_id)}" if currency_id else ""
    return f"{value:,.2f}{suffix}"


def _history_row(entry: StoreCreditHistory) -> str:
    is_add = entry.action_type == HistoryActionType.ADD
    sign = "+" if is_add else "-"
    color = COLOR_ADD if is_add else COLOR_DEDUCT
    created = entry.created_at.strftime("%Y-%m-%d %H:%M")
    return f"""\
        <tr>
            <td>{created}</td>
            <td>{escape(entry.reason)}</td>
            <td style="color: {color}; text-align: right;">{sign}{format_money(entry.amount, entry.currency_id)}</td>
            <td style="text-align: right;">{sign}{entry.credits:,.2f}</td>
        </tr>"""


def render_store_credit_page(
    customer_name: str,
    balance_credits: float,
    balance_amount: float,
    history: Iterable[StoreCreditHistory],
    currency_id: Optional[str] = None,
) -> str:
    """Render the account store credit page.

    Args:
        customer_name: Shown in the greeting.
        balance_credits: Current balance in credits.
        balance_amount: Money equivalent of the balance.
        history: Ledger entries, already ordered newest first.
        currency_id: Optional currency label for amounts.
    """
    rows = "\n".join(_history_row(entry) for entry in history)
    if not rows:
        history_html = '<p class="empty">No store credit transactions yet.</p>'
    else:
        history_html = f"""\
    <table class="history">
        <thead>
            <tr><th>Date</th><th>Reason</th><th>Amount</th><th>Credits</th></tr>
        </thead>
        <tbody>
{rows}
        </tbody>
    </table>"""

    return f"""\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>Store credit</title>
    <style>
        body {{ font-family: -apple-system, "Segoe UI", Roboto, sans-serif; color: #0f172a; margin: 0; padding: 24px; }}
        .balance {{ background: #f1f5f9; border-radius: 8px; padding: 16px 20px; margin-bottom: 24px; }}
        .balance strong {{ font-size: 28px; display: block; }}
        table.history {{ width: 100%; border-collapse: collapse; }}
        table.history th, table.history td {{ padding: 8px; border-bottom: 1px solid #e2e8f0; text-align: left; }}
        .empty {{ color: #64748b; }}
    </style>
</head>
<body>
    <h1>Store credit</h1>
    <p>Hi {escape(customer_name)}, here is your store credit.</p>
    <div class="balance">
        <span>Available balance</span>
        <strong>{format_money(balance_amount, currency_id)}</strong>
        <span>{balance_credits:,.2f} credits</span>
    </div>
    <h2>History</h2>
{history_html}
</body>
</html>
"""
