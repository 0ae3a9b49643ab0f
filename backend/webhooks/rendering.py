# webhooks/rendering.py
"""
Placeholder resolution and HTML rendering for webhook notifications.

Placeholder language (in subject, header, subtexts, body and table rows):

    {{a.b.c}}               dotted path into the payload; missing -> ""
    {{a.b:money_amount}}    number formatted as 1.234,56; non-numbers as-is

The HTML shell lives in templates/emails/webhook_notification.html.
"""

import json
import re
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.template.loader import render_to_string
from django.utils.dateparse import parse_datetime
from django.utils.html import escape
from django.utils.safestring import mark_safe

from webhooks.models import DEFAULT_MAIN_COLOR

MONEY_PLACEHOLDER = re.compile(r"\{\{\s*([\w.]+):money_amount\s*\}\}")
PLACEHOLDER = re.compile(r"\{\{\s*([\w.]+)\s*\}\}")
TEMPLATE_NAME = "emails/webhook_notification.html"

_MISSING = object()


def lookup_path(data, path: str, default=_MISSING):
    """
    Walk ``data`` along a dotted path.

    Dict keys and list indexes are both supported. Returns ``default``
    (or "" when not given) as soon as a segment is missing.
    """
    value = data
    for part in path.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return "" if default is _MISSING else default
    return value


def _to_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, bool)):
        return json.dumps(value)
    return str(value)


def format_money_amount(value):
    """
    Format a number with dot thousands, comma decimals and two places.

    >>> format_money_amount("1234.5")
    '1.234,50'

    Values that do not parse as a number are returned unchanged.
    """
    if isinstance(value, bool):
        return value
    try:
        number = Decimal(str(value).strip())
        if not number.is_finite():
            return value
        # more than 28 significant digits cannot be quantized
        number = number.quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        return value
    formatted = f"{number:,.2f}"
    return formatted.replace(",", "_").replace(".", ",").replace("_", ".")


def resolve_placeholders(text: str, data, escape_values: bool = False) -> str:
    """
    Substitute placeholders in ``text`` from ``data``.

    With ``escape_values`` the substituted values are HTML-escaped; the
    surrounding template text is left alone.
    """
    if not text:
        return ""
    data = data if data is not None else {}

    def _emit(value) -> str:
        value = _to_text(value)
        return escape(value) if escape_values else value

    text = MONEY_PLACEHOLDER.sub(
        lambda m: _emit(format_money_amount(lookup_path(data, m.group(1)))),
        text,
    )
    return PLACEHOLDER.sub(lambda m: _emit(lookup_path(data, m.group(1))), text)


def render_html(*, subject, header, subtext1="", subtext2="", body="", rows=None, main_color=None) -> str:
    context = {
        "subject": subject,
        "header": header,
        "subtext1": subtext1,
        "subtext2": subtext2,
        # body is authored HTML with escaped payload values
        "body": mark_safe(body),
        "rows": rows or [],
        "main_color": (main_color or "").strip() or DEFAULT_MAIN_COLOR,
        "logo_url": settings.LOGO_URL,
    }
    return render_to_string(TEMPLATE_NAME, context)


def render_template(template, data) -> dict:
    """Render a WebhookTemplate against a payload -> {subject, html}."""
    data = data if data is not None else {}
    subject = resolve_placeholders(template.subject, data)
    rows = [
        {
            "key": resolve_placeholders(str(row.get("key", "")), data),
            "value": resolve_placeholders(str(row.get("value", "")), data),
        }
        for row in (template.table_rows or [])
        if isinstance(row, dict)
    ]
    html = render_html(
        subject=subject,
        header=resolve_placeholders(template.header, data),
        subtext1=resolve_placeholders(template.subtext1, data),
        subtext2=resolve_placeholders(template.subtext2, data),
        body=resolve_placeholders(template.body, data, escape_values=True),
        rows=rows,
        main_color=template.main_color,
    )
    return {"subject": subject, "html": html}


# =============================================================================
# Fallback (no template configured)
# =============================================================================

def event_display_name(event_name: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in event_name.replace(".", " ").split())


def _format_date(value) -> str:
    parsed = parse_datetime(str(value))
    if parsed is None:
        return str(value)
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def fallback_rows(event_name: str, data) -> list:
    """Summary rows built from the fields most provider events carry."""
    rows = []
    if not isinstance(data, dict):
        data = {}

    def add(key, value):
        rows.append({"key": key, "value": _to_text(value)})

    if data.get("status"):
        add("Status", data["status"])

    amount = data.get("amount_beneficiary_receives") or data.get("amount_payer_pays")
    if amount:
        if isinstance(amount, dict):
            amount = amount.get("amount", "")
        currency = (
            data.get("transfer_currency")
            or data.get("currency")
            or data.get("buy_currency")
            or data.get("sell_currency")
            or "USD"
        )
        add("Amount", f"{format_money_amount(amount)} {currency}")

    for field, label in (
        ("short_reference_id", "Reference ID"),
        ("request_id", "Request ID"),
        ("id", "Transaction ID"),
        ("transfer_date", "Transfer Date"),
        ("conversion_date", "Conversion Date"),
    ):
        if data.get(field):
            add(label, data[field])

    if data.get("created_at"):
        add("Created At", _format_date(data["created_at"]))
    if data.get("account_name"):
        add("Account Name", data["account_name"])
    account_id = data.get("accountId") or data.get("account_id")
    if account_id:
        add("Account ID", account_id)

    bank_details = lookup_path(data, "beneficiary.bank_details", default=None)
    if isinstance(bank_details, dict):
        if bank_details.get("account_name"):
            add("Beneficiary", bank_details["account_name"])
        if bank_details.get("iban"):
            add("IBAN", bank_details["iban"])

    if lookup_path(data, "payer.company_name", default=None):
        add("From Company", data["payer"]["company_name"])

    for field, label in (
        ("currency_pair", "Currency Pair"),
        ("client_rate", "Rate"),
        ("connected_account_id", "Connected Account ID"),
        ("connected_account_name", "Connected Account Name"),
    ):
        if data.get(field):
            add(label, data[field])

    if not rows:
        add("Event Type", event_display_name(event_name))
        add("Data", "Webhook data received successfully")
    return rows


def render_fallback(event_name: str, data) -> dict:
    display = event_display_name(event_name)
    subject = f"Webhook Notification: {display}"
    html = render_html(
        subject=subject,
        header=subject,
        subtext1="A new webhook event has been received. Please review the details below.",
        rows=fallback_rows(event_name, data),
    )
    return {"subject": subject, "html": html}
