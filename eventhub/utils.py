import html
import json
from decimal import Decimal, InvalidOperation

import bleach

ALLOWED_HTML_TAGS = []  # plain text only


def sanitize_text(content):
    """
    Strip every HTML tag from user-supplied text. The result is stored and
    served as plain text, so the entities bleach escapes are turned back.
    """
    if not content:
        return content
    cleaned = bleach.clean(str(content), tags=ALLOWED_HTML_TAGS, strip=True)
    return html.unescape(cleaned).strip()


def parse_positive_int(value):
    """Integer above zero from a JSON number or numeric string, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    elif not isinstance(value, (int, str)):
        return None
    try:
        number = int(value)
    except ValueError:
        return None
    return number if number > 0 else None


def parse_decimal(value, places=2, max_digits=10):
    """
    Decimal from a JSON number or numeric string, or None when the value is
    missing, not a finite number, or does not fit a money column.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    if amount.as_tuple().exponent < -places:
        return None
    if abs(amount) >= Decimal(10) ** (max_digits - places):
        return None
    return amount


def load_json_object(request):
    """The request body as a dict, or None when it is not a JSON object."""
    try:
        data = json.loads(request.body)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
