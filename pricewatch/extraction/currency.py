# pricewatch/extraction/currency.py

"""Parse localized currency strings like ``'₺12.345,67'`` into Decimals."""

import re
from decimal import Decimal, InvalidOperation

from pricewatch.errors import ParseError

_NON_NUMERIC_RE = re.compile(r"[^0-9.,]")

# A dot followed by exactly three digits and then a non-digit or the end
# is a thousands separator ("1.234", "12.345,67").
_THOUSANDS_DOT_RE = re.compile(r"\.(?=[0-9]{3}(?:[^0-9]|$))")


def _to_decimal(text: str) -> Decimal:
    """Read *text* as a finite, non-negative Decimal or raise ParseError."""
    if not text:
        raise ParseError("empty amount")
    try:
        value = Decimal(text)
    except InvalidOperation as exc:
        raise ParseError(f"not a number: {text!r}") from exc
    if not value.is_finite() or value < 0:
        raise ParseError(f"out of range: {text!r}")
    return value


def parse_localized_amount(text: str | None) -> Decimal | None:
    """Extract a numeric amount from a comma-decimal price string.

    ``"12.345,67"`` → ``12345.67``, ``"1.234"`` → ``1234``. Returns
    ``None`` for empty or garbage input; never raises.
    """
    if not text:
        return None
    cleaned = _NON_NUMERIC_RE.sub("", "".join(text.split()))
    cleaned = _THOUSANDS_DOT_RE.sub("", cleaned)
    cleaned = cleaned.replace(",", ".", 1)
    try:
        return _to_decimal(cleaned)
    except ParseError:
        return None


def parse_plain_amount(value: object) -> Decimal | None:
    """Read a machine-formatted amount from structured data.

    Numbers are taken as-is; strings use ``.`` as the decimal mark (a
    ``,`` is accepted in its place). Strings that fail this strict read
    get a second chance through :func:`parse_localized_amount`.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            return _to_decimal(str(value))
        except ParseError:
            return None
    if not isinstance(value, str):
        return None
    compact = "".join(value.split()).replace(",", ".", 1)
    try:
        return _to_decimal(compact)
    except ParseError:
        return parse_localized_amount(value)
