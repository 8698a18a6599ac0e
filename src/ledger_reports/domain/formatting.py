"""Display formatting for report cells.

Every amount in a ReportResult goes through these helpers so the preview,
the PDF and the spreadsheet exports show identical strings.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
BALANCE_TOLERANCE = Decimal("0.01")
EMPTY_CELL = "-"


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_currency(value: Decimal | int | float | None, label: str = "EGP") -> str:
    """`EGP 50,000.00`: thousands separators and exactly two decimals."""
    amount = to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    if amount == 0:
        amount = abs(amount)
    text = f"{amount:,.2f}"
    return f"{label} {text}" if label else text


def format_currency_or_dash(value: Decimal | int | float | None, label: str = "EGP") -> str:
    """Currency string, or "-" when the value is zero."""
    amount = to_decimal(value)
    if amount == 0:
        return EMPTY_CELL
    return format_currency(amount, label)


def format_count(value: int | Decimal | None) -> str:
    return str(int(value or 0))


def format_percentage(value: Decimal | int | float | None, places: int = 2) -> str:
    """`43.33%`; value is already expressed in percent."""
    quantum = Decimal(1).scaleb(-places)
    pct = to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{pct:.{places}f}%"


def is_balanced(left: Decimal, right: Decimal) -> bool:
    return abs(left - right) < BALANCE_TOLERANCE


def humanize_key(key: str) -> str:
    """`totalDebits` -> `Total Debits`."""
    words: list[str] = []
    current = ""
    for ch in key.replace("_", " "):
        if ch.isupper() and current and not current.endswith(" "):
            words.append(current)
            current = ch
        else:
            current += ch
    words.append(current)
    return " ".join(w.strip().capitalize() for w in " ".join(words).split())
