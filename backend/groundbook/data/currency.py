"""Currency utilities — display formatting for quoted prices."""

from decimal import ROUND_HALF_UP, Decimal

CURRENCY_SYMBOLS: dict[str, str] = {
    "PKR": "PKR ",
    "USD": "$", "GBP": "£", "EUR": "€",
    "INR": "₹", "AED": "AED ",
}


def format_price(amount, currency: str = "PKR") -> str:
    """Format a price with currency prefix for display, e.g. 'PKR 2,970'."""
    symbol = CURRENCY_SYMBOLS.get(currency, currency + " ")
    whole = int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if whole < 0 else ""
    return f"{sign}{symbol}{abs(whole):,}"
