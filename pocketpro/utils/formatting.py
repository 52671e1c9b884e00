"""Display helpers for money and time."""
from typing import Optional


def format_currency(amount: Optional[float]) -> str:
    """Format an amount as US dollars, e.g. ``$1,234.50`` or ``-$40.00``.
    
    ``None`` renders as a dash so undefined rates never show up as NaN.
    """
    if amount is None:
        return "-"
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_signed(amount: float) -> str:
    """Format a net result with an explicit sign."""
    if amount >= 0:
        return f"+{format_currency(amount)}"
    return format_currency(amount)


def format_hours(hours: float) -> str:
    return f"{hours:.1f}h"
