"""Numeric input parsing shared by the ledger and the income tracker."""
import math
from numbers import Real
from typing import Any, Optional


def parse_number(value: Any) -> Optional[float]:
    """Parse user input into a finite float.
    
    Accepts ints, floats and numeric strings (surrounding whitespace is
    ignored). Booleans, NaN, infinities and anything else yield ``None``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    elif isinstance(value, Real):
        number = float(value)
    else:
        return None
    if not math.isfinite(number):
        return None
    return number
