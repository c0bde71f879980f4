"""Score Normalizer - Phase 1 of the Decision Scoring Engine.

Maps raw scores onto the 0-10 desirability scale and parses the loosely
formatted amounts users type into budget and cost fields.
"""

import math
import re
from typing import Optional, Union

# Leading numeric part once currency symbols and separators are removed
_AMOUNT_PATTERN = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")
_FORMATTING_PATTERN = re.compile(r"[^0-9.\-]")


def normalize_score(value: float, min: float = 0, max: float = 10) -> float:
    """Linearly rescale ``value`` from [min, max] to [0, 10].

    Degenerate bounds (``max == min``) return the midpoint 5 rather than
    dividing by zero.
    """
    if max == min:
        return 5.0
    return (value - min) * 10 / (max - min)


def parse_amount(value: Union[str, float, int, None]) -> Optional[float]:
    """Parse a currency-like amount such as ``"$1,500.00"``.

    Returns None for missing or unparsable input instead of raising.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        cleaned = _FORMATTING_PATTERN.sub("", value)
        match = _AMOUNT_PATTERN.match(cleaned)
        if not match:
            return None
        try:
            amount = float(match.group(0))
        except ValueError:
            return None
    if math.isnan(amount) or math.isinf(amount):
        return None
    return amount
