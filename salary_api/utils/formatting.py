# utils/formatting.py

import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "GBP": "£",
    "USD": "$",
    "EUR": "€",
    "JPY": "¥",
    "AUD": "A$",
    "CAD": "C$",
}

# (threshold, divisor, suffix) checked top-down; Indian numbering for lakh/crore
SALARY_SCALES = [
    (10_000_000, 10_000_000, " cr"),
    (100_000, 100_000, " lakh"),
    (1_000, 1_000, " k"),
]


def format_name(name: Optional[str]) -> str:
    """
    Cleans a company or job name before it is used for a lookup.
    Drops everything after the first comma or opening parenthesis,
    then removes any character that is not alphanumeric or whitespace.
    """
    if not name:
        return ""
    cleaned = re.split(r"[,(]", name, maxsplit=1)[0].strip()
    return re.sub(r"[^\w\s]|_", "", cleaned)


def _round_half_up(value: Union[int, float, Decimal]) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_salary(salary: Union[int, float, str, None], currency: Optional[str]) -> str:
    """
    Renders a salary like "₹12 lakh" or "$100 k".
    Missing or zero salaries render as "N/A"; unknown currencies get no symbol.
    """
    if not salary:
        return "N/A"

    symbol = CURRENCY_SYMBOLS.get(currency or "", "")
    amount = Decimal(str(salary))

    for threshold, divisor, suffix in SALARY_SCALES:
        if amount >= threshold:
            return f"{symbol}{_round_half_up(amount / divisor)}{suffix}"
    return f"{symbol}{_round_half_up(amount)}"
