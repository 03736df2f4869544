from __future__ import annotations

import math
import re
from typing import Optional

DEFAULT_SYMBOL = "₹"

_NON_NUMERIC = re.compile(r"[^0-9.]")


def _group_indian(digits: str) -> str:
    """12345678 -> 1,23,45,678 (last three digits, then pairs)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_number(value: float, precision: Optional[int] = None) -> str:
    """
    Indian-grouped number without symbol.
    precision=None keeps 0-2 fraction digits, dropping trailing zeros.
    """
    if not math.isfinite(value):
        return "0"
    digits = 2 if precision is None else max(precision, 0)
    text = f"{abs(value):.{digits}f}"
    whole, _, frac = text.partition(".")
    if precision is None:
        frac = frac.rstrip("0")
    sign = "-" if value < 0 and (int(whole) or (frac and int(frac))) else ""
    grouped = _group_indian(whole)
    return f"{sign}{grouped}.{frac}" if frac else f"{sign}{grouped}"


def format_currency(amount: float, symbol: str = DEFAULT_SYMBOL, precision: Optional[int] = None) -> str:
    if not math.isfinite(amount):
        return f"{symbol}0"
    text = format_number(amount, precision)
    if text.startswith("-"):
        return f"-{symbol}{text[1:]}"
    return f"{symbol}{text}"


def parse_currency(text: str) -> Optional[float]:
    """Parse user input such as "₹1,250.50"; None when nothing numeric remains."""
    cleaned = _NON_NUMERIC.sub("", text or "")
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def format_for_input(text: str) -> str:
    value = parse_currency(text)
    if value is None:
        return ""
    return format_number(value)
