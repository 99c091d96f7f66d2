# finsim/reports/formatting.py
"""
Presentation helpers for Indian-rupee amounts.

The engines never round; everything here is display-only.
"""

from __future__ import annotations

import math

_UNITS = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine"]
_TEENS = ["Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen"]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000


def _below_thousand(n: int) -> list[str]:
    words: list[str] = []
    if n >= 100:
        words += [_UNITS[n // 100], "Hundred"]
        n %= 100
    if n >= 20:
        words.append(_TENS[n // 10])
        n %= 10
    if n >= 10:
        words.append(_TEENS[n - 10])
        n = 0
    if n > 0:
        words.append(_UNITS[n])
    return words


def _integer_words(n: int) -> list[str]:
    words: list[str] = []
    crores, n = divmod(n, CRORE)
    lakhs, n = divmod(n, LAKH)
    thousands, n = divmod(n, THOUSAND)
    if crores:
        # Amounts of a thousand crore and above: "One Thousand Five Hundred Crore"
        words += _integer_words(crores) + ["Crore"]
    if lakhs:
        words += _below_thousand(lakhs) + ["Lakh"]
    if thousands:
        words += _below_thousand(thousands) + ["Thousand"]
    if n:
        words += _below_thousand(n)
    return words


def to_indian_words(amount: float) -> str:
    """
    Spell a rupee amount in the Indian system (crore / lakh / thousand).

    Example:
        10_000_000 -> "One Crore Rupees Only"
        0          -> "Zero"
    Paise are dropped; non-finite input yields an empty string.
    """
    if not math.isfinite(amount):
        return ""
    n = math.floor(abs(amount))
    if n == 0:
        return "Zero"
    sign = ["Minus"] if amount < 0 else []
    return " ".join(sign + _integer_words(n) + ["Rupees", "Only"])


def fmt_inr(x: float) -> str:
    """
    Whole-rupee amount with Indian digit grouping.

    Example:
        10000000 -> ₹1,00,00,000
        -2500.6  -> -₹2,501
    """
    rounded = round(x)
    sign = "-" if rounded < 0 else ""
    digits = str(abs(rounded))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups: list[str] = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    return f"{sign}₹{digits}"


def fmt_pct(percent: float) -> str:
    """Format a value already expressed in percent, e.g. 8.5 -> 8.50%."""
    return f"{percent:.2f}%"
