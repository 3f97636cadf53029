"""Baht formatting helpers used on documents and reports.

>>> baht_text(121.5)
'หนึ่งร้อยยี่สิบเอ็ดบาทห้าสิบสตางค์'
>>> format_thb(1234.5)
'฿1,234.50'
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

_DIGITS = ["", "หนึ่ง", "สอง", "สาม", "สี่", "ห้า", "หก", "เจ็ด", "แปด", "เก้า"]
_UNITS = ["", "สิบ", "ร้อย", "พัน", "หมื่น", "แสน"]
_MILLION = "ล้าน"


def _read_group(n: int, has_higher: bool = False) -> str:
    """Thai reading of 0 <= n < 1,000,000 (empty for zero).

    ``has_higher`` marks a group that follows millions, where a lone
    trailing 1 is read "เอ็ด".
    """
    text = ""
    digits = str(n)
    length = len(digits)
    for i, ch in enumerate(digits):
        d = int(ch)
        pos = length - 1 - i
        if d == 0:
            continue
        if pos == 0 and d == 1 and (n > 9 or has_higher):
            text += "เอ็ด"
        elif pos == 1 and d == 2:
            text += "ยี่"
        elif pos == 1 and d == 1:
            pass
        else:
            text += _DIGITS[d]
        text += _UNITS[pos]
    return text


def _read_number(n: int) -> str:
    if n < 1_000_000:
        return _read_group(n)
    millions, rest = divmod(n, 1_000_000)
    return _read_number(millions) + _MILLION + _read_group(rest, has_higher=True)


def baht_text(amount: float) -> str:
    """Spell out ``amount`` in Thai baht and satang, e.g. for receipts.

    Amounts are rounded half-up to the satang.  ``NaN`` gives an empty string.
    """
    if amount is None or math.isnan(amount):
        return ""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    prefix = "ลบ" if value < 0 else ""
    value = abs(value)
    baht = int(value)
    satang = int((value - baht) * 100)

    text = (_read_number(baht) if baht else "ศูนย์") + "บาท"
    if satang:
        text += _read_group(satang) + "สตางค์"
    else:
        text += "ถ้วน"
    return prefix + text


def format_thb(amount: float) -> str:
    return f"฿{amount:,.2f}"


__all__ = ["baht_text", "format_thb"]
