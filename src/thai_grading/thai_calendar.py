"""
Thai calendar helpers - Buddhist Era years, Thai date formatting, national ID check
"""

import re
from datetime import date, datetime
from typing import Union

BUDDHIST_ERA_OFFSET = 543

THAI_MONTHS = [
    "มกราคม",
    "กุมภาพันธ์",
    "มีนาคม",
    "เมษายน",
    "พฤษภาคม",
    "มิถุนายน",
    "กรกฎาคม",
    "สิงหาคม",
    "กันยายน",
    "ตุลาคม",
    "พฤศจิกายน",
    "ธันวาคม",
]

THAI_MONTHS_SHORT = [
    "ม.ค.",
    "ก.พ.",
    "มี.ค.",
    "เม.ย.",
    "พ.ค.",
    "มิ.ย.",
    "ก.ค.",
    "ส.ค.",
    "ก.ย.",
    "ต.ค.",
    "พ.ย.",
    "ธ.ค.",
]

_NATIONAL_ID_PATTERN = re.compile(r"[0-9]{13}")


def to_buddhist_year(year: int) -> int:
    """Convert a Christian Era year to Buddhist Era (พ.ศ.)"""
    return year + BUDDHIST_ERA_OFFSET


def to_christian_year(buddhist_year: int) -> int:
    """Convert a Buddhist Era year (พ.ศ.) to Christian Era"""
    return buddhist_year - BUDDHIST_ERA_OFFSET


def format_thai_date(
    value: Union[date, datetime, str],
    short: bool = False,
    include_time: bool = False,
) -> str:
    """
    Format a date the way Thai school documents print it

    Args:
        value: date, datetime or ISO-8601 string
        short: Use abbreviated month names (ม.ค., ก.พ., ...)
        include_time: Append HH:MM น. (datetime values only)

    Returns:
        e.g. "5 มิถุนายน 2567" or "5 มิ.ย. 2567 08:30 น."
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value)

    months = THAI_MONTHS_SHORT if short else THAI_MONTHS
    result = f"{value.day} {months[value.month - 1]} {to_buddhist_year(value.year)}"

    if include_time and isinstance(value, datetime):
        result += f" {value.hour:02d}:{value.minute:02d} น."

    return result


def validate_thai_national_id(national_id: str) -> bool:
    """Check a 13-digit Thai national ID (เลขประจำตัวประชาชน) against its check digit"""
    if not national_id or not _NATIONAL_ID_PATTERN.fullmatch(national_id):
        return False

    digits = [int(ch) for ch in national_id]
    total = sum(digit * (13 - i) for i, digit in enumerate(digits[:12]))
    check_digit = (11 - total % 11) % 10
    return check_digit == digits[12]


__all__ = [
    "to_buddhist_year",
    "to_christian_year",
    "format_thai_date",
    "validate_thai_national_id",
]
