"""Number formatting for audit-trail strings"""

import math


def format_amount(value: float) -> str:
    """Money amount with thousands separators, decimals only when present"""
    if math.isfinite(value) and float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.2f}"


def format_percent(value: float, digits: int = 2) -> str:
    """Percentage value (already scaled to percent) with a trailing % sign"""
    return f"{value:.{digits}f}%"


def format_signed(value: float, digits: int = 2) -> str:
    """Signed difference, e.g. +3.10 or -0.42"""
    return f"{value:+.{digits}f}"
