"""
formatting.py — Display helpers for model outputs.
"""


def format_currency(value: float, compact: bool = True) -> str:
    """
    Format a dollar amount.

    Compact mode uses B/M/K suffixes with two decimals:
        format_currency(1_500_000_000)     # "$1.50B"
        format_currency(42_150_000)        # "$42.15M"
        format_currency(1500, compact=False)  # "$1,500"
    """
    if compact:
        abs_value = abs(value)
        if abs_value >= 1e9:
            return f"${value / 1e9:.2f}B"
        if abs_value >= 1e6:
            return f"${value / 1e6:.2f}M"
        if abs_value >= 1e3:
            return f"${value / 1e3:.2f}K"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def format_percent(value: float, decimals: int = 1) -> str:
    """Format a percentage-unit value (10.5 -> "10.5%")."""
    return f"{value:.{decimals}f}%"


def format_number(value: float) -> str:
    """Round to the nearest integer and add thousands separators."""
    return f"{round(value):,}"
