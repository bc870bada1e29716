"""Operator-facing strings for distances, durations, fuel and money."""


def format_distance(nm: float) -> str:
    return f"{nm:.1f} nm"


def format_duration(hours: float) -> str:
    """Minutes under an hour, decimal hours under a day, then days + hours."""
    if hours < 1:
        return f"{round(hours * 60)}m"
    if hours < 24:
        return f"{hours:.1f}h"
    days = int(hours // 24)
    return f"{days}d {round(hours % 24)}h"


def format_fuel(liters: float) -> str:
    if liters >= 1000:
        return f"{liters / 1000:.1f}K L"
    return f"{liters:.0f} L"


def format_currency(usd: float) -> str:
    if abs(usd) >= 1000:
        return f"${usd / 1000:.1f}K"
    return f"${usd:.0f}"
