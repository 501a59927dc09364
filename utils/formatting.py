"""
Formatting utilities.
"""


def format_currency(amount: int, currency: str = "EUR") -> str:
    """
    Format an integer amount as currency.

    Args:
        amount: The amount in whole units (e.g., euros, not cents).
        currency: Currency code (default EUR).

    Returns:
        Formatted currency string.
    """
    symbols = {
        "GBP": "£",
        "USD": "$",
        "EUR": "€",
    }
    symbol = symbols.get(currency, currency + " ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,}"


def format_percent(value: float, decimals: int = 1) -> str:
    """
    Format a number as a percentage.

    Args:
        value: The percentage value.
        decimals: Number of decimal places.

    Returns:
        Formatted percentage string.
    """
    return f"{value:.{decimals}f}%"


def format_confidence(value: float) -> str:
    """Format a 0-1 confidence score as a percentage."""
    return format_percent(value * 100, 1)


def format_area(area: float) -> str:
    """Format an area in square metres."""
    return f"{area:,.0f} m²"


def format_distance(meters: float) -> str:
    """
    Format a distance, switching to kilometres at 1 km.

    Examples: 850 -> "850 m", 1500 -> "1.5 km"
    """
    if meters >= 1000:
        return f"{meters / 1000:.1f} km"
    return f"{round(meters)} m"
