# utils/formatting.py

def format_amount(n: float) -> str:
    """
    Format a money amount with ',' as thousands separator and no decimals.
    Example: 1234567.4 -> "1,234,567"
    """
    return f"{n:,.0f}"
