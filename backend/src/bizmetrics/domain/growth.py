"""
Customer growth formatting.

Growth here is the share of all customers that were added this month,
not a month-over-month delta. The dashboard has always shown it this
way and the number is kept as-is.
"""

from decimal import ROUND_HALF_UP, Decimal


def customer_growth(total_customers: int, customers_this_month: int) -> str:
    """
    Format this month's customers as a whole-number percentage of the total.

    Halves round away from zero.

    Example:
        >>> customer_growth(100, 25)
        '25%'
        >>> customer_growth(0, 0)
        '0%'
    """
    if total_customers == 0:
        return "0%"
    if total_customers < 0 or customers_this_month < 0:
        raise ValueError("Customer counts must be non-negative")

    percentage = Decimal(customers_this_month) * 100 / Decimal(total_customers)
    rounded = percentage.quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return f"{rounded:,f}%"
