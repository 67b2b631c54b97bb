"""
Generated offer copy: titles, descriptions and currency amounts.
"""

from typing import Union

from .tiers import PERCENT

CURRENCY_SYMBOLS = {
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
}

Number = Union[int, float]


def format_currency(amount: Number, currency: str = "EUR") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol is None:
        return f"{currency.upper()} {amount:,.2f}"
    return f"{symbol}{amount:,.2f}"


def generate_title(
    discount_type: str,
    discount_value: Number,
    business_name: str,
    currency: str = "EUR",
    free_threshold: int = 150,
) -> str:
    if discount_type == PERCENT:
        return f"-{discount_value}% at {business_name}"
    if discount_value >= free_threshold:
        return f"Free at {business_name}"
    return f"-{format_currency(discount_value, currency)} at {business_name}"


def generate_description(
    discount_type: str,
    discount_value: Number,
    currency: str = "EUR",
    free_threshold: int = 150,
) -> str:
    if discount_type == PERCENT:
        return f"Show your QR and get -{discount_value}%"
    if discount_value >= free_threshold:
        return "Show your QR and get it free"
    return f"Show your QR and get -{format_currency(discount_value, currency)}"
