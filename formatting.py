# formatting.py
from models import Transaction


def format_number(amount: float) -> str:
    # vi-VN groups thousands with dots
    return f"{amount:,.0f}".replace(",", ".")


def format_vnd(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}{format_number(abs(amount))} ₫"


def signed_amount(tx: Transaction) -> str:
    return ("+" if tx.is_income else "-") + format_number(tx.amount)


def short_thousands(value: float) -> str:
    """Axis tick label, e.g. 1500000 -> '1500k'."""
    return f"{value / 1000:g}k"
