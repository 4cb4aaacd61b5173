"""Money helpers. Amounts are EGP floats rounded to piastres."""

CURRENCY = "EGP"


def round_money(amount: float) -> float:
    return round(amount + 0.0, 2)


def format_amount(amount: float) -> str:
    """Render 4900.0 as "4900" and 12.5 as "12.50"."""
    amount = round_money(amount)
    if amount == int(amount):
        return f"{int(amount)}"
    return f"{amount:.2f}"
