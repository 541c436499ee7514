from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Optional

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Exact decimal from float/int/str input (floats go through str to avoid binary noise)."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_money(value) -> Optional[Decimal]:
    if value is None:
        return None
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def split_money(total, parts: int) -> list[Decimal]:
    """
    Split an amount into parts whole-cent shares. Every share but the last is
    rounded down and the last absorbs the remainder, so no share is negative
    and the shares sum to the total.
    """
    total = to_money(total)
    share = (total / parts).quantize(CENT, rounding=ROUND_DOWN)
    return [share] * (parts - 1) + [total - share * (parts - 1)]


def price_fields_to_money(data: dict, *fields: str) -> dict:
    for field in fields:
        if field in data and data[field] is not None:
            data[field] = to_money(data[field])
    return data
