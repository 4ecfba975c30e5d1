# storefront/utils/money.py

from decimal import Decimal, ROUND_HALF_UP

Money = Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0")


def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))

def round_money(x) -> Money:
    return D(x).quantize(CENT, rounding=ROUND_HALF_UP)

def to_float_money(x) -> float:
    # JSON boundary: amounts leave the engine as rounded floats
    return float(round_money(x))

def percent_of(amount, percent) -> Money:
    """`percent` is a whole-number percentage, e.g. 15 for 15%."""
    return D(amount) * D(percent) / Decimal(100)
