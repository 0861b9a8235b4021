from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

CENT = Decimal("0.01")

PriceLike = Union[str, int, float, Decimal]


def parse_price(value: PriceLike) -> Decimal:
    """
    Parse a price into a Decimal without going through binary float.
    Floats are converted via their repr so 12.5 -> Decimal("12.5").
    Raises ValueError for empty, non-numeric, negative or non-finite input.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid price: {value!r}")
    raw = repr(value) if isinstance(value, float) else str(value).strip()
    try:
        d = Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"Invalid price: {value!r}")
    if not d.is_finite() or d < 0:
        raise ValueError(f"Invalid price: {value!r}")
    return d


def quantize_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_price(amount: PriceLike) -> str:
    return str(quantize_cents(parse_price(amount)))


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
