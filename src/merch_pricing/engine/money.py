"""
Money helpers.

Unrounded amounts are Decimals; consumer price points are integer cents.
Consumer rounding floors the unrounded amount; the resulting price points
are integer cents so repeated scaling and solver iterations never drift
across a whole-euro boundary.
"""
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Optional

CENT = Decimal('0.01')
# Decimal division noise (1.999...9) is absorbed before flooring
MICRO = Decimal('0.000001')
ONE = Decimal('1')
HUNDRED = Decimal('100')


def D(value) -> Decimal:
    """Coerce a float/int/str/None to Decimal (None -> 0)."""
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(amount: Decimal) -> Decimal:
    """Round an amount to cents, half-up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(amount) -> int:
    return int(quantize(D(amount)) * HUNDRED)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / HUNDRED).quantize(CENT)


def round_consumer(amount, ending_cents: int) -> int:
    """Floor to the whole currency unit, then add the fractional ending (12.9999 -> 12.99)."""
    value = D(amount).quantize(MICRO, rounding=ROUND_HALF_UP)
    return int(value.to_integral_value(rounding=ROUND_FLOOR)) * 100 + ending_cents


def ceil_to_unit(cents: int) -> int:
    """Round cents up to the next whole currency unit."""
    return -(-cents // 100) * 100


def format_eur(cents: Optional[int]) -> str:
    if cents is None:
        return "n/a"
    return f"€{from_cents(cents):.2f}"


BASE_UNITS = {'ml': 'L', 'g': 'kg'}


def grundpreis(price_cents: int, net_content, unit: str = 'ml') -> tuple[Optional[Decimal], Optional[str]]:
    """Price per liter/kilogram for a pack of net_content ml/g."""
    if not net_content or D(net_content) <= 0:
        return None, None
    per_base = from_cents(price_cents) / (D(net_content) / Decimal('1000'))
    return quantize(per_base), BASE_UNITS.get(unit, 'L')
