import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Optional

CENT = Decimal("0.01")
# enough digits to quantize the largest finite float to cents
CENT_PRECISION = 400


def to_number(value: Any) -> Optional[float]:
    """Coerce an upstream amount to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def round2(value: Any) -> Optional[float]:
    number = to_number(value)
    if number is None:
        return None
    with localcontext() as ctx:
        ctx.prec = CENT_PRECISION
        return float(Decimal(repr(number)).quantize(CENT, rounding=ROUND_HALF_UP))
