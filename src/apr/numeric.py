from __future__ import annotations

from dataclasses import dataclass
from decimal import Context, Decimal
from typing import Optional, Union

# uint256 values need more than the default 28 significant digits
DECIMAL_CONTEXT = Context(prec=80)

SECONDS_PER_YEAR = 60 * 60 * 24 * 365
BASIS_POINTS = 10_000


@dataclass(frozen=True)
class FixedPoint:
    """An on-chain fixed-point integer together with its decimal scale."""

    raw: int
    decimals: int

    def to_decimal(self) -> Decimal:
        return Decimal(self.raw).scaleb(-self.decimals, context=DECIMAL_CONTEXT)

    def __float__(self) -> float:
        return float(self.to_decimal())


def convert_with_decimals(
    value: Union[str, int, None], decimals: Optional[int]
) -> Optional[Decimal]:
    """Scale a fixed-point integer down by ``decimals`` places.

    Parameters
    ----------
    value:
        The integer as returned by a contract or subgraph, either as a string
        of digits or as an ``int``.
    decimals:
        Number of decimal places of the token.

    Returns
    -------
    Decimal or None
        ``None`` when either argument is missing, empty or zero, mirroring how
        a failed contract read propagates as an absent value.
    """
    if not decimals or value is None or value == "":
        return None
    return FixedPoint(int(value), decimals).to_decimal()


def to_decimal(value: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """Parse a subgraph BigDecimal string (already scaled) into a ``Decimal``."""
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
