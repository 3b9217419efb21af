"""
PlanShift Deterministic Arithmetic - Money Precision and Content Hashing

Decimal helpers used by every financial projection in the engine, plus the
canonical SHA-256 content hash attached to engine results.

Features:
- Cent precision with ROUND_HALF_UP rounding
- Half-up integer rounding for scores (0.5 always rounds away from zero)
- Safe type conversion from any numeric type
- Canonical JSON hashing (sorted keys, compact separators)

Example:
    >>> from planshift.determinism import Money, round_half_up
    >>> Money.of("9.99") * 3
    Decimal('29.97')
    >>> round_half_up(72.5)
    73
"""

import hashlib
import json
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Optional, Union

Numeric = Union[Decimal, float, int, str]


class Money:
    """
    Decimal operations with cent precision.

    All conversions go through ``str`` so that float inputs keep the value
    they print as (``0.1 + 0.2 == 0.3``).
    """

    CENTS = Decimal("0.01")
    ROUNDING = ROUND_HALF_UP

    @classmethod
    def of(cls, value: Numeric) -> Decimal:
        """
        Convert any numeric type to a cent-quantized Decimal.

        Raises:
            TypeError: If value cannot be converted to Decimal

        Example:
            >>> Money.of(14.99)
            Decimal('14.99')
            >>> Money.of(3)
            Decimal('3.00')
        """
        return cls.quantize(cls.to_decimal(value))

    @classmethod
    def to_decimal(cls, value: Numeric) -> Decimal:
        """Convert without quantizing."""
        if isinstance(value, Decimal):
            return value
        if isinstance(value, bool):
            raise TypeError("Cannot convert bool to Decimal")
        if isinstance(value, int):
            return Decimal(value)
        if isinstance(value, float):
            return Decimal(str(value))
        if isinstance(value, str):
            return Decimal(value.replace(",", "").replace("$", "").strip())
        raise TypeError(f"Cannot convert {type(value).__name__} to Decimal")

    @classmethod
    def quantize(cls, value: Decimal) -> Decimal:
        return value.quantize(cls.CENTS, rounding=cls.ROUNDING)

    @classmethod
    def floor_zero(cls, value: Decimal) -> Decimal:
        """Clamp negative amounts to zero."""
        return value if value > 0 else Decimal("0.00")

    @classmethod
    def percent_of(cls, amount: Decimal, percent: Numeric) -> Decimal:
        """
        Return ``percent`` % of ``amount`` with cent precision.

        Example:
            >>> Money.percent_of(Decimal("100.00"), 25)
            Decimal('25.00')
        """
        return cls.quantize(amount * cls.to_decimal(percent) / Decimal(100))


def round_half_up(value: Numeric, places: int = 0) -> Union[int, Decimal]:
    """Round with ROUND_HALF_UP semantics.

    Python's builtin ``round`` uses banker's rounding; scores and
    percentages here always round .5 up.

    Args:
        value: Number to round.
        places: Decimal places to keep. ``0`` returns an ``int``.

    Returns:
        ``int`` when ``places`` is 0, otherwise a quantized ``Decimal``.
    """
    decimal_value = Money.to_decimal(value)
    if places == 0:
        return int(decimal_value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    exponent = Decimal(1).scaleb(-places)
    return decimal_value.quantize(exponent, rounding=ROUND_HALF_UP)


def _json_serializer(obj: Any) -> Any:
    """Serialize the non-JSON types that appear in engine results."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def content_hash(data: Any) -> str:
    """Compute a SHA-256 hash of the canonical JSON form of ``data``.

    Args:
        data: JSON-compatible structure (Decimal, datetime and Enum allowed).

    Returns:
        Hex-encoded SHA-256 digest.
    """
    canonical = json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Read a naive datetime as UTC; aware values and None pass through.

    Example:
        >>> as_utc(datetime(2026, 3, 1)).tzinfo
        datetime.timezone.utc
    """
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


__all__ = [
    "Money",
    "round_half_up",
    "content_hash",
    "as_utc",
]
