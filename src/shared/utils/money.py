from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Union

# Type alias for money values
Money = Decimal


def round_money(value: Union[Decimal, float, int, str]) -> Decimal:
    """
    Round monetary value to 2 decimal places using ROUND_HALF_UP.

    Examples:
        >>> round_money(10.125)
        Decimal('10.13')
        >>> round_money(10.124)
        Decimal('10.12')
        >>> round_money("10.115")
        Decimal('10.12')
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    if value < 0:
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_DOWN)
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    """
    Lenient conversion for loosely-typed upstream numbers: None, "" and
    garbage become 0, numeric strings are parsed.

        >>> to_decimal("12.5")
        Decimal('12.5')
        >>> to_decimal(None)
        Decimal('0')
    """
    if value is None or value == "" or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value).replace(",", "").strip())
    except InvalidOperation:
        return Decimal("0")
    if not result.is_finite():
        return Decimal("0")
    return result


def format_money(value: Union[Decimal, float, int, str, None]) -> str:
    """
    Display form used in report cells: thousands separator, two decimals.

        >>> format_money(1234.5)
        '1,234.50'
    """
    return f"{round_money(to_decimal(value)):,.2f}"
