"""Amount parsing and formatting helpers."""

import re
from decimal import Decimal, InvalidOperation, localcontext

# Integer amounts as emitted by contract events, optionally type-tagged ("1000i128")
_INTEGER_AMOUNT = re.compile(r"^(-?\d+)(?:[ui]\d+)?$")

SMALL_AMOUNT_THRESHOLD = Decimal("0.0001")
SMALL_AMOUNT_PLACES = 10
MIN_DISPLAY_PLACES = 2
MAX_DISPLAY_PLACES = 7


def parse_amount(value: object) -> Decimal | None:
    """Tolerant decimal parse. None for missing, non-numeric, NaN or infinite input."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().replace(",", "")
    if not text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def format_token_amount(raw: object, decimals: int | None = None) -> str:
    """Scale an integer token amount by decimals and trim trailing fractional zeros.

    Returns "0" for anything that is not an integer amount.
    """
    match = _INTEGER_AMOUNT.match(str(raw).strip()) if raw is not None else None
    if match is None:
        return "0"
    units = int(match.group(1))
    if not decimals:
        return str(units)

    negative = units < 0
    integer_part, fractional_part = divmod(abs(units), 10**decimals)
    fractional = str(fractional_part).rjust(decimals, "0").rstrip("0")
    text = f"{integer_part}.{fractional}" if fractional else str(integer_part)
    return f"-{text}" if negative else text


def format_summary_amount(value: Decimal) -> str:
    """Human display of an aggregated amount.

    Tiny positive values are rounded to 10 places then trimmed; everything else
    shows between 2 and 7 fractional digits with thousands separators.
    """
    with localcontext() as ctx:
        # i128 token balances need more than the default 28 digits
        ctx.prec = max(ctx.prec, value.adjusted() + SMALL_AMOUNT_PLACES + 2)
        if Decimal(0) < value < SMALL_AMOUNT_THRESHOLD:
            rounded = value.quantize(Decimal(1).scaleb(-SMALL_AMOUNT_PLACES))
            text = format(rounded, "f").rstrip("0").rstrip(".")
            return text or "0"

        rounded = value.quantize(Decimal(1).scaleb(-MAX_DISPLAY_PLACES))
        text = f"{rounded:,.{MAX_DISPLAY_PLACES}f}"
    integer_part, _, fractional = text.partition(".")
    fractional = fractional.rstrip("0").ljust(MIN_DISPLAY_PLACES, "0")
    return f"{integer_part}.{fractional}"


def same_amount(left: object, right: object) -> bool:
    """Numeric equality of two amount strings ("10" == "10.0000000")."""
    a = parse_amount(left)
    b = parse_amount(right)
    if a is None or b is None:
        return left == right
    return a == b
