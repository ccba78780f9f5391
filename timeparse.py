"""Turn logged time values into whole minutes.

Two conventions exist in the ledger's history:

* fractional hours, where ``1.5`` is an hour and a half (90 minutes)
* H.MM, where the digits after the point are literal minutes, so ``1.5``
  is read as 1h50m (110 minutes)

New entries say which one they use. Old rows and old clients did not, so
``should_infer_legacy`` guesses from the shape of the number. The guess is a
pragmatic one, not a sound decoding: whenever a value could be either, it is
read as fractional hours, because reading an old fractional value as H.MM
would change earnings that were already recorded. Callers that know the
format must pass it.

H.MM minute digits of 60 or more are added as written (``1.75`` is 1h + 75m =
155 minutes) and flagged with ``had_overflow``; they are not carried into
hours.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext

from errors import InvalidTimeInput
from models import ParsedTime

FORMAT_HM = "hm"
FORMAT_FRACTIONAL = "fractional"
TIME_FORMATS = (FORMAT_HM, FORMAT_FRACTIONAL)

_PLAIN_NUMBER = re.compile(r"(\d*)(?:\.(\d*))?")
# Same ceiling Python puts on int <-> str conversion
_MAX_DIGITS = 4300


def _as_text(value: object) -> str:
    """Plain decimal text for a raw time value, e.g. 1.5 -> "1.5"."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, str)):
        raise InvalidTimeInput(value)

    try:
        text = str(value).strip()
    except ValueError:
        # int too long to print
        raise InvalidTimeInput(type(value).__name__, "too many digits") from None
    if "e" in text.lower():
        # 1e-05 and friends: expand so the digits can be split on "."
        try:
            number = Decimal(text)
        except InvalidOperation:
            raise InvalidTimeInput(value) from None
        if not number.is_finite():
            raise InvalidTimeInput(value)
        if abs(number.adjusted()) > _MAX_DIGITS:
            raise InvalidTimeInput(value, "too many digits")
        text = format(number, "f")

    match = _PLAIN_NUMBER.fullmatch(text)
    if not match or not (match.group(1) or match.group(2)):
        raise InvalidTimeInput(value, "not a non-negative number")
    if len(text) > _MAX_DIGITS:
        raise InvalidTimeInput(value, "too many digits")
    return text


def should_infer_legacy(value: object) -> bool:
    """Guess whether an untagged value is fractional hours (True) or H.MM."""
    decimal = _as_text(value).partition(".")[2]

    if not decimal:
        return False
    if len(decimal) > 2:
        return True
    if len(decimal) == 2:
        # Only H.MM can produce these, e.g. 1.67 is 1h67m
        return int(decimal[1]) <= 5
    return True


def _parse_hm(text: str) -> tuple[int, bool]:
    hours_part, _, minutes_part = text.partition(".")
    minute_digits = int(minutes_part[:2].ljust(2, "0")) if minutes_part else 0
    return int(hours_part or "0") * 60 + minute_digits, minute_digits >= 60


def _parse_fractional(text: str) -> int:
    with localcontext() as ctx:
        # Room for every digit of text * 60, so the product is exact
        ctx.prec = max(ctx.prec, len(text) + 3)
        minutes = (Decimal(text) * 60).to_integral_value(rounding=ROUND_HALF_UP)
    return int(minutes)


def parse_time_input(
    value: object,
    format: str | None = None,
    allow_legacy_inference: bool = True,
) -> ParsedTime:
    """Parse a time value into minutes.

    An explicit ``format`` always wins. Without one, the legacy heuristic
    decides unless ``allow_legacy_inference`` is False, in which case the
    value is read as H.MM.
    """
    text = _as_text(value)
    if format is not None and format not in TIME_FORMATS:
        raise InvalidTimeInput(value, f"unknown time format {format!r}")

    if format is None:
        use_fractional = allow_legacy_inference and should_infer_legacy(text)
    else:
        use_fractional = format == FORMAT_FRACTIONAL

    if use_fractional:
        return ParsedTime(
            minutes=_parse_fractional(text),
            format=FORMAT_FRACTIONAL,
            used_legacy_fractional=True,
            had_overflow=False,
            source=value,
        )

    minutes, had_overflow = _parse_hm(text)
    return ParsedTime(
        minutes=minutes,
        format=FORMAT_HM,
        used_legacy_fractional=False,
        had_overflow=had_overflow,
        source=value,
    )


def minutes_to_hours_decimal(minutes: int) -> Decimal:
    return Decimal(max(0, minutes)) / 60


def split_minutes(minutes: int) -> tuple[int, int]:
    """Split a minute count into (hours, minutes)."""
    return divmod(max(0, minutes), 60)


def format_minutes_hm(minutes: int) -> str:
    """Format as H:MM, e.g. 110 -> "1:50"."""
    hours, mins = split_minutes(minutes)
    return f"{hours}:{mins:02d}"


def format_minutes_readable(minutes: int) -> str:
    hours, mins = split_minutes(minutes)
    hour_text = "hour" if hours == 1 else "hours"
    minute_text = "minute" if mins == 1 else "minutes"
    if hours == 0:
        return f"{mins} {minute_text}"
    if mins == 0:
        return f"{hours} {hour_text}"
    return f"{hours} {hour_text} {mins} {minute_text}"
