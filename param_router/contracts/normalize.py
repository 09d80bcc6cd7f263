"""
Value coercion - single source of truth for turning raw input into typed values.

Used at two points:
- Compile time: shorthand defaults, e.g. "number(20)" -> 20
- Request time: values pulled from body/query/params/cookies

Coercion never raises. Input that cannot be parsed comes back as the
default (None unless given), so a parse failure looks exactly like a
missing value to the checks that run afterwards.

Usage:
    from param_router.contracts.normalize import coerce_value

    coerce_value(ParamType.NUMBER, "25")            # 25
    coerce_value(ParamType.NUMBER, "25,30", array=True)  # [25, 30]
    coerce_value(ParamType.NUMBER, "25,x", array=True)   # None
    coerce_value(ParamType.NUMBER, "2.5", integer=True)  # None
    coerce_value(ParamType.BOOL, "maybe")           # None
"""

import math
import re
from typing import Any, List, Optional

from .registry import ParamType


LIST_SEPARATOR = ","

# Plain ASCII literals only: no "1_000", no "inf", no non-ASCII digits
INT_LITERAL = re.compile(r"[+-]?[0-9]+")
FLOAT_LITERAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

TRUE_TOKENS = frozenset({"true", "t", "yes", "y", "1"})
FALSE_TOKENS = frozenset({"false", "f", "no", "n", "0"})


def to_str(value: Any, *, default: Optional[str] = None) -> Optional[str]:
    """
    Pass strings through; empty input is treated as absent.

    Non-string scalars (e.g. numbers from a JSON body) are stringified.
    """
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, dict)):
        return default
    return str(value)


def to_number(value: Any, *, default: Optional[float] = None, integer: bool = False) -> Optional[float]:
    """
    Convert to int when the text is an integer literal, float otherwise.

    Args:
        value: Raw value (text, or a number from a JSON body)
        default: Returned when the value cannot be parsed
        integer: Only accept whole numbers

    Returns:
        Parsed number, or default if input is empty, not numeric or not finite
    """
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return default
        if integer:
            return int(value) if value.is_integer() else default
        return value
    if not isinstance(value, str):
        return default

    text = value.strip()
    if INT_LITERAL.fullmatch(text):
        return int(text)
    if integer or not FLOAT_LITERAL.fullmatch(text):
        return default
    number = float(text)
    if not math.isfinite(number):
        return default
    return number


def to_integer(value: Any, *, default: Optional[int] = None) -> Optional[int]:
    return to_number(value, default=default, integer=True)


def to_bool(value: Any, *, default: Optional[bool] = None) -> Optional[bool]:
    """
    Convert to bool.

    Accepts (case-insensitive):
        True: 'true', 't', 'yes', 'y', '1'
        False: 'false', 'f', 'no', 'n', '0'
    """
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    lower = str(value).strip().lower()
    if lower in TRUE_TOKENS:
        return True
    if lower in FALSE_TOKENS:
        return False
    return default


_COERCERS = {
    ParamType.STRING: to_str,
    ParamType.NUMBER: to_number,
    ParamType.BOOL: to_bool,
}


def split_list(value: Any, separator: str = LIST_SEPARATOR) -> List[Any]:
    """Split a comma-separated scalar; lists pass through unchanged."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str):
        return [item.strip() for item in value.split(separator)]
    return [value]


def coerce_value(param_type: ParamType, value: Any, *, array: bool = False, integer: bool = False) -> Any:
    """
    Coerce a raw value to the declared type.

    Arrays: list input is coerced element-wise, scalar input is split on
    commas first. One unparsable element makes the whole array None.
    Scalars: a list supplied for a non-array parameter uses its first item.
    integer restricts numbers to whole values.
    """
    if integer and param_type is ParamType.NUMBER:
        coerce = to_integer
    else:
        coerce = _COERCERS[param_type]
    if array:
        items = [coerce(item) for item in split_list(value)]
        if any(item is None for item in items):
            return None
        return items
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return coerce(value)


def stringify(param_type: ParamType, value: Any) -> str:
    """Inverse of coercion for a single value: typed value -> raw text."""
    if value is None:
        return ""
    if param_type is ParamType.BOOL:
        return "true" if value else "false"
    return str(value)
