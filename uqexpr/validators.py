"""Pure predicates over variable names, numeric literals and loop ranges."""

import re
from typing import Sequence

from .messages import LOOP_FIELD_COUNT, NAME_MAX, NAME_MIN

_NAME_RE = re.compile(r'[A-Za-z]+')

# Decimal floating literals the way strtod reads them: ASCII digits only,
# leading whitespace is skipped, nothing may follow the number.
_DOUBLE_RE = re.compile(
    r'''\s*[+-]?
        (?:
            (?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?
          | inf(?:inity)?
          | nan
        )''',
    re.VERBOSE | re.IGNORECASE | re.ASCII,
)


def valid_variable_name(name: str) -> bool:
    """1 to 20 ASCII letters, nothing else."""
    if not NAME_MIN <= len(name) <= NAME_MAX:
        return False
    return _NAME_RE.fullmatch(name) is not None


def valid_double(text: str) -> bool:
    """True if the whole of ``text`` is a floating point literal."""
    return _DOUBLE_RE.fullmatch(text) is not None


def valid_loop_range(start: float, increment: float, end: float) -> bool:
    """The increment must be nonzero and move ``start`` towards ``end``."""
    if increment == 0:
        return False
    if start < end and increment <= 0:
        return False
    if start > end and increment >= 0:
        return False
    return True


def validate_loop_tokens(tokens: Sequence[str]) -> bool:
    """Check ``name, start, increment, end`` tokens from a --forloop value."""
    if len(tokens) != LOOP_FIELD_COUNT:
        return False
    name, *values = tokens
    if not valid_variable_name(name):
        return False
    if not all(valid_double(value) for value in values):
        return False
    start, increment, end = (float(value) for value in values)
    return valid_loop_range(start, increment, end)
