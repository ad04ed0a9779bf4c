"""Delimiter-based splitting for option values and assignment lines."""

from typing import List

from .messages import REQUIRED_DELIMITERS


def split_tokens(text: str, delim: str, limit: int) -> List[str]:
    """Split ``text`` on ``delim`` and return at most ``limit`` tokens.

    Runs of delimiters act as a single separator and leading or trailing
    delimiters are ignored, so no token is ever empty. Fields past ``limit``
    are not returned; use :func:`delim_check` to reject those up front.
    """
    tokens: List[str] = []
    for field in text.split(delim):
        if not field:
            continue
        if len(tokens) == limit:
            break
        tokens.append(field)
    return tokens


def delim_check(text: str, delim: str) -> bool:
    """Return True if ``text`` holds exactly as many ``delim`` characters as required.

    ``=`` must appear exactly once and ``,`` exactly three times. Other
    delimiters carry no requirement.
    """
    required = REQUIRED_DELIMITERS.get(delim)
    if required is None:
        return True
    return text.count(delim) == required
