"""Per-line classification and handling.

Every input line is handled on its own: whitespace is removed, the line is
classified, and the matching handler prints a result or the generic run
error. The only state carried between lines is the variable store.
"""

from __future__ import annotations

import enum
import logging
import math
import sys
from dataclasses import dataclass
from typing import Callable

from .errors import LineError
from .expr import evaluate
from .messages import (
    ASSIGNMENT_TOKEN_LIMIT,
    COMMENT_PREFIX,
    DEFAULT_PRECISION,
    PRINT_COMMAND,
    RUN_ERROR_MESSAGE,
)
from .store import VariableStore, format_number
from .tokens import split_tokens
from .validators import valid_variable_name

logger = logging.getLogger(__name__)


class LineKind(enum.Enum):
    BLANK = "blank"
    PRINT = "print"
    TOO_MANY_EQUALS = "too_many_equals"
    EXPRESSION = "expression"
    ASSIGNMENT = "assignment"


def strip_whitespace(line: str) -> str:
    """Remove every whitespace character, interior ones included."""
    return "".join(ch for ch in line if not ch.isspace())


def count_equals(stripped: str) -> int:
    """Count '=' signs, ignoring the first character of the line."""
    return stripped.count('=', 1)


def classify(line: str) -> LineKind:
    stripped = strip_whitespace(line)
    if not stripped or stripped.startswith(COMMENT_PREFIX):
        return LineKind.BLANK
    if line == PRINT_COMMAND:
        return LineKind.PRINT
    equals = count_equals(stripped)
    if equals > 1:
        return LineKind.TOO_MANY_EQUALS
    if equals == 0:
        return LineKind.EXPRESSION
    return LineKind.ASSIGNMENT


Evaluate = Callable[..., float]


@dataclass
class LineHandler:
    """Applies lines to a variable store and prints the outcome.

    ``evaluator`` is the expression bridge; it takes the expression text and a
    name -> value mapping and returns NaN on failure.
    """
    store: VariableStore
    precision: int = DEFAULT_PRECISION
    evaluator: Evaluate = evaluate

    def handle_line(self, line: str) -> LineKind:
        """Process one line (without its newline) and return how it was classified."""
        kind = classify(line)
        logger.debug("Line %r classified as %s", line, kind.value)
        try:
            if kind is LineKind.PRINT:
                print(self.store.listing(self.precision))
            elif kind is LineKind.TOO_MANY_EQUALS:
                raise LineError("more than one '=' in line")
            elif kind is LineKind.EXPRESSION:
                self._expression(strip_whitespace(line))
            elif kind is LineKind.ASSIGNMENT:
                self._assignment(strip_whitespace(line))
        except LineError as e:
            logger.debug("Rejected line %r: %s", line, e)
            print(RUN_ERROR_MESSAGE, file=sys.stderr)
        return kind

    def _evaluate(self, text: str) -> float:
        result = self.evaluator(text, self.store.scalar_values())
        if math.isnan(result):
            raise LineError(f"cannot evaluate {text!r}")
        return result

    def _expression(self, stripped: str) -> None:
        result = self._evaluate(stripped)
        print(f"Result = {format_number(result, self.precision)}")

    def _assignment(self, stripped: str) -> None:
        tokens = split_tokens(stripped, '=', ASSIGNMENT_TOKEN_LIMIT)
        if len(tokens) < ASSIGNMENT_TOKEN_LIMIT:
            raise LineError("assignment needs a name and an expression")
        name, expression = tokens
        value = self._evaluate(expression)
        if not valid_variable_name(name):
            raise LineError(f"invalid variable name {name!r}")
        print(f"{name} = {format_number(value, self.precision)}")
        self.store.assign(name, value)
