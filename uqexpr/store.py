# Variable store: scalar bindings and loop-range bindings sharing one namespace.

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from .messages import (
    LOOPS_HEADER,
    NO_LOOPS_MESSAGE,
    NO_VARIABLES_MESSAGE,
    VARIABLES_HEADER,
)

logger = logging.getLogger(__name__)


def format_number(value: float, precision: int) -> str:
    """Format like C's ``%.<precision>g``."""
    return f"{value:.{precision}g}"


@dataclass
class ScalarBinding:
    """A named value set with --def or by an assignment line."""
    name: str
    value: float

    def describe(self, precision: int) -> str:
        return f"{self.name} = {format_number(self.value, precision)}"


@dataclass(frozen=True)
class LoopBinding:
    """A named, immutable numeric range set with --forloop.

    Loops are never iterated; ``start`` doubles as the displayed value.
    """
    name: str
    start: float
    increment: float
    end: float

    def describe(self, precision: int) -> str:
        start, increment, end = (
            format_number(v, precision) for v in (self.start, self.increment, self.end)
        )
        return f"{self.name} = {start} ({start}, {increment}, {end})"


Binding = Union[ScalarBinding, LoopBinding]


class VariableStore:
    """Ordered scalar and loop bindings for one run of the program."""

    def __init__(self):
        self.scalars: List[ScalarBinding] = []
        self.loops: List[LoopBinding] = []

    def add_scalar(self, name: str, value: float) -> ScalarBinding:
        """Append a scalar. The caller guarantees ``name`` is unused."""
        binding = ScalarBinding(name, value)
        self.scalars.append(binding)
        return binding

    def add_loop(self, name: str, start: float, increment: float, end: float) -> LoopBinding:
        binding = LoopBinding(name, start, increment, end)
        self.loops.append(binding)
        return binding

    def lookup(self, name: str) -> Optional[Binding]:
        """Return the binding called ``name``; a loop wins over a scalar."""
        for binding in itertools.chain(self.loops, self.scalars):
            if binding.name == name:
                return binding
        return None

    def assign(self, name: str, value: float) -> None:
        """Apply an assignment line's write.

        Loop bindings are immutable and the write is dropped. An existing
        scalar is overwritten in place; otherwise a new scalar is added.
        """
        binding = self.lookup(name)
        if isinstance(binding, LoopBinding):
            logger.debug("Ignoring assignment to loop variable %s", name)
        elif isinstance(binding, ScalarBinding):
            logger.debug("Overwriting %s: %r -> %r", name, binding.value, value)
            binding.value = value
        else:
            logger.debug("Creating %s = %r", name, value)
            self.add_scalar(name, value)

    def names(self) -> List[str]:
        return [b.name for b in itertools.chain(self.scalars, self.loops)]

    def check_unique(self) -> bool:
        """True if no name is used by more than one binding of either kind."""
        names = self.names()
        return len(names) == len(set(names))

    def scalar_values(self) -> Dict[str, float]:
        """Scalar name -> value, in definition order, for expression evaluation."""
        return {b.name: b.value for b in self.scalars}

    def listing(self, precision: int) -> str:
        """Text shown by ``@print`` and at startup."""
        lines: List[str] = []
        if self.scalars:
            lines.append(VARIABLES_HEADER)
            lines.extend(b.describe(precision) for b in self.scalars)
        else:
            lines.append(NO_VARIABLES_MESSAGE)
        if self.loops:
            lines.append(LOOPS_HEADER)
            lines.extend(b.describe(precision) for b in self.loops)
        else:
            lines.append(NO_LOOPS_MESSAGE)
        return "\n".join(lines)
