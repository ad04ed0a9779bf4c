"""
Command-line entry point for uqexpr.

Parses the startup options into a variable store and a Config, prints the
banner and the initial listing, then feeds every input line to a LineHandler.
Input comes from the file named as the last argument, or from standard input
(an interactive prompt_toolkit session when stdin is a terminal).

Startup errors are fatal and map to fixed exit statuses; per-line errors are
reported and the run continues.
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, TextIO, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory

from .dispatcher import LineHandler
from .errors import (
    DuplicateNameError,
    FileReadError,
    InvalidVariablesError,
    UqexprError,
    UsageError,
)
from .expr import BUILTIN_NAMES
from .messages import (
    DEF_TOKEN_LIMIT,
    DEFAULT_PRECISION,
    FAREWELL_MESSAGE,
    LOOP_TOKEN_LIMIT,
    OPT_DEF,
    OPT_FORLOOP,
    OPT_SIGFIGURES,
    OPTION_PREFIX,
    PRECISION_MAX,
    PRECISION_MIN,
    STDIN_MESSAGE,
    WELCOME_MESSAGE,
    ExitStatus,
)
from .store import VariableStore
from .tokens import delim_check, split_tokens
from .validators import valid_double, valid_variable_name, validate_loop_tokens

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "UQEXPR_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PROMPT = '> '


@dataclass
class Config:
    """Run-wide settings chosen on the command line."""
    precision: int = DEFAULT_PRECISION
    input_path: Optional[str] = None


def configure_logging() -> None:
    """Send log records to stderr at the level named by UQEXPR_LOG_LEVEL."""
    level = os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "WARNING"
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


# ---------------------------
# Option parsing
# ---------------------------

def parse_def(spec: str, store: VariableStore) -> None:
    """Add the scalar described by ``name=value``."""
    if not delim_check(spec, '='):
        raise InvalidVariablesError()
    tokens = split_tokens(spec, '=', DEF_TOKEN_LIMIT)
    if len(tokens) != 2:
        raise InvalidVariablesError()
    name, value = tokens
    if not valid_variable_name(name) or not valid_double(value):
        raise InvalidVariablesError()
    store.add_scalar(name, float(value))
    logger.debug("Defined %s = %s", name, value)


def parse_forloop(spec: str, store: VariableStore) -> None:
    """Add the loop described by ``name,start,increment,end``."""
    if not delim_check(spec, ','):
        raise InvalidVariablesError()
    tokens = split_tokens(spec, ',', LOOP_TOKEN_LIMIT)
    if not validate_loop_tokens(tokens):
        raise InvalidVariablesError()
    name, start, increment, end = tokens
    store.add_loop(name, float(start), float(increment), float(end))
    logger.debug("Defined loop %s = (%s, %s, %s)", name, start, increment, end)


def parse_precision(value: str) -> int:
    """A single digit between 2 and 9."""
    if len(value) != 1 or not '0' <= value <= '9':
        raise UsageError()
    precision = int(value)
    if not PRECISION_MIN <= precision <= PRECISION_MAX:
        raise UsageError()
    return precision


def check_input_file(path: str) -> None:
    """Reject option-like names and files that cannot be opened."""
    if path.startswith(OPTION_PREFIX):
        raise UsageError()
    try:
        with open(path, 'r', encoding='utf-8'):
            pass
    except OSError:
        raise FileReadError(path)


def parse_args(argv: List[str]) -> Tuple[Config, VariableStore]:
    """Build the run configuration and initial bindings from ``argv``.

    ``argv`` excludes the program name. Raises a UqexprError subclass for the
    first problem found, in argument order; duplicate names are checked last.
    """
    config = Config()
    store = VariableStore()
    precision_seen = False
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in (OPT_DEF, OPT_FORLOOP, OPT_SIGFIGURES):
            if arg == OPT_SIGFIGURES:
                if precision_seen:
                    raise UsageError()
                precision_seen = True
            # options need a value after them
            if i >= len(argv) - 1:
                raise UsageError()
            value = argv[i + 1]
            if arg == OPT_DEF:
                parse_def(value, store)
            elif arg == OPT_FORLOOP:
                parse_forloop(value, store)
            else:
                config.precision = parse_precision(value)
            i += 2
        elif i == len(argv) - 1:
            check_input_file(arg)
            config.input_path = arg
            i += 1
        else:
            raise UsageError()

    if not store.check_unique():
        raise DuplicateNameError()
    return config, store


# ---------------------------
# Input sources
# ---------------------------

def iter_lines(stream: TextIO) -> Iterator[str]:
    """Yield the lines of ``stream`` without their trailing newline."""
    for line in stream:
        if line.endswith('\n'):
            line = line[:-1]
        yield line


def prompt_lines(store: VariableStore) -> Iterator[str]:
    """Interactive input with history and name completion until EOF."""
    session = PromptSession(history=InMemoryHistory())
    while True:
        words = list(BUILTIN_NAMES) + store.names()
        try:
            yield session.prompt(PROMPT, completer=WordCompleter(words))
        except KeyboardInterrupt:
            print("^C")
            continue
        except EOFError:
            break


def process(lines: Iterable[str], handler: LineHandler) -> None:
    for line in lines:
        handler.handle_line(line)


def run(config: Config, store: VariableStore, stdin: Optional[TextIO] = None) -> None:
    """Print the banner and listing, then process every input line."""
    handler = LineHandler(store, config.precision)
    print(WELCOME_MESSAGE)
    print(store.listing(config.precision))

    if config.input_path is not None:
        logger.debug("Reading from %s", config.input_path)
        with open(config.input_path, 'r', encoding='utf-8', errors='replace') as f:
            process(iter_lines(f), handler)
    else:
        if stdin is None:
            stdin = sys.stdin
        print(STDIN_MESSAGE)
        if stdin.isatty():
            process(prompt_lines(store), handler)
        else:
            process(iter_lines(stdin), handler)

    print(FAREWELL_MESSAGE)


# ---------------------------
# Main Entry Point
# ---------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """Run uqexpr with ``argv`` (defaults to sys.argv[1:]) and return the exit status."""
    configure_logging()
    if argv is None:
        argv = sys.argv[1:]
    try:
        config, store = parse_args(argv)
    except UqexprError as e:
        logger.info("Startup failed with status %d", e.status)
        print(e, file=sys.stderr)
        return int(e.status)
    run(config, store)
    return int(ExitStatus.OK)


if __name__ == '__main__':
    raise SystemExit(main())
