# Fixed option names, messages, limits and exit statuses for uqexpr.
#
# Everything here is read-only process-wide data.

from enum import IntEnum

PROGRAM = "uqexpr"

# Command-line options
OPT_DEF = "--def"
OPT_FORLOOP = "--forloop"
OPT_SIGFIGURES = "--sigfigures"
OPTION_PREFIX = "--"

# Line commands
PRINT_COMMAND = "@print"
COMMENT_PREFIX = "#"

# Limits
DEFAULT_PRECISION = 3
PRECISION_MIN = 2
PRECISION_MAX = 9
NAME_MIN = 1
NAME_MAX = 20

# Field counts used when splitting option values and assignment lines.
# One more token than needed is read so that extras can be detected.
DEF_TOKEN_LIMIT = 3
LOOP_TOKEN_LIMIT = 5
LOOP_FIELD_COUNT = 4
ASSIGNMENT_TOKEN_LIMIT = 2

# Exact number of delimiters an option value must contain.
REQUIRED_DELIMITERS = {
    '=': 1,
    ',': 3,
}


class ExitStatus(IntEnum):
    """Process exit statuses."""
    OK = 0
    INVALID_VARIABLES = 4
    USAGE = 12
    DUPLICATE_NAME = 18
    FILE_READ = 19


USAGE_MESSAGE = (
    f"Usage: {PROGRAM} [{OPT_SIGFIGURES} 2..9] [{OPT_FORLOOP} string] "
    f"[{OPT_DEF} string] [inputfilename]"
)
INVALID_VARIABLES_MESSAGE = f"{PROGRAM}: invalid variable(s) specified on the command line"
DUPLICATE_NAME_MESSAGE = f"{PROGRAM}: one or more variables are duplicated"
FILE_READ_MESSAGE = PROGRAM + ': unable to read from input file "{path}"'
RUN_ERROR_MESSAGE = "Error in command, expression or assignment operation detected"

WELCOME_MESSAGE = f"Welcome to {PROGRAM}!"
STDIN_MESSAGE = "Submit your expressions and assignment operations to be evaluated."
FAREWELL_MESSAGE = f"Thanks for using {PROGRAM}!"

NO_VARIABLES_MESSAGE = "There are no variables."
VARIABLES_HEADER = "Variables:"
NO_LOOPS_MESSAGE = "No loop variables were found."
LOOPS_HEADER = "Loop variables:"
