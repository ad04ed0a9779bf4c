"""uqexpr: a line-oriented calculator with scalar and loop variables."""

__version__ = "0.1.0"
