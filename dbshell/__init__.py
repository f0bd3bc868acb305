"""Building blocks for an interactive SQL shell: statement types, variables, environment helpers and driver metadata."""

__version__ = "0.1.0"