"""Building blocks for the sumcheck protocol over prime fields."""

__version__ = "0.1.0"