"""
Error taxonomy for splitting and dataset loading.

All errors derive from ValueError so callers that already guard against
bad arguments keep working.
"""

from __future__ import annotations


class SplitError(ValueError):
    """Base class for all stratsplit errors."""


class InvalidConfiguration(SplitError):
    """Bad fraction, fold count, or label column."""


class InsufficientData(InvalidConfiguration):
    """A stratification group is too small for the requested split.

    Subclasses InvalidConfiguration: asking for more folds than the
    smallest class holds is both a data and a configuration problem.
    """


class SchemaError(SplitError):
    """Dataset does not match its declared schema."""
