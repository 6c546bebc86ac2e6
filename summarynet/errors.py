# summarynet/errors.py
"""
Exceptions raised by summarynet.

All of them are ``ValueError`` subclasses so callers that already guard
against bad arguments with ``except ValueError`` keep working.
"""
from __future__ import annotations


class SummaryNetError(ValueError):
    """Base class for all summarynet errors."""


class ConfigurationError(SummaryNetError):
    """Invalid architecture construction (missing networks, width mismatch, unknown aggregation)."""


class ShapeMismatch(SummaryNetError):
    """Replicates or graphs in a collection disagree on a non-replicate axis."""


class DimensionMismatch(SummaryNetError):
    """Number of covariate vectors does not match the number of sets."""
