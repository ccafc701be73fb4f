"""
Exceptions raised by the clustering engine and its input/output helpers.
"""


class KMeansError(Exception):
    """Base class for all lloyd_kmeans errors."""


class NumericDegeneracyError(KMeansError, ArithmeticError):
    """A distance or movement computation produced NaN or a negative sum.

    This always means the input contains values that overflow or are not
    finite. It is never retried.
    """


class ConfigurationError(KMeansError, ValueError):
    """Invalid clustering or reader parameters (bad k, columns, method...)."""


class InputParseError(KMeansError, ValueError):
    """A malformed input row was found while failing on errors."""

    def __init__(self, message: str, line_number: int, line: str):
        super().__init__(message)
        self.line_number = line_number
        self.line = line


class NotFittedError(KMeansError, ValueError):
    """The estimator was used before ``fit`` was called."""
