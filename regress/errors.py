"""Exceptions raised by the regression dispatcher."""


class RegressionError(Exception):
    """Base class for regression dispatch errors."""
    pass


class ConfigError(RegressionError):
    """Raised when the run configuration is invalid."""
    pass


class SubmissionError(RegressionError):
    """Raised when a job cannot be spawned or the queue rejects it."""
    pass
