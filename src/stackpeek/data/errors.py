"""Data layer error hierarchy."""

from stackpeek.errors import StackpeekError


class DataError(StackpeekError):
    """Base for all stackpeek.data errors."""


class DriverNotInstalledError(DataError):
    """Raised when the required database driver is not installed."""


class QueryError(DataError):
    """Raised when a SQL statement fails."""
