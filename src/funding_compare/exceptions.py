"""Custom exceptions for the funding rate comparison service.

Both source errors are absorbed at the adapter boundary: they are raised by
clients and parsers, logged by ``SourceAdapter.fetch``, and never reach the
comparison engine.
"""


class CompareError(Exception):
    """Base exception for all funding rate comparison errors."""


class SourceUnavailableError(CompareError):
    """Raised when an exchange endpoint cannot be reached or answers with an error."""


class PayloadFormatError(CompareError):
    """Raised when a whole upstream payload has an unexpected shape."""
