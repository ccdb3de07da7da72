"""Store error hierarchy.

Every store wraps driver-specific errors in one of the StoreError
subclasses so callers never need to import pymongo to handle failures.
"""


class StoreError(Exception):
    """Base exception for all store errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConfigurationError(StoreError):
    """Raised when a store is constructed with incomplete configuration.

    Examples:
        - No target database name for the mongodb backend
        - Unknown backend type
    """

    pass


class ConnectionError(StoreError):
    """Raised when the document store cannot be reached.

    Fatal while constructing a store; afterwards raised only for
    connection loss, other per-call failures are reported by the
    operation's acknowledgement flag.
    """

    pass


class NotFoundError(StoreError):
    """Raised when a requested collection or document does not exist."""

    pass


class ValidationError(StoreError):
    """Raised on data the store cannot accept.

    Examples:
        - Malformed session mutation log
        - Invalid ObjectId string in a filter
    """

    pass
