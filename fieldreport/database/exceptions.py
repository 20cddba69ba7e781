class PersistenceError(Exception):
    """Raised when the report/user store is unavailable or rejects a write.

    Retryable by the caller.
    """
