class StorageError(Exception):
    """Raised when an artifact cannot be written to or read from durable storage."""
