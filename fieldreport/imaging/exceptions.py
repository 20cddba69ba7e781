class ImagingError(Exception):
    """Base exception for all imaging backend errors."""


class DecodeError(ImagingError):
    """Raised when image bytes cannot be decoded or their metadata read."""


class EncodingError(ImagingError):
    """Raised when a bitmap cannot be encoded (QR payloads included)."""


class CompositeError(ImagingError):
    """Raised when a layer cannot be placed onto its base image."""
