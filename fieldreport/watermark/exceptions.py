class WatermarkError(Exception):
    """Base exception for watermark stamp construction."""


class AssetMissingError(WatermarkError):
    """Raised when a template asset (base, logo or font) cannot be read.

    This is a configuration error and is meant to stop the process at
    startup, not to surface per request.
    """
