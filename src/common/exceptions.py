"""
Exceptions raised across the receipt scanning pipeline.
"""


class ImageLoadError(ValueError):
    """Raised when an image cannot be read or decoded."""


class ProcessingError(RuntimeError):
    """Raised when a pipeline stage fails; no partial result is produced."""


class UnsupportedFormatError(ValueError):
    """Raised when an output encoding is not supported."""
