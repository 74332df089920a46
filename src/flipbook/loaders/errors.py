"""Loader exceptions."""


class FrameLoadError(Exception):
    """Raised when a source cannot be decoded into frames."""
    pass
