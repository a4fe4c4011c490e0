"""Error taxonomy for the preprocessing pipeline."""

from typing import Any


class PreprocessError(Exception):
    """Base exception for pipeline failures. Terminal for the current call."""

    def __init__(self, message: str, status_code: int = 422, details: Any = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class DecodeError(PreprocessError):
    """Input bytes are empty, malformed or not a supported image format."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message=message, status_code=422, details=details)


class SurfaceError(PreprocessError):
    """A pixel surface of the required size could not be acquired."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message=message, status_code=413, details=details)


class EncodeError(PreprocessError):
    """The JPEG encoder produced no output."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message=message, status_code=500, details=details)
