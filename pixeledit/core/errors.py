"""
Error types raised by the editor.

Every failure surfaced to callers derives from ImageEditorError, so a chain
can capture any of them into an EditResult without catching unrelated bugs.
"""


class ImageEditorError(Exception):
    """Base class for all editor failures."""


class NoImageLoaded(ImageEditorError):
    """A pixel operation was requested before an image was loaded."""

    def __init__(self, message: str = "There is no image."):
        super().__init__(message)


class UnsupportedFormat(ImageEditorError):
    """Extension or format tag outside the supported set."""


class DecodeFailure(ImageEditorError):
    """The codec could not read an image."""


class EncodeFailure(ImageEditorError):
    """The codec could not write an image."""


class FilterFailure(ImageEditorError):
    """The external filter library failed to process a buffer."""


class InvalidDimensions(ImageEditorError):
    """Width or height below 1."""


class InvalidMatrix(ImageEditorError):
    """Convolution kernel is not a 3x3 matrix of numbers."""


class InvalidParameter(ImageEditorError):
    """A numeric parameter is outside its allowed range."""


class OutOfRange(ImageEditorError):
    """Pixel coordinate outside the buffer."""
