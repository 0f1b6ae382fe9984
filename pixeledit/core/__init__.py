"""Core types, errors and validation for pixeledit."""

from .errors import (
    ImageEditorError,
    NoImageLoaded,
    UnsupportedFormat,
    DecodeFailure,
    EncodeFailure,
    FilterFailure,
    InvalidDimensions,
    InvalidMatrix,
    InvalidParameter,
    OutOfRange,
)
from .types import (
    RGBA,
    ImageFormat,
    BorderPolicy,
    ResizeReference,
    ValidationSeverity,
    ValidationIssue,
    PixelBuffer,
    EditState,
)
from .validation import ValidationEngine, raise_for_issues

__all__ = [
    "ImageEditorError",
    "NoImageLoaded",
    "UnsupportedFormat",
    "DecodeFailure",
    "EncodeFailure",
    "FilterFailure",
    "InvalidDimensions",
    "InvalidMatrix",
    "InvalidParameter",
    "OutOfRange",
    "RGBA",
    "ImageFormat",
    "BorderPolicy",
    "ResizeReference",
    "ValidationSeverity",
    "ValidationIssue",
    "PixelBuffer",
    "EditState",
    "ValidationEngine",
    "raise_for_issues",
]
