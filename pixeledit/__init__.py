"""
pixeledit - chainable raster image editing.

Load an image, chain edits, save the result:

    from pixeledit import ImageEditor

    ImageEditor().load("photo.jpg").sepia().sharpen().save("photo.png")
"""

from .core import (
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
    ImageFormat,
    BorderPolicy,
    ResizeReference,
    PixelBuffer,
    EditState,
)
from .processing import ProcessingPipeline, FilterKind, create_filter
from .services import ImageEditor, EditResult, Settings, RecipeSerializer, configure_logging

__version__ = "0.1.0"

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
    "ImageFormat",
    "BorderPolicy",
    "ResizeReference",
    "PixelBuffer",
    "EditState",
    "ProcessingPipeline",
    "FilterKind",
    "create_filter",
    "ImageEditor",
    "EditResult",
    "Settings",
    "RecipeSerializer",
    "configure_logging",
]
