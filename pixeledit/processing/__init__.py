"""
Processing system for pixeledit.

Pixel algorithms (resample, sepia, background removal, convolution), the
filter definitions describing each edit step, and the pipeline/executor pair
that applies them to an editing state.
"""

from .resize import resize
from .tone import sepia
from .mask import remove_background, DEFAULT_THRESHOLD
from .convolution import convolve, kernel_divisor, SHARPEN, POSTERIZE, IDENTITY
from .filters import (
    FilterKind,
    ProcessingFilter,
    FilterParameter,
    ParameterType,
    create_filter,
    FILTER_REGISTRY,
)
from .pipeline import ProcessingPipeline
from .executor import ProcessingExecutor, FilterLibrary

__all__ = [
    "resize",
    "sepia",
    "remove_background",
    "DEFAULT_THRESHOLD",
    "convolve",
    "kernel_divisor",
    "SHARPEN",
    "POSTERIZE",
    "IDENTITY",
    "FilterKind",
    "ProcessingFilter",
    "FilterParameter",
    "ParameterType",
    "create_filter",
    "FILTER_REGISTRY",
    "ProcessingPipeline",
    "ProcessingExecutor",
    "FilterLibrary",
]
