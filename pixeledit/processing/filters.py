"""
Filter definitions for the editing pipeline.

Each filter describes one edit operation and its parameters. Filters hold
configuration only; ProcessingExecutor applies them. Operations flagged as
delegated are carried out by the external filter library, the others by the
pixel algorithms in this package.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Optional, List, Dict
import math
import numbers

import numpy as np

from ..core import ImageFormat, ValidationEngine, ValidationIssue, ValidationSeverity
from . import convolution
from .mask import DEFAULT_THRESHOLD


class FilterKind(Enum):
    """Every edit operation a pipeline step can perform."""
    RESIZE = "resize"
    SEPIA = "sepia"
    REMOVE_BACKGROUND = "remove_background"
    CUSTOM_CONVOLUTION = "custom_convolution"
    SHARPEN = "sharpen"
    POSTERIZE = "posterize"
    SELECT_FORMAT = "select_format"
    # Delegated to the filter library
    NEGATE = "negative"
    GRAYSCALE = "grayscale"
    BRIGHTNESS = "brightness"
    CONTRAST = "contrast"
    COLORIZE = "color_overlay"
    EDGE_DETECT = "edge_detection"
    EMBOSS = "emboss"
    GAUSSIAN_BLUR = "gaussian_blur"
    SELECTIVE_BLUR = "selective_blur"
    MEAN_REMOVAL = "sketch"
    SMOOTH = "smooth"
    PIXELATE = "pixelate"
    SCATTER = "scatter"


class ParameterType(Enum):
    """Type of filter parameter."""
    FLOAT = auto()
    INT = auto()
    CHOICE = auto()
    BOOL = auto()
    MATRIX = auto()


@dataclass
class FilterParameter:
    """A single parameter for a filter."""
    name: str
    param_type: ParameterType
    value: Any
    min_val: Optional[float] = None
    max_val: Optional[float] = None
    options: Optional[List[str]] = None
    description: str = ""

    def validate(self) -> List[ValidationIssue]:
        """Validate the current value. Returns the issues found."""
        if self.param_type in (ParameterType.FLOAT, ParameterType.INT):
            if self.param_type == ParameterType.INT and not _is_int(self.value):
                return [_issue("PARAMETER_NOT_NUMERIC", f"{self.name} must be an integer")]
            low = -math.inf if self.min_val is None else self.min_val
            high = math.inf if self.max_val is None else self.max_val
            return ValidationEngine.validate_range(self.name, self.value, low, high)

        elif self.param_type == ParameterType.CHOICE:
            if self.options and self.value not in self.options:
                return [
                    _issue(
                        "PARAMETER_OUT_OF_RANGE",
                        f"{self.name} must be one of: {', '.join(self.options)}",
                    )
                ]

        elif self.param_type == ParameterType.BOOL:
            if not isinstance(self.value, bool):
                return [_issue("PARAMETER_NOT_NUMERIC", f"{self.name} must be a boolean")]

        elif self.param_type == ParameterType.MATRIX:
            return ValidationEngine.validate_kernel(self.value)

        return []


@dataclass
class ProcessingFilter:
    """Base class for all edit filters."""
    kind: FilterKind
    name: str
    delegated: bool = False
    enabled: bool = True
    order: int = 0
    parameters: Dict[str, FilterParameter] = field(default_factory=dict)

    @property
    def filter_id(self) -> str:
        return self.kind.value

    def validate_parameters(self) -> List[ValidationIssue]:
        """Validate all parameters."""
        issues = []
        for param in self.parameters.values():
            issues.extend(param.validate())
        return issues

    def get_parameter(self, name: str) -> Optional[FilterParameter]:
        """Get a parameter by name."""
        return self.parameters.get(name)

    def set_parameter(self, name: str, value: Any) -> bool:
        """Set a parameter value. Returns True if the new value is valid."""
        if name not in self.parameters:
            raise KeyError(f"{self.name} has no parameter '{name}'")
        self.parameters[name].value = value
        return not self.parameters[name].validate()

    def values(self) -> Dict[str, Any]:
        """Current parameter values keyed by parameter id."""
        return {key: param.value for key, param in self.parameters.items()}

    def clone(self) -> "ProcessingFilter":
        """Create a deep copy of this filter with same parameters."""
        from copy import deepcopy
        return deepcopy(self)

    def __str__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.values().items())
        return f"{self.filter_id}({args})"


def _issue(code: str, message: str) -> ValidationIssue:
    return ValidationIssue(severity=ValidationSeverity.ERROR, code=code, message=message)


def _is_int(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _channel(name: str, value: int) -> FilterParameter:
    return FilterParameter(
        name=f"{name} value",
        param_type=ParameterType.INT,
        value=value,
        min_val=0,
        max_val=255,
    )


# ============================================================================
# PIXEL OPERATIONS
# ============================================================================

class ResizeFilter(ProcessingFilter):
    """Box-filter resample to a new size."""

    def __init__(self, width: int = 1, height: int = 1):
        super().__init__(
            kind=FilterKind.RESIZE,
            name="Resize",
            parameters={
                "width": FilterParameter(
                    name="Width",
                    param_type=ParameterType.INT,
                    value=width,
                    min_val=1,
                    description="Target width in pixels",
                ),
                "height": FilterParameter(
                    name="Height",
                    param_type=ParameterType.INT,
                    value=height,
                    min_val=1,
                    description="Target height in pixels",
                ),
            }
        )

    def validate_parameters(self) -> List[ValidationIssue]:
        # dimension errors surface as InvalidDimensions
        return ValidationEngine.validate_dimensions(
            self.parameters["width"].value, self.parameters["height"].value
        )


class SepiaFilter(ProcessingFilter):
    """Sepia tone."""

    def __init__(self):
        super().__init__(kind=FilterKind.SEPIA, name="Sepia")


class RemoveBackgroundFilter(ProcessingFilter):
    """Make pixels close to the corner color transparent."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD):
        super().__init__(
            kind=FilterKind.REMOVE_BACKGROUND,
            name="Remove Background",
            parameters={
                "threshold": FilterParameter(
                    name="Color threshold",
                    param_type=ParameterType.FLOAT,
                    value=threshold,
                    min_val=0,
                    max_val=255,
                    description="Per-channel distance from the corner average",
                ),
            }
        )


class CustomConvolutionFilter(ProcessingFilter):
    """Convolve with a user supplied 3x3 kernel."""

    def __init__(self, kernel=convolution.IDENTITY, kind: FilterKind = FilterKind.CUSTOM_CONVOLUTION,
                 name: str = "Custom Convolution"):
        if isinstance(kernel, np.ndarray):
            kernel = kernel.tolist()
        super().__init__(
            kind=kind,
            name=name,
            parameters={
                "kernel": FilterParameter(
                    name="Kernel",
                    param_type=ParameterType.MATRIX,
                    value=kernel,
                    description="3x3 weights, normalized by their sum",
                ),
            }
        )


class SharpenFilter(CustomConvolutionFilter):
    """Sharpen preset."""

    def __init__(self):
        super().__init__(kernel=convolution.SHARPEN, kind=FilterKind.SHARPEN, name="Sharpen")


class PosterizeFilter(CustomConvolutionFilter):
    """Posterize preset (3x3 box blur)."""

    def __init__(self):
        super().__init__(kernel=convolution.POSTERIZE, kind=FilterKind.POSTERIZE, name="Posterize")


class SelectFormatFilter(ProcessingFilter):
    """Choose the output format."""

    def __init__(self, format: str = "png"):
        if isinstance(format, ImageFormat):
            format = format.value
        super().__init__(
            kind=FilterKind.SELECT_FORMAT,
            name="Select Format",
            parameters={
                "format": FilterParameter(
                    name="Format",
                    param_type=ParameterType.CHOICE,
                    value=format,
                    options=["jpg"] + [f.value for f in ImageFormat],
                ),
            }
        )

    def validate_parameters(self) -> List[ValidationIssue]:
        # format errors are raised as UnsupportedFormat by the executor
        return []


# ============================================================================
# DELEGATED OPERATIONS
# ============================================================================

class NegateFilter(ProcessingFilter):
    """Invert colors."""

    def __init__(self):
        super().__init__(kind=FilterKind.NEGATE, name="Negative", delegated=True)


class GrayscaleFilter(ProcessingFilter):
    """Convert to gray."""

    def __init__(self):
        super().__init__(kind=FilterKind.GRAYSCALE, name="Grayscale", delegated=True)


class BrightnessFilter(ProcessingFilter):
    """Add a constant to every color channel."""

    def __init__(self, level: int = 128):
        super().__init__(
            kind=FilterKind.BRIGHTNESS,
            name="Brightness",
            delegated=True,
            parameters={
                "level": FilterParameter(
                    name="Brightness Value",
                    param_type=ParameterType.INT,
                    value=level,
                    min_val=-255,
                    max_val=255,
                ),
            }
        )


class ContrastFilter(ProcessingFilter):
    """Scale colors around mid gray. Positive levels reduce contrast."""

    def __init__(self, level: int = 128):
        super().__init__(
            kind=FilterKind.CONTRAST,
            name="Contrast",
            delegated=True,
            parameters={
                "level": FilterParameter(
                    name="Contrast Value",
                    param_type=ParameterType.INT,
                    value=level,
                    min_val=-255,
                    max_val=255,
                ),
            }
        )


class ColorizeFilter(ProcessingFilter):
    """Add a color to every pixel; alpha raises transparency."""

    def __init__(self, red: int = 0, green: int = 0, blue: int = 0, alpha: int = 0):
        super().__init__(
            kind=FilterKind.COLORIZE,
            name="Color Overlay",
            delegated=True,
            parameters={
                "red": _channel("Red", red),
                "green": _channel("Green", green),
                "blue": _channel("Blue", blue),
                "alpha": _channel("Alpha", alpha),
            }
        )


class EdgeDetectFilter(ProcessingFilter):
    """Highlight edges."""

    def __init__(self):
        super().__init__(kind=FilterKind.EDGE_DETECT, name="Edge Detection", delegated=True)


class EmbossFilter(ProcessingFilter):
    """Emboss relief."""

    def __init__(self):
        super().__init__(kind=FilterKind.EMBOSS, name="Emboss", delegated=True)


class GaussianBlurFilter(ProcessingFilter):
    """3x3 gaussian blur."""

    def __init__(self):
        super().__init__(kind=FilterKind.GAUSSIAN_BLUR, name="Gaussian Blur", delegated=True)


class SelectiveBlurFilter(ProcessingFilter):
    """Edge-preserving blur."""

    def __init__(self):
        super().__init__(kind=FilterKind.SELECTIVE_BLUR, name="Selective Blur", delegated=True)


class MeanRemovalFilter(ProcessingFilter):
    """Mean removal, a sketchy look."""

    def __init__(self):
        super().__init__(kind=FilterKind.MEAN_REMOVAL, name="Sketch", delegated=True)


class SmoothFilter(ProcessingFilter):
    """Weighted smoothing; the center weight controls strength."""

    def __init__(self, weight: float = -6):
        super().__init__(
            kind=FilterKind.SMOOTH,
            name="Smooth",
            delegated=True,
            parameters={
                "weight": FilterParameter(
                    name="Smooth weight",
                    param_type=ParameterType.FLOAT,
                    value=weight,
                    description="Center weight; neighbours weigh 1",
                ),
            }
        )

    def validate_parameters(self) -> List[ValidationIssue]:
        return ValidationEngine.validate_smooth_weight(self.parameters["weight"].value)


class PixelateFilter(ProcessingFilter):
    """Blocky mosaic."""

    def __init__(self, block_size: int = 16, advanced: bool = False):
        super().__init__(
            kind=FilterKind.PIXELATE,
            name="Pixelate",
            delegated=True,
            parameters={
                "block_size": FilterParameter(
                    name="Block size",
                    param_type=ParameterType.INT,
                    value=block_size,
                    min_val=1,
                ),
                "advanced": FilterParameter(
                    name="Advanced",
                    param_type=ParameterType.BOOL,
                    value=advanced,
                    description="Average each block instead of sampling its corner",
                ),
            }
        )


class ScatterFilter(ProcessingFilter):
    """Randomly displace pixels."""

    def __init__(self, subtraction: int = 8, addition: int = 10):
        super().__init__(
            kind=FilterKind.SCATTER,
            name="Scatter",
            delegated=True,
            parameters={
                "subtraction": FilterParameter(
                    name="Subtraction Level",
                    param_type=ParameterType.INT,
                    value=subtraction,
                    min_val=0,
                ),
                "addition": FilterParameter(
                    name="Addition Level",
                    param_type=ParameterType.INT,
                    value=addition,
                    min_val=0,
                ),
            }
        )

    def validate_parameters(self) -> List[ValidationIssue]:
        issues = super().validate_parameters()
        if issues:
            return issues
        return ValidationEngine.validate_scatter_levels(
            self.parameters["subtraction"].value, self.parameters["addition"].value
        )


# Registry of all available filters
FILTER_REGISTRY = {
    FilterKind.RESIZE: ResizeFilter,
    FilterKind.SEPIA: SepiaFilter,
    FilterKind.REMOVE_BACKGROUND: RemoveBackgroundFilter,
    FilterKind.CUSTOM_CONVOLUTION: CustomConvolutionFilter,
    FilterKind.SHARPEN: SharpenFilter,
    FilterKind.POSTERIZE: PosterizeFilter,
    FilterKind.SELECT_FORMAT: SelectFormatFilter,
    FilterKind.NEGATE: NegateFilter,
    FilterKind.GRAYSCALE: GrayscaleFilter,
    FilterKind.BRIGHTNESS: BrightnessFilter,
    FilterKind.CONTRAST: ContrastFilter,
    FilterKind.COLORIZE: ColorizeFilter,
    FilterKind.EDGE_DETECT: EdgeDetectFilter,
    FilterKind.EMBOSS: EmbossFilter,
    FilterKind.GAUSSIAN_BLUR: GaussianBlurFilter,
    FilterKind.SELECTIVE_BLUR: SelectiveBlurFilter,
    FilterKind.MEAN_REMOVAL: MeanRemovalFilter,
    FilterKind.SMOOTH: SmoothFilter,
    FilterKind.PIXELATE: PixelateFilter,
    FilterKind.SCATTER: ScatterFilter,
}


def create_filter(kind, **params) -> Optional[ProcessingFilter]:
    """
    Create a filter instance by kind or filter id.

    Keyword arguments set parameter values. Returns None if the filter is
    not registered.
    """
    if not isinstance(kind, FilterKind):
        try:
            kind = FilterKind(kind)
        except ValueError:
            return None
    filter_obj = FILTER_REGISTRY[kind]()
    for name, value in params.items():
        filter_obj.set_parameter(name, value)
    return filter_obj
