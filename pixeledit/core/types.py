"""
Core data types for pixeledit.

All types use @dataclass and Enum for structured representations.
No loose dicts or format strings at the internal API boundary.
"""

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .errors import InvalidDimensions, InvalidParameter, OutOfRange, UnsupportedFormat

RGBA = Tuple[int, int, int, int]


class ImageFormat(Enum):
    """Supported file formats. Values are the canonical tags."""
    BMP = "bmp"
    GIF = "gif"
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"

    @classmethod
    def canonicalize(cls, tag: Union[str, "ImageFormat"]) -> "ImageFormat":
        """Map a format tag or file extension to its ImageFormat ("jpg" -> JPEG)."""
        if isinstance(tag, ImageFormat):
            return tag
        if not isinstance(tag, str):
            raise UnsupportedFormat(f"{tag!r} is not accepted")
        key = tag.strip().lstrip(".").lower()
        if key == "jpg":
            key = "jpeg"
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedFormat(f"{tag} is not accepted") from None

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageFormat":
        """Detect the format from a file extension."""
        suffix = Path(path).suffix
        if not suffix:
            raise UnsupportedFormat(f"Unable to read file extension of {path}")
        return cls.canonicalize(suffix)

    @property
    def supports_alpha(self) -> bool:
        return self in (ImageFormat.PNG, ImageFormat.GIF, ImageFormat.WEBP)


class BorderPolicy(Enum):
    """How convolution samples neighbours outside the buffer."""
    BLACK = auto()   # out-of-bounds samples read as (0, 0, 0)
    EXTEND = auto()  # coordinates clamped to the nearest edge pixel


class ResizeReference(Enum):
    """Which source size a resize maps from."""
    CURRENT = auto()  # the buffer's own dimensions
    INITIAL = auto()  # dimensions captured at load time


class ValidationSeverity(Enum):
    """Validation issue severity."""
    ERROR = auto()
    WARNING = auto()


@dataclass
class ValidationIssue:
    """A validation problem."""
    severity: ValidationSeverity
    code: str
    message: str
    context: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.severity.name}] {self.code}: {self.message}"


@dataclass(eq=False)
class PixelBuffer:
    """
    Rectangular grid of straight-alpha RGBA samples.

    pixels has shape (height, width, 4) and dtype uint8. The buffer keeps a
    private, read-only copy of the array it is given: operations build a new
    buffer instead of editing this one.
    """
    pixels: np.ndarray

    def __post_init__(self):
        data = np.asarray(self.pixels)
        if data.ndim != 3 or data.shape[2] != 4:
            raise InvalidDimensions(
                f"Pixel array must have shape (height, width, 4), got {data.shape}"
            )
        if data.shape[0] < 1 or data.shape[1] < 1:
            raise InvalidDimensions(
                f"Buffer must be at least 1x1, got {data.shape[1]}x{data.shape[0]}"
            )
        if data.dtype != np.uint8:
            if not np.issubdtype(data.dtype, np.integer):
                raise InvalidParameter(f"Pixel samples must be integers, got {data.dtype}")
            if data.min() < 0 or data.max() > 255:
                raise InvalidParameter("Pixel samples must be between 0 and 255")
        self.pixels = np.array(data, dtype=np.uint8)
        self.pixels.flags.writeable = False

    @classmethod
    def create(cls, width: int, height: int, fill: Sequence[int] = (0, 0, 0, 0)) -> "PixelBuffer":
        """Allocate a buffer with every pixel set to fill."""
        if width < 1 or height < 1:
            raise InvalidDimensions(f"Buffer must be at least 1x1, got {width}x{height}")
        color = _check_rgba(fill)
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = color
        return cls(pixels)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """
        Build a buffer from a gray, RGB or RGBA array.

        Gray is expanded to RGB and missing alpha is filled as opaque.
        The data is always copied.
        """
        data = np.asarray(array)
        if data.ndim == 2:
            data = data[:, :, np.newaxis]
        if data.ndim != 3:
            raise InvalidDimensions(f"Unsupported pixel array shape {data.shape}")

        data = np.clip(data, 0, 255).astype(np.uint8)
        channels = data.shape[2]
        if channels == 1:
            data = np.repeat(data, 3, axis=2)
            channels = 3
        elif channels == 2:
            # gray + alpha
            data = np.concatenate([np.repeat(data[:, :, :1], 3, axis=2), data[:, :, 1:2]], axis=2)
            channels = 4

        if channels == 3:
            alpha = np.full(data.shape[:2] + (1,), 255, dtype=np.uint8)
            data = np.concatenate([data, alpha], axis=2)
        elif channels > 4:
            data = data[:, :, :4]

        return cls(np.ascontiguousarray(data))

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[:, :, 3]

    def _check_coords(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfRange(f"({x}, {y}) is outside a {self.width}x{self.height} buffer")

    def get(self, x: int, y: int) -> RGBA:
        """Return the (r, g, b, a) sample at column x, row y."""
        self._check_coords(x, y)
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def set(self, x: int, y: int, value: Sequence[int]) -> "PixelBuffer":
        """Return a copy of this buffer with one pixel replaced."""
        self._check_coords(x, y)
        color = _check_rgba(value)
        pixels = self.pixels.copy()
        pixels[y, x] = color
        return PixelBuffer(pixels)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(np.array_equal(self.pixels, other.pixels))

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"


def _check_rgba(value: Sequence[int]) -> RGBA:
    """Validate a 4-channel color with every channel in [0, 255]."""
    channels = tuple(value)
    if len(channels) != 4:
        raise InvalidParameter(f"Expected 4 channels (r, g, b, a), got {len(channels)}")
    for name, channel in zip("rgba", channels):
        if not 0 <= channel <= 255:
            raise InvalidParameter(f"Channel {name} must be between 0 and 255, got {channel}")
    return tuple(int(c) for c in channels)


@dataclass(frozen=True)
class EditState:
    """
    Snapshot of an editing session.

    Every edit produces a new EditState; the previous one stays valid, which
    is what lets a failed edit leave the session untouched.
    """
    buffer: PixelBuffer
    initial_width: int
    initial_height: int
    target_width: int
    target_height: int
    source_format: ImageFormat
    target_format: Optional[ImageFormat] = None
    requires_alpha: bool = False
    source_path: Optional[Path] = None

    @classmethod
    def from_buffer(
        cls,
        buffer: PixelBuffer,
        source_format: ImageFormat,
        source_path: Optional[Path] = None,
    ) -> "EditState":
        """Fresh state for a just-loaded buffer."""
        return cls(
            buffer=buffer,
            initial_width=buffer.width,
            initial_height=buffer.height,
            target_width=buffer.width,
            target_height=buffer.height,
            source_format=source_format,
            source_path=source_path,
        )

    def with_buffer(self, buffer: PixelBuffer, **changes) -> "EditState":
        """Copy of this state holding a new buffer."""
        return replace(self, buffer=buffer, **changes)

    def effective_format(self, fallback_alpha_format: ImageFormat = ImageFormat.PNG) -> ImageFormat:
        """
        Format used at save time.

        An explicit target format always wins. Otherwise the source format is
        used, unless an edit needs transparency the source format cannot hold.
        """
        if self.target_format is not None:
            return self.target_format
        if self.requires_alpha and not self.source_format.supports_alpha:
            return fallback_alpha_format
        return self.source_format
