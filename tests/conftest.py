"""Shared fixtures: in-memory codec and filter library, buffer builders."""

from pathlib import Path

import numpy as np
import pytest

from pixeledit.core import DecodeFailure, PixelBuffer
from pixeledit.services import ImageEditor, Settings


class FakeCodec:
    """Serves buffers registered by file name and records what gets written."""

    def __init__(self):
        self.images = {}
        self.written = []

    def add(self, name: str, buffer: PixelBuffer) -> str:
        self.images[name] = buffer
        return name

    def decode(self, path):
        name = Path(path).name
        if name not in self.images:
            raise DecodeFailure(f"{path} could not be read safely")
        return self.images[name], None

    def encode(self, buffer, image_format, path):
        self.written.append((Path(path), image_format, buffer))


class FakeFilterLibrary:
    """Records delegated calls; returns the buffer with colors inverted."""

    def __init__(self):
        self.calls = []

    def apply_filter(self, buffer, kind, params):
        self.calls.append((kind, dict(params)))
        pixels = buffer.pixels.copy()
        pixels[:, :, :3] = 255 - pixels[:, :, :3]
        return PixelBuffer(pixels)


def make_buffer(rows) -> PixelBuffer:
    """Build a buffer from nested rows of (r, g, b, a) tuples."""
    return PixelBuffer(np.array(rows, dtype=np.uint8))


def solid(width: int, height: int, color=(100, 100, 100, 255)) -> PixelBuffer:
    return PixelBuffer.create(width, height, color)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Defaults only: points at a settings file that does not exist."""
    return Settings(settings_file=tmp_path / "missing.ini")


@pytest.fixture
def codec() -> FakeCodec:
    return FakeCodec()


@pytest.fixture
def filter_library() -> FakeFilterLibrary:
    return FakeFilterLibrary()


@pytest.fixture
def editor(codec, filter_library, settings) -> ImageEditor:
    return ImageEditor(codec=codec, filter_library=filter_library, settings=settings)


@pytest.fixture
def gradient() -> PixelBuffer:
    """4x3 buffer with distinct values in every channel."""
    pixels = np.zeros((3, 4, 4), dtype=np.uint8)
    for y in range(3):
        for x in range(4):
            pixels[y, x] = [x * 60, y * 100, (x + y) * 30, 200 + x + y]
    return PixelBuffer(pixels)
