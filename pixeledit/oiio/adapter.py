"""
OpenImageIO adapter for decoding, encoding and ImageBuf conversion.

Pixels cross this boundary as straight (unassociated) alpha, 8 bits per
channel. OIIO is asked not to premultiply on read or write.
"""

import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
import OpenImageIO as oiio

from ..core import (
    DecodeFailure,
    EncodeFailure,
    ImageFormat,
    PixelBuffer,
)
from ..processing.rounding import to_channel

logger = logging.getLogger(__name__)


class OiioAdapter:
    """Thin wrapper for robust OIIO bindings."""

    @staticmethod
    def read_image(filepath: Union[str, Path]) -> Tuple[PixelBuffer, ImageFormat]:
        """
        Decode a file into a PixelBuffer.

        The format comes from the file extension and must be supported
        (UnsupportedFormat otherwise). Unreadable files raise DecodeFailure.
        """
        path = Path(filepath)
        image_format = ImageFormat.from_path(path)

        config = oiio.ImageSpec()
        config.attribute("oiio:UnassociatedAlpha", 1)

        inp = oiio.ImageInput.open(str(path), config)
        if not inp:
            raise DecodeFailure(f"{path} could not be read safely: {oiio.geterror()}")

        try:
            spec = inp.spec()
            pixels = inp.read_image(oiio.UINT8)
            if pixels is None:
                raise DecodeFailure(f"{path} could not be read safely: {inp.geterror()}")
        finally:
            inp.close()

        pixels = np.asarray(pixels).reshape(spec.height, spec.width, spec.nchannels)
        logger.info("Decoded %s (%dx%d, %d channels)", path, spec.width, spec.height, spec.nchannels)
        return PixelBuffer.from_array(pixels), image_format

    @staticmethod
    def write_image(buffer: PixelBuffer, image_format: ImageFormat, filepath: Union[str, Path]) -> None:
        """
        Encode a buffer in the given format.

        The format decides the encoder regardless of the path's extension.
        Alpha is dropped for formats that cannot store it.
        """
        path = Path(filepath)
        if image_format.supports_alpha:
            pixels = buffer.pixels
        else:
            if np.any(buffer.alpha != 255):
                logger.warning("%s cannot store transparency; alpha dropped for %s", image_format.value, path)
            pixels = buffer.rgb

        nchannels = pixels.shape[2]
        spec = oiio.ImageSpec(buffer.width, buffer.height, nchannels, oiio.UINT8)
        if nchannels == 4:
            spec.alpha_channel = 3
            spec.attribute("oiio:UnassociatedAlpha", 1)

        out = oiio.ImageOutput.create(image_format.value)
        if not out:
            raise EncodeFailure(f"No {image_format.value} writer available: {oiio.geterror()}")

        try:
            if not out.open(str(path), spec):
                raise EncodeFailure(f"Cannot open {path} for writing: {out.geterror()}")
            if not out.write_image(np.ascontiguousarray(pixels)):
                raise EncodeFailure(f"Write failed for {path}: {out.geterror()}")
        finally:
            out.close()

        logger.info("Encoded %s as %s", path, image_format.value)

    @staticmethod
    def to_imagebuf(samples: np.ndarray) -> oiio.ImageBuf:
        """Wrap a (height, width, channels) uint8 array as a float ImageBuf in [0, 1]."""
        height, width, nchannels = samples.shape
        buf = oiio.ImageBuf(oiio.ImageSpec(width, height, nchannels, oiio.FLOAT))
        data = np.ascontiguousarray(samples, dtype=np.float32) / 255.0
        buf.set_pixels(oiio.ROI(0, width, 0, height, 0, 1, 0, nchannels), data)
        return buf

    @staticmethod
    def from_imagebuf(buf: oiio.ImageBuf) -> np.ndarray:
        """Read an ImageBuf back as a (height, width, channels) uint8 array."""
        spec = buf.spec()
        data = np.asarray(buf.get_pixels(oiio.FLOAT), dtype=np.float64)
        data = data.reshape(spec.height, spec.width, spec.nchannels)
        return to_channel(data * 255.0)


class OiioCodec:
    """Decoder/encoder collaborator backed by OiioAdapter."""

    def decode(self, path: Union[str, Path]) -> Tuple[PixelBuffer, ImageFormat]:
        return OiioAdapter.read_image(path)

    def encode(self, buffer: PixelBuffer, image_format: ImageFormat, path: Union[str, Path]) -> None:
        OiioAdapter.write_image(buffer, image_format, path)
