"""OpenImageIO collaborators: codec and filter library."""

from .adapter import OiioAdapter, OiioCodec
from .filter_library import OiioFilterLibrary

__all__ = ["OiioAdapter", "OiioCodec", "OiioFilterLibrary"]
