"""
Processing executor - applies edit filters to an editing state.

Pixel operations run through the algorithms in this package; delegated
operations are handed to the filter library (OpenImageIO by default).
"""

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from ..core import (
    BorderPolicy,
    EditState,
    ImageFormat,
    PixelBuffer,
    ResizeReference,
    raise_for_issues,
)
from .convolution import convolve
from .mask import remove_background
from .resize import resize
from .tone import sepia
from .filters import FilterKind, ProcessingFilter

logger = logging.getLogger(__name__)


class FilterLibrary(Protocol):
    """External collaborator for the delegated operations."""

    def apply_filter(self, buffer: PixelBuffer, kind: FilterKind, params: Mapping[str, Any]) -> PixelBuffer:
        ...


class ProcessingExecutor:
    """Executes edit filters on EditState objects."""

    def __init__(
        self,
        filter_library: Optional[FilterLibrary] = None,
        resize_reference: ResizeReference = ResizeReference.CURRENT,
        border_policy: BorderPolicy = BorderPolicy.BLACK,
    ):
        self.filter_library = filter_library
        self.resize_reference = resize_reference
        self.border_policy = border_policy
        self._handlers: Dict[FilterKind, Callable[[EditState, ProcessingFilter], EditState]] = {
            FilterKind.RESIZE: self._apply_resize,
            FilterKind.SEPIA: self._apply_sepia,
            FilterKind.REMOVE_BACKGROUND: self._apply_remove_background,
            FilterKind.CUSTOM_CONVOLUTION: self._apply_convolution,
            FilterKind.SHARPEN: self._apply_convolution,
            FilterKind.POSTERIZE: self._apply_convolution,
            FilterKind.SELECT_FORMAT: self._apply_select_format,
        }

    def apply(self, state: EditState, filter: ProcessingFilter) -> EditState:
        """
        Apply a single filter.

        Parameters are validated before anything runs, so a rejected filter
        never produces a partial result.
        """
        raise_for_issues(filter.validate_parameters())

        if filter.delegated:
            new_state = self._apply_delegated(state, filter)
        else:
            handler = self._handlers.get(filter.kind)
            if handler is None:
                raise ValueError(f"Unknown filter type: {filter.kind}")
            new_state = handler(state, filter)

        logger.debug("Applied %s -> %dx%d", filter, new_state.buffer.width, new_state.buffer.height)
        return new_state

    def _apply_resize(self, state: EditState, filter: ProcessingFilter) -> EditState:
        """Resample to the requested size and record it as the target size."""
        width = filter.get_parameter("width").value
        height = filter.get_parameter("height").value

        if self.resize_reference == ResizeReference.INITIAL:
            source_size = (state.initial_width, state.initial_height)
        else:
            source_size = state.buffer.size

        buffer = resize(state.buffer, width, height, source_size=source_size)
        return state.with_buffer(buffer, target_width=width, target_height=height)

    def _apply_sepia(self, state: EditState, filter: ProcessingFilter) -> EditState:
        return state.with_buffer(sepia(state.buffer))

    def _apply_remove_background(self, state: EditState, filter: ProcessingFilter) -> EditState:
        """Mask the background; the result needs an alpha-capable format."""
        threshold = filter.get_parameter("threshold").value
        buffer = remove_background(state.buffer, threshold)
        return state.with_buffer(buffer, requires_alpha=True)

    def _apply_convolution(self, state: EditState, filter: ProcessingFilter) -> EditState:
        kernel = filter.get_parameter("kernel").value
        buffer = convolve(state.buffer, kernel, border=self.border_policy)
        return state.with_buffer(buffer)

    def _apply_select_format(self, state: EditState, filter: ProcessingFilter) -> EditState:
        target = ImageFormat.canonicalize(filter.get_parameter("format").value)
        return replace(state, target_format=target)

    def _apply_delegated(self, state: EditState, filter: ProcessingFilter) -> EditState:
        """Hand the buffer to the external filter library."""
        if self.filter_library is None:
            raise RuntimeError(f"No filter library configured for {filter.name}")
        buffer = self.filter_library.apply_filter(state.buffer, filter.kind, filter.values())
        return state.with_buffer(buffer)
