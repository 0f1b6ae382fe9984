"""
Fluent image editor.

Each call returns a new ImageEditor wrapping an EditResult: either the
updated EditState or the first error met along the chain. After an error,
later calls are skipped and the error is carried forward, so a chain can be
written end to end and checked once:

    result = (
        ImageEditor()
        .load("in.jpg")
        .resize(320, 200)
        .remove_background()
        .save("out.png")
        .result
    )
    if not result.ok:
        ...
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union
import logging

from ..core import (
    EditState,
    ImageEditorError,
    ImageFormat,
    NoImageLoaded,
    PixelBuffer,
)
from ..processing import ProcessingExecutor, ProcessingPipeline
from ..processing.filters import (
    ProcessingFilter,
    ResizeFilter,
    SepiaFilter,
    RemoveBackgroundFilter,
    CustomConvolutionFilter,
    SharpenFilter,
    PosterizeFilter,
    SelectFormatFilter,
    NegateFilter,
    GrayscaleFilter,
    BrightnessFilter,
    ContrastFilter,
    ColorizeFilter,
    EdgeDetectFilter,
    EmbossFilter,
    GaussianBlurFilter,
    SelectiveBlurFilter,
    MeanRemovalFilter,
    SmoothFilter,
    PixelateFilter,
    ScatterFilter,
)
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditResult:
    """Outcome of a chain: a state, an error, or neither (nothing loaded yet)."""
    state: Optional[EditState] = None
    error: Optional[ImageEditorError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> EditState:
        """Return the state, raising the captured error if there is one."""
        if self.error is not None:
            raise self.error
        if self.state is None:
            raise NoImageLoaded()
        return self.state


@dataclass(frozen=True)
class EditorContext:
    """Collaborators shared by every editor of one chain."""
    codec: object
    executor: ProcessingExecutor
    settings: Settings


class ImageEditor:
    """Chainable editing session."""

    def __init__(
        self,
        codec=None,
        filter_library=None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or Settings()
        if codec is None or filter_library is None:
            from ..oiio import OiioCodec, OiioFilterLibrary
            codec = codec or OiioCodec()
            filter_library = filter_library or OiioFilterLibrary(scatter_seed=settings.get_scatter_seed())

        executor = ProcessingExecutor(
            filter_library=filter_library,
            resize_reference=settings.get_resize_reference(),
            border_policy=settings.get_border_policy(),
        )
        self._context = EditorContext(codec=codec, executor=executor, settings=settings)
        self._result = EditResult()
        self._history = ProcessingPipeline()
        self._saved_to: Optional[Path] = None

    def _derive(
        self,
        result: EditResult,
        step: Optional[ProcessingFilter] = None,
        saved_to: Optional[Path] = None,
        reset_history: bool = False,
    ) -> "ImageEditor":
        editor = ImageEditor.__new__(ImageEditor)
        editor._context = self._context
        editor._result = result
        editor._history = ProcessingPipeline() if reset_history else self._history.copy()
        if step is not None:
            editor._history.add_filter(step.clone())
        editor._saved_to = saved_to
        return editor

    def _fail(self, error: ImageEditorError) -> "ImageEditor":
        logger.debug("Edit chain stopped: %s: %s", type(error).__name__, error)
        return self._derive(EditResult(state=self._result.state, error=error))

    # ========== Inspection ==========

    @property
    def result(self) -> EditResult:
        return self._result

    @property
    def ok(self) -> bool:
        return self._result.ok

    @property
    def error(self) -> Optional[ImageEditorError]:
        return self._result.error

    @property
    def state(self) -> EditState:
        """Current state; raises the captured error, or NoImageLoaded."""
        return self._result.unwrap()

    @property
    def buffer(self) -> PixelBuffer:
        return self.state.buffer

    @property
    def history(self) -> ProcessingPipeline:
        """Steps applied since the last load, as a replayable pipeline."""
        return self._history.copy()

    @property
    def saved_to(self) -> Optional[Path]:
        """Where the last save wrote, or None if not saved since the last edit."""
        return self._saved_to

    # ========== Load / save ==========

    def load(self, file_path: Union[str, Path]) -> "ImageEditor":
        """Decode an image and start a fresh state from it."""
        if not self.ok:
            return self
        path = Path(file_path)
        try:
            source_format = ImageFormat.from_path(path)
            buffer, _ = self._context.codec.decode(path)
        except ImageEditorError as e:
            return self._fail(e)

        logger.info("Loaded %s (%dx%d, %s)", path, buffer.width, buffer.height, source_format.value)
        state = EditState.from_buffer(buffer, source_format, source_path=path)
        return self._derive(EditResult(state=state), reset_history=True)

    def save(self, file_path: Union[str, Path]) -> "ImageEditor":
        """Encode the current buffer in the effective output format."""
        if not self.ok:
            return self
        path = Path(file_path)
        try:
            state = self._result.unwrap()
            image_format = state.effective_format(self._context.settings.get_fallback_alpha_format())
            if state.requires_alpha and not image_format.supports_alpha:
                logger.warning("Saving %s as %s discards the removed background", path, image_format.value)
            self._context.codec.encode(state.buffer, image_format, path)
        except ImageEditorError as e:
            return self._fail(e)

        logger.info("Saved %s as %s", path, image_format.value)
        return self._derive(self._result, saved_to=path)

    # ========== Steps ==========

    def apply(self, step: ProcessingFilter) -> "ImageEditor":
        """Run one edit step against the current state."""
        if not self.ok:
            return self
        try:
            state = self._result.unwrap()
            new_state = self._context.executor.apply(state, step)
        except ImageEditorError as e:
            return self._fail(e)
        return self._derive(EditResult(state=new_state), step=step)

    def apply_pipeline(self, pipeline: ProcessingPipeline) -> "ImageEditor":
        """Replay every enabled step of a pipeline, stopping at the first error."""
        editor = self
        for step in pipeline.get_enabled_filters():
            editor = editor.apply(step)
            if not editor.ok:
                break
        return editor

    def select_format(self, image_type: Union[str, ImageFormat]) -> "ImageEditor":
        """Choose the output format ('jpg' is read as 'jpeg')."""
        return self.apply(SelectFormatFilter(format=image_type))

    def resize(self, width: int, height: int) -> "ImageEditor":
        return self.apply(ResizeFilter(width=width, height=height))

    def sepia(self) -> "ImageEditor":
        return self.apply(SepiaFilter())

    def remove_background(self, threshold: Optional[float] = None) -> "ImageEditor":
        """Make the corner-colored background transparent."""
        if threshold is None:
            threshold = self._context.settings.get_threshold()
        return self.apply(RemoveBackgroundFilter(threshold=threshold))

    def custom_convolution(self, kernel: Sequence[Sequence[float]]) -> "ImageEditor":
        return self.apply(CustomConvolutionFilter(kernel=kernel))

    def sharpen(self) -> "ImageEditor":
        return self.apply(SharpenFilter())

    def posterize(self) -> "ImageEditor":
        return self.apply(PosterizeFilter())

    def negative(self) -> "ImageEditor":
        return self.apply(NegateFilter())

    def grayscale(self) -> "ImageEditor":
        return self.apply(GrayscaleFilter())

    def adjust_brightness(self, level: int = 128) -> "ImageEditor":
        return self.apply(BrightnessFilter(level=level))

    def adjust_contrast(self, level: int = 128) -> "ImageEditor":
        return self.apply(ContrastFilter(level=level))

    def color_overlay(self, red: int, green: int, blue: int, alpha: int = 0) -> "ImageEditor":
        return self.apply(ColorizeFilter(red=red, green=green, blue=blue, alpha=alpha))

    def edge_detection(self) -> "ImageEditor":
        return self.apply(EdgeDetectFilter())

    def emboss(self) -> "ImageEditor":
        return self.apply(EmbossFilter())

    def gaussian_blur(self) -> "ImageEditor":
        return self.apply(GaussianBlurFilter())

    def selective_blur(self) -> "ImageEditor":
        return self.apply(SelectiveBlurFilter())

    def sketch(self) -> "ImageEditor":
        return self.apply(MeanRemovalFilter())

    def smooth(self, weight: float = -6) -> "ImageEditor":
        return self.apply(SmoothFilter(weight=weight))

    def pixelate(self, block_size: int = 16, advanced: bool = False) -> "ImageEditor":
        return self.apply(PixelateFilter(block_size=block_size, advanced=advanced))

    def scatter(self, subtraction: int = 8, addition: int = 10) -> "ImageEditor":
        return self.apply(ScatterFilter(subtraction=subtraction, addition=addition))

    def __repr__(self) -> str:
        if self._result.error is not None:
            return f"ImageEditor(error={self._result.error!r})"
        if self._result.state is None:
            return "ImageEditor(empty)"
        buffer = self._result.state.buffer
        return f"ImageEditor({buffer.width}x{buffer.height}, steps={len(self._history)})"
