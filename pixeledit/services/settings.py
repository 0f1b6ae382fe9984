"""
Settings management for pixeledit.

Reads editor defaults from an INI file (pixeledit.ini in the working
directory, or the path in PIXELEDIT_SETTINGS). Missing files and keys fall
back to defaults.
"""

from configparser import ConfigParser
from pathlib import Path
from typing import Optional, Union
import logging
import os

from ..core import BorderPolicy, ImageFormat, ResizeReference, UnsupportedFormat

logger = logging.getLogger(__name__)

ENV_VAR = "PIXELEDIT_SETTINGS"
DEFAULT_FILE = "pixeledit.ini"


class Settings:
    """Editor settings backed by an INI file."""

    SECTION = "editor"
    KEY_THRESHOLD = "default_threshold"
    KEY_RESIZE_REFERENCE = "resize_reference"
    KEY_BORDER_POLICY = "border_policy"
    KEY_ALPHA_FORMAT = "fallback_alpha_format"
    KEY_SCATTER_SEED = "scatter_seed"
    KEY_LOG_LEVEL = "log_level"

    DEFAULTS = {
        KEY_THRESHOLD: "30",
        KEY_RESIZE_REFERENCE: "current",
        KEY_BORDER_POLICY: "black",
        KEY_ALPHA_FORMAT: "png",
        KEY_SCATTER_SEED: "",
        KEY_LOG_LEVEL: "WARNING",
    }

    def __init__(self, settings_file: Optional[Union[str, Path]] = None):
        """Load settings from settings_file, the environment, or defaults."""
        if settings_file is None:
            settings_file = os.environ.get(ENV_VAR, DEFAULT_FILE)
        self.settings_file = Path(settings_file)
        self.config = ConfigParser()
        self.config.read_dict({self.SECTION: self.DEFAULTS})
        self._load()

    def _load(self) -> None:
        """Overlay values from the settings file if it exists."""
        if self.settings_file.exists():
            self.config.read(self.settings_file)
            logger.debug("Loaded settings from %s", self.settings_file)

    def save(self) -> None:
        """Save settings to file."""
        self.settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.settings_file, "w") as f:
            self.config.write(f)

    def set(self, key: str, value) -> None:
        """Set a value (written on the next save())."""
        if key not in self.DEFAULTS:
            raise KeyError(f"Unknown setting '{key}'")
        self.config.set(self.SECTION, key, str(value))

    def _fallback(self, key: str, raw: str):
        logger.warning("Invalid %s value %r in %s; using %r", key, raw, self.settings_file, self.DEFAULTS[key])
        return self.DEFAULTS[key]

    def get_threshold(self) -> float:
        """Default background removal threshold."""
        raw = self.config.get(self.SECTION, self.KEY_THRESHOLD)
        try:
            value = float(raw)
        except ValueError:
            value = float(self._fallback(self.KEY_THRESHOLD, raw))
        if not 0 <= value <= 255:
            value = float(self._fallback(self.KEY_THRESHOLD, raw))
        return value

    def get_resize_reference(self) -> ResizeReference:
        """Source size used by resize: current buffer or load-time size."""
        raw = self.config.get(self.SECTION, self.KEY_RESIZE_REFERENCE)
        try:
            return ResizeReference[raw.strip().upper()]
        except KeyError:
            return ResizeReference[self._fallback(self.KEY_RESIZE_REFERENCE, raw).upper()]

    def get_border_policy(self) -> BorderPolicy:
        """Convolution border handling."""
        raw = self.config.get(self.SECTION, self.KEY_BORDER_POLICY)
        try:
            return BorderPolicy[raw.strip().upper()]
        except KeyError:
            return BorderPolicy[self._fallback(self.KEY_BORDER_POLICY, raw).upper()]

    def get_fallback_alpha_format(self) -> ImageFormat:
        """Format used when transparency must be saved from a format without alpha."""
        raw = self.config.get(self.SECTION, self.KEY_ALPHA_FORMAT)
        try:
            image_format = ImageFormat.canonicalize(raw)
        except UnsupportedFormat:
            image_format = None
        if image_format is None or not image_format.supports_alpha:
            image_format = ImageFormat.canonicalize(self._fallback(self.KEY_ALPHA_FORMAT, raw))
        return image_format

    def get_scatter_seed(self) -> Optional[int]:
        """Seed for scatter's random offsets; None means unseeded."""
        raw = self.config.get(self.SECTION, self.KEY_SCATTER_SEED).strip()
        if not raw:
            return None
        try:
            return int(raw)
        except ValueError:
            self._fallback(self.KEY_SCATTER_SEED, raw)
            return None

    def get_log_level(self) -> int:
        raw = self.config.get(self.SECTION, self.KEY_LOG_LEVEL).strip().upper()
        level = logging.getLevelName(raw)
        if not isinstance(level, int):
            level = logging.getLevelName(self._fallback(self.KEY_LOG_LEVEL, raw))
        return level


def configure_logging(level: Union[int, str, None] = None, settings: Optional[Settings] = None) -> None:
    """Install a basic console handler for the pixeledit loggers."""
    if level is None:
        level = (settings or Settings()).get_log_level()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
