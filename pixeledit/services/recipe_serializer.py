"""
Recipe serialization and deserialization.

Saves the steps of a ProcessingPipeline to JSON and loads them back, so an
edit chain recorded on one image can be replayed on others.
"""

import json
from pathlib import Path
from typing import Any, Dict

from ..processing import ProcessingPipeline


class RecipeSerializer:
    """
    Serializes and deserializes ProcessingPipeline recipes to/from JSON.

    The version field guards against files written by incompatible releases.
    """

    FORMAT_VERSION = "1.0"

    @staticmethod
    def serialize(pipeline: ProcessingPipeline) -> Dict[str, Any]:
        """Convert a pipeline to a serializable dictionary."""
        data = pipeline.to_dict()
        data["format_version"] = RecipeSerializer.FORMAT_VERSION
        return data

    @staticmethod
    def deserialize(data: Dict[str, Any]) -> ProcessingPipeline:
        """
        Convert a dictionary back to a pipeline.

        Raises:
            ValueError: unknown version, filter or parameter
        """
        version = data.get("format_version", RecipeSerializer.FORMAT_VERSION)
        if version != RecipeSerializer.FORMAT_VERSION:
            raise ValueError(
                f"Unsupported recipe format version: {version}. "
                f"Expected {RecipeSerializer.FORMAT_VERSION}"
            )
        return ProcessingPipeline.from_dict(data)

    @staticmethod
    def save_to_file(pipeline: ProcessingPipeline, file_path: Path) -> None:
        """Save recipe to JSON file."""
        file_path = Path(file_path)
        text = json.dumps(RecipeSerializer.serialize(pipeline), indent=2)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w") as f:
            f.write(text)

    @staticmethod
    def load_from_file(file_path: Path) -> ProcessingPipeline:
        """Load recipe from JSON file."""
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Recipe file not found: {file_path}")

        with open(file_path, "r") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid recipe file {file_path}: {e}") from e

        return RecipeSerializer.deserialize(data)
