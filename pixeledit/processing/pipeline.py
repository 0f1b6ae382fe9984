"""
Processing pipeline management.

Manages an ordered chain of edit filters that are applied sequentially to
an editing state. A pipeline doubles as a replayable recipe.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any

import numpy as np

from ..core import ValidationIssue
from .filters import ProcessingFilter, create_filter


@dataclass
class ProcessingPipeline:
    """Container for a sequence of edit filters."""

    filters: List[ProcessingFilter] = field(default_factory=list)
    enabled: bool = True

    def add_filter(self, filter: ProcessingFilter) -> None:
        """Add a filter to the end of the pipeline."""
        filter.order = len(self.filters)
        self.filters.append(filter)

    def remove_filter(self, index: int) -> bool:
        """Remove a filter by index. Returns success."""
        if 0 <= index < len(self.filters):
            del self.filters[index]
            self._renumber()
            return True
        return False

    def move_filter(self, from_index: int, to_index: int) -> bool:
        """Move a filter from one position to another. Returns success."""
        if not (0 <= from_index < len(self.filters) and 0 <= to_index < len(self.filters)):
            return False

        filter = self.filters.pop(from_index)
        self.filters.insert(to_index, filter)
        self._renumber()
        return True

    def get_filter(self, index: int) -> Optional[ProcessingFilter]:
        """Get a filter by index."""
        if 0 <= index < len(self.filters):
            return self.filters[index]
        return None

    def validate(self) -> List[ValidationIssue]:
        """Validate all filters in pipeline, prefixing messages with the step."""
        issues = []
        for i, filter in enumerate(self.filters):
            for issue in filter.validate_parameters():
                issue.message = f"Step {i} ({filter.name}): {issue.message}"
                issue.context.setdefault("step", i)
                issues.append(issue)
        return issues

    def copy(self) -> "ProcessingPipeline":
        return ProcessingPipeline(filters=[f.clone() for f in self.filters], enabled=self.enabled)

    def get_enabled_filters(self) -> List[ProcessingFilter]:
        """Get list of enabled filters in order."""
        if not self.enabled:
            return []
        return [f for f in self.filters if f.enabled]

    def _renumber(self) -> None:
        for i, f in enumerate(self.filters):
            f.order = i

    def __len__(self) -> int:
        return len(self.filters)

    def __iter__(self):
        return iter(self.filters)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize pipeline to dictionary."""
        return {
            "enabled": self.enabled,
            "steps": [self._serialize_filter(f) for f in self.filters],
        }

    @staticmethod
    def _serialize_filter(filter: ProcessingFilter) -> Dict[str, Any]:
        """Serialize a single filter."""
        params = {param_name: _plain(value) for param_name, value in filter.values().items()}

        return {
            "filter_id": filter.filter_id,
            "enabled": filter.enabled,
            "parameters": params,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ProcessingPipeline":
        """
        Deserialize pipeline from dictionary.

        Raises:
            ValueError: a step names an unknown filter or parameter
        """
        pipeline = ProcessingPipeline()
        pipeline.enabled = data.get("enabled", True)

        for index, step_data in enumerate(data.get("steps", [])):
            pipeline.add_filter(ProcessingPipeline._deserialize_filter(step_data, index))

        return pipeline

    @staticmethod
    def _deserialize_filter(data: Dict[str, Any], index: int) -> ProcessingFilter:
        """Deserialize a single filter from data."""
        filter_id = data.get("filter_id")
        if not filter_id:
            raise ValueError(f"Step {index} has no filter_id")

        filter_obj = create_filter(filter_id)
        if filter_obj is None:
            raise ValueError(f"Step {index}: unknown filter '{filter_id}'")

        for param_name, value in data.get("parameters", {}).items():
            try:
                filter_obj.set_parameter(param_name, value)
            except KeyError as e:
                raise ValueError(f"Step {index}: {e.args[0]}") from None

        filter_obj.enabled = data.get("enabled", True)
        return filter_obj


def _plain(value: Any) -> Any:
    """Convert a parameter value to JSON-compatible types."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value
