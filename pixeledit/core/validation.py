"""
Validation engine for edit operations.

Structured validation rules that must pass before an operation touches the
state. Checks return ValidationIssue lists; any ERROR issue blocks the edit
and is raised as the matching ImageEditorError.
"""

import math
import numbers
from typing import List, Sequence

from .errors import (
    ImageEditorError,
    InvalidDimensions,
    InvalidMatrix,
    InvalidParameter,
)
from .types import ValidationIssue, ValidationSeverity


# Issue code -> exception raised for it
ERROR_CLASSES = {
    "INVALID_DIMENSIONS": InvalidDimensions,
    "INVALID_MATRIX": InvalidMatrix,
    "NON_NUMERIC_KERNEL": InvalidMatrix,
    "PARAMETER_OUT_OF_RANGE": InvalidParameter,
    "PARAMETER_NOT_NUMERIC": InvalidParameter,
    "SCATTER_LEVELS": InvalidParameter,
    "ZERO_SMOOTH_DIVISOR": InvalidParameter,
}


class ValidationEngine:
    """Validates operation parameters."""

    @staticmethod
    def validate_dimensions(width, height) -> List[ValidationIssue]:
        """Target dimensions must both be integers >= 1."""
        issues = []
        for name, value in (("width", width), ("height", height)):
            if not isinstance(value, numbers.Integral) or isinstance(value, bool) or value < 1:
                issues.append(
                    ValidationIssue(
                        severity=ValidationSeverity.ERROR,
                        code="INVALID_DIMENSIONS",
                        message=f"Target {name} must be an integer >= 1, got {value!r}",
                        context={name: value},
                    )
                )
        return issues

    @staticmethod
    def validate_kernel(kernel) -> List[ValidationIssue]:
        """Kernel must be a 3x3 matrix of finite numbers."""
        if not _is_3x3(kernel):
            return [
                ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="INVALID_MATRIX",
                    message="The matrix must be 3 X 3",
                    context={},
                )
            ]

        issues = []
        for row_idx, row in enumerate(kernel):
            for col_idx, value in enumerate(row):
                if not _is_finite_number(value):
                    issues.append(
                        ValidationIssue(
                            severity=ValidationSeverity.ERROR,
                            code="NON_NUMERIC_KERNEL",
                            message=f"Kernel entry [{row_idx}][{col_idx}] is not a finite number: {value!r}",
                            context={"row": row_idx, "column": col_idx},
                        )
                    )
        return issues

    @staticmethod
    def validate_range(name: str, value, min_val: float, max_val: float) -> List[ValidationIssue]:
        """Inclusive range check for a numeric parameter."""
        if not _is_finite_number(value):
            return [
                ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="PARAMETER_NOT_NUMERIC",
                    message=f"{name} must be a number, got {value!r}",
                    context={"parameter": name},
                )
            ]
        if value < min_val or value > max_val:
            return [
                ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="PARAMETER_OUT_OF_RANGE",
                    message=f"{name} must be between {_fmt(min_val)} and {_fmt(max_val)}",
                    context={"parameter": name, "value": value},
                )
            ]
        return []

    @staticmethod
    def validate_scatter_levels(subtraction, addition) -> List[ValidationIssue]:
        """Scatter needs subtraction strictly below addition."""
        issues = []
        issues.extend(ValidationEngine.validate_range("Subtraction Level", subtraction, 0, math.inf))
        issues.extend(ValidationEngine.validate_range("Addition Level", addition, 0, math.inf))
        if issues:
            return issues
        if subtraction >= addition:
            issues.append(
                ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="SCATTER_LEVELS",
                    message="Subtraction Level can not be higher than or equal to Addition Level",
                    context={"subtraction": subtraction, "addition": addition},
                )
            )
        return issues

    @staticmethod
    def validate_smooth_weight(weight) -> List[ValidationIssue]:
        """Smoothing divides by weight + 8, so -8 is rejected."""
        issues = ValidationEngine.validate_range("Smooth weight", weight, -math.inf, math.inf)
        if not issues and weight == -8:
            issues.append(
                ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="ZERO_SMOOTH_DIVISOR",
                    message="Smooth weight must not be -8",
                    context={"weight": weight},
                )
            )
        return issues


def raise_for_issues(issues: Sequence[ValidationIssue]) -> None:
    """Raise the first ERROR issue as its ImageEditorError subclass."""
    for issue in issues:
        if issue.severity == ValidationSeverity.ERROR:
            error_class = ERROR_CLASSES.get(issue.code, ImageEditorError)
            raise error_class(issue.message)


def _is_3x3(matrix) -> bool:
    if isinstance(matrix, (str, bytes)):
        return False
    try:
        rows = list(matrix)
    except TypeError:
        return False
    if len(rows) != 3:
        return False
    for row in rows:
        if isinstance(row, (str, bytes)):
            return False
        try:
            if len(row) != 3:
                return False
        except TypeError:
            return False
    return True


def _is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def _fmt(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
