"""Exceptions raised around validation.

The validator itself reports problems as issues and does not raise on
document content; these exceptions belong to the layers around it.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flowcheck.validation.framework import ValidationResult


class FlowcheckError(Exception):
    """Base class for flowcheck errors."""


class ConfigError(FlowcheckError, ValueError):
    """Configuration file could not be read or is invalid."""


class DocumentLoadError(FlowcheckError):
    """Workflow document could not be read as a JSON object."""


class WorkflowValidationError(FlowcheckError):
    """A workflow failed validation and must not be published."""

    def __init__(self, result: "ValidationResult"):
        self.result = result
        count = len(result.errors)
        super().__init__(f"Workflow has {count} validation error{'s' if count != 1 else ''}")
