"""flowcheck - Structural validator for declarative workflow definitions.

flowcheck decides whether a candidate workflow document (a tree of typed
steps with branches, decisions, GOTO and TERMINATE hooks) is legal before it
is published or executed, and reports every violation at a location the
editor and the generator can address.
"""

__version__ = "0.1.0"
__description__ = "Structural validator for declarative workflow definitions"

from flowcheck.config import FlowcheckConfig, ValidationMode
from flowcheck.models import Flow
from flowcheck.validation import Issue, ValidateOptions, ValidationResult
from flowcheck.validator import build_framework, validate_workflow

__all__ = [
    "__version__",
    "__description__",
    "FlowcheckConfig",
    "ValidationMode",
    "Flow",
    "Issue",
    "ValidateOptions",
    "ValidationResult",
    "build_framework",
    "validate_workflow",
]
