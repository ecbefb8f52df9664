"""Validator façade.

Single entry point used by the publish pipeline, the editor and the
generator: build the collaborators from configuration, run the default
rules and return ``{valid, errors, warnings}``.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from flowcheck.config import FlowcheckConfig, ValidationMode, create_default_config
from flowcheck.constraints import ConfigConstraintProvider
from flowcheck.errors import DocumentLoadError
from flowcheck.models import Flow
from flowcheck.registry import StepTypeRegistry
from flowcheck.validation import ValidateOptions, ValidationFramework, ValidationResult

logger = logging.getLogger(__name__)


def parse_mode(mode: ValidationMode | str) -> ValidationMode:
    """Accept a mode enum or its name in any case ("lenient", "STRICT")."""
    if isinstance(mode, ValidationMode):
        return mode
    return ValidationMode(mode.upper())


def build_framework(config: FlowcheckConfig | None = None) -> ValidationFramework:
    """Create a framework with the default rules and configured collaborators."""
    config = config or create_default_config()
    framework = ValidationFramework(
        StepTypeRegistry.from_config(config.step_types),
        ConfigConstraintProvider(config.constraints),
    )
    framework.create_default_rules()
    return framework


def validate_workflow(
    document: Flow | Mapping[str, Any],
    options: ValidateOptions | None = None,
    *,
    mode: ValidationMode | str | None = None,
    config: FlowcheckConfig | None = None,
    framework: ValidationFramework | None = None,
) -> ValidationResult:
    """Validate a workflow document.

    Args:
        document: A Flow or a JSON-shaped mapping (not mutated)
        options: Validation options; takes precedence over ``mode``
        mode: Shorthand for ValidateOptions(mode=...)
        config: Configuration used to build the framework and default mode
        framework: Pre-built framework to reuse across calls

    Returns:
        ValidationResult; ``valid`` is False iff there are errors
    """
    config = config or create_default_config()
    if options is None:
        options = ValidateOptions(mode=parse_mode(mode or config.validation.default_mode))

    flow = document if isinstance(document, Flow) else Flow.from_document(document)
    framework = framework or build_framework(config)
    return framework.validate(flow, options)


def load_document(path: str | Path) -> dict[str, Any]:
    """Read a workflow document from a JSON file.

    Raises:
        DocumentLoadError: If the file is missing, not JSON, or not a JSON object
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise DocumentLoadError(f"Workflow document not found: {path}") from e
    except json.JSONDecodeError as e:
        raise DocumentLoadError(f"Invalid JSON in workflow document {path}: {e}") from e

    if not isinstance(data, dict):
        raise DocumentLoadError(f"Workflow document {path} must contain a JSON object")

    logger.debug(f"Loaded workflow document {path}")
    return data
