"""Core validation framework for workflow documents.

Rules report issues with an intended severity. The issue sink then remaps
that severity from the run's mode and the rule's force-warning flag, so the
mode policy stays in one place and can be tested on its own.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum

from pydantic import BaseModel

from ..config import ValidationMode
from ..constraints import ConstraintProvider
from ..errors import WorkflowValidationError
from ..models import Flow
from ..registry import StepTypeCatalog

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class RuleId(str, Enum):
    """Rule identifiers, doubling as error kinds."""
    REQUIRED_FIELD = "REQUIRED_FIELD"
    UNIQUE_ID = "UNIQUE_ID"
    UNKNOWN_STEP_TYPE = "UNKNOWN_STEP_TYPE"
    INVALID_REFERENCE = "INVALID_REFERENCE"
    MAX_NESTING_DEPTH = "MAX_NESTING_DEPTH"
    MAX_PARALLEL_PATHS = "MAX_PARALLEL_PATHS"
    MIN_PATHS = "MIN_PATHS"
    BRANCH_MILESTONE_CONSISTENCY = "BRANCH_MILESTONE_CONSISTENCY"
    INVALID_CONDITION_TYPE = "INVALID_CONDITION_TYPE"
    MAX_CONDITIONS_PER_PATH = "MAX_CONDITIONS_PER_PATH"
    INVALID_CONDITION_LOGIC = "INVALID_CONDITION_LOGIC"
    DECISION_SINGLE_ASSIGNEE = "DECISION_SINGLE_ASSIGNEE"
    MAX_DECISION_OUTCOMES = "MAX_DECISION_OUTCOMES"
    MIN_OUTCOMES = "MIN_OUTCOMES"
    GOTO_PLACEMENT = "GOTO_PLACEMENT"
    GOTO_TARGET_MAIN_PATH = "GOTO_TARGET_MAIN_PATH"
    TERMINATE_PLACEMENT = "TERMINATE_PLACEMENT"
    TERMINATE_STATUS = "TERMINATE_STATUS"
    RULE_EXECUTION = "RULE_EXECUTION"


@dataclass(frozen=True)
class Issue:
    """A single violation found during validation."""
    path: str
    rule: str
    message: str
    severity: Severity = Severity.ERROR

    def __post_init__(self):
        # Store rule ids as plain strings so formatting is the same for custom rules
        if isinstance(self.rule, Enum):
            object.__setattr__(self, "rule", self.rule.value)

    def __str__(self) -> str:
        location = f" at {self.path}" if self.path else ""
        return f"[{self.severity.value.upper()}] {self.rule}: {self.message}{location}"

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "rule": self.rule,
            "message": self.message,
            "severity": self.severity.value,
        }


def resolve_severity(mode: ValidationMode, force_warning: bool = False) -> Severity:
    """Final severity of an issue, whatever severity the rule intended."""
    if force_warning or mode == ValidationMode.LENIENT:
        return Severity.WARNING
    return Severity.ERROR


class IssueSink:
    """Collects the issues of one validation run.

    Each run creates its own sink and is its only writer.
    """

    def __init__(self, mode: ValidationMode):
        self.mode = mode
        self.errors: list[Issue] = []
        self.warnings: list[Issue] = []

    def add(self, issue: Issue, force_warning: bool = False) -> None:
        severity = resolve_severity(self.mode, force_warning)
        routed = replace(issue, severity=severity)
        if severity == Severity.WARNING:
            self.warnings.append(routed)
        else:
            self.errors.append(routed)

    def report(
        self,
        path: str,
        rule: str,
        message: str,
        severity: Severity = Severity.ERROR,
        force_warning: bool = False,
    ) -> None:
        """Shorthand for add(Issue(...))."""
        self.add(Issue(path, rule, message, severity), force_warning)


@dataclass
class ValidationResult:
    """Outcome of validating one workflow document."""
    errors: list[Issue] = field(default_factory=list)
    warnings: list[Issue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = valid (warnings allowed), 1 = invalid."""
        return 0 if self.valid else 1

    @property
    def issues(self) -> list[Issue]:
        return [*self.errors, *self.warnings]

    def error_messages(self) -> list[str]:
        """Errors as "path: message" lines, the form fed back to the generator."""
        return [f"{issue.path}: {issue.message}" for issue in self.errors]

    def raise_for_errors(self) -> None:
        """Raise WorkflowValidationError when the document must be rejected."""
        if not self.valid:
            raise WorkflowValidationError(self)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "valid": self.valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
        }


class ValidateOptions(BaseModel):
    """Per-call validation options."""
    mode: ValidationMode = ValidationMode.STRICT


@dataclass(frozen=True)
class ValidationContext:
    """Read-only collaborators and settings shared by all rules of a run."""
    mode: ValidationMode
    registry: StepTypeCatalog
    constraints: ConstraintProvider


class ValidationRule(ABC):
    """Base class for validation rules."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Rule name for identification."""
        pass

    @abstractmethod
    def validate(self, flow: Flow, context: ValidationContext, sink: IssueSink) -> None:
        """Execute validation rule.

        Args:
            flow: Workflow document to inspect (never mutated)
            context: Mode and read-only collaborators
            sink: Issue sink to report violations to
        """
        pass


class ValidationFramework:
    """Runs the validation rules over a workflow document."""

    def __init__(self, registry: StepTypeCatalog, constraints: ConstraintProvider):
        self.registry = registry
        self.constraints = constraints
        self.rules: list[ValidationRule] = []

    def add_rule(self, rule: ValidationRule) -> None:
        """Add a validation rule."""
        self.rules.append(rule)

    def validate(self, flow: Flow, options: ValidateOptions | None = None) -> ValidationResult:
        """Run every rule, in order, over one document.

        Args:
            flow: Workflow document
            options: Validation options (default: STRICT mode)

        Returns:
            ValidationResult with errors and warnings
        """
        options = options or ValidateOptions()
        context = ValidationContext(options.mode, self.registry, self.constraints)
        sink = IssueSink(options.mode)

        logger.info(f"Validating flow {flow.flow_id!r} in {options.mode.value} mode")
        logger.debug(f"Running {len(self.rules)} validation rules")

        for rule in self.rules:
            logger.debug(f"Executing rule: {rule.name}")
            try:
                rule.validate(flow, context, sink)
            except Exception as e:
                logger.error(f"Rule {rule.name} failed with error: {e}")
                sink.report("", RuleId.RULE_EXECUTION, f"Rule {rule.name} failed: {e}")

        result = ValidationResult(errors=sink.errors, warnings=sink.warnings)
        logger.info(
            f"Validation completed: valid={result.valid}, "
            f"{len(result.errors)} errors, {len(result.warnings)} warnings"
        )
        return result

    def create_default_rules(self) -> None:
        """Register the standard rules in their fixed order."""
        from .rules import (
            AssigneeReferenceRule,
            BranchConditionRule,
            BranchingRule,
            DecisionRule,
            FlowStructureRule,
            GotoRule,
            MainPathMilestoneRule,
            MilestoneRule,
            StepIdUniquenessRule,
            StepTypeRule,
            TerminateRule,
        )

        self.add_rule(FlowStructureRule())
        self.add_rule(MilestoneRule())
        self.add_rule(StepIdUniquenessRule())
        self.add_rule(StepTypeRule())
        self.add_rule(MainPathMilestoneRule())
        self.add_rule(BranchingRule())
        self.add_rule(BranchConditionRule())
        self.add_rule(DecisionRule())
        self.add_rule(GotoRule())
        self.add_rule(TerminateRule())
        self.add_rule(AssigneeReferenceRule())
