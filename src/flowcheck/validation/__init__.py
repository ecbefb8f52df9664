"""Structural validation of workflow documents.

A fixed sequence of rules walks the step tree and reports issues at
machine-addressable locations; the run's mode decides whether each issue
is an error or a warning.
"""

from .framework import (
    Issue,
    IssueSink,
    RuleId,
    Severity,
    ValidateOptions,
    ValidationContext,
    ValidationFramework,
    ValidationResult,
    ValidationRule,
    resolve_severity,
)
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

__all__ = [
    "Issue",
    "IssueSink",
    "RuleId",
    "Severity",
    "ValidateOptions",
    "ValidationContext",
    "ValidationFramework",
    "ValidationResult",
    "ValidationRule",
    "resolve_severity",
    "FlowStructureRule",
    "MilestoneRule",
    "StepIdUniquenessRule",
    "StepTypeRule",
    "MainPathMilestoneRule",
    "BranchingRule",
    "BranchConditionRule",
    "DecisionRule",
    "GotoRule",
    "TerminateRule",
    "AssigneeReferenceRule",
]
