"""Workflow document model and tree traversal."""

from .flow import (
    BRANCH_STEP_TYPES,
    DECISION_STEP_TYPE,
    GOTO_DESTINATION_STEP_TYPE,
    GOTO_STEP_TYPE,
    TERMINATE_STEP_TYPE,
    AssigneePlaceholder,
    BaseStep,
    BranchCondition,
    BranchPath,
    BranchStep,
    DecisionOutcome,
    DecisionStep,
    Flow,
    GotoDestinationStep,
    GotoStep,
    Milestone,
    SimpleStep,
    Step,
    TerminateStep,
)
from .tree import Container, ContainerKind, StepVisit, child_step_lists, walk_steps

__all__ = [
    "BRANCH_STEP_TYPES",
    "DECISION_STEP_TYPE",
    "GOTO_DESTINATION_STEP_TYPE",
    "GOTO_STEP_TYPE",
    "TERMINATE_STEP_TYPE",
    "AssigneePlaceholder",
    "BaseStep",
    "BranchCondition",
    "BranchPath",
    "BranchStep",
    "Container",
    "ContainerKind",
    "DecisionOutcome",
    "DecisionStep",
    "Flow",
    "GotoDestinationStep",
    "GotoStep",
    "Milestone",
    "SimpleStep",
    "Step",
    "StepVisit",
    "TerminateStep",
    "child_step_lists",
    "walk_steps",
]
