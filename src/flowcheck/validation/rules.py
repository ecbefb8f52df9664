"""Validation rules for workflow documents.

Each rule walks the document read-only and reports one category of
violation. Rules keep going after a violation so a single run surfaces
every problem in the document.
"""

import logging
from collections.abc import Sequence
from typing import Any

from ..config import ValidationMode
from ..models import (
    GOTO_STEP_TYPE,
    BaseStep,
    BranchPath,
    BranchStep,
    DecisionStep,
    Flow,
    GotoDestinationStep,
    GotoStep,
    TerminateStep,
    child_step_lists,
    walk_steps,
)
from ..models.flow import scalar_or_none
from ..models.tree import branch_path_container, keyed
from .framework import IssueSink, RuleId, Severity, ValidationContext, ValidationRule

logger = logging.getLogger(__name__)

VALID_CONDITION_TYPES = ("EQUALS", "NOT_EQUALS", "CONTAINS", "NOT_CONTAINS", "NOT_EMPTY", "ELSE")
VALID_CONDITION_LOGIC = ("ALL", "ANY")
MAX_CONDITIONS_PER_PATH = 10


class FlowStructureRule(ValidationRule):
    """Validate that the flow has an id, a name and a steps list."""

    @property
    def name(self) -> str:
        return "flow_structure"

    def validate(self, flow: Flow, context: ValidationContext, sink: IssueSink) -> None:
        if not flow.flow_id:
            sink.report("flowId", RuleId.REQUIRED_FIELD, "Flow must have a flowId")

        if not flow.name:
            sink.report("name", RuleId.REQUIRED_FIELD, "Flow must have a name")

        if flow.steps is None:
            sink.report("steps", RuleId.REQUIRED_FIELD, "Flow must have a steps array")


class MilestoneRule(ValidationRule):
    """Validate that milestones have unique, non-empty ids."""

    @property
    def name(self) -> str:
        return "milestones"

    def validate(self, flow: Flow, context: ValidationContext, sink: IssueSink) -> None:
        seen: set[str] = set()

        for i, milestone in enumerate(flow.milestones):
            path = f"milestones[{i}].milestoneId"

            if not milestone.milestone_id:
                sink.report(path, RuleId.REQUIRED_FIELD, "Milestone must have a milestoneId")
                continue

            if milestone.milestone_id in seen:
                sink.report(
                    path,
                    RuleId.UNIQUE_ID,
                    f"Duplicate milestone ID: {milestone.milestone_id}"
                )
            seen.add(milestone.milestone_id)


class StepIdUniquenessRule(ValidationRule):
    """Validate that step ids are unique across the whole step tree."""

    @property
    def name(self) -> str:
        return "step_ids"

    def validate(self, flow: Flow, context: ValidationContext, sink: IssueSink) -> None:
        seen: set[str] = set()

        def collect(steps: Sequence[BaseStep], base_path: str) -> None:
            for i, step in enumerate(steps):
                step_path = f"{base_path}[{i}]"

                if not step.step_id:
                    # Children of an unidentified step are not visited
                    sink.report(f"{step_path}.stepId", RuleId.REQUIRED_FIELD, "Step must have a stepId")
                    continue

                if step.step_id in seen:
                    sink.report(
                        f"{step_path}.stepId",
                        RuleId.UNIQUE_ID,
                        f"Duplicate step ID: {step.step_id}"
                    )
                seen.add(step.step_id)

                for child in child_step_lists(step, step_path):
                    collect(child.steps, child.path)

        collect(flow.main_path, "steps")


class StepTypeRule(ValidationRule):
    """Validate that every step type is known to the registry.

    Unknown types fail STRICT runs (our own generator output) and are only
    flagged in LENIENT runs (externally supplied documents).
    """

    @property
    def name(self) -> str:
        return "step_types"

    def validate(self, flow: Flow, context: ValidationContext, sink: IssueSink) -> None:
        lenient = context.mode == ValidationMode.LENIENT

        for visit in walk_steps(flow.main_path):
            if context.registry.is_known_step_type(visit.step.type):
                continue
            sink.report(
                f"{visit.path}.type",
                RuleId.UNKNOWN_STEP_TYPE,
                f"Unknown step type: {visit.step.type}",
                severity=Severity.WARNING if lenient else Severity.ERROR,
                force_warning=lenient,
            )


class MainPathMilestoneRule(ValidationRule):
    """Validate that main path steps reference a declared milestone.

    Only applies when the flow declares milestones. GOTO steps are exempt.
    """

    @property
    def name(self) -> str:
        return "main_path_milestones"

    def validate(self, flow: Flow, context: ValidationContext, sink: IssueSink) -> None:
        if not flow.milestones:
            return

        declared = {m.milestone_id for m in flow.milestones}

        for i, step in enumerate(flow.main_path):
            if step.type == GOTO_STEP_TYPE:
                continue

            path = f"steps[{i}].milestoneId"
            if not step.milestone_id:
                sink.report(
                    path,
                    RuleId.REQUIRED_FIELD,
                    "Step must have a milestoneId when milestones are defined"
                )
            elif step.milestone_id not in declared:
                sink.report(path, RuleId.INVALID_REFERENCE, f"Invalid milestoneId: {step.milestone_id}")


class BranchingRule(ValidationRule):
    """Validate branch nesting depth, path counts and milestone consistency."""

    @property
    def name(self) -> str:
        return "branching"

    def validate(self, flow: Flow, context: ValidationContext, sink: IssueSink) -> None:
        constraints = context.constraints
        max_paths = constraints.get_max_parallel_paths()
        max_depth = constraints.get_max_branch_nesting_depth()
        single_milestone = constraints.must_branch_fit_single_milestone()

        def find_branches(
            steps: Sequence[BaseStep],
            base_path: str,
            depth: int,
            parent_milestone_id: str | None,
        ) -> None:
            # Decision outcomes do not add a nesting level; only branches do
            for i, step in enumerate(steps):
                step_path = f"{base_path}[{i}]"
                if isinstance(step, BranchStep):
                    check_branch(step, step_path, depth, parent_milestone_id)
                elif isinstance(step, DecisionStep):
                    for child in child_step_lists(step, step_path):
                        find_branches(child.steps, child.path, depth, parent_milestone_id)

        def check_branch(
            step: BranchStep,
            path: str,
            depth: int,
            parent_milestone_id: str | None,
        ) -> None:
            # parent_milestone_id is threaded through but not checked; only the
            # immediate branch's milestone is enforced on its nested steps.
            if depth > max_depth:
                sink.report(
                    path,
                    RuleId.MAX_NESTING_DEPTH,
                    f"Branch nesting depth {depth} exceeds maximum {max_depth}"
                )

            path_count = len(step.paths)
            if path_count > max_paths:
                sink.report(
                    f"{path}.paths",
                    RuleId.MAX_PARALLEL_PATHS,
                    f"Branch has {path_count} paths, maximum is {max_paths}"
                )
            if path_count < 2:
                sink.report(f"{path}.paths", RuleId.MIN_PATHS, "Branch must have at least 2 paths")

            if single_milestone:
                for index, branch_path in enumerate(step.paths):
                    self._check_milestone_consistency(step, branch_path, index, path, sink)

            for child in child_step_lists(step, path):
                find_branches(child.steps, child.path, depth + 1, step.milestone_id)

        find_branches(flow.main_path, "steps", 1, None)

    def _check_milestone_consistency(
        self,
        branch: BranchStep,
        branch_path: BranchPath,
        index: int,
        path: str,
        sink: IssueSink,
    ) -> None:
        """Report the path once if any step under it belongs to another milestone."""
        path_location = f"{path}.paths[{keyed(branch_path.path_id, index)}]"
        nested = walk_steps(branch_path.steps, f"{path_location}.steps", branch_path_container(branch))

        for visit in nested:
            milestone_id = visit.step.milestone_id
            if milestone_id and milestone_id != branch.milestone_id:
                sink.report(
                    path_location,
                    RuleId.BRANCH_MILESTONE_CONSISTENCY,
                    f"All steps in branch must have same milestoneId as branch ({branch.milestone_id})"
                )
                break


class BranchConditionRule(ValidationRule):
    """Validate branch path condition types, condition counts and condition logic.

    Runs on every branch path in the tree, whether or not the branch itself
    is legally placed.
    """

    @property
    def name(self) -> str:
        return "branch_conditions"

    def validate(self, flow: Flow, context: ValidationContext, sink: IssueSink) -> None:
        for visit in walk_steps(flow.main_path):
            if not isinstance(visit.step, BranchStep):
                continue
            for index, branch_path in enumerate(visit.step.paths):
                path_location = f"{visit.path}.paths[{keyed(branch_path.path_id, index)}]"
                self._check_path(branch_path, path_location, sink)

    def _check_path(self, branch_path: BranchPath, path: str, sink: IssueSink) -> None:
        if branch_path.condition is not None:
            self._check_condition_type(branch_path.condition.type, f"{path}.condition.type", sink)

        conditions = branch_path.conditions
        logic_checked = False
        if conditions is not None:
            if len(conditions) > MAX_CONDITIONS_PER_PATH:
                sink.report(
                    f"{path}.conditions",
                    RuleId.MAX_CONDITIONS_PER_PATH,
                    f"Path has {len(conditions)} conditions, maximum is {MAX_CONDITIONS_PER_PATH}"
                )

            for ci, condition in enumerate(conditions):
                self._check_condition_type(condition.type, f"{path}.conditions[{ci}].type", sink)

            if len(conditions) > 1:
                logic_checked = True
                if not branch_path.condition_logic:
                    sink.report(
                        f"{path}.conditionLogic",
                        RuleId.REQUIRED_FIELD,
                        "conditionLogic is required when multiple conditions are specified (use 'ALL' or 'ANY')"
                    )
                elif branch_path.condition_logic not in VALID_CONDITION_LOGIC:
                    self._report_invalid_logic(branch_path.condition_logic, path, sink)

        # Any conditionLogic present is validated, even with zero or one condition
        if (
            not logic_checked
            and branch_path.condition_logic
            and branch_path.condition_logic not in VALID_CONDITION_LOGIC
        ):
            self._report_invalid_logic(branch_path.condition_logic, path, sink)

    def _check_condition_type(self, condition_type: str | None, path: str, sink: IssueSink) -> None:
        if condition_type not in VALID_CONDITION_TYPES:
            sink.report(
                path,
                RuleId.INVALID_CONDITION_TYPE,
                f"Invalid condition type: {condition_type}. Valid types: {', '.join(VALID_CONDITION_TYPES)}"
            )

    def _report_invalid_logic(self, logic: str, path: str, sink: IssueSink) -> None:
        sink.report(
            f"{path}.conditionLogic",
            RuleId.INVALID_CONDITION_LOGIC,
            f"Invalid conditionLogic: {logic}. Valid values: {', '.join(VALID_CONDITION_LOGIC)}"
        )


class DecisionRule(ValidationRule):
    """Validate decision assignee, outcome count and outcome id uniqueness."""

    @property
    def name(self) -> str:
        return "decisions"

    def validate(self, flow: Flow, context: ValidationContext, sink: IssueSink) -> None:
        max_outcomes = context.constraints.get_max_decision_outcomes()

        for visit in walk_steps(flow.main_path):
            step = visit.step
            if not isinstance(step, DecisionStep):
                continue

            if isinstance(step.assignee, list):
                sink.report(
                    f"{visit.path}.assignee",
                    RuleId.DECISION_SINGLE_ASSIGNEE,
                    "Decision must have exactly one assignee (not an array)"
                )

            outcome_count = len(step.outcomes)
            if outcome_count > max_outcomes:
                sink.report(
                    f"{visit.path}.outcomes",
                    RuleId.MAX_DECISION_OUTCOMES,
                    f"Decision has {outcome_count} outcomes, maximum is {max_outcomes}"
                )
            if outcome_count < 2:
                sink.report(f"{visit.path}.outcomes", RuleId.MIN_OUTCOMES, "Decision must have at least 2 outcomes")

            # Scoped to this decision, unlike step ids
            outcome_ids: set[str] = set()
            for outcome in step.outcomes:
                if not outcome.outcome_id:
                    continue
                if outcome.outcome_id in outcome_ids:
                    sink.report(
                        f"{visit.path}.outcomes",
                        RuleId.UNIQUE_ID,
                        f"Duplicate outcome ID: {outcome.outcome_id}"
                    )
                outcome_ids.add(outcome.outcome_id)


class GotoRule(ValidationRule):
    """Validate GOTO placement and that targets are main path destinations."""

    @property
    def name(self) -> str:
        return "goto_destinations"

    def validate(self, flow: Flow, context: ValidationContext, sink: IssueSink) -> None:
        constraints = context.constraints

        # Destinations nested inside paths or outcomes are never legal targets
        destinations = {
            step.step_id
            for step in flow.main_path
            if isinstance(step, GotoDestinationStep) and step.step_id
        }

        for visit in walk_steps(flow.main_path):
            if not isinstance(visit.step, GotoStep):
                continue

            container_type = visit.container.token
            if container_type is None or not constraints.is_goto_allowed_in(container_type):
                sink.report(
                    visit.path,
                    RuleId.GOTO_PLACEMENT,
                    "GOTO can only be placed inside DECISION or SINGLE_CHOICE_BRANCH paths"
                )

            target = visit.step.target_goto_destination_id
            if constraints.must_goto_target_main_path() and target not in destinations:
                sink.report(
                    f"{visit.path}.targetGotoDestinationId",
                    RuleId.GOTO_TARGET_MAIN_PATH,
                    f"GOTO target {target} must be on main path"
                )


class TerminateRule(ValidationRule):
    """Validate TERMINATE placement and status."""

    @property
    def name(self) -> str:
        return "terminate"

    def validate(self, flow: Flow, context: ValidationContext, sink: IssueSink) -> None:
        constraints = context.constraints

        for visit in walk_steps(flow.main_path):
            if not isinstance(visit.step, TerminateStep):
                continue

            container_type = visit.container.token
            if container_type is None or not constraints.is_terminate_allowed_in(container_type):
                sink.report(
                    visit.path,
                    RuleId.TERMINATE_PLACEMENT,
                    "TERMINATE can only be placed inside DECISION or SINGLE_CHOICE_BRANCH paths"
                )

            if not constraints.is_valid_terminate_status(visit.step.status):
                sink.report(
                    f"{visit.path}.status",
                    RuleId.TERMINATE_STATUS,
                    f"Invalid terminate status: {visit.step.status}"
                )


class AssigneeReferenceRule(ValidationRule):
    """Validate that placeholder assignment references point at declared placeholders.

    Only resolvable-but-unknown placeholder references are reported; absent or
    malformed references are left alone.
    """

    @property
    def name(self) -> str:
        return "assignees"

    def validate(self, flow: Flow, context: ValidationContext, sink: IssueSink) -> None:
        placeholders = {
            p.placeholder_id for p in flow.assignee_placeholders if p.placeholder_id
        }

        def check_ref(ref: Any, path: str) -> None:
            if not isinstance(ref, dict):
                return
            # Declared ids are coerced to strings; compare references the same way
            placeholder_id = scalar_or_none(ref.get("placeholderId"))
            if placeholder_id is not None:
                placeholder_id = str(placeholder_id)
            if ref.get("mode") == "PLACEHOLDER" and placeholder_id and placeholder_id not in placeholders:
                sink.report(path, RuleId.INVALID_REFERENCE, f"Invalid assignee placeholder: {placeholder_id}")

        for visit in walk_steps(flow.main_path):
            step = visit.step
            check_ref(step.assignee, f"{visit.path}.assignee")

            if isinstance(step.assignees, list):
                for i, ref in enumerate(step.assignees):
                    check_ref(ref, f"{visit.path}.assignees[{i}]")
            else:
                check_ref(step.assignees, f"{visit.path}.assignees")

            check_ref(step.reviewer, f"{visit.path}.reviewer")

            if isinstance(step.signers, list):
                for i, ref in enumerate(step.signers):
                    check_ref(ref, f"{visit.path}.signers[{i}]")
