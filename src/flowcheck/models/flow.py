"""Workflow document model.

A flow owns an ordered main path of steps. Branch steps own paths and
decision steps own outcomes; both nest further steps, so the document is a
tree. GOTO refers to its destination by id only.

Models are deliberately lenient: every field is optional so that a
malformed document can still be walked and every problem reported, rather
than failing on the first missing field.
"""

from collections.abc import Mapping
from typing import Annotated, Any, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Discriminator, Field, Tag, field_validator

BRANCH_STEP_TYPES = frozenset({"SINGLE_CHOICE_BRANCH", "MULTI_CHOICE_BRANCH", "PARALLEL_BRANCH"})
DECISION_STEP_TYPE = "DECISION"
GOTO_STEP_TYPE = "GOTO"
GOTO_DESTINATION_STEP_TYPE = "GOTO_DESTINATION"
TERMINATE_STEP_TYPE = "TERMINATE"


def _as_records(value: Any) -> list:
    """Replace non-object entries with empty records so one bad entry does not abort parsing."""
    return [item if isinstance(item, Mapping | BaseModel) else {} for item in value]


def _as_step_list(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return _as_records(value)


def scalar_or_none(value: Any) -> str | int | float | None:
    """Keep a scalar id, type or status; anything else reads as missing."""
    if isinstance(value, bool) or not isinstance(value, str | int | float):
        return None
    return value


# Fields the rules read: non-scalar values become None and are reported, not raised
ScalarStr = Annotated[str | None, BeforeValidator(scalar_or_none)]


class DocumentModel(BaseModel):
    """Base for all document nodes: camelCase aliases, unknown fields kept."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )


class Milestone(DocumentModel):
    """A named phase of the flow that main-path steps belong to."""
    milestone_id: ScalarStr = Field(alias="milestoneId", default=None)
    name: Any = None
    sequence: Any = None


class AssigneePlaceholder(DocumentModel):
    """Role placeholder resolved to a real person at run time."""
    placeholder_id: ScalarStr = Field(alias="placeholderId", default=None)
    name: Any = None


class BranchCondition(DocumentModel):
    type: ScalarStr = None


class BaseStep(DocumentModel):
    """Fields shared by every step variant."""
    step_id: ScalarStr = Field(alias="stepId", default=None)
    type: ScalarStr = None
    milestone_id: ScalarStr = Field(alias="milestoneId", default=None)
    title: Any = None

    # Assignment references: a single reference or a list of references
    assignee: Any = None
    assignees: Any = None
    reviewer: Any = None
    signers: Any = None


class SimpleStep(BaseStep):
    """Any step without nested structure (forms, approvals, automations, unknown types)."""


class BranchPath(DocumentModel):
    path_id: ScalarStr = Field(alias="pathId", default=None)
    label: Any = None
    condition: BranchCondition | None = None
    conditions: list[BranchCondition] | None = None
    condition_logic: ScalarStr = Field(alias="conditionLogic", default=None)
    steps: list["Step"] = Field(default_factory=list)

    @field_validator("steps", mode="before")
    @classmethod
    def coerce_steps(cls, v):
        return _as_step_list(v)

    @field_validator("condition", mode="before")
    @classmethod
    def coerce_condition(cls, v):
        return v if isinstance(v, Mapping | BaseModel) else None

    @field_validator("conditions", mode="before")
    @classmethod
    def coerce_conditions(cls, v):
        if not isinstance(v, list):
            return None
        return _as_records(v)


class BranchStep(BaseStep):
    """Forks execution into conditionally selected or parallel paths."""
    paths: list[BranchPath] = Field(default_factory=list)

    @field_validator("paths", mode="before")
    @classmethod
    def coerce_paths(cls, v):
        return _as_records(v)


class DecisionOutcome(DocumentModel):
    outcome_id: ScalarStr = Field(alias="outcomeId", default=None)
    label: Any = None
    steps: list["Step"] = Field(default_factory=list)

    @field_validator("steps", mode="before")
    @classmethod
    def coerce_steps(cls, v):
        return _as_step_list(v)


class DecisionStep(BaseStep):
    """A single assignee picks exactly one of several outcomes."""
    outcomes: list[DecisionOutcome] = Field(default_factory=list)

    @field_validator("outcomes", mode="before")
    @classmethod
    def coerce_outcomes(cls, v):
        return _as_records(v)


class GotoStep(BaseStep):
    target_goto_destination_id: ScalarStr = Field(alias="targetGotoDestinationId", default=None)


class GotoDestinationStep(BaseStep):
    name: Any = None


class TerminateStep(BaseStep):
    status: ScalarStr = None


def step_kind(value: Any) -> str:
    """Pick the step variant for a raw mapping or an already-built step.

    Branch and decision variants additionally require their child list to be
    a list; otherwise the step is treated as a plain step and never walked.
    """
    if isinstance(value, Mapping):
        step_type = value.get("type")
        paths = value.get("paths")
        outcomes = value.get("outcomes")
    else:
        step_type = getattr(value, "type", None)
        paths = getattr(value, "paths", None)
        outcomes = getattr(value, "outcomes", None)

    if not isinstance(step_type, str):
        return "simple"

    if step_type in BRANCH_STEP_TYPES and isinstance(paths, list):
        return "branch"
    if step_type == DECISION_STEP_TYPE and isinstance(outcomes, list):
        return "decision"
    if step_type == GOTO_STEP_TYPE:
        return "goto"
    if step_type == GOTO_DESTINATION_STEP_TYPE:
        return "goto_destination"
    if step_type == TERMINATE_STEP_TYPE:
        return "terminate"
    return "simple"


Step = Annotated[
    Union[
        Annotated[BranchStep, Tag("branch")],
        Annotated[DecisionStep, Tag("decision")],
        Annotated[GotoStep, Tag("goto")],
        Annotated[GotoDestinationStep, Tag("goto_destination")],
        Annotated[TerminateStep, Tag("terminate")],
        Annotated[SimpleStep, Tag("simple")],
    ],
    Discriminator(step_kind),
]


class Flow(DocumentModel):
    """A complete workflow document."""
    flow_id: ScalarStr = Field(alias="flowId", default=None)
    name: Any = None
    steps: list[Step] | None = None
    milestones: list[Milestone] = Field(default_factory=list)
    assignee_placeholders: list[AssigneePlaceholder] = Field(
        alias="assigneePlaceholders", default_factory=list
    )
    settings: dict[str, Any] | None = None

    @field_validator("steps", mode="before")
    @classmethod
    def coerce_steps(cls, v):
        # A non-list main path is reported by the structure rule, not raised
        if not isinstance(v, list):
            return None
        return _as_step_list(v)

    @field_validator("milestones", "assignee_placeholders", mode="before")
    @classmethod
    def coerce_records(cls, v):
        if not isinstance(v, list):
            return []
        return _as_records(v)

    @field_validator("settings", mode="before")
    @classmethod
    def coerce_settings(cls, v):
        return v if isinstance(v, Mapping) else None

    @property
    def main_path(self) -> list[BaseStep]:
        """Top-level steps, empty when the document has no usable steps list."""
        return self.steps or []

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> "Flow":
        """Build a flow from a JSON-shaped mapping without mutating it."""
        return cls.model_validate(dict(data))


BranchPath.model_rebuild()
BranchStep.model_rebuild()
DecisionOutcome.model_rebuild()
DecisionStep.model_rebuild()
Flow.model_rebuild()
