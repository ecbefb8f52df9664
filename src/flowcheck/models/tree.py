"""Step tree traversal and location paths.

Locations use dotted field access with bracket indices for step lists and
bracket ids for branch paths and decision outcomes, for example
``steps[2].paths[pathA].steps[0].outcomes[yes].steps[1].milestoneId``.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum

from .flow import DECISION_STEP_TYPE, BaseStep, BranchStep, DecisionStep


class ContainerKind(str, Enum):
    """What structure a step list is nested inside."""
    MAIN_PATH = "main_path"
    DECISION_OUTCOME = "decision_outcome"
    BRANCH_PATH = "branch_path"


@dataclass(frozen=True)
class Container:
    kind: ContainerKind
    branch_type: str | None = None

    @property
    def token(self) -> str | None:
        """Container type as named in constraint policies (None on the main path)."""
        if self.kind == ContainerKind.DECISION_OUTCOME:
            return DECISION_STEP_TYPE
        if self.kind == ContainerKind.BRANCH_PATH:
            return self.branch_type
        return None


MAIN_PATH = Container(ContainerKind.MAIN_PATH)
DECISION_OUTCOME = Container(ContainerKind.DECISION_OUTCOME)


def branch_path_container(step: BranchStep) -> Container:
    return Container(ContainerKind.BRANCH_PATH, step.type)


def keyed(declared_id: str | None, index: int) -> str:
    """Bracket key for a path or outcome: its declared id, or its position when it has none."""
    return declared_id if declared_id else str(index)


@dataclass(frozen=True)
class ChildSteps:
    """A nested step list owned by a branch path or decision outcome."""
    path: str
    steps: list[BaseStep]
    container: Container


def child_step_lists(step: BaseStep, step_path: str) -> Iterator[ChildSteps]:
    """Yield the nested step lists directly owned by a step."""
    if isinstance(step, BranchStep):
        container = branch_path_container(step)
        for index, branch_path in enumerate(step.paths):
            yield ChildSteps(
                f"{step_path}.paths[{keyed(branch_path.path_id, index)}].steps",
                branch_path.steps,
                container,
            )
    elif isinstance(step, DecisionStep):
        for index, outcome in enumerate(step.outcomes):
            yield ChildSteps(
                f"{step_path}.outcomes[{keyed(outcome.outcome_id, index)}].steps",
                outcome.steps,
                DECISION_OUTCOME,
            )


@dataclass(frozen=True)
class StepVisit:
    step: BaseStep
    path: str
    container: Container


def walk_steps(
    steps: Sequence[BaseStep],
    base_path: str = "steps",
    container: Container = MAIN_PATH,
) -> Iterator[StepVisit]:
    """Depth-first, pre-order walk over a step list and everything nested in it."""
    for index, step in enumerate(steps):
        step_path = f"{base_path}[{index}]"
        yield StepVisit(step, step_path, container)
        for child in child_step_lists(step, step_path):
            yield from walk_steps(child.steps, child.path, child.container)
