"""Constraint provider.

Exposes the platform limits from ``ConstraintsConfig`` through the narrow
accessor interface the validation rules depend on.
"""

from typing import Protocol

from flowcheck.config import ConstraintsConfig


class ConstraintProvider(Protocol):
    """Numeric and placement policy consumed by the validation rules."""

    def get_max_parallel_paths(self) -> int:
        ...

    def get_max_decision_outcomes(self) -> int:
        ...

    def get_max_branch_nesting_depth(self) -> int:
        ...

    def is_goto_allowed_in(self, container_type: str) -> bool:
        ...

    def is_terminate_allowed_in(self, container_type: str) -> bool:
        ...

    def must_branch_fit_single_milestone(self) -> bool:
        ...

    def must_goto_target_main_path(self) -> bool:
        ...

    def is_valid_terminate_status(self, status: str | None) -> bool:
        ...


class ConfigConstraintProvider:
    """ConstraintProvider backed by a ConstraintsConfig section."""

    def __init__(self, config: ConstraintsConfig | None = None):
        self.config = config or ConstraintsConfig()

    # --- Branching ---

    def get_max_parallel_paths(self) -> int:
        return self.config.branching.max_parallel_paths

    def get_max_decision_outcomes(self) -> int:
        return self.config.branching.max_decision_outcomes

    def get_max_branch_nesting_depth(self) -> int:
        return self.config.branching.max_nesting_depth

    def are_milestones_allowed_in_branches(self) -> bool:
        return self.config.branching.milestones_inside_branches

    def must_branch_fit_single_milestone(self) -> bool:
        return self.config.branching.branch_must_fit_single_milestone

    # --- GOTO ---

    def get_goto_allowed_containers(self) -> list[str]:
        return list(self.config.goto.allowed_inside)

    def is_goto_allowed_in(self, container_type: str) -> bool:
        return container_type in self.config.goto.allowed_inside

    def must_goto_target_main_path(self) -> bool:
        return self.config.goto.target_must_be_on_main_path

    # --- TERMINATE ---

    def get_terminate_allowed_containers(self) -> list[str]:
        return list(self.config.terminate.allowed_inside)

    def is_terminate_allowed_in(self, container_type: str) -> bool:
        return container_type in self.config.terminate.allowed_inside

    def get_valid_terminate_statuses(self) -> list[str]:
        return list(self.config.terminate.valid_statuses)

    def is_valid_terminate_status(self, status: str | None) -> bool:
        return status in self.config.terminate.valid_statuses

    def to_dict(self) -> dict:
        """Effective constraints, camelCase keys as in the configuration file."""
        return self.config.model_dump(by_alias=True)
