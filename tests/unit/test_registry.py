"""Unit tests for the step type registry and the constraint provider."""

from flowcheck.config import ConstraintsConfig, StepCategory, StepTypesConfig
from flowcheck.constraints import ConfigConstraintProvider
from flowcheck.registry import StepTypeRegistry


class TestStepTypeRegistry:
    """Test StepTypeRegistry lookups."""

    def test_builtin_types_known(self, registry):
        for step_type in ("FORM", "DECISION", "SINGLE_CHOICE_BRANCH", "GOTO", "TERMINATE", "AI_EXTRACT"):
            assert registry.is_known_step_type(step_type)

    def test_unknown_types(self, registry):
        assert not registry.is_known_step_type("UNKNOWN_TYPE")
        assert not registry.is_known_step_type(None)
        assert not registry.is_known_step_type("form")

    def test_categories(self, registry):
        assert "APPROVAL" in registry.get_by_category(StepCategory.HUMAN_ACTION)
        assert "SYSTEM_EMAIL" in registry.get_by_category(StepCategory.AUTOMATION)
        assert "GOTO_DESTINATION" in registry.get_by_category(StepCategory.CONTROL)
        assert "FORM" not in registry.get_by_category(StepCategory.CONTROL)

    def test_categories_cover_catalog(self, registry):
        by_category = [t for category in StepCategory for t in registry.get_by_category(category)]
        assert len(by_category) == len(registry)
        assert registry.get_by_category(StepCategory.CONTROL) == sorted(registry.get_by_category(StepCategory.CONTROL))

    def test_explicit_catalog(self):
        registry = StepTypeRegistry({"ONLY_ONE": StepCategory.CONTROL})
        assert registry.is_known_step_type("ONLY_ONE")
        assert not registry.is_known_step_type("FORM")

    def test_from_config_additions_and_removals(self):
        registry = StepTypeRegistry.from_config(StepTypesConfig(
            additional={"CUSTOM_SYNC": StepCategory.AUTOMATION},
            disabled=["WAIT", "NOT_A_TYPE"],
        ))
        assert registry.is_known_step_type("CUSTOM_SYNC")
        assert not registry.is_known_step_type("WAIT")
        assert registry.is_known_step_type("FORM")


class TestConfigConstraintProvider:
    """Test ConfigConstraintProvider accessors."""

    def test_default_limits(self, constraints):
        assert constraints.get_max_parallel_paths() == 3
        assert constraints.get_max_decision_outcomes() == 3
        assert constraints.get_max_branch_nesting_depth() == 2
        assert constraints.must_branch_fit_single_milestone() is True
        assert constraints.must_goto_target_main_path() is True

    def test_container_policies(self, constraints):
        assert constraints.is_goto_allowed_in("DECISION")
        assert constraints.is_goto_allowed_in("SINGLE_CHOICE_BRANCH")
        assert not constraints.is_goto_allowed_in("PARALLEL_BRANCH")
        assert constraints.is_terminate_allowed_in("DECISION")
        assert not constraints.is_terminate_allowed_in("MULTI_CHOICE_BRANCH")

    def test_terminate_statuses(self, constraints):
        assert constraints.is_valid_terminate_status("COMPLETED")
        assert constraints.is_valid_terminate_status("CANCELLED")
        assert not constraints.is_valid_terminate_status("FAILED")
        assert not constraints.is_valid_terminate_status(None)

    def test_custom_config(self):
        provider = ConfigConstraintProvider(ConstraintsConfig(
            goto={"allowedInside": ["PARALLEL_BRANCH"], "targetMustBeOnMainPath": False}
        ))
        assert provider.is_goto_allowed_in("PARALLEL_BRANCH")
        assert not provider.is_goto_allowed_in("DECISION")
        assert provider.must_goto_target_main_path() is False

    def test_to_dict_uses_aliases(self, constraints):
        data = constraints.to_dict()
        assert data["branching"]["maxParallelPaths"] == 3
        assert data["terminate"]["validStatuses"] == ["COMPLETED", "CANCELLED"]
