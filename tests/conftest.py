"""Shared fixtures for flowcheck tests."""

import copy

import pytest

from flowcheck.config import create_default_config
from flowcheck.constraints import ConfigConstraintProvider
from flowcheck.registry import StepTypeRegistry
from flowcheck.validator import build_framework

SAMPLE_FLOW = {
    "flowId": "flow_test_001",
    "name": "Test Client Onboarding",
    "settings": {
        "chatAssistanceEnabled": True,
        "autoArchiveEnabled": True,
    },
    "milestones": [
        {"milestoneId": "ms1", "name": "Intake", "sequence": 1},
        {"milestoneId": "ms2", "name": "Review", "sequence": 2},
    ],
    "assigneePlaceholders": [
        {"placeholderId": "role_client", "name": "Client"},
        {"placeholderId": "role_manager", "name": "Manager"},
    ],
    "steps": [
        {
            "stepId": "s1_form",
            "type": "FORM",
            "milestoneId": "ms1",
            "title": "Client Intake Form",
            "assignees": {"mode": "PLACEHOLDER", "placeholderId": "role_client"},
        },
        {
            "stepId": "s2_decision",
            "type": "DECISION",
            "milestoneId": "ms1",
            "title": "Approve Client?",
            "assignee": {"mode": "PLACEHOLDER", "placeholderId": "role_manager"},
            "outcomes": [
                {"outcomeId": "o_yes", "label": "Yes", "steps": []},
                {
                    "outcomeId": "o_no",
                    "label": "No",
                    "steps": [
                        {
                            "stepId": "s2_1_terminate",
                            "type": "TERMINATE",
                            "milestoneId": "ms1",
                            "status": "CANCELLED",
                        },
                    ],
                },
            ],
        },
        {
            "stepId": "s3_approval",
            "type": "APPROVAL",
            "milestoneId": "ms2",
            "title": "Final Approval",
            "assignees": [{"mode": "PLACEHOLDER", "placeholderId": "role_manager"}],
        },
    ],
}

INVALID_FLOW = {
    "flowId": "flow_invalid",
    "name": "Invalid Workflow",
    "milestones": [{"milestoneId": "ms1", "name": "Main", "sequence": 1}],
    "assigneePlaceholders": [],
    "steps": [
        {
            "stepId": "s1_decision",
            "type": "DECISION",
            "milestoneId": "ms1",
            "assignee": {"mode": "PLACEHOLDER", "placeholderId": "nonexistent_role"},
            "outcomes": [{"outcomeId": "o1", "label": "One", "steps": []}],
        },
        {
            "stepId": "s1_decision",
            "type": "FORM",
            "milestoneId": "ms1",
            "assignees": [],
        },
    ],
}


@pytest.fixture
def sample_flow():
    """A workflow that passes every rule."""
    return copy.deepcopy(SAMPLE_FLOW)


@pytest.fixture
def invalid_flow():
    """A workflow with a duplicate step id, a bad placeholder and a one-outcome decision."""
    return copy.deepcopy(INVALID_FLOW)


@pytest.fixture
def default_config():
    return create_default_config()


@pytest.fixture
def registry():
    return StepTypeRegistry()


@pytest.fixture
def constraints(default_config):
    return ConfigConstraintProvider(default_config.constraints)


@pytest.fixture
def framework(default_config):
    return build_framework(default_config)
