"""Step type registry.

Answers whether a step type string is known to the platform. The built-in
catalog can be extended or narrowed through the ``stepTypes`` section of the
configuration.
"""

import logging
from collections.abc import Mapping
from typing import Protocol

from flowcheck.config import StepCategory, StepTypesConfig

logger = logging.getLogger(__name__)

HUMAN_ACTION_TYPES = (
    "FORM",
    "QUESTIONNAIRE",
    "FILE_REQUEST",
    "TODO",
    "APPROVAL",
    "ACKNOWLEDGEMENT",
    "ESIGN",
    "DECISION",
    "CUSTOM_ACTION",
    "WEB_APP",
    "PDF_FORM",
)

CONTROL_TYPES = (
    "SINGLE_CHOICE_BRANCH",
    "MULTI_CHOICE_BRANCH",
    "PARALLEL_BRANCH",
    "GOTO",
    "GOTO_DESTINATION",
    "TERMINATE",
    "WAIT",
    "SUB_FLOW",
)

AUTOMATION_TYPES = (
    "AI_CUSTOM_PROMPT",
    "AI_EXTRACT",
    "AI_SUMMARIZE",
    "AI_TRANSCRIBE",
    "AI_TRANSLATE",
    "AI_WRITE",
    "SYSTEM_WEBHOOK",
    "SYSTEM_EMAIL",
    "SYSTEM_CHAT_MESSAGE",
    "SYSTEM_UPDATE_WORKSPACE",
    "BUSINESS_RULE",
    "INTEGRATION_AIRTABLE",
    "INTEGRATION_CLICKUP",
    "INTEGRATION_DROPBOX",
    "INTEGRATION_GMAIL",
    "INTEGRATION_GOOGLE_DRIVE",
    "INTEGRATION_GOOGLE_SHEETS",
    "INTEGRATION_WRIKE",
)


def default_step_types() -> dict[str, StepCategory]:
    catalog = {name: StepCategory.HUMAN_ACTION for name in HUMAN_ACTION_TYPES}
    catalog.update({name: StepCategory.CONTROL for name in CONTROL_TYPES})
    catalog.update({name: StepCategory.AUTOMATION for name in AUTOMATION_TYPES})
    return catalog


class StepTypeCatalog(Protocol):
    """Read-only lookup used by the step type rule."""

    def is_known_step_type(self, step_type: str | None) -> bool:
        ...


class StepTypeRegistry:
    """Immutable registry of known step types and their categories."""

    def __init__(self, step_types: Mapping[str, StepCategory] | None = None):
        self._types: dict[str, StepCategory] = dict(
            default_step_types() if step_types is None else step_types
        )

    @classmethod
    def from_config(cls, config: StepTypesConfig) -> "StepTypeRegistry":
        """Built-in catalog plus configured additions, minus disabled types."""
        catalog = default_step_types()
        catalog.update(config.additional)
        for step_type in config.disabled:
            if catalog.pop(step_type, None) is None:
                logger.warning(f"Cannot disable unknown step type: {step_type}")
        return cls(catalog)

    def is_known_step_type(self, step_type: str | None) -> bool:
        return step_type in self._types

    def get_by_category(self, category: StepCategory) -> list[str]:
        return sorted(name for name, cat in self._types.items() if cat == category)

    def __len__(self) -> int:
        return len(self._types)
