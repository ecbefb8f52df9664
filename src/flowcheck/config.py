"""Configuration management for flowcheck using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from flowcheck.errors import ConfigError

CONFIG_FILE_NAME = ".flowcheck.json"


class ValidationMode(str, Enum):
    """Validation strictness profile."""
    STRICT = "STRICT"    # Our own generated output
    LENIENT = "LENIENT"  # Externally authored or imported documents


class StepCategory(str, Enum):
    """Step type categories."""
    HUMAN_ACTION = "HUMAN_ACTION"
    CONTROL = "CONTROL"
    AUTOMATION = "AUTOMATION"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"
    TRACE = "trace"


class BranchingConfig(BaseModel):
    """Branching and decision limits."""
    max_parallel_paths: int = Field(alias="maxParallelPaths", default=3)
    max_decision_outcomes: int = Field(alias="maxDecisionOutcomes", default=3)
    max_nesting_depth: int = Field(alias="maxNestingDepth", default=2)
    milestones_inside_branches: bool = Field(alias="milestonesInsideBranches", default=False)
    branch_must_fit_single_milestone: bool = Field(alias="branchMustFitSingleMilestone", default=True)

    @field_validator("max_parallel_paths", "max_decision_outcomes")
    @classmethod
    def validate_fan_out(cls, v):
        if v < 2:
            raise ValueError("branch and decision limits must be >= 2")
        return v

    @field_validator("max_nesting_depth")
    @classmethod
    def validate_max_nesting_depth(cls, v):
        if v < 1:
            raise ValueError("max_nesting_depth must be >= 1")
        return v

    model_config = ConfigDict(populate_by_name=True)


class GotoConfig(BaseModel):
    """GOTO placement and target policy."""
    allowed_inside: list[str] = Field(
        alias="allowedInside",
        default_factory=lambda: ["DECISION", "SINGLE_CHOICE_BRANCH"]
    )
    target_must_be_on_main_path: bool = Field(alias="targetMustBeOnMainPath", default=True)

    model_config = ConfigDict(populate_by_name=True)


class TerminateConfig(BaseModel):
    """TERMINATE placement and status policy."""
    allowed_inside: list[str] = Field(
        alias="allowedInside",
        default_factory=lambda: ["DECISION", "SINGLE_CHOICE_BRANCH"]
    )
    valid_statuses: list[str] = Field(
        alias="validStatuses",
        default_factory=lambda: ["COMPLETED", "CANCELLED"]
    )

    @field_validator("valid_statuses")
    @classmethod
    def validate_statuses(cls, v):
        if not v:
            raise ValueError("valid_statuses must not be empty")
        return v

    model_config = ConfigDict(populate_by_name=True)


class ConstraintsConfig(BaseModel):
    """Platform constraints consumed by the validation rules."""
    branching: BranchingConfig = Field(default_factory=BranchingConfig)
    goto: GotoConfig = Field(default_factory=GotoConfig)
    terminate: TerminateConfig = Field(default_factory=TerminateConfig)


class StepTypesConfig(BaseModel):
    """Step type catalog adjustments on top of the built-in catalog."""
    additional: dict[str, StepCategory] = Field(default_factory=dict)
    disabled: list[str] = Field(default_factory=list)


class ValidationConfig(BaseModel):
    """Validation configuration section."""
    default_mode: ValidationMode = Field(alias="defaultMode", default=ValidationMode.STRICT)

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.INFO

    model_config = ConfigDict(use_enum_values=True, validate_default=True)


class FlowcheckConfig(BaseModel):
    """Complete flowcheck configuration model."""
    constraints: ConstraintsConfig = Field(default_factory=ConstraintsConfig)
    step_types: StepTypesConfig = Field(alias="stepTypes", default_factory=StepTypesConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


def load_config(config_path: str | Path | None = None) -> FlowcheckConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .flowcheck.json

    Returns:
        FlowcheckConfig: Loaded and validated configuration

    Raises:
        ConfigError: If the configuration file is not valid JSON or violates the schema
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file {config_path}: {e}") from e

        try:
            return FlowcheckConfig(**config_data)
        except (TypeError, ValidationError) as e:
            raise ConfigError(f"Failed to load config from {config_path}: {e}") from e

    return create_default_config()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .flowcheck.json by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def create_default_config() -> FlowcheckConfig:
    """Zero-config defaults matching the platform's published constraints."""
    return FlowcheckConfig()
