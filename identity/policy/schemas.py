"""Pydantic models for the label policy configuration.

Keys and values named by a policy are normalized the same way label fields
are, so ``Phone: Verified`` matches a stored ``phone: verified`` label. Terms
that still fail the label key format could never match and are rejected.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from identity.core.labels import is_label_term, normalize_field


def label_term(value: str) -> str:
    """Normalize a policy key or value, raising ValueError if no label can match it."""
    term = normalize_field(value)
    if not is_label_term(term):
        raise ValueError(f"{value!r} is not a valid label term")
    return term


class StateTrigger(BaseModel):
    """ANY policy: the state applies when any of ``keys`` is present."""

    state: str = Field(..., min_length=1, description="Target state name")
    keys: list[str] = Field(default_factory=list, description="Label keys, value ignored")

    @field_validator("keys")
    @classmethod
    def _normalize_keys(cls, value: list[str]) -> list[str]:
        return [label_term(key) for key in value]


class LevelRule(BaseModel):
    """A level reachable through required key/values and/or trigger keys."""

    level: int = Field(..., ge=0, description="Resolved level")
    requires: dict[str, str] = Field(default_factory=dict, description="ALL policy")
    any_of: list[str] = Field(default_factory=list, description="ANY policy")

    @field_validator("requires")
    @classmethod
    def _normalize_requires(cls, value: dict[str, str]) -> dict[str, str]:
        return {label_term(key): label_term(val) for key, val in value.items()}

    @field_validator("any_of")
    @classmethod
    def _normalize_any_of(cls, value: list[str]) -> list[str]:
        return [label_term(key) for key in value]


class PolicyConfig(BaseModel):
    """The rule set driving account state and level.

    Sections are ordered: declaration order in the source mapping decides
    which trigger or level rule wins when several match.
    """

    activation_requirements: list[tuple[str, str]] = Field(
        default_factory=list, description="ALL policy for the 'active' state"
    )
    state_triggers: list[StateTrigger] = Field(
        default_factory=list, description="ANY policy per state, in priority order"
    )
    level_rules: list[LevelRule] = Field(
        default_factory=list, description="Level rules, in priority order"
    )

    model_config = {"frozen": True}

    @field_validator("activation_requirements", mode="before")
    @classmethod
    def _requirements_from_mapping(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, dict):
            return list(value.items())
        return value

    @field_validator("activation_requirements")
    @classmethod
    def _normalize_requirements(cls, value: list[tuple[str, str]]) -> list[tuple[str, str]]:
        return [(label_term(key), label_term(val)) for key, val in value]

    @field_validator("state_triggers", mode="before")
    @classmethod
    def _triggers_from_mapping(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, dict):
            return [{"state": state, "keys": keys or []} for state, keys in value.items()]
        return value

    @field_validator("level_rules", mode="before")
    @classmethod
    def _level_rules_default(cls, value: Any) -> Any:
        return [] if value is None else value

    def requirements_mapping(self) -> dict[str, str]:
        return dict(self.activation_requirements)
