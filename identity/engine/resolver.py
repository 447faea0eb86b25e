"""State and level resolution over a fact projection.

Both resolvers share one algorithm: scan an ordered list of match rules and
return the target of the first rule the facts satisfy, or a default. A rule
matches through its ``requires`` mapping (ALL policy: every key carries its
exact value) or its ``any_of`` keys (ANY policy: one key present with any
value). Empty sections never match.

Resolution looks only at the current facts, never at the previous state, so
re-running it on unchanged facts always yields the same answer.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from pydantic import BaseModel, Field

from identity.policy.schemas import PolicyConfig
from .projection import labels_include

ACTIVE_STATE = "active"
DEFAULT_STATE = "pending"
DEFAULT_LEVEL = 0


class MatchRule(BaseModel):
    """A single target reachable through an ALL and/or ANY condition."""

    target: str | int
    requires: dict[str, str] = Field(default_factory=dict, description="ALL policy")
    any_of: list[str] = Field(default_factory=list, description="ANY policy")

    model_config = {"frozen": True}

    def matches(self, facts: Mapping[str, str]) -> bool:
        if self.requires and labels_include(facts, self.requires):
            return True
        return any(key in facts for key in self.any_of)


def resolve(facts: Mapping[str, str], rules: Sequence[MatchRule], default: str | int) -> str | int:
    """Return the target of the first matching rule, in declaration order."""
    for rule in rules:
        if rule.matches(facts):
            return rule.target
    return default


def state_rules(policy: PolicyConfig) -> list[MatchRule]:
    """Activation requirements first, then state triggers in declaration order."""
    rules = [MatchRule(target=ACTIVE_STATE, requires=policy.requirements_mapping())]
    rules.extend(
        MatchRule(target=trigger.state, any_of=trigger.keys) for trigger in policy.state_triggers
    )
    return rules


def level_rules(policy: PolicyConfig) -> list[MatchRule]:
    return [
        MatchRule(target=rule.level, requires=rule.requires, any_of=rule.any_of)
        for rule in policy.level_rules
    ]


def resolve_state(facts: Mapping[str, str], policy: PolicyConfig) -> str:
    return str(resolve(facts, state_rules(policy), DEFAULT_STATE))


def resolve_level(facts: Mapping[str, str], policy: PolicyConfig) -> int:
    return int(resolve(facts, level_rules(policy), DEFAULT_LEVEL))
