"""Label policy - rule set schema and sources."""

from .schemas import LevelRule, PolicyConfig, StateTrigger
from .source import (
    FilePolicySource,
    PolicyError,
    PolicySource,
    StaticPolicySource,
    parse_policy,
)

__all__ = [
    # Schemas
    "PolicyConfig",
    "StateTrigger",
    "LevelRule",
    # Sources
    "PolicySource",
    "FilePolicySource",
    "StaticPolicySource",
    "PolicyError",
    "parse_policy",
]
