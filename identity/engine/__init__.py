"""State and level engine - fact projection, resolvers, recomputation."""

from .projection import PRIVATE_SCOPE, labels_include, private_facts
from .recompute import (
    DOCUMENT_KEY,
    LabelMutation,
    LabelRecomputer,
    RecomputeResult,
)
from .resolver import (
    ACTIVE_STATE,
    DEFAULT_LEVEL,
    DEFAULT_STATE,
    MatchRule,
    level_rules,
    resolve,
    resolve_level,
    resolve_state,
    state_rules,
)

__all__ = [
    # Projection
    "PRIVATE_SCOPE",
    "private_facts",
    "labels_include",
    # Resolvers
    "ACTIVE_STATE",
    "DEFAULT_STATE",
    "DEFAULT_LEVEL",
    "MatchRule",
    "resolve",
    "resolve_state",
    "resolve_level",
    "state_rules",
    "level_rules",
    # Recomputation
    "DOCUMENT_KEY",
    "LabelMutation",
    "LabelRecomputer",
    "RecomputeResult",
]
