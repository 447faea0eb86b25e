"""Fact projection: the private-scope key -> value view of an account's labels."""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol

PRIVATE_SCOPE = "private"


class LabelLike(Protocol):
    key: str
    value: str
    scope: str


def private_facts(labels: Iterable[LabelLike]) -> dict[str, str]:
    """Map key -> value for every private label.

    Keys are unique per scope, so the mapping is unambiguous. Returns an
    empty dict when there are no private labels.
    """
    return {label.key: label.value for label in labels if label.scope == PRIVATE_SCOPE}


def labels_include(facts: Mapping[str, str], candidate: Mapping[str, str]) -> bool:
    """True if every (key, value) in ``candidate`` is present in ``facts`` exactly."""
    return all(key in facts and facts[key] == value for key, value in candidate.items())
