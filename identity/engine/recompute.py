"""Recomputation of account state and level after a committed label mutation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

from identity.events.publisher import DOCUMENT_REJECTED, DOCUMENT_VERIFIED, EventPublisher
from identity.policy.source import PolicyError, PolicySource
from .projection import PRIVATE_SCOPE
from .resolver import resolve_level, resolve_state

logger = logging.getLogger(__name__)

DOCUMENT_KEY = "document"
DOCUMENT_EVENTS = {
    "verified": DOCUMENT_VERIFIED,
    "rejected": DOCUMENT_REJECTED,
}


class LabelMutation(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DESTROYED = "destroyed"


class AccountFacts(Protocol):
    """What the recomputer needs from an account."""

    uid: str
    state: str
    level: int

    def current_private_facts(self) -> dict[str, str]: ...

    def set_state(self, state: str) -> None: ...

    def set_level(self, level: int) -> None: ...

    def as_payload(self) -> dict[str, Any]: ...


class MutatedLabel(Protocol):
    id: Any
    key: str
    value: str
    scope: str


@dataclass
class RecomputeResult:
    """Outcome of one recomputation."""

    mutation: LabelMutation
    state: str
    level: int
    state_changed: bool = False
    level_changed: bool = False
    event: str | None = None

    @property
    def changed(self) -> bool:
        return self.state_changed or self.level_changed


class LabelRecomputer:
    """Post-commit hook that re-derives state and level from private labels.

    The caller invokes ``label_committed`` only once the label mutation is
    durably committed. A policy failure propagates and leaves the account
    untouched; the committed label is not affected.
    """

    def __init__(self, policy_source: PolicySource, publisher: EventPublisher):
        self.policy_source = policy_source
        self.publisher = publisher

    @staticmethod
    def should_recompute(label: MutatedLabel, previous_scope: str | None = None) -> bool:
        """Private labels, and labels moving into or out of private scope."""
        return label.scope == PRIVATE_SCOPE or previous_scope == PRIVATE_SCOPE

    def label_committed(
        self,
        account: AccountFacts,
        label: MutatedLabel,
        mutation: LabelMutation,
        previous_scope: str | None = None,
        persist: Callable[[AccountFacts], None] | None = None,
    ) -> RecomputeResult | None:
        """Recompute after ``label`` was created, updated or destroyed.

        Args:
            account: The label's owner, reflecting the committed label set
            label: The mutated label (for destroys, its last values)
            mutation: What happened to the label
            previous_scope: Scope before an update, if it changed
            persist: Called once with the account when state or level changed

        Returns:
            RecomputeResult, or None if the mutation does not touch private scope.

        Raises:
            PolicyError: If the policy source is unavailable or malformed.
        """
        if not self.should_recompute(label, previous_scope):
            logger.debug("label %s %s in %s scope, skipping recompute", label.key, mutation.value, label.scope)
            return None

        try:
            policy = self.policy_source.get()
        except PolicyError:
            logger.error("policy unavailable, account %s not recomputed", account.uid)
            raise

        facts = account.current_private_facts()
        state = resolve_state(facts, policy)
        level = resolve_level(facts, policy)

        result = RecomputeResult(mutation=mutation, state=state, level=level)
        if state != account.state:
            logger.info("account %s state %s -> %s", account.uid, account.state, state)
            account.set_state(state)
            result.state_changed = True
        if level != account.level:
            logger.info("account %s level %s -> %s", account.uid, account.level, level)
            account.set_level(level)
            result.level_changed = True

        if result.changed and persist is not None:
            persist(account)

        result.event = self._notify_document_review(account, label)
        return result

    def _notify_document_review(self, account: AccountFacts, label: MutatedLabel) -> str | None:
        if label.key != DOCUMENT_KEY:
            return None
        event_name = DOCUMENT_EVENTS.get(label.value)
        if event_name is None:
            return None

        payload = {
            "record": {
                "id": label.id,
                "user": account.as_payload(),
                "key": label.key,
                "value": label.value,
            }
        }
        try:
            self.publisher.notify(event_name, payload)
        except Exception:
            logger.exception("failed to publish %s for account %s", event_name, account.uid)
            return None
        return event_name
