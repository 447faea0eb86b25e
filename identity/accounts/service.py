"""Business logic for accounts and labels.

The label service is the persistence collaborator of the state engine: it
validates and commits each label mutation, then hands the committed label to
the recomputer together with its owning account.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from identity.core.config import get_settings
from identity.engine.recompute import LabelMutation, LabelRecomputer, RecomputeResult
from .models import Account, Label, generate_uid
from .validation import LabelScope, LabelValidationError, normalize_field

logger = logging.getLogger(__name__)


class AccountError(Exception):
    """Raised for account lookups and conflicts at the service boundary."""

    pass


@dataclass(frozen=True)
class LabelSnapshot:
    """Field values of a label captured before it is destroyed."""

    id: Any
    key: str
    value: str
    scope: str


class AccountService:
    """Service for account CRUD operations."""

    def __init__(self, session: Session, uid_prefix: str | None = None):
        self.session = session
        self.uid_prefix = uid_prefix or get_settings().uid_prefix

    def create_account(self, email: str, role: str = "member") -> Account:
        email = email.strip().lower()
        if self.get_account_by_email(email):
            raise AccountError(f"Account with email '{email}' already exists")

        account = Account(uid=self._unique_uid(), email=email, role=role)
        self.session.add(account)
        self.session.commit()
        self.session.refresh(account)
        logger.info("created account %s", account.uid)
        return account

    def get_account(self, uid: str) -> Optional[Account]:
        statement = select(Account).where(Account.uid == uid.upper())
        return self.session.exec(statement).first()

    def get_account_by_email(self, email: str) -> Optional[Account]:
        statement = select(Account).where(Account.email == email.strip().lower())
        return self.session.exec(statement).first()

    def list_accounts(self, skip: int = 0, limit: int = 100) -> list[Account]:
        statement = select(Account).order_by(Account.id).offset(skip).limit(limit)
        return list(self.session.exec(statement).all())

    def _unique_uid(self) -> str:
        while True:
            uid = generate_uid(self.uid_prefix)
            if not self.get_account(uid):
                return uid


class LabelService:
    """Service for label mutations and the recomputation that follows them."""

    def __init__(self, session: Session, recomputer: LabelRecomputer):
        self.session = session
        self.recomputer = recomputer

    def list_labels(self, account: Account, scope: str | None = None) -> list[Label]:
        statement = select(Label).where(Label.account_id == account.id)
        if scope:
            statement = statement.where(Label.scope == scope)
        return list(self.session.exec(statement.order_by(Label.id)).all())

    def get_label(self, account: Account, key: str, scope: str = LabelScope.PUBLIC.value) -> Optional[Label]:
        statement = select(Label).where(
            Label.account_id == account.id,
            Label.key == normalize_field(key),
            Label.scope == scope,
        )
        return self.session.exec(statement).first()

    def create_label(
        self, account: Account, key: str, value: str, scope: str = LabelScope.PUBLIC.value
    ) -> Label:
        """Validate and commit a new label, then recompute the account.

        Raises:
            LabelValidationError: If the label is malformed or already exists.
            PolicyError: If recomputation fails; the label stays committed.
        """
        label = Label(key=key, value=value, scope=scope, account_id=account.id)
        label.validate_label()
        self._check_unique(label)

        self.session.add(label)
        self._commit()
        self.session.refresh(label)

        self._recompute(label.account_id, label, LabelMutation.CREATED)
        return label

    def update_label(self, label: Label, value: str | None = None, scope: str | None = None) -> Label:
        """Change a label's value and/or scope, then recompute the account.

        A scope change out of ``private`` still recomputes, so the account can
        fall back from a state the label used to grant.
        """
        previous_scope = label.scope
        if value is not None:
            label.value = value
        if scope is not None:
            label.scope = scope
        try:
            label.validate_label()
            self._check_unique(label)
        except LabelValidationError:
            self.session.refresh(label)
            raise

        label.updated_at = datetime.now(timezone.utc)
        self.session.add(label)
        self._commit()
        self.session.refresh(label)

        self._recompute(
            label.account_id,
            label,
            LabelMutation.UPDATED,
            previous_scope=previous_scope if previous_scope != label.scope else None,
        )
        return label

    def delete_label(self, label: Label) -> None:
        snapshot = LabelSnapshot(id=label.id, key=label.key, value=label.value, scope=label.scope)
        account_id = label.account_id

        self.session.delete(label)
        self._commit()

        self._recompute(account_id, snapshot, LabelMutation.DESTROYED)

    def _check_unique(self, label: Label) -> None:
        statement = select(Label).where(
            Label.account_id == label.account_id,
            Label.key == label.key,
            Label.scope == label.scope,
        )
        if label.id is not None:
            statement = statement.where(Label.id != label.id)
        with self.session.no_autoflush:
            taken = self.session.exec(statement).first()
        if taken:
            raise LabelValidationError({"key": ["has already been taken"]})

    def _commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise LabelValidationError({"key": ["has already been taken"]}) from e

    def _recompute(
        self,
        account_id: int,
        label: Label | LabelSnapshot,
        mutation: LabelMutation,
        previous_scope: str | None = None,
    ) -> RecomputeResult | None:
        if not self.recomputer.should_recompute(label, previous_scope):
            return None

        # Serialize concurrent recomputations of the same account; the row lock
        # is released on every exit path below.
        statement = select(Account).where(Account.id == account_id).with_for_update()
        account = self.session.exec(statement).one()

        try:
            result = self.recomputer.label_committed(
                account,
                label,
                mutation,
                previous_scope=previous_scope,
                persist=self._persist_account,
            )
        except Exception:
            self.session.rollback()
            raise

        if self.session.in_transaction():
            self.session.commit()
        return result

    def _persist_account(self, account: Account) -> None:
        self.session.add(account)
        self.session.commit()
        self.session.refresh(account)
