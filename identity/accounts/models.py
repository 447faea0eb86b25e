"""SQLModel table definitions for accounts and their labels."""

import secrets
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from identity.engine.projection import labels_include, private_facts
from identity.engine.resolver import DEFAULT_LEVEL, DEFAULT_STATE
from .validation import (
    LabelScope,
    LabelValidationError,
    normalize_field,
    validate_fields,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_uid(prefix: str = "ID") -> str:
    """Generate an account UID such as ``ID4F2A9C01B7``."""
    return prefix.upper() + secrets.token_hex(5).upper()


class Account(SQLModel, table=True):
    """An identity whose state and level are derived from its private labels."""

    __tablename__ = "accounts"

    id: Optional[int] = Field(default=None, primary_key=True)
    uid: str = Field(..., unique=True, index=True, description="Public account identifier")
    email: str = Field(..., unique=True, index=True, description="Account email")
    role: str = Field(default="member", description="Account role")
    state: str = Field(default=DEFAULT_STATE, description="Lifecycle state")
    level: int = Field(default=DEFAULT_LEVEL, description="Trust level")
    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=utcnow, description="Last update timestamp")

    labels: list["Label"] = Relationship(
        back_populates="account",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "lazy": "selectin"},
    )

    def current_private_facts(self) -> dict[str, str]:
        """Private-scope key -> value view of the current labels."""
        return private_facts(self.labels)

    def labels_include(self, candidate: dict[str, str]) -> bool:
        return labels_include(self.current_private_facts(), candidate)

    def set_state(self, state: str) -> None:
        self.state = state
        self.updated_at = utcnow()

    def set_level(self, level: int) -> None:
        self.level = level
        self.updated_at = utcnow()

    def as_payload(self) -> dict[str, Any]:
        """Public identity fields carried by outbound events."""
        return {
            "uid": self.uid,
            "email": self.email,
            "role": self.role,
            "level": self.level,
            "state": self.state,
        }


class Label(SQLModel, table=True):
    """A key/value fact attached to an account."""

    __tablename__ = "labels"
    __table_args__ = (
        UniqueConstraint("account_id", "key", "scope", name="uq_labels_account_key_scope"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(..., max_length=255, description="Normalized label key")
    value: str = Field(..., max_length=255, description="Normalized label value")
    scope: str = Field(default=LabelScope.PUBLIC.value, max_length=255, description="public or private")
    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=utcnow, description="Last update timestamp")

    account_id: Optional[int] = Field(
        default=None, foreign_key="accounts.id", index=True, ondelete="CASCADE"
    )
    account: Optional["Account"] = Relationship(back_populates="labels")

    def normalize_fields(self) -> None:
        self.key = normalize_field(self.key)
        self.value = normalize_field(self.value)
        if isinstance(self.scope, LabelScope):
            self.scope = self.scope.value

    def validate_label(self) -> None:
        """Normalize, then raise LabelValidationError if any field is malformed."""
        self.normalize_fields()
        errors = validate_fields(self.key, self.value, self.scope)
        if self.account_id is None and self.account is None:
            errors["account"] = ["can't be blank"]
        if errors:
            raise LabelValidationError(errors)

    @property
    def is_private(self) -> bool:
        return self.scope == LabelScope.PRIVATE.value


Account.model_rebuild()
Label.model_rebuild()
