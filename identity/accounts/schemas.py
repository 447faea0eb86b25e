"""Pydantic schemas for the account management API."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .validation import LabelScope


class AccountCreate(BaseModel):
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+$", description="Account email")
    role: str = Field(default="member", min_length=1)


class LabelCreate(BaseModel):
    key: str = Field(..., description="Label key, normalized to lower case")
    value: str = Field(..., description="Label value, normalized to lower case")
    scope: LabelScope = LabelScope.PUBLIC


class LabelUpdate(BaseModel):
    value: Optional[str] = None
    scope: Optional[LabelScope] = Field(default=None, description="New scope for the label")


class LabelRead(BaseModel):
    key: str
    value: str
    scope: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AccountRead(BaseModel):
    uid: str
    email: str
    role: str
    level: int
    state: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AccountWithLabels(AccountRead):
    labels: list[LabelRead] = Field(default_factory=list)
