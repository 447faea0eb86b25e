"""Label field normalization and validation."""

from __future__ import annotations

from enum import Enum

from identity.core.labels import KEY_FORMAT, normalize_field

MIN_LENGTH = 3
MAX_LENGTH = 255


class LabelScope(str, Enum):
    """Visibility of a label."""

    PUBLIC = "public"
    PRIVATE = "private"


class LabelValidationError(ValueError):
    """Raised when a label is malformed or collides with an existing one.

    ``errors`` maps each offending field to its messages, e.g.
    ``{"key": ["is too short (minimum is 3 characters)"]}``.
    """

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        summary = "; ".join(
            f"{field} {message}" for field, messages in errors.items() for message in messages
        )
        super().__init__(f"Invalid label: {summary}")


def field_errors(value: str) -> list[str]:
    """Return the format/length errors for a normalized key or value."""
    if not value:
        return ["can't be blank"]

    errors = []
    if len(value) < MIN_LENGTH:
        errors.append(f"is too short (minimum is {MIN_LENGTH} characters)")
    elif len(value) > MAX_LENGTH:
        errors.append(f"is too long (maximum is {MAX_LENGTH} characters)")
    if not KEY_FORMAT.match(value):
        errors.append("is invalid")
    return errors


def scope_errors(scope: str | None) -> list[str]:
    if not scope:
        return ["can't be blank"]
    if scope not in {s.value for s in LabelScope}:
        return ["is not included in the list"]
    return []


def validate_fields(key: str, value: str, scope: str | None) -> dict[str, list[str]]:
    """Collect errors for already-normalized label fields."""
    errors: dict[str, list[str]] = {}
    for name, messages in (
        ("key", field_errors(key)),
        ("value", field_errors(value)),
        ("scope", scope_errors(scope)),
    ):
        if messages:
            errors[name] = messages
    return errors
