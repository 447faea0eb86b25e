"""Policy sources supply the current rule set on every recomputation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Protocol

import yaml
from pydantic import ValidationError

from .schemas import PolicyConfig


class PolicyError(Exception):
    """Raised when the policy cannot be read or has the wrong shape."""

    pass


class PolicySource(Protocol):
    def get(self) -> PolicyConfig: ...


def parse_policy(data: Any) -> PolicyConfig:
    """Validate a raw policy mapping into a PolicyConfig.

    ``None`` (an empty document) yields an empty policy.

    Raises:
        PolicyError: If the data is not a mapping or a section is malformed.
    """
    if data is None:
        return PolicyConfig()
    if not isinstance(data, Mapping):
        raise PolicyError(f"Policy must be a mapping, got {type(data).__name__}")
    try:
        return PolicyConfig.model_validate(dict(data))
    except ValidationError as e:
        raise PolicyError(f"Malformed policy: {e}") from e


class FilePolicySource:
    """Reads the policy from a YAML file.

    The file is re-read on every ``get()``, so edits take effect on the next
    label mutation without a restart.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def get(self) -> PolicyConfig:
        if not self.path.exists():
            raise PolicyError(f"Policy file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise PolicyError(f"Failed to read policy file {self.path}: {e}") from e

        return parse_policy(content)


class StaticPolicySource:
    """Serves a policy held in memory, validated on every ``get()``."""

    def __init__(self, data: Mapping[str, Any] | None = None):
        self.data: dict[str, Any] = dict(data or {})

    def update(self, data: Mapping[str, Any]) -> None:
        self.data = dict(data)

    def get(self) -> PolicyConfig:
        return parse_policy(self.data)
