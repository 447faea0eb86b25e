"""Label term format shared by label validation and policy loading."""

import re
from typing import Any

KEY_FORMAT = re.compile(r"^[a-z0-9_-]+$")


def normalize_field(value: Any) -> str:
    """Lower-case a key or value and squish its whitespace.

    ``"  Email  "`` becomes ``"email"``; ``None`` becomes ``""``.
    """
    text = "" if value is None else str(value)
    return " ".join(text.lower().split())


def is_label_term(value: str) -> bool:
    return bool(KEY_FORMAT.match(value))
