"""Value objects for account fields.

Immutable, validated domain primitives. All validation occurs at construction.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_LABEL_INVALID_CHARS = re.compile(r"[^a-z0-9_-]+")


@dataclass(frozen=True, slots=True)
class Email:
    """Validated, lowercased email address.

    Attributes:
        value: The validated email string.

    Raises:
        ValueError: If email is empty, invalid format, or exceeds 255 chars.
    """

    value: str

    def __post_init__(self) -> None:
        normalized = self.value.strip().lower()
        if not normalized:
            msg = "Email cannot be empty"
            raise ValueError(msg)
        if len(normalized) > 255:
            msg = f"Email too long: {len(normalized)} chars (max 255)"
            raise ValueError(msg)
        if not _EMAIL_PATTERN.match(normalized):
            msg = f"Invalid email format: '{self.value}'"
            raise ValueError(msg)
        object.__setattr__(self, "value", normalized)


@dataclass(frozen=True, slots=True)
class StorageLabel:
    """Filesystem-safe storage label.

    Lowercased; characters outside ``[a-z0-9_-]`` are dropped so the label
    can be used directly as a folder name. Path separators and dots never
    survive normalisation.

    Raises:
        ValueError: If nothing remains after normalisation, or the label
            exceeds 63 characters.
    """

    value: str

    def __post_init__(self) -> None:
        normalized = _LABEL_INVALID_CHARS.sub("", self.value.strip().lower())
        if not normalized:
            msg = f"Storage label has no usable characters: '{self.value}'"
            raise ValueError(msg)
        if len(normalized) > 63:
            msg = f"Storage label too long: {len(normalized)} chars (max 63)"
            raise ValueError(msg)
        object.__setattr__(self, "value", normalized)
