"""
Markup escaping for untrusted repository content.

Repository data is arbitrary bytes. It is decoded with ``surrogateescape``
so that bytes which are not valid UTF-8 survive a later
``encode("utf-8", "surrogateescape")`` unchanged when the page is written.
"""

from __future__ import annotations

import dataclasses
from typing import Optional, Union

ENTITIES = {
    "<": "&lt;",
    ">": "&gt;",
    "'": "&apos;",
    "&": "&amp;",
    '"': "&quot;",
}

_TABLE = str.maketrans(ENTITIES)

Text = Union[str, bytes]


def to_text(data: Text) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="surrogateescape")
    return data


def clip(data: Text, length: Optional[int] = None) -> Text:
    """Cut ``data`` at the first NUL or after ``length`` units, whichever is first."""
    nul = data.find(b"\0" if isinstance(data, bytes) else "\0")
    if nul != -1:
        data = data[:nul]
    if length is not None:
        data = data[:max(length, 0)]
    return data


def xmlencode(data: Text, length: Optional[int] = None) -> str:
    """Escape the five reserved markup characters, everything else passes through.

    ``length`` bounds the input (bytes for ``bytes``, characters for ``str``).
    """
    if not data:
        return ""
    return to_text(clip(data, length)).translate(_TABLE)


@dataclasses.dataclass(frozen=True)
class BoundedText:
    """A text field with an explicit maximum length."""

    value: str
    limit: int

    def __post_init__(self) -> None:
        if len(self.value) > self.limit:
            raise ValueError(f"text of length {len(self.value)} exceeds limit {self.limit}")

    @classmethod
    def clip(cls, text: Text, limit: int) -> "BoundedText":
        return cls(to_text(clip(text, limit)), limit)

    @classmethod
    def empty(cls, limit: int) -> "BoundedText":
        return cls("", limit)

    def __bool__(self) -> bool:
        return bool(self.value)

    def __str__(self) -> str:
        return self.value
