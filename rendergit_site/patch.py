"""
Parse the unified patch text produced by ``git diff-tree -p`` into deltas,
hunks and lines.

Everything stays ``bytes`` until it is rendered: paths and line content
come straight from the repository and are not guaranteed to be UTF-8.
"""

from __future__ import annotations

import dataclasses
import re
from typing import List, Optional, Tuple

HUNK_RE = re.compile(rb"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

DEV_NULL = b"/dev/null"

_C_ESCAPES = {
    ord("a"): 7, ord("b"): 8, ord("t"): 9, ord("n"): 10,
    ord("v"): 11, ord("f"): 12, ord("r"): 13,
    ord('"'): ord('"'), ord("\\"): ord("\\"),
}


@dataclasses.dataclass
class DiffLine:
    origin: str                  # "+", "-", " " or "\\" for "\ No newline at end of file"
    content: bytes               # without the origin character, newline included
    old_lineno: Optional[int]
    new_lineno: Optional[int]


@dataclasses.dataclass
class DiffHunk:
    header: bytes
    lines: List[DiffLine] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class DiffDelta:
    old_path: bytes
    new_path: bytes
    binary: bool = False
    hunks: List[DiffHunk] = dataclasses.field(default_factory=list)

    @property
    def insertions(self) -> int:
        return sum(1 for h in self.hunks for ln in h.lines if ln.origin == "+")

    @property
    def deletions(self) -> int:
        return sum(1 for h in self.hunks for ln in h.lines if ln.origin == "-")


@dataclasses.dataclass(frozen=True)
class DiffStats:
    files_changed: int
    insertions: int
    deletions: int


@dataclasses.dataclass
class Diff:
    deltas: List[DiffDelta]

    @property
    def stats(self) -> DiffStats:
        return DiffStats(
            files_changed=len(self.deltas),
            insertions=sum(d.insertions for d in self.deltas),
            deletions=sum(d.deletions for d in self.deltas),
        )


# ---- path quoting --------------------------------------------------------------

def _parse_quoted(buf: bytes, pos: int) -> Tuple[bytes, int]:
    """Decode a C-style quoted name starting at ``buf[pos] == '"'``.

    Returns the name and the index just past the closing quote.
    """
    out = bytearray()
    i = pos + 1
    n = len(buf)
    while i < n:
        c = buf[i]
        if c == ord('"'):
            return bytes(out), i + 1
        if c == ord("\\") and i + 1 < n:
            nxt = buf[i + 1]
            if nxt in _C_ESCAPES:
                out.append(_C_ESCAPES[nxt])
                i += 2
                continue
            octal = buf[i + 1:i + 4]
            if len(octal) == 3 and all(0x30 <= o <= 0x37 for o in octal):
                out.append(int(octal, 8) & 0xFF)
                i += 4
                continue
        out.append(c)
        i += 1
    return bytes(out), n


def _strip_prefix(name: bytes) -> bytes:
    if name.startswith((b"a/", b"b/")):
        return name[2:]
    return name


def parse_side(raw: bytes) -> Optional[bytes]:
    """Path of a ``---``/``+++`` line body, ``None`` for /dev/null."""
    raw = raw.rstrip(b"\n")
    if raw.startswith(b'"'):
        name, _ = _parse_quoted(raw, 0)
    else:
        # git appends a tab when the name contains a space
        name = raw[:-1] if raw.endswith(b"\t") else raw
    if name == DEV_NULL:
        return None
    return _strip_prefix(name)


def parse_git_header(raw: bytes) -> Tuple[bytes, bytes]:
    """Old and new path from the part of a ``diff --git`` line after the command."""
    raw = raw.rstrip(b"\n")
    if raw.startswith(b'"'):
        old, end = _parse_quoted(raw, 0)
        rest = raw[end:].lstrip(b" ")
        new = _parse_quoted(rest, 0)[0] if rest.startswith(b'"') else rest
        return _strip_prefix(old), _strip_prefix(new)
    if raw.endswith(b'"'):
        start = raw.rfind(b' "')
        new, _ = _parse_quoted(raw, start + 1)
        return _strip_prefix(raw[:start]), _strip_prefix(new)
    # Renames are disabled, so both sides name the same path: "a/P b/P".
    half = (len(raw) - 1) // 2
    old, new = raw[:half], raw[half + 1:]
    if _strip_prefix(old) != _strip_prefix(new):
        old, _, new = raw.partition(b" b/")
        new = b"b/" + new
    return _strip_prefix(old), _strip_prefix(new)


# ---- patch parsing --------------------------------------------------------------

def split_lines(data: bytes) -> List[bytes]:
    """Split on ``\\n`` only, keeping the terminators (``\\r`` is content)."""
    lines = data.split(b"\n")
    out = [ln + b"\n" for ln in lines[:-1]]
    if lines[-1]:
        out.append(lines[-1])
    return out


def parse_patch(data: bytes) -> Diff:
    deltas: List[DiffDelta] = []
    delta: Optional[DiffDelta] = None
    hunk: Optional[DiffHunk] = None
    old_no = new_no = old_left = new_left = 0

    for raw in split_lines(data):
        if hunk is not None and (old_left > 0 or new_left > 0):
            origin = raw[:1]
            if origin == b"+":
                hunk.lines.append(DiffLine("+", raw[1:], None, new_no))
                new_no += 1
                new_left -= 1
                continue
            if origin == b"-":
                hunk.lines.append(DiffLine("-", raw[1:], old_no, None))
                old_no += 1
                old_left -= 1
                continue
            if origin == b" " or raw == b"\n":
                hunk.lines.append(DiffLine(" ", raw[1:] if origin == b" " else raw, old_no, new_no))
                old_no += 1
                new_no += 1
                old_left -= 1
                new_left -= 1
                continue
        if raw.startswith(b"\\") and hunk is not None:
            hunk.lines.append(DiffLine("\\", raw, None, None))
            continue

        if raw.startswith(b"diff --git "):
            old, new = parse_git_header(raw[len(b"diff --git "):])
            delta = DiffDelta(old_path=old, new_path=new)
            deltas.append(delta)
            hunk = None
            continue
        if delta is None:
            continue

        m = HUNK_RE.match(raw)
        if m:
            old_no = int(m.group(1))
            old_left = int(m.group(2)) if m.group(2) is not None else 1
            new_no = int(m.group(3))
            new_left = int(m.group(4)) if m.group(4) is not None else 1
            hunk = DiffHunk(header=raw)
            delta.hunks.append(hunk)
            continue
        if hunk is not None:
            # trailing garbage after a complete hunk
            continue

        if raw.startswith(b"--- "):
            path = parse_side(raw[4:])
            if path is not None:
                delta.old_path = path
        elif raw.startswith(b"+++ "):
            path = parse_side(raw[4:])
            if path is not None:
                delta.new_path = path
        elif raw.startswith((b"Binary files ", b"GIT binary patch")):
            delta.binary = True

    return Diff(deltas=deltas)
