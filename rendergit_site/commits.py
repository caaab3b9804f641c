from __future__ import annotations

import dataclasses
import datetime as dt
import logging
from typing import List, Optional

from .errors import CommitLookupError, ObjectLookupError
from .escape import to_text
from .patch import Diff, DiffStats
from .vcs import Repository

logger = logging.getLogger(__name__)


# ---- data ----------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class Signature:
    name: str
    email: str
    timestamp: int          # seconds since the epoch, UTC
    offset: int             # minutes east of UTC

    @property
    def local(self) -> dt.datetime:
        tz = dt.timezone(dt.timedelta(minutes=self.offset))
        return dt.datetime.fromtimestamp(self.timestamp, tz=tz)

    @property
    def utc(self) -> dt.datetime:
        return dt.datetime.fromtimestamp(self.timestamp, tz=dt.timezone.utc)


@dataclasses.dataclass(frozen=True)
class CommitSnapshot:
    oid: str
    parent_oid: str         # "" for a root commit
    author: Optional[Signature]
    summary: str
    message: str
    stats: DiffStats
    diff: Diff

    @property
    def is_root(self) -> bool:
        return not self.parent_oid


def summary_of(message: str) -> str:
    """First paragraph of a commit message folded onto one line."""
    lines: List[str] = []
    for line in message.lstrip().splitlines():
        if not line.strip():
            break
        lines.append(line.strip())
    return " ".join(lines)


def _first_parent(repo: Repository, commit):
    """First parent as ``(hex id, commit or None)``.

    A parent listed in the commit but missing from the object database (the
    boundary of a shallow clone) keeps its id and diffs like a root commit.
    """
    if not commit.parents:
        return "", None
    parent_oid = commit.parents[0].hexsha
    try:
        return parent_oid, repo.commit(parent_oid)
    except ObjectLookupError as exc:
        logger.warning("parent of %s unavailable, diffing against the empty tree: %s",
                       commit.hexsha, exc)
        return parent_oid, None


def get_snapshot(repo: Repository, oid: str, with_diff: bool = True) -> CommitSnapshot:
    """Look up commit ``oid`` with its first parent and the diff between their trees.

    With ``with_diff=False`` only the display fields are filled in and the
    diff is left empty. Raises CommitLookupError if the commit itself or
    one of the trees to diff is missing.
    """
    try:
        commit = repo.commit(oid)
        parent_oid, parent = _first_parent(repo, commit)
        if with_diff:
            diff = repo.diff_trees(parent.tree.hexsha if parent else None, commit.tree.hexsha)
        else:
            diff = Diff(deltas=[])
    except ObjectLookupError as exc:
        raise CommitLookupError(f"cannot build commit {oid}: {exc}") from exc

    author = Signature(
        name=to_text(commit.author.name or ""),
        email=to_text(commit.author.email or ""),
        timestamp=commit.authored_date,
        # GitPython stores the offset in seconds *west* of UTC
        offset=-commit.author_tz_offset // 60,
    )
    message = to_text(commit.message)
    logger.debug("snapshot %s (%d deltas)", commit.hexsha, len(diff.deltas))
    return CommitSnapshot(
        oid=commit.hexsha,
        parent_oid=parent_oid,
        author=author,
        summary=summary_of(message),
        message=message,
        stats=diff.stats,
        diff=diff,
    )


# ---- time formats ----------------------------------------------------------------

def _offset(when: dt.datetime) -> str:
    minutes = int(when.utcoffset().total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{sign}{minutes // 60:02d}{minutes % 60:02d}"


def format_time(sig: Signature) -> str:
    """Long form used in commit headers: ``Mon Oct  5 10:00:00 2026 +0200``."""
    when = sig.local
    return f"{when:%a %b} {when.day:2d} {when:%H:%M:%S %Y} {_offset(when)}"


def format_time_short(sig: Signature) -> str:
    return f"{sig.local:%Y-%m-%d %H:%M}"


def format_time_z(sig: Signature) -> str:
    return f"{sig.utc:%Y-%m-%dT%H:%M:%SZ}"


# ---- diffstat --------------------------------------------------------------------

def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def format_shortstat(stats: DiffStats) -> str:
    parts = [f"{_plural(stats.files_changed, 'file')} changed"]
    if stats.insertions:
        parts.append(f"{_plural(stats.insertions, 'insertion')}(+)")
    if stats.deletions:
        parts.append(f"{_plural(stats.deletions, 'deletion')}(-)")
    return " " + ", ".join(parts)


def format_diffstat(diff: Diff, width: int) -> str:
    """Per-file stat lines scaled to ``width`` columns, then the summary line."""
    if not diff.deltas:
        return ""
    rows = []
    for delta in diff.deltas:
        path = to_text(delta.new_path or delta.old_path)
        if delta.binary:
            rows.append((path, "Bin", 0, 0))
        else:
            ins, dels = delta.insertions, delta.deletions
            rows.append((path, str(ins + dels), ins, dels))

    count_width = max(len(r[1]) for r in rows)
    max_changes = max(r[2] + r[3] for r in rows)
    name_width = max(len(r[0]) for r in rows)
    # " " name " | " count " " graph
    name_width = min(name_width, max(width - count_width - 16, 10))
    graph_width = max(width - name_width - count_width - 5, 1)

    lines = []
    for path, count, ins, dels in rows:
        if len(path) > name_width:
            path = "..." + path[-(name_width - 3):]
        total = ins + dels
        if max_changes > graph_width and total:
            scaled = max(1, round(total * graph_width / max_changes))
            add = round(ins * scaled / total)
            if ins and not add:
                add = 1
            if dels and add == scaled and scaled > 1:
                add = scaled - 1
            ins, dels = add, scaled - add
        graph = "+" * ins + "-" * dels
        lines.append(f" {path:<{name_width}} | {count:>{count_width}} {graph}".rstrip())
    lines.append(format_shortstat(diff.stats))
    return "\n".join(lines) + "\n"
