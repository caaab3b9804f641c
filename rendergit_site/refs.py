from __future__ import annotations

import dataclasses
import logging
from typing import List, Tuple

from .commits import CommitSnapshot, format_time_short, get_snapshot
from .errors import CommitLookupError, FailurePolicy, RefResolutionError
from .escape import xmlencode
from .site import BuildContext
from .vcs import RawRef

logger = logging.getLogger(__name__)

# (table id, heading, first column title)
SECTIONS = (
    ("branches", "Branches", "Branch"),
    ("tags", "Tags", "Tag"),
)


@dataclasses.dataclass(frozen=True)
class Reference:
    name: str               # shorthand, e.g. "main" or "v1.0"
    kind: str               # "branches" or "tags"
    target: str             # peeled commit id


def sort_key(ref: RawRef) -> Tuple[int, str]:
    """Branches before tags, then by shorthand name."""
    return (0 if ref.is_branch else 1, ref.shorthand)


def resolve_reference(ctx: BuildContext, ref: RawRef) -> Reference:
    """Follow one level of symbolic indirection and peel down to a commit."""
    target = ctx.repo.resolve_symbolic(ref)
    oid = ctx.repo.peel(target)
    return Reference(name=ref.shorthand, kind="branches" if ref.is_branch else "tags", target=oid)


def collect_references(ctx: BuildContext,
                       policy: FailurePolicy = FailurePolicy.ABORT) -> List[Tuple[Reference, CommitSnapshot]]:
    """Sorted branches and tags with the snapshot of the commit each one designates."""
    raw = sorted((r for r in ctx.repo.references() if r.is_branch or r.is_tag), key=sort_key)
    out: List[Tuple[Reference, CommitSnapshot]] = []
    for r in raw:
        try:
            ref = resolve_reference(ctx, r)
            try:
                ci = get_snapshot(ctx.repo, ref.target, with_diff=False)
            except CommitLookupError as exc:
                raise RefResolutionError(f"{r.path}: {exc}") from exc
        except RefResolutionError as exc:
            if policy is FailurePolicy.ABORT:
                raise
            if policy is FailurePolicy.STOP:
                logger.warning("refs stop at %s: %s", r.path, exc)
                break
            logger.warning("skipping reference %s: %s", r.path, exc)
            continue
        out.append((ref, ci))
    return out


def render_refs(ctx: BuildContext, policy: FailurePolicy = FailurePolicy.ABORT) -> str:
    """Branches and tags tables; a table only appears if it has at least one row."""
    refs = collect_references(ctx, policy)
    out: List[str] = []
    for table_id, heading, column in SECTIONS:
        rows = [(ref, ci) for ref, ci in refs if ref.kind == table_id]
        if not rows:
            continue
        out.append(f'<h2>{heading}</h2><table id="{table_id}"><thead>\n<tr><td>{column}</td>'
                   '<td>Age</td><td>Author</td>\n</tr>\n</thead><tbody>\n')
        for ref, ci in rows:
            out.append(render_ref_row(ref, ci))
        out.append("</tbody></table><br/>")
    logger.info("refs: %d references", len(refs))
    return "".join(out)


def render_ref_row(ref: Reference, ci: CommitSnapshot) -> str:
    when = format_time_short(ci.author) if ci.author else ""
    author = xmlencode(ci.author.name) if ci.author else ""
    return f"<tr><td>{xmlencode(ref.name)}</td><td>{when}</td><td>{author}</td></tr>\n"
