from __future__ import annotations

import logging
from typing import List

from .commits import CommitSnapshot, format_time, format_time_z, get_snapshot
from .errors import CommitLookupError, FailurePolicy, ObjectLookupError
from .escape import xmlencode
from .site import BuildContext

logger = logging.getLogger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"


def render_entry(ci: CommitSnapshot) -> str:
    """One Atom ``<entry>``; the content mirrors the commit page header as plain text."""
    out: List[str] = ["<entry>\n", f"<id>{ci.oid}</id>\n"]
    if ci.author:
        out.append(f"<updated>{format_time_z(ci.author)}</updated>\n")
    if ci.summary:
        out.append(f'<title type="text">{xmlencode(ci.summary)}</title>\n')

    out.append(f'<content type="text">commit {ci.oid}\n')
    if ci.parent_oid:
        out.append(f"parent {ci.parent_oid}\n")
    if ci.author:
        out.append(f"Author: {xmlencode(ci.author.name)} &lt;{xmlencode(ci.author.email)}&gt;\n")
        out.append(f"Date:   {format_time(ci.author)}\n")
    if ci.message:
        out.append(f"\n{xmlencode(ci.message)}")
    out.append("\n</content>\n")
    if ci.author:
        out.append(f"<author><name>{xmlencode(ci.author.name)}</name>\n"
                   f"<email>{xmlencode(ci.author.email)}</email>\n</author>\n")
    out.append("</entry>\n")
    return "".join(out)


def render_feed(ctx: BuildContext, start: str = "HEAD",
                policy: FailurePolicy = FailurePolicy.STOP) -> str:
    """Atom document for the newest ``feed_max`` first-parent commits of ``start``.

    Only the feed itself is produced: no commit pages are written here.
    """
    out: List[str] = [
        '<?xml version="1.0" encoding="UTF-8"?>\n',
        f'<feed xmlns="{ATOM_NS}">\n',
        f"<title>{xmlencode(ctx.meta.stripped_name)}, branch {xmlencode(start)}</title>\n",
        f"<subtitle>{xmlencode(str(ctx.meta.description))}</subtitle>\n",
    ]
    count = 0
    try:
        for oid in ctx.repo.walk(start, max_count=ctx.config.feed_max):
            try:
                ci = get_snapshot(ctx.repo, oid)
            except CommitLookupError as exc:
                if policy is FailurePolicy.ABORT:
                    raise
                if policy is FailurePolicy.STOP:
                    logger.warning("feed stops at %s: %s", oid, exc)
                    break
                logger.warning("skipping commit %s: %s", oid, exc)
                continue
            out.append(render_entry(ci))
            count += 1
    except ObjectLookupError as exc:
        if policy is FailurePolicy.ABORT:
            raise
        logger.warning("feed walk ended early: %s", exc)
    out.append("</feed>")
    logger.info("feed: %d entries", count)
    return "".join(out)
