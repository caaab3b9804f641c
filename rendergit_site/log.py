"""
Log page and per-commit diff pages.

The log walk and commit page generation happen in one pass: each visited
commit gets a row in the log table and, unless it was already written,
its own page under ``commit/``.
"""

from __future__ import annotations

import logging
from typing import List

from .commits import CommitSnapshot, format_diffstat, format_time, format_time_short, get_snapshot
from .errors import CommitLookupError, FailurePolicy, ObjectLookupError
from .escape import to_text, xmlencode
from .paths import blob_page_path, commit_page_path, href, relpath_for
from .patch import Diff
from .site import BuildContext, render_page, write_page

logger = logging.getLogger(__name__)

ELLIPSIS = "…"

LOG_HEAD = (
    '<table id="log"><thead>\n<tr><td>Age</td><td>Commit message</td>'
    '<td>Author</td><td>Files</td><td class="num">+</td>'
    '<td class="num">-</td></tr>\n</thead><tbody>\n'
)


def truncate_summary(summary: str, limit: int) -> str:
    if len(summary) > limit:
        return xmlencode(summary, limit - 1) + ELLIPSIS
    return xmlencode(summary)


# ---- commit page ------------------------------------------------------------------

def render_commit_header(ci: CommitSnapshot, relpath: str) -> str:
    """commit/parent links, author line with mailto and the full message."""
    out: List[str] = []
    link = href(relpath, commit_page_path(ci.oid))
    out.append(f'<b>commit</b> <a href="{link}">{ci.oid}</a>\n')
    if ci.parent_oid:
        link = href(relpath, commit_page_path(ci.parent_oid))
        out.append(f'<b>parent</b> <a href="{link}">{ci.parent_oid}</a>\n')
    if ci.author:
        email = xmlencode(ci.author.email)
        out.append(f"<b>Author:</b> {xmlencode(ci.author.name)} "
                   f'&lt;<a href="mailto:{email}">{email}</a>&gt;\n')
        out.append(f"<b>Date:</b>   {format_time(ci.author)}\n")
    if ci.message:
        out.append(f"\n{xmlencode(ci.message)}\n")
    return "".join(out)


def render_diff(diff: Diff, relpath: str) -> str:
    out: List[str] = []
    for delta in diff.deltas:
        old, new = to_text(delta.old_path), to_text(delta.new_path)
        out.append(
            f'<b>diff --git a/<a href="{href(relpath, blob_page_path(old))}">{xmlencode(old)}</a> '
            f'b/<a href="{href(relpath, blob_page_path(new))}">{xmlencode(new)}</a></b>\n'
        )
        if delta.binary:
            out.append("Binary files differ\n")
            continue
        for j, hunk in enumerate(delta.hunks):
            out.append(f'<a href="#h{j}" id="h{j}" class="h">{xmlencode(hunk.header)}</a>')
            for k, line in enumerate(hunk.lines):
                content = xmlencode(line.content)
                if line.origin == "+":
                    out.append(f'<a href="#h{j}-{k}" id="h{j}-{k}" class="i">+{content}</a>')
                elif line.origin == "-":
                    out.append(f'<a href="#h{j}-{k}" id="h{j}-{k}" class="d">-{content}</a>')
                elif line.origin == "\\":
                    out.append(content)
                else:
                    out.append(f" {content}")
    return "".join(out)


def write_commit_page(ctx: BuildContext, ci: CommitSnapshot) -> bool:
    """Write ``commit/<oid>.html`` unless it already exists; True if written."""
    page = commit_page_path(ci.oid)
    path = ctx.output(page)
    if not ctx.manifest.claim(ci.oid, path):
        logger.debug("commit page %s exists, skipping", page)
        return False
    relpath = relpath_for(page)

    body: List[str] = ["<pre>", render_commit_header(ci, relpath)]
    stat = format_diffstat(ci.diff, ctx.config.stat_width)
    if stat:
        body.append("<b>Diffstat:</b>\n")
        body.append(xmlencode(stat))
    body.append("<hr/>")
    body.append(render_diff(ci.diff, relpath))
    body.append("</pre>\n")

    write_page(path, render_page(ctx.meta, relpath, "".join(body), title=ci.summary))
    return True


# ---- log ------------------------------------------------------------------------------

def render_log_row(ci: CommitSnapshot, relpath: str, summary_len: int) -> str:
    out: List[str] = ["<tr><td>"]
    if ci.author:
        out.append(format_time_short(ci.author))
    out.append("</td><td>")
    if ci.summary:
        out.append(f'<a href="{href(relpath, commit_page_path(ci.oid))}">')
        out.append(truncate_summary(ci.summary, summary_len))
        out.append("</a>")
    out.append("</td><td>")
    if ci.author:
        out.append(xmlencode(ci.author.name))
    out.append(f'</td><td class="num">{ci.stats.files_changed}</td>')
    out.append(f'<td class="num">+{ci.stats.insertions}</td>')
    out.append(f'<td class="num">-{ci.stats.deletions}</td></tr>\n')
    return "".join(out)


def render_log(ctx: BuildContext, start: str, relpath: str = "",
               policy: FailurePolicy = FailurePolicy.STOP) -> str:
    """Log table for the first-parent history of ``start``; writes commit pages as it goes."""
    out: List[str] = [LOG_HEAD]
    count = 0
    try:
        for oid in ctx.repo.walk(start):
            try:
                ci = get_snapshot(ctx.repo, oid)
            except CommitLookupError as exc:
                if policy is FailurePolicy.ABORT:
                    raise
                if policy is FailurePolicy.STOP:
                    logger.warning("log stops at %s: %s", oid, exc)
                    break
                logger.warning("skipping commit %s: %s", oid, exc)
                continue
            out.append(render_log_row(ci, relpath, ctx.config.summary_len))
            write_commit_page(ctx, ci)
            count += 1
    except ObjectLookupError as exc:
        if policy is FailurePolicy.ABORT:
            raise
        logger.warning("history walk ended early: %s", exc)
    out.append("</tbody></table>")
    logger.info("log: %d commits", count)
    return "".join(out)
