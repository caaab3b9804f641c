"""
File browser: one table row per blob of the tree at a commit, and one page
per blob under ``file/`` mirroring the repository layout.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Tuple

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

from .escape import clip, to_text, xmlencode
from .paths import blob_page_path, filemode, href, relpath_for
from .site import BuildContext, render_page, write_page
from .vcs import TreeEntry, is_binary

logger = logging.getLogger(__name__)

FILES_HEAD = (
    '<table id="files"><thead>\n<tr>'
    '<td>Mode</td><td>Name</td><td class="num">Size</td>'
    '</tr>\n</thead><tbody>\n'
)

LINE_NUMBER = '<a href="#l{n}" id="l{n}">{n}</a>\n'


def count_lines(data: bytes) -> int:
    """Number of lines, counting a final line that has no newline."""
    if not data:
        return 0
    return data.count(b"\n", 0, len(data) - 1) + 1


def highlight_blob(name: str, text: str) -> str:
    """Pygments markup for ``text``, or plain escaped text if no lexer matches."""
    try:
        lexer = get_lexer_for_filename(name, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return xmlencode(text)
    return highlight(text, lexer, HtmlFormatter(nowrap=True))


def render_blob(data: bytes, name: str = "", use_highlight: bool = False) -> Tuple[str, int]:
    """Line-numbered two-column table for a text blob and its line count."""
    n = count_lines(data)
    out: List[str] = ['<table id="blob"><tr><td class="num"><pre>\n']
    out.extend(LINE_NUMBER.format(n=i) for i in range(1, n + 1))
    if use_highlight:
        out.append('</pre></td><td><pre class="highlight">\n')
        out.append(highlight_blob(name, to_text(clip(data))))
    else:
        out.append("</pre></td><td><pre>\n")
        out.append(xmlencode(data))
    out.append("</pre></td></tr></table>\n")
    return "".join(out), n


def write_blob(ctx: BuildContext, entry: TreeEntry, page: str) -> int:
    """Render one blob page at ``page``; returns its line count (0 for binary)."""
    relpath = relpath_for(page)
    data = ctx.repo.blob_data(entry.oid)

    body: List[str] = [f"<p> {xmlencode(entry.name)} ({entry.size}B)</p><hr/>"]
    lines = 0
    if is_binary(data):
        body.append("<p>Binary file</p>\n")
    else:
        table, lines = render_blob(data, entry.name, ctx.meta.highlight)
        body.append(table)

    write_page(ctx.output(page), render_page(ctx.meta, relpath, "".join(body), title=entry.name))
    return lines


def walk_tree(ctx: BuildContext, tree_oid: str) -> Iterator[Tuple[str, TreeEntry]]:
    """Depth-first ``(path, entry)`` for every blob, using a stack instead of recursion."""
    stack = [("", iter(ctx.repo.tree_entries(tree_oid)))]
    while stack:
        prefix, entries = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            continue
        if entry.name in ("", ".", ".."):
            logger.warning("skipping unsafe tree entry %r under %r", entry.name, prefix)
            continue
        path = f"{prefix}/{entry.name}" if prefix else entry.name
        if entry.kind == "tree":
            stack.append((path, iter(ctx.repo.tree_entries(entry.oid))))
        elif entry.kind == "blob":
            yield path, entry
        else:
            logger.debug("skipping %s entry %s", entry.kind, path)


def render_files(ctx: BuildContext, commit_oid: str, relpath: str = "") -> str:
    """Files table for the tree of ``commit_oid``; writes every blob page."""
    tree_oid = ctx.repo.tree_of(commit_oid)
    out: List[str] = [FILES_HEAD]
    count = 0
    for path, entry in walk_tree(ctx, tree_oid):
        page = blob_page_path(path)
        lines = write_blob(ctx, entry, page)
        if ctx.config.show_line_count and lines > 0:
            size = f"{lines}L"
        else:
            size = f"{entry.size}B"
        out.append(f"<tr><td>{filemode(entry.mode)}</td>"
                   f'<td><a href="{href(relpath, page)}">{xmlencode(path)}</a></td>'
                   f'<td class="num">{size}</td></tr>\n')
        count += 1
    out.append("</tbody></table>")
    logger.info("files: %d blobs", count)
    return "".join(out)
