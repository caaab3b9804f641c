"""
Page shell and the state shared by every page writer.

Each rendering function receives ``relpath`` (the ``../`` prefix from the
page being written back to the site root) explicitly; nothing here keeps a
"current page" around.
"""

from __future__ import annotations

import dataclasses
import pathlib
from typing import List, Optional, Set

from .config import CLONE_URL_MAX, DESCRIPTION_MAX, SiteConfig
from .escape import BoundedText, xmlencode
from .vcs import Repository


HIGHLIGHT_CSS = "highlight.css"


@dataclasses.dataclass(frozen=True)
class SiteMeta:
    name: str
    stripped_name: str
    description: BoundedText
    clone_url: BoundedText
    has_readme: bool = False
    has_license: bool = False
    highlight: bool = False


def _read_first_line(candidates: List[pathlib.Path], limit: int) -> BoundedText:
    for path in candidates:
        try:
            data = path.read_bytes()
        except OSError:
            continue
        line = data.split(b"\n", 1)[0].rstrip(b"\r")
        return BoundedText.clip(line, limit)
    return BoundedText.empty(limit)


def load_meta(repo: Repository, repo_dir: pathlib.Path, head: str = "HEAD",
              highlight: bool = False) -> SiteMeta:
    """Name, description, clone URL and README/LICENSE presence of a repository."""
    name = pathlib.Path(repo_dir).resolve().name
    stripped = name[:-4] if name.endswith(".git") else name
    repo_dir = pathlib.Path(repo_dir)
    description = _read_first_line(
        [repo_dir / "description", repo_dir / ".git" / "description"], DESCRIPTION_MAX)
    clone_url = _read_first_line([repo_dir / "url", repo_dir / ".git" / "url"], CLONE_URL_MAX)
    return SiteMeta(
        name=name,
        stripped_name=stripped,
        description=description,
        clone_url=clone_url,
        has_readme=repo.exists(f"{head}:README"),
        has_license=repo.exists(f"{head}:LICENSE"),
        highlight=highlight,
    )


class CommitManifest:
    """Commit ids whose page has been written, in this run or an earlier one."""

    def __init__(self) -> None:
        self._done: Set[str] = set()

    def claim(self, oid: str, path: pathlib.Path) -> bool:
        """True if the caller should write the page for ``oid`` now."""
        if oid in self._done:
            return False
        self._done.add(oid)
        return not path.exists()

    def __contains__(self, oid: str) -> bool:
        return oid in self._done

    def __len__(self) -> int:
        return len(self._done)


@dataclasses.dataclass
class BuildContext:
    repo: Repository
    meta: SiteMeta
    config: SiteConfig
    out_dir: pathlib.Path
    manifest: CommitManifest = dataclasses.field(default_factory=CommitManifest)

    def output(self, page_path: str) -> pathlib.Path:
        return self.out_dir / page_path


def write_page(path: pathlib.Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8", errors="surrogateescape"))


# ---- header / footer -------------------------------------------------------------

def render_header(meta: SiteMeta, relpath: str, title: Optional[str] = None) -> str:
    name = xmlencode(meta.stripped_name)
    desc = xmlencode(str(meta.description))
    out: List[str] = []
    out.append(
        '<!DOCTYPE html>\n'
        '<html dir="ltr" lang="en">\n<head>\n'
        '<meta http-equiv="Content-Type" content="text/html; charset=UTF-8" />\n'
        '<meta http-equiv="Content-Language" content="en" />\n'
    )
    out.append(f"<title>{xmlencode(title) + ' - ' if title else ''}{name}"
               f"{' - ' if meta.description else ''}{desc}</title>\n")
    out.append(f'<link rel="icon" type="image/png" href="{relpath}favicon.png" />\n')
    out.append(f'<link rel="alternate" type="application/atom+xml" title="{xmlencode(meta.name)} Atom Feed" '
               f'href="{relpath}atom.xml" />\n')
    out.append(f'<link rel="stylesheet" type="text/css" href="{relpath}style.css" />\n')
    if meta.highlight:
        out.append(f'<link rel="stylesheet" type="text/css" href="{relpath}{HIGHLIGHT_CSS}" />\n')
    out.append("</head>\n<body>\n<table><tr><td>")
    out.append(f'<a href="../{relpath}"><img src="{relpath}logo.png" alt="" width="32" height="32" /></a>')
    out.append(f'</td><td><h1>{name}</h1><span class="desc">{desc}</span></td></tr>')
    if meta.clone_url:
        url = xmlencode(str(meta.clone_url))
        out.append(f'<tr class="url"><td></td><td>git clone <a href="{url}">{url}</a></td></tr>')
    out.append("<tr><td></td><td>\n")
    out.append(f'<a href="{relpath}log.html">Log</a> | ')
    out.append(f'<a href="{relpath}files.html">Files</a> | ')
    out.append(f'<a href="{relpath}refs.html">Refs</a>')
    if meta.has_readme:
        out.append(f' | <a href="{relpath}file/README.html">README</a>')
    if meta.has_license:
        out.append(f' | <a href="{relpath}file/LICENSE.html">LICENSE</a>')
    out.append('</td></tr></table>\n<hr/>\n<div id="content">\n')
    return "".join(out)


def render_footer() -> str:
    return "</div>\n</body>\n</html>\n"


def render_page(meta: SiteMeta, relpath: str, body: str, title: Optional[str] = None) -> str:
    return render_header(meta, relpath, title) + body + render_footer()
