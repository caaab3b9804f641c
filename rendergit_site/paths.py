from __future__ import annotations

import stat
import urllib.parse

COMMIT_DIR = "commit"
FILE_DIR = "file"
PAGE_EXT = ".html"


def relpath_for(page_path: str) -> str:
    """Prefix that leads from ``page_path`` (relative to the site root) back to the root.

    >>> relpath_for("log.html")
    ''
    >>> relpath_for("file/src/main.c.html")
    '../../'
    """
    return "../" * page_path.count("/")


def commit_page_path(oid: str) -> str:
    return f"{COMMIT_DIR}/{oid}{PAGE_EXT}"


def blob_page_path(entry_path: str) -> str:
    return f"{FILE_DIR}/{entry_path}{PAGE_EXT}"


def href(relpath: str, page_path: str) -> str:
    """Link target for ``page_path`` as seen from a page at depth ``relpath``.

    Path segments are percent-quoted so names containing ``#``, ``?`` or
    spaces still point at the file written to disk.
    """
    return relpath + urllib.parse.quote(page_path, safe="/", errors="surrogateescape")


def filemode(mode: int) -> str:
    """10-character permission string of a tree entry mode, ``ls -l`` style."""
    return stat.filemode(mode)
