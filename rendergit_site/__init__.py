"""
Render a git repository into a static tree of hyperlinked HTML pages:
log, per-commit diffs, file browser, refs and an Atom feed.
"""

__version__ = "0.1.0"
