"""
Thin adapter over GitPython: the only place that talks to git.

Callers get hex ids, plain dataclasses and GitPython commit objects; failures
surface only as the exceptions from :mod:`rendergit_site.errors`, never as
GitPython exception types.
"""

from __future__ import annotations

import dataclasses
import logging
import pathlib
from typing import Iterator, List, Optional

import git
from git.exc import BadName, BadObject, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from .errors import ObjectLookupError, RefResolutionError, RepositoryError, RevisionNotFound
from .patch import Diff, parse_patch

logger = logging.getLogger(__name__)

# printf '' | git hash-object -t tree --stdin
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

BINARY_SNIFF_LEN = 8000  # same window git uses for its NUL heuristic

HEADS_PREFIX = "refs/heads/"
TAGS_PREFIX = "refs/tags/"

# rev_parse("<rev>:<path>") raises KeyError when the path is not in the tree
_LOOKUP_ERRORS = (BadName, BadObject, GitCommandError, KeyError, ValueError)


def is_binary(data: bytes) -> bool:
    """git's content heuristic: a NUL byte near the start means binary."""
    return b"\0" in data[:BINARY_SNIFF_LEN]


@dataclasses.dataclass(frozen=True)
class TreeEntry:
    name: str            # surrogateescape-decoded
    mode: int
    kind: str            # "blob", "tree" or "submodule"
    oid: str
    size: int = 0


@dataclasses.dataclass(frozen=True)
class RawRef:
    path: str            # full name, e.g. refs/heads/main
    handle: object = dataclasses.field(compare=False, repr=False)

    @property
    def is_branch(self) -> bool:
        return self.path.startswith(HEADS_PREFIX)

    @property
    def is_tag(self) -> bool:
        return self.path.startswith(TAGS_PREFIX)

    @property
    def shorthand(self) -> str:
        for prefix in (HEADS_PREFIX, TAGS_PREFIX, "refs/remotes/", "refs/"):
            if self.path.startswith(prefix):
                return self.path[len(prefix):]
        return self.path


class Repository:
    def __init__(self, path: pathlib.Path | str):
        self.path = pathlib.Path(path)
        try:
            self._repo = git.Repo(str(self.path), search_parent_directories=False)
        except (InvalidGitRepositoryError, NoSuchPathError) as exc:
            raise RepositoryError(f"cannot open repository {self.path}: {exc}") from exc

    @property
    def git_dir(self) -> pathlib.Path:
        return pathlib.Path(self._repo.git_dir)

    # ---- revisions & objects ------------------------------------------------

    def resolve(self, rev: str) -> str:
        """Hex id of the commit ``rev`` designates."""
        try:
            obj = self._repo.rev_parse(rev)
            while obj.type == "tag":
                obj = obj.object
        except _LOOKUP_ERRORS as exc:
            raise RevisionNotFound(f"revision {rev!r} not found") from exc
        if obj.type != "commit":
            raise RevisionNotFound(f"revision {rev!r} is a {obj.type}, not a commit")
        return obj.hexsha

    def exists(self, rev: str) -> bool:
        try:
            self._repo.rev_parse(rev)
        except _LOOKUP_ERRORS:
            return False
        return True

    def commit(self, oid: str) -> git.Commit:
        try:
            commit = self._repo.commit(oid)
            commit.tree  # force the object to be read
        except _LOOKUP_ERRORS as exc:
            raise ObjectLookupError(f"commit {oid} not found") from exc
        return commit

    def tree_of(self, oid: str) -> str:
        """Hex id of the root tree of commit ``oid``."""
        return self.commit(oid).tree.hexsha

    def diff_trees(self, old_tree: Optional[str], new_tree: str) -> Diff:
        """Diff two trees with every path included; ``None`` stands for the empty tree."""
        try:
            out = self._repo.git(c="core.quotepath=false").diff_tree(
                old_tree or EMPTY_TREE_SHA,
                new_tree,
                p=True,
                r=True,
                no_renames=True,
                no_color=True,
                no_ext_diff=True,
                no_textconv=True,
                stdout_as_string=False,
                strip_newline_in_stdout=False,
            )
        except GitCommandError as exc:
            raise ObjectLookupError(f"cannot diff {old_tree} {new_tree}: {exc}") from exc
        diff = parse_patch(out)
        logger.debug("diff %s..%s: %d deltas", old_tree or "empty", new_tree, len(diff.deltas))
        return diff

    def tree_entries(self, tree_oid: str) -> List[TreeEntry]:
        try:
            # a Tree needs a path before its children can be listed
            tree = git.Tree(self._repo, bytes.fromhex(tree_oid), path="")
            items = list(tree)
        except _LOOKUP_ERRORS as exc:
            raise ObjectLookupError(f"tree {tree_oid} not found") from exc
        entries: List[TreeEntry] = []
        for obj in items:
            if obj.type == "blob":
                entries.append(TreeEntry(obj.name, obj.mode, "blob", obj.hexsha, obj.size))
            else:
                entries.append(TreeEntry(obj.name, obj.mode, obj.type, obj.hexsha))
        return entries

    def blob_data(self, oid: str) -> bytes:
        try:
            return self._repo.odb.stream(bytes.fromhex(oid)).read()
        except _LOOKUP_ERRORS as exc:
            raise ObjectLookupError(f"blob {oid} not found") from exc

    # ---- history --------------------------------------------------------------

    def walk(self, start: str, max_count: Optional[int] = None) -> Iterator[str]:
        """Commit ids from ``start``, newest first, following first parents only."""
        kwargs = {"first_parent": True}
        if max_count is not None:
            kwargs["max_count"] = max_count
        try:
            for commit in self._repo.iter_commits(start, **kwargs):
                yield commit.hexsha
        except _LOOKUP_ERRORS as exc:
            raise ObjectLookupError(f"history walk from {start} failed: {exc}") from exc

    # ---- references -----------------------------------------------------------

    def references(self) -> List[RawRef]:
        try:
            return [RawRef(ref.path, ref) for ref in self._repo.refs]
        except _LOOKUP_ERRORS as exc:
            raise RepositoryError(f"cannot list references: {exc}") from exc

    def resolve_symbolic(self, ref: RawRef) -> RawRef:
        """Follow a symbolic reference one level; direct references come back as is."""
        try:
            target = ref.handle.reference
        except TypeError:
            return ref
        except _LOOKUP_ERRORS as exc:
            raise RefResolutionError(f"cannot resolve {ref.path}: {exc}") from exc
        return RawRef(target.path, target)

    def peel(self, ref: RawRef) -> str:
        """Hex id of the commit ``ref`` ultimately designates, peeling annotated tags."""
        try:
            obj = ref.handle.object
            while obj.type == "tag":
                obj = obj.object
        except _LOOKUP_ERRORS as exc:
            raise RefResolutionError(f"cannot peel {ref.path}: {exc}") from exc
        if obj.type != "commit":
            raise RefResolutionError(f"{ref.path} points at a {obj.type}, not a commit")
        return obj.hexsha
