from __future__ import annotations

import pathlib
from typing import Optional, Sequence, Union

import pytest
from git import Actor, Repo

from rendergit_site.config import SiteConfig
from rendergit_site.site import BuildContext, load_meta
from rendergit_site.vcs import Repository

AUTHOR = Actor("Ada Lovelace", "ada@example.com")
EPOCH = 1767261600  # 2026-01-01 10:00:00 UTC
STEP = 3600


class RepoBuilder:
    """Builds a throw-away repository one commit at a time with fixed dates."""

    def __init__(self, path: pathlib.Path):
        self.path = path
        self.repo = Repo.init(path)
        with self.repo.config_writer() as cw:
            cw.set_value("user", "name", AUTHOR.name)
            cw.set_value("user", "email", AUTHOR.email)
        self.clock = EPOCH

    def write(self, rel: str, data: Union[str, bytes]) -> None:
        target = self.path / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            data = data.encode("utf-8")
        target.write_bytes(data)

    def commit(self, message: str, offset: str = "+0000",
               parents: Optional[Sequence] = None, head: bool = True):
        self.repo.git.add("--all")
        date = f"{self.clock} {offset}"
        self.clock += STEP
        kwargs = {}
        if parents is not None:
            kwargs["parent_commits"] = list(parents)
        return self.repo.index.commit(
            message,
            author=AUTHOR,
            committer=AUTHOR,
            author_date=date,
            commit_date=date,
            head=head,
            **kwargs,
        )


@pytest.fixture
def builder(tmp_path):
    return RepoBuilder(tmp_path / "repo")


@pytest.fixture
def two_commits(builder):
    """Root commit adds a.txt ("hi\\n"), the second one appends "bye\\n"."""
    builder.write("a.txt", "hi\n")
    root = builder.commit("Add a.txt")
    builder.write("a.txt", "hi\nbye\n")
    second = builder.commit("Say bye\n\nLonger explanation\nof the change.\n")
    return builder, root, second


@pytest.fixture
def make_ctx(tmp_path):
    def _make(path: pathlib.Path, **overrides) -> BuildContext:
        out_dir = overrides.pop("out_dir", tmp_path / "site")
        config = SiteConfig(repo_dir=path, out_dir=out_dir, **overrides)
        repo = Repository(path)
        meta = load_meta(repo, path, highlight=config.highlight)
        out_dir.mkdir(parents=True, exist_ok=True)
        return BuildContext(repo=repo, meta=meta, config=config, out_dir=out_dir)

    return _make


@pytest.fixture
def shallow_clone(builder, tmp_path):
    """Three commits cloned with ``--depth 2``: the oldest commit is not in the clone."""
    commits = []
    for i in range(3):
        builder.write("f.txt", f"{i}\n")
        commits.append(builder.commit(f"commit {i}"))
    path = tmp_path / "shallow"
    Repo.clone_from(builder.path.as_uri(), path, depth=2)
    return path, commits
