import re

import pytest

from rendergit_site.errors import FailurePolicy, RefResolutionError
from rendergit_site.refs import collect_references, render_refs

ROW_RE = re.compile(r"<tr><td>([^<]*)</td><td>([^<]*)</td><td>([^<]*)</td></tr>")


@pytest.fixture
def tagged(two_commits):
    builder, root, second = two_commits
    repo = builder.repo
    repo.create_head("feature", root)
    repo.create_tag("v0.1", ref=root)
    repo.create_tag("v1.0", ref=second, message="release 1.0")
    return builder, root, second


def test_branches_before_tags(tagged, make_ctx):
    builder, _, _ = tagged
    default = builder.repo.head.reference.name
    html = render_refs(make_ctx(builder.path))
    assert html.index("<h2>Branches</h2>") < html.index("<h2>Tags</h2>")
    names = [row[0] for row in ROW_RE.findall(html)]
    assert names == sorted([default, "feature"]) + ["v0.1", "v1.0"]
    assert '<table id="branches">' in html and '<table id="tags">' in html
    assert "<td>Branch</td><td>Age</td><td>Author</td>" in html


def test_annotated_tag_is_peeled(tagged, make_ctx):
    builder, root, second = tagged
    refs = {ref.name: ref for ref, _ in collect_references(make_ctx(builder.path))}
    assert refs["v1.0"].target == second.hexsha
    assert refs["v0.1"].target == root.hexsha
    assert refs["feature"].kind == "branches"
    assert refs["v1.0"].kind == "tags"


def test_row_shows_commit_date_and_author(tagged, make_ctx):
    builder, _, _ = tagged
    rows = {row[0]: row for row in ROW_RE.findall(render_refs(make_ctx(builder.path)))}
    assert rows["v1.0"][1:] == ("2026-01-01 11:00", "Ada Lovelace")
    assert rows["v0.1"][1:] == ("2026-01-01 10:00", "Ada Lovelace")


def test_no_tags_no_tag_table(two_commits, make_ctx):
    builder, _, _ = two_commits
    html = render_refs(make_ctx(builder.path))
    assert "<h2>Branches</h2>" in html
    assert "Tags" not in html


def test_symbolic_branch_is_resolved(two_commits, make_ctx):
    builder, _, second = two_commits
    default = builder.repo.head.reference.path
    (builder.path / ".git" / "refs" / "heads" / "alias").write_text(f"ref: {default}\n")
    refs = {ref.name: ref for ref, _ in collect_references(make_ctx(builder.path))}
    assert refs["alias"].target == second.hexsha


def _break_ref(builder):
    (builder.path / ".git" / "refs" / "heads" / "broken").write_text("dead" * 10 + "\n")


def test_broken_reference_aborts(tagged, make_ctx):
    builder, _, _ = tagged
    _break_ref(builder)
    with pytest.raises(RefResolutionError):
        render_refs(make_ctx(builder.path))


def test_broken_reference_can_be_skipped(tagged, make_ctx):
    builder, _, _ = tagged
    _break_ref(builder)
    html = render_refs(make_ctx(builder.path), policy=FailurePolicy.SKIP)
    names = [row[0] for row in ROW_RE.findall(html)]
    assert "broken" not in names
    assert "feature" in names and "v1.0" in names
