import pytest

from rendergit_site.commits import (
    Signature,
    format_diffstat,
    format_shortstat,
    format_time,
    format_time_short,
    format_time_z,
    get_snapshot,
    summary_of,
)
from rendergit_site.errors import CommitLookupError
from rendergit_site.patch import Diff, DiffDelta, DiffHunk, DiffLine, DiffStats
from rendergit_site.vcs import Repository


def test_root_commit_has_no_parent(two_commits):
    builder, root, _ = two_commits
    ci = get_snapshot(Repository(builder.path), root.hexsha)
    assert ci.oid == root.hexsha
    assert ci.parent_oid == ""
    assert ci.is_root
    assert (ci.stats.files_changed, ci.stats.insertions, ci.stats.deletions) == (1, 1, 0)
    assert ci.diff.deltas[0].new_path == b"a.txt"


def test_second_commit(two_commits):
    builder, root, second = two_commits
    ci = get_snapshot(Repository(builder.path), second.hexsha)
    assert ci.parent_oid == root.hexsha
    assert ci.summary == "Say bye"
    assert ci.message.startswith("Say bye\n\nLonger explanation")
    assert ci.author.name == "Ada Lovelace"
    assert ci.author.email == "ada@example.com"
    added = [ln for h in ci.diff.deltas[0].hunks for ln in h.lines if ln.origin == "+"]
    assert [ln.content for ln in added] == [b"bye\n"]


def test_snapshot_without_diff(two_commits):
    builder, _, second = two_commits
    ci = get_snapshot(Repository(builder.path), second.hexsha, with_diff=False)
    assert ci.diff.deltas == []
    assert ci.author.timestamp == builder.clock - 3600


def test_author_offset(builder):
    builder.write("f", "x\n")
    commit = builder.commit("tz", offset="+0200")
    ci = get_snapshot(Repository(builder.path), commit.hexsha)
    assert ci.author.offset == 120
    assert format_time_short(ci.author) == "2026-01-01 12:00"


def test_missing_commit(two_commits):
    builder, _, _ = two_commits
    with pytest.raises(CommitLookupError):
        get_snapshot(Repository(builder.path), "1" * 40)


def test_summary_of():
    assert summary_of("  First line\ncontinues\n\nbody") == "First line continues"
    assert summary_of("") == ""


def test_time_formats():
    sig = Signature("a", "b", 1767261600, 120)
    assert format_time(sig) == "Thu Jan  1 12:00:00 2026 +0200"
    assert format_time_short(sig) == "2026-01-01 12:00"
    assert format_time_z(sig) == "2026-01-01T10:00:00Z"
    west = Signature("a", "b", 1767261600, -330)
    assert format_time(west).endswith("-0530")


def test_diffstat_of_second_commit(two_commits):
    builder, _, second = two_commits
    ci = get_snapshot(Repository(builder.path), second.hexsha)
    assert format_diffstat(ci.diff, 80) == " a.txt | 1 +\n 1 file changed, 1 insertion(+)\n"


def test_shortstat_plurals():
    assert format_shortstat(DiffStats(2, 3, 1)) == " 2 files changed, 3 insertions(+), 1 deletion(-)"
    assert format_shortstat(DiffStats(1, 0, 0)) == " 1 file changed"


def _delta(path, ins, dels, binary=False):
    lines = [DiffLine("+", b"x\n", None, i) for i in range(ins)]
    lines += [DiffLine("-", b"y\n", i, None) for i in range(dels)]
    return DiffDelta(path, path, binary=binary, hunks=[DiffHunk(b"@@ @@\n", lines)] if lines else [])


def test_diffstat_scales_to_width():
    diff = Diff([_delta(b"big.txt", 300, 100), _delta(b"small.txt", 1, 0)])
    text = format_diffstat(diff, 80)
    lines = text.splitlines()
    assert all(len(line) <= 80 for line in lines)
    assert "+" in lines[1] and "-" not in lines[1].split("|")[1]
    assert lines[-1] == " 2 files changed, 301 insertions(+), 100 deletions(-)"


def test_diffstat_marks_binary():
    text = format_diffstat(Diff([_delta(b"logo.png", 0, 0, binary=True)]), 80)
    assert text.splitlines()[0] == " logo.png | Bin"


def test_diffstat_of_empty_diff():
    assert format_diffstat(Diff([]), 80) == ""


def test_shallow_boundary_commit_diffs_against_empty_tree(shallow_clone):
    path, (c0, c1, _) = shallow_clone
    ci = get_snapshot(Repository(path), c1.hexsha)
    assert ci.parent_oid == c0.hexsha
    assert not ci.is_root
    assert (ci.stats.files_changed, ci.stats.insertions, ci.stats.deletions) == (1, 1, 0)
    assert ci.diff.deltas[0].new_path == b"f.txt"
