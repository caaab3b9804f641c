import pytest

from rendergit_site.paths import blob_page_path, commit_page_path, filemode, href, relpath_for


@pytest.mark.parametrize(
    "page, expected",
    [
        ("log.html", ""),
        ("commit/0123abcd.html", "../"),
        ("file/a.txt.html", "../"),
        ("file/src/lib/util.c.html", "../../../"),
    ],
)
def test_relpath_for(page, expected):
    assert relpath_for(page) == expected


def test_page_paths():
    assert commit_page_path("abc") == "commit/abc.html"
    assert blob_page_path("dir/name.py") == "file/dir/name.py.html"


@pytest.mark.parametrize(
    "mode, expected",
    [
        (0o100644, "-rw-r--r--"),
        (0o100755, "-rwxr-xr-x"),
        (0o120000, "l---------"),
        (0o040000, "d---------"),
    ],
)
def test_filemode(mode, expected):
    assert filemode(mode) == expected
    assert len(filemode(mode)) == 10


def test_href_quotes_unsafe_characters():
    assert href("../", "file/a b#c.html") == "../file/a%20b%23c.html"
    assert href("", "file/x&y.html") == "file/x%26y.html"


def test_href_keeps_raw_bytes():
    name = b"caf\xe9.txt".decode("utf-8", errors="surrogateescape")
    assert href("", f"file/{name}.html") == "file/caf%E9.txt.html"
