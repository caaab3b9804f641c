"""
Command line entry point: build the whole static site for one repository.

    rendergit-site [options] REPO_DIR

Pages are written into the output directory (the current directory by
default): log.html, files.html, refs.html, atom.xml, commit/ and file/.
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from typing import List, Optional

from pygments.formatters import HtmlFormatter

from .config import DIFFSTAT_WIDTH, FEED_MAX_ENTRIES, SUMMARY_LEN, SiteConfig
from .errors import RepositoryError
from .feed import render_feed
from .files import render_files
from .log import render_log
from .paths import COMMIT_DIR
from .refs import render_refs
from .site import HIGHLIGHT_CSS, BuildContext, load_meta, render_page, write_page
from .vcs import Repository

logger = logging.getLogger(__name__)


def build_site(config: SiteConfig, progress: bool = False) -> BuildContext:
    """Render every page for ``config.repo_dir`` into ``config.out_dir``."""

    def say(msg: str) -> None:
        if progress:
            print(msg, file=sys.stderr)

    logger.debug("building site: %s", config)
    repo = Repository(config.repo_dir)
    head = repo.resolve("HEAD")
    meta = load_meta(repo, config.repo_dir, highlight=config.highlight)
    out_dir = pathlib.Path(config.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    (out_dir / COMMIT_DIR).mkdir(exist_ok=True)
    ctx = BuildContext(repo=repo, meta=meta, config=config, out_dir=out_dir)
    say(f"📁 {meta.name} (HEAD: {head[:8]}) → {out_dir.resolve()}")

    if config.highlight:
        css = HtmlFormatter().get_style_defs(".highlight")
        write_page(ctx.output(HIGHLIGHT_CSS), css + "\n")

    say("📜 Writing log and commit pages...")
    write_page(ctx.output("log.html"), render_page(meta, "", render_log(ctx, head)))

    say("🗂️  Writing file tree...")
    write_page(ctx.output("files.html"), render_page(meta, "", render_files(ctx, head)))

    say("🏷️  Writing refs...")
    write_page(ctx.output("refs.html"), render_page(meta, "", render_refs(ctx)))

    say("📰 Writing Atom feed...")
    write_page(ctx.output("atom.xml"), render_feed(ctx))

    say(f"✓ Done ({len(ctx.manifest)} commits)")
    return ctx


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        prog="rendergit-site",
        description="Render a git repository as a static tree of HTML pages",
    )
    ap.add_argument("repo_dir", help="Path to the repository (work tree or bare)")
    ap.add_argument("--out", "-o", default=".", help="Output directory (default: current directory)")
    ap.add_argument("--summary-length", type=int, default=SUMMARY_LEN,
                    help="Clip log summaries longer than this many characters")
    ap.add_argument("--feed-max", type=int, default=FEED_MAX_ENTRIES, help="Maximum number of Atom entries")
    ap.add_argument("--stat-width", type=int, default=DIFFSTAT_WIDTH, help="Column width of the diffstat")
    ap.add_argument("--no-line-count", action="store_true", help="Show byte sizes instead of line counts")
    ap.add_argument("--highlight", action="store_true", help="Syntax-highlight file pages with Pygments")
    ap.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    ap.add_argument("--quiet", "-q", action="store_true", help="No progress output")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    config = SiteConfig(
        repo_dir=pathlib.Path(args.repo_dir),
        out_dir=pathlib.Path(args.out),
        summary_len=args.summary_length,
        show_line_count=not args.no_line_count,
        feed_max=args.feed_max,
        stat_width=args.stat_width,
        highlight=args.highlight,
    )
    try:
        build_site(config, progress=not args.quiet)
    except (RepositoryError, OSError) as exc:
        # git messages can span lines; the diagnostic is one line
        print("error: " + " ".join(str(exc).split()), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
