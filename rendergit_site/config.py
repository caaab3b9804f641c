from __future__ import annotations

import dataclasses
import pathlib

# ---- defaults ----------------------------------------------------------------

SUMMARY_LEN = 70            # log summaries longer than this get clipped
SHOW_LINE_COUNT = True      # file list shows "<N>L" instead of bytes for text
FEED_MAX_ENTRIES = 100
DIFFSTAT_WIDTH = 80
DESCRIPTION_MAX = 255
CLONE_URL_MAX = 1024


@dataclasses.dataclass
class SiteConfig:
    repo_dir: pathlib.Path
    out_dir: pathlib.Path = pathlib.Path(".")
    summary_len: int = SUMMARY_LEN
    show_line_count: bool = SHOW_LINE_COUNT
    feed_max: int = FEED_MAX_ENTRIES
    stat_width: int = DIFFSTAT_WIDTH
    highlight: bool = False
