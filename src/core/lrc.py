# core/lrc.py
from __future__ import annotations

import re
from bisect import bisect_right
from typing import List, Sequence, Tuple

from core.models import LineTimestamp

_TS_RE = re.compile(r"\[(\d+):(\d+)(?:[.:](\d+))?\]")
_META_TAGS = ("ar", "ti", "al", "by", "offset", "au", "length", "re", "ve")


def _ts_to_ms(mm: str, ss: str, frac: str | None) -> int:
    m = int(mm)
    s = int(ss)
    if frac is None:
        ms = 0
    elif len(frac) == 1:
        ms = int(frac) * 100
    elif len(frac) == 2:
        ms = int(frac) * 10
    else:
        ms = int(frac[:3])
    return (m * 60 + s) * 1000 + ms


def _is_meta_line(line: str) -> bool:
    if not line.startswith("["):
        return False
    tag = line[1:].split(":", 1)[0].strip().lower()
    return tag in _META_TAGS


def parse_lrc(lrc_text: str) -> LineTimestamp:
    """
    Parse LRC text into time-synced lines sorted by time.

    Supports several timestamps per line ("[00:12.00][01:40.00]chorus").
    Metadata tags like [ar:], [ti:] are ignored. A timestamp with no text
    is kept as an empty line; it marks an instrumental gap.
    """
    out: List[Tuple[int, str]] = []
    if not lrc_text:
        return LineTimestamp(())

    for raw_line in lrc_text.splitlines():
        line = raw_line.strip()
        if not line or _is_meta_line(line):
            continue

        matches = list(_TS_RE.finditer(line))
        if not matches:
            continue

        text = _TS_RE.sub("", line).strip()
        for m in matches:
            out.append((_ts_to_ms(m.group(1), m.group(2), m.group(3)), text))

    # stable: lines sharing a timestamp keep file order
    out.sort(key=lambda x: x[0])
    return LineTimestamp(tuple(out))


def strip_timestamps(lrc: str) -> str:
    out_lines = []
    for line in lrc.splitlines():
        line = line.strip()
        if not line or _is_meta_line(line):
            continue
        while line.startswith("[") and "]" in line:
            line = line.split("]", 1)[1].lstrip()
        out_lines.append(line)
    return "\n".join(out_lines).strip()


def find_line_index(lines: Sequence[Tuple[int, str]], position_ms: int) -> int:
    """Index of the line active at `position_ms`, -1 before the first line."""
    times = [t for t, _ in lines]
    return bisect_right(times, position_ms) - 1
