"""Logical line ranges and line numbering for the visible part of a text view."""

from __future__ import annotations

import sys
from dataclasses import dataclass

from .index import CombinedPos, fixed_ceil
from .textview import TextView

_MAX = sys.maxsize


@dataclass(frozen=True)
class LineInfo:
    """A visible logical line.

    ``line_num`` starts from 1, ``y_offset`` is the top of the line in the
    cross axis, and ``start``/``end`` are rune offsets of its first and last
    caret positions.
    """

    line_num: int
    y_offset: int
    start: int
    end: int


def _source_size(view: TextView) -> int:
    """Size of the view's text in bytes."""
    return view.rune_offset(_MAX)


def search_for_line_range(view: TextView, screen_line: int) -> tuple[CombinedPos, CombinedPos]:
    """Start and end positions of the logical line holding *screen_line*.

    A logical line ends at a newline; wrapped screen lines belong to the
    same logical line.
    """
    spos = view.closest_to_line_col(screen_line, 0)

    start = CombinedPos()
    end = CombinedPos()

    p = spos
    while True:
        if p.runes == 0:
            start = p
            break
        r, size = view.read_rune_before(view.rune_offset(p.runes))
        if size == 0:
            break
        if r == "\n":
            start = p
            break
        p = view.closest_to_line_col(p.line_col.line - 1, 0)

    total = _source_size(view)
    p = spos
    while True:
        offset = view.rune_offset(p.runes)
        r, _ = view.read_rune_before(offset)
        if (r == "\n" and p != start) or offset == total:
            end = p
            break
        p = view.closest_to_line_col(p.line_col.line + 1, 0)

    # An empty line starts and ends on the same screen line; otherwise step
    # back from the start of the following line onto this line's last rune.
    if start.line_col.line != end.line_col.line:
        end = view.closest_to_rune(end.runes - 1)

    return start, end


def visible_lines(view: TextView) -> list[LineInfo]:
    """Logical lines within the viewport, numbered from the top of the text."""
    view.make_valid()
    if view.view_size.y <= 0:
        return []

    scroll_y = view.scroll_off.y
    first_pos = view.closest_to_xy_graphemes(0, scroll_y)
    last_pos = view.closest_to_xy_graphemes(0, view.view_size.y + scroll_y)
    first_rng = search_for_line_range(view, first_pos.line_col.line)
    last_rng = search_for_line_range(view, last_pos.line_col.line)

    ranges = [first_rng]
    pos = first_rng[1]
    while pos.runes < last_rng[0].runes:
        rng = search_for_line_range(view, pos.line_col.line + 1)
        ranges.append(rng)
        pos = rng[1]

    text_bytes = view.text().encode("utf-8")
    lines: list[LineInfo] = []
    for start, end in ranges:
        if not lines:
            if start.line_col.line == 0:
                line_num = 1
                y_offset = start.y - fixed_ceil(start.ascent)
            else:
                offset = min(view.rune_offset(start.runes), len(text_bytes))
                line_num = text_bytes.count(b"\n", 0, offset) + 1
                y_offset = start.y - scroll_y - fixed_ceil(start.ascent)
        else:
            line_num = lines[-1].line_num + 1
            y_offset = start.y - scroll_y - fixed_ceil(start.ascent)
        lines.append(
            LineInfo(line_num=line_num, y_offset=y_offset, start=start.runes, end=end.runes)
        )
    return lines


def caret_current_line(view: TextView) -> tuple[CombinedPos, CombinedPos]:
    """Start and end positions of the logical line holding the caret."""
    caret_start = view.closest_to_rune(view.caret_start)
    return search_for_line_range(view, caret_start.line_col.line)