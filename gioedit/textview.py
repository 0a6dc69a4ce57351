"""Shaped, indexed and scrollable view over an editable text source."""

from __future__ import annotations

import sys
from bisect import bisect_left
from dataclasses import dataclass, field
from enum import IntEnum
from itertools import accumulate
from typing import Iterator

from .buffer import EditBuffer
from .index import (
    CombinedPos,
    Glyph,
    GlyphFlags,
    GlyphIndex,
    Point,
    Rectangle,
    Region,
    ScreenPos,
    fixed_ceil,
    fixed_floor,
    fixed_round,
    grapheme_boundaries,
)
from .iterator import TextIterator

_MAX = sys.maxsize


class SelectionAction(IntEnum):
    """Whether a caret movement extends or clears the selection."""

    EXTEND = 0
    CLEAR = 1


@dataclass(frozen=True)
class Dimensions:
    """Size of laid out text and distance from its bottom to the baseline."""

    size: Point = field(default_factory=Point)
    baseline: int = 0


def _decode_first(b: bytes) -> tuple[str, int]:
    if not b:
        return "", 0
    for n in range(1, min(4, len(b)) + 1):
        try:
            return b[:n].decode("utf-8"), n
        except UnicodeDecodeError:
            continue
    return "\ufffd", 1


def _decode_last(b: bytes) -> tuple[str, int]:
    if not b:
        return "", 0
    for n in range(1, min(4, len(b)) + 1):
        try:
            s = b[-n:].decode("utf-8")
        except UnicodeDecodeError:
            continue
        if len(s) == 1:
            return s, n
    return "\ufffd", 1


class TextView:
    """Lays out text from a source with a monospace shaper and tracks a caret.

    Metrics are whole pixels; every rune is *char_width* wide. Lines wrap
    at the layout width unless *single_line* is set.
    """

    def __init__(
        self,
        source: EditBuffer | None = None,
        *,
        char_width: int = 8,
        ascent: int = 12,
        descent: int = 4,
        line_height: int | None = None,
        view_height: int | None = None,
        single_line: bool = False,
    ) -> None:
        self.char_width = char_width
        self.ascent = ascent
        self.descent = descent
        self.line_height = line_height if line_height is not None else ascent + descent
        self.view_height = view_height
        self.single_line = single_line
        self.index = GlyphIndex()
        self.graphemes: list[int] = []
        self.caret_start = 0
        self.caret_end = 0
        self.caret_xoff = 0
        self.scroll_off = Point()
        self.view_size = Point()
        self._dims = Dimensions()
        self._max_width = _MAX
        self._min_width = 0
        self._valid = False
        self._offsets: list[int] | None = None
        self._source: EditBuffer = source if source is not None else EditBuffer()

    # source access

    def set_source(self, source: EditBuffer) -> None:
        """Use *source* as the text to display."""
        self._source = source
        self._invalidate()

    def changed(self) -> bool:
        """Whether the source changed since last asked."""
        return self._source.changed()

    def _all_bytes(self) -> bytes:
        size = self._source.size()
        if size <= 0:
            return b""
        return self._source.read_at(size, 0)

    def _decoded(self) -> str:
        return self._all_bytes().decode("utf-8", errors="replace")

    def read_at(self, size: int, offset: int) -> bytes:
        """Read up to *size* bytes at byte *offset* of the source."""
        return self._source.read_at(size, offset)

    def read_rune_at(self, off: int) -> tuple[str, int]:
        """Rune starting at byte *off* and its size; ("", 0) at the end."""
        try:
            b = self._source.read_at(4, off)
        except (EOFError, IndexError):
            return "", 0
        return _decode_first(b)

    def read_rune_before(self, off: int) -> tuple[str, int]:
        """Rune ending at byte *off* and its size; ("", 0) at the start."""
        if off < 4:
            size, start = off, 0
        else:
            size, start = 4, off - 4
        try:
            b = self._source.read_at(size, start)
        except (EOFError, IndexError):
            return "", 0
        return _decode_last(b)

    # layout

    def dimensions(self) -> Dimensions:
        """Dimensions of the visible text."""
        base_pos = self._dims.size.y - self._dims.baseline
        return Dimensions(self.view_size, self.view_size.y - base_pos)

    def full_dimensions(self) -> Dimensions:
        """Dimensions of all shaped text."""
        return self._dims

    def _invalidate(self) -> None:
        self._offsets = None
        self._valid = False

    def make_valid(self) -> None:
        if not self._valid:
            self._layout_text()
            self._valid = True

    def layout(self, max_width: int, min_width: int = 0) -> None:
        """Lay the text out within the given widths, reshaping as needed."""
        effective = _MAX if self.single_line else max_width
        if effective != self._max_width:
            self._max_width = effective
            self._invalidate()
        if min_width != self._min_width:
            self._min_width = min_width
            self._invalidate()
        self.make_valid()
        size = self._dims.size
        x = max(size.x, 1)
        x = max(min_width, min(x, max_width))
        y = size.y
        if self.view_height is not None:
            y = min(y, self.view_height)
        view = Point(x, y)
        if view != self.view_size:
            self.view_size = view
            self._invalidate()
        self.make_valid()

    def _shape(self, text: str) -> Iterator[Glyph]:
        cw = self.char_width * 64
        asc = self.ascent * 64
        desc = self.descent * 64
        if self._max_width >= _MAX or self.char_width <= 0:
            cols = _MAX
        else:
            cols = max(1, self._max_width // self.char_width)
        parts = text.split("\n")
        paragraphs = [(p, True) for p in parts[:-1]] + [(parts[-1], False)]
        line_no = 0
        for body, has_newline in paragraphs:
            chunks = [body[i : i + cols] for i in range(0, len(body), cols)] or [""]
            for ci, chunk in enumerate(chunks):
                y = self.ascent + line_no * self.line_height
                glyphs = [
                    Glyph(
                        x=col * cw,
                        y=y,
                        advance=cw,
                        ascent=asc,
                        descent=desc,
                        runes=1,
                        flags=GlyphFlags.CLUSTER_BREAK,
                        bounds=Rectangle(Point(0, -asc), Point(cw, desc)),
                    )
                    for col in range(len(chunk))
                ]
                last_chunk = ci == len(chunks) - 1
                if last_chunk and has_newline:
                    glyphs.append(
                        Glyph(
                            x=len(chunk) * cw, y=y, ascent=asc, descent=desc, runes=1,
                            flags=GlyphFlags.CLUSTER_BREAK | GlyphFlags.PARAGRAPH_BREAK,
                        )
                    )
                if not glyphs:
                    glyphs.append(
                        Glyph(
                            x=0, y=y, ascent=asc, descent=desc, runes=0,
                            flags=GlyphFlags.CLUSTER_BREAK | GlyphFlags.PARAGRAPH_BREAK,
                        )
                    )
                last = glyphs[-1]
                glyphs[-1] = Glyph(
                    x=last.x, y=last.y, advance=last.advance, ascent=last.ascent,
                    descent=last.descent, runes=last.runes,
                    flags=last.flags | GlyphFlags.LINE_BREAK | GlyphFlags.RUN_BREAK,
                    bounds=last.bounds,
                )
                yield from glyphs
                line_no += 1

    def _layout_text(self) -> None:
        self.index.reset()
        it = TextIterator(viewport=Rectangle(Point(), Point(_MAX, _MAX)))
        text = self._decoded()
        for g in self._shape(text):
            if not it.process_glyph(g, True):
                break
            self.index.glyph(g)
        self.graphemes = grapheme_boundaries(text)
        size = it.bounds.size()
        self._dims = Dimensions(size, size.y - it.baseline)

    # positions

    def closest_to_rune(self, rune_idx: int) -> CombinedPos:
        self.make_valid()
        return self.index.closest_to_rune(rune_idx)[0]

    def closest_to_line_col(self, line: int, col: int) -> CombinedPos:
        self.make_valid()
        return self.index.closest_to_line_col(ScreenPos(line=line, col=col))

    def closest_to_xy_graphemes(self, x: int, y: int) -> CombinedPos:
        """Grapheme boundary closest to 26.6 *x* on the line at pixel *y*."""
        self.make_valid()
        pos = self.index.closest_to_xy(x, y)
        first_option = self._move_by_graphemes(pos.runes, 0)
        distance = -1 if first_option > pos.runes else 1
        second_option = self._move_by_graphemes(first_option, distance)
        first = self.closest_to_rune(first_option)
        second = self.closest_to_rune(second_option)
        return second if abs(first.x - x) > abs(second.x - x) else first

    def rune_offset(self, r: int) -> int:
        """Byte offset of the *r*'th rune, clamped to the text."""
        if self._offsets is None:
            self._offsets = [0, *accumulate(len(ch.encode("utf-8")) for ch in self._decoded())]
        r = max(0, min(r, len(self._offsets) - 1))
        return self._offsets[r]

    def byte_offset(self, rune_offset: int) -> int:
        """Byte offset of the rune at *rune_offset*, clamped to the text."""
        return self.rune_offset(self.closest_to_rune(rune_offset).runes)

    def length(self) -> int:
        """Length of the text in runes."""
        self.make_valid()
        return self.closest_to_rune(_MAX).runes

    def text(self) -> str:
        """The whole text."""
        return self._decoded()

    def replace(self, start: int, end: int, s: str) -> int:
        """Replace runes [start, end) with *s*; return the runes inserted."""
        if start > end:
            start, end = end, start
        start_pos = self.closest_to_rune(start)
        end_pos = self.closest_to_rune(end)
        start_off = self.rune_offset(start_pos.runes)
        replace_size = end_pos.runes - start_pos.runes
        sc = len(s)
        new_end = start_pos.runes + sc
        self._source.replace_runes(start_off, replace_size, s)

        def adjust(pos: int) -> int:
            if new_end < pos <= end_pos.runes:
                return new_end
            if end_pos.runes < pos:
                return pos + new_end - end_pos.runes
            return pos

        self.caret_start = adjust(self.caret_start)
        self.caret_end = adjust(self.caret_end)
        self._invalidate()
        return sc

    # scrolling

    def scroll_bounds(self) -> Rectangle:
        """Allowed range of the scroll offset."""
        if self.single_line:
            min_x = 0
            if self.index.lines:
                min_x = min(0, fixed_floor(self.index.lines[0].x_off))
            max_x = self._dims.size.x + min_x - self.view_size.x
            return Rectangle(Point(min_x, 0), Point(max_x, 0))
        return Rectangle(Point(), Point(0, self._dims.size.y - self.view_size.y))

    def scroll_rel(self, dx: int, dy: int) -> None:
        """Scroll by (dx, dy), clamped to the scroll bounds."""
        x = self.scroll_off.x + dx
        y = self.scroll_off.y + dy
        b = self.scroll_bounds()
        x = max(min(x, b.max.x), b.min.x) if x > b.max.x or x < b.min.x else x
        if x > b.max.x:
            x = b.max.x
        if x < b.min.x:
            x = b.min.x
        if y > b.max.y:
            y = b.max.y
        if y < b.min.y:
            y = b.min.y
        self.scroll_off = Point(x, y)

    def scroll_to_caret(self) -> None:
        """Scroll just enough to bring the caret into view."""
        caret = self.closest_to_rune(self.caret_start)
        dist = 0
        if self.single_line:
            d = fixed_floor(caret.x) - self.scroll_off.x
            if d < 0:
                dist = d
            else:
                d = fixed_ceil(caret.x) - (self.scroll_off.x + self.view_size.x)
                if d > 0:
                    dist = d
            self.scroll_rel(dist, 0)
        else:
            miny = caret.y - fixed_ceil(caret.ascent)
            maxy = caret.y + fixed_ceil(caret.descent)
            d = miny - self.scroll_off.y
            if d < 0:
                dist = d
            else:
                d = maxy - (self.scroll_off.y + self.view_size.y)
                if d > 0:
                    dist = d
            self.scroll_rel(0, dist)

    # caret

    def move_coord(self, pos: Point) -> None:
        """Move the caret to the grapheme boundary nearest to *pos*."""
        x = (pos.x + self.scroll_off.x) * 64
        y = pos.y + self.scroll_off.y
        self.caret_start = self.closest_to_xy_graphemes(x, y).runes
        self.caret_xoff = 0

    def caret_pos(self) -> tuple[int, int]:
        """Line and column of the caret."""
        pos = self.closest_to_rune(self.caret_start)
        return pos.line_col.line, pos.line_col.col

    def caret_info(self) -> tuple[Point, int, int]:
        """Caret position relative to the viewport, its ascent and descent."""
        c = self.closest_to_rune(self.caret_start)
        pos = Point(fixed_round(c.x), c.y).sub(self.scroll_off)
        return pos, fixed_ceil(c.ascent), fixed_ceil(c.descent)

    def caret_coords(self) -> tuple[float, float]:
        """Caret coordinates relative to the viewport."""
        pos = self.closest_to_rune(self.caret_start)
        return pos.x / 64 - self.scroll_off.x, float(pos.y - self.scroll_off.y)

    def _update_selection(self, sel_act: SelectionAction) -> None:
        if sel_act == SelectionAction.CLEAR:
            self.clear_selection()

    def _move_by_graphemes(self, start_rune: int, graphemes: int) -> int:
        if not self.graphemes:
            return start_rune
        idx = bisect_left(self.graphemes, start_rune) + graphemes
        idx = min(max(idx, 0), len(self.graphemes) - 1)
        return self.closest_to_rune(self.graphemes[idx]).runes

    def _clamp_to_graphemes(self) -> None:
        self.caret_start = self._move_by_graphemes(self.caret_start, 0)
        self.caret_end = self._move_by_graphemes(self.caret_end, 0)

    def move_lines(self, distance: int, sel_act: SelectionAction) -> None:
        """Move the caret *distance* lines vertically."""
        start = self.closest_to_rune(self.caret_start)
        x = start.x + self.caret_xoff
        pos = self.closest_to_line_col(start.line_col.line + distance, 0)
        pos = self.closest_to_xy_graphemes(x, pos.y)
        self.caret_start = pos.runes
        self.caret_xoff = x - pos.x
        self._update_selection(sel_act)

    def move_pages(self, pages: int, sel_act: SelectionAction) -> None:
        """Move the caret by whole viewport heights."""
        caret = self.closest_to_rune(self.caret_start)
        x = caret.x + self.caret_xoff
        y = caret.y + pages * self.view_size.y
        pos = self.closest_to_xy_graphemes(x, y)
        self.caret_start = pos.runes
        self.caret_xoff = x - pos.x
        self._update_selection(sel_act)

    def move_caret(self, start_delta: int, end_delta: int) -> None:
        """Move caret and selection end by grapheme clusters."""
        self.caret_xoff = 0
        self.caret_start = self._move_by_graphemes(self.caret_start, start_delta)
        self.caret_end = self._move_by_graphemes(self.caret_end, end_delta)

    def move_text_start(self, sel_act: SelectionAction) -> None:
        """Move the caret to the start of the text."""
        caret = self.closest_to_rune(self.caret_end)
        self.caret_start = 0
        self.caret_end = caret.runes
        self.caret_xoff = -caret.x
        self._update_selection(sel_act)
        self._clamp_to_graphemes()

    def move_text_end(self, sel_act: SelectionAction) -> None:
        """Move the caret to the end of the text."""
        caret = self.closest_to_rune(_MAX)
        self.caret_start = caret.runes
        self.caret_xoff = self._max_width * 64 - caret.x
        self._update_selection(sel_act)
        self._clamp_to_graphemes()

    def move_line_start(self, sel_act: SelectionAction) -> None:
        """Move the caret to the start of its line."""
        caret = self.closest_to_rune(self.caret_start)
        caret = self.closest_to_line_col(caret.line_col.line, 0)
        self.caret_start = caret.runes
        self.caret_xoff = -caret.x
        self._update_selection(sel_act)
        self._clamp_to_graphemes()

    def move_line_end(self, sel_act: SelectionAction) -> None:
        """Move the caret to the end of its line."""
        caret = self.closest_to_rune(self.caret_start)
        caret = self.closest_to_line_col(caret.line_col.line, _MAX)
        self.caret_start = caret.runes
        self.caret_xoff = self._max_width * 64 - caret.x
        self._update_selection(sel_act)
        self._clamp_to_graphemes()

    def move_word(self, distance: int, sel_act: SelectionAction) -> None:
        """Move the caret over whitespace-delimited words."""
        words, direction = (-distance, -1) if distance < 0 else (distance, 1)
        caret = self.closest_to_rune(self.caret_start)

        def at_end() -> bool:
            return caret.runes == 0 or caret.runes == self.length()

        def nxt() -> str:
            off = self.rune_offset(caret.runes)
            if direction < 0:
                return self.read_rune_before(off)[0]
            return self.read_rune_at(off)[0]

        def step() -> None:
            nonlocal caret
            self.move_caret(direction, 0)
            caret = self.closest_to_rune(self.caret_start)

        for _ in range(words):
            while nxt().isspace() and not at_end():
                step()
            step()
            while not nxt().isspace() and not at_end():
                step()
        self._update_selection(sel_act)
        self._clamp_to_graphemes()

    # selection

    def selection_len(self) -> int:
        """Length of the selection in runes."""
        return abs(self.caret_start - self.caret_end)

    def selection(self) -> tuple[int, int]:
        """Caret and selection end as rune offsets."""
        return self.caret_start, self.caret_end

    def set_caret(self, start: int, end: int) -> None:
        """Set caret and selection end, clamped to grapheme boundaries."""
        self.caret_start = self.closest_to_rune(start).runes
        self.caret_end = self.closest_to_rune(end).runes
        self._clamp_to_graphemes()

    def selected_text(self) -> str:
        """The selected text."""
        a = self.rune_offset(self.caret_start)
        b = self.rune_offset(self.caret_end)
        start, end = min(a, b), max(a, b)
        if end <= start:
            return ""
        return self._source.read_at(end - start, start).decode("utf-8", errors="replace")

    def clear_selection(self) -> None:
        """Collapse the selection onto the caret."""
        self.caret_end = self.caret_start

    def regions(self, start: int, end: int) -> list[Region]:
        """Visible regions covering runes [start, end)."""
        self.make_valid()
        viewport = Rectangle(self.scroll_off, self.view_size.add(self.scroll_off))
        return self.index.locate(viewport, start, end)

    def truncated(self) -> bool:
        """Whether the shaped text was truncated."""
        return self.index.truncated