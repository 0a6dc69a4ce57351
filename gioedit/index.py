"""Glyph indexing: caret positions, line metrics and selection regions.

Horizontal coordinates and glyph metrics are 26.6 fixed-point integers
(value * 64); vertical baselines are whole pixels.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field, replace
from enum import IntFlag
from typing import Callable

import regex

MAX_INT32 = 2**31 - 1
_MAX_COL = sys.maxsize


def fixed_floor(v: int) -> int:
    """Greatest whole number not above the 26.6 value *v*."""
    return v >> 6


def fixed_ceil(v: int) -> int:
    """Least whole number not below the 26.6 value *v*."""
    return (v + 0x3F) >> 6


def fixed_round(v: int) -> int:
    """Nearest whole number to the 26.6 value *v*, halves rounding up."""
    return (v + 0x20) >> 6


def _div_trunc(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _search(n: int, pred: Callable[[int], bool]) -> int:
    """Smallest index in [0, n) for which *pred* holds, or *n*."""
    lo, hi = 0, n
    while lo < hi:
        mid = (lo + hi) // 2
        if not pred(mid):
            lo = mid + 1
        else:
            hi = mid
    return lo


class GlyphFlags(IntFlag):
    """Properties of a shaped glyph."""

    NONE = 0
    TOWARD_ORIGIN = 1 << 0
    LINE_BREAK = 1 << 1
    RUN_BREAK = 1 << 2
    CLUSTER_BREAK = 1 << 3
    PARAGRAPH_BREAK = 1 << 4
    TRUNCATOR = 1 << 5


@dataclass(frozen=True)
class Point:
    """An integer point."""

    x: int = 0
    y: int = 0

    def add(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def sub(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Rectangle:
    """An axis-aligned rectangle covering [min, max)."""

    min: Point = field(default_factory=Point)
    max: Point = field(default_factory=Point)

    @property
    def width(self) -> int:
        return self.max.x - self.min.x

    @property
    def height(self) -> int:
        return self.max.y - self.min.y

    def size(self) -> Point:
        return Point(self.width, self.height)

    def add(self, p: Point) -> Rectangle:
        return Rectangle(self.min.add(p), self.max.add(p))

    def sub(self, p: Point) -> Rectangle:
        return Rectangle(self.min.sub(p), self.max.sub(p))

    def is_empty(self) -> bool:
        return self.min.x >= self.max.x or self.min.y >= self.max.y

    def intersect(self, other: Rectangle) -> Rectangle:
        r = Rectangle(
            Point(max(self.min.x, other.min.x), max(self.min.y, other.min.y)),
            Point(min(self.max.x, other.max.x), min(self.max.y, other.max.y)),
        )
        return Rectangle() if r.is_empty() else r


@dataclass(frozen=True)
class Glyph:
    """A shaped glyph; x, advance, ascent, descent and bounds are 26.6."""

    x: int = 0
    y: int = 0
    advance: int = 0
    ascent: int = 0
    descent: int = 0
    runes: int = 0
    flags: GlyphFlags = GlyphFlags.NONE
    bounds: Rectangle = field(default_factory=Rectangle)


@dataclass(frozen=True)
class ScreenPos:
    """A position as a line number and a rune column."""

    line: int = 0
    col: int = 0


@dataclass(frozen=True)
class CombinedPos:
    """A caret position: rune offset, line/column and pixel coordinates."""

    runes: int = 0
    line_col: ScreenPos = field(default_factory=ScreenPos)
    x: int = 0
    y: int = 0
    ascent: int = 0
    descent: int = 0
    run_index: int = 0
    toward_origin: bool = False


@dataclass(frozen=True)
class LineMetrics:
    """Size and position of one shaped line."""

    x_off: int = 0
    y_off: int = 0
    width: int = 0
    ascent: int = 0
    descent: int = 0
    glyphs: int = 0


@dataclass(frozen=True)
class Region:
    """A highlight rectangle and the pixels from its baseline to its bottom."""

    bounds: Rectangle = field(default_factory=Rectangle)
    baseline: int = 0


def make_region(line: LineMetrics, y: int, start: int, end: int) -> Region:
    """Rectangle from x *start* to *end* sized by the line's ascent and descent."""
    if start > end:
        start, end = end, start
    return Region(
        bounds=Rectangle(
            Point(fixed_round(start), y - fixed_ceil(line.ascent)),
            Point(fixed_round(end), y + fixed_floor(line.descent)),
        ),
        baseline=fixed_floor(line.descent),
    )


_PARAGRAPH = re.compile(r"[^\n]*\n|[^\n]+")
_GRAPHEME = regex.compile(r"\X")


def grapheme_boundaries(text: str) -> list[int]:
    """Rune offsets of grapheme cluster boundaries in *text*, including 0.

    Text is segmented paragraph by paragraph, each paragraph ending after a
    newline. Empty text has no boundaries.
    """
    boundaries: list[int] = []
    offset = 0
    for paragraph in _PARAGRAPH.findall(text):
        ends = []
        pos = offset
        for cluster in _GRAPHEME.findall(paragraph):
            pos += len(cluster)
            ends.append(pos)
        if ends:
            if not boundaries or boundaries[-1] != offset:
                boundaries.append(offset)
            boundaries.extend(ends)
        offset += len(paragraph)
    return boundaries


class GlyphIndex:
    """Collects shaped glyphs and derives caret positions and line metrics."""

    def __init__(self) -> None:
        self.glyphs: list[Glyph] = []
        self.positions: list[CombinedPos] = []
        self.lines: list[LineMetrics] = []
        self.truncated = False
        self.reset()

    def reset(self) -> None:
        """Forget everything indexed so far."""
        self.glyphs = []
        self.positions = []
        self.lines = []
        self._line_min = 0
        self._line_max = 0
        self._line_glyphs = 0
        self._pos = CombinedPos()
        self._prog = GlyphFlags.NONE
        self._cluster_advance = 0
        self.truncated = False
        self._mid_cluster = False

    def increment_position(self, pos: CombinedPos) -> tuple[CombinedPos, bool]:
        """Position following *pos* and whether the end was reached instead."""
        candidate, index = self.closest_to_rune(pos.runes)
        while candidate != pos and index + 1 < len(self.positions):
            index += 1
            candidate = self.positions[index]
        if index + 1 < len(self.positions):
            return self.positions[index + 1], False
        return candidate, True

    def _insert_position(self, pos: CombinedPos) -> None:
        if self.positions:
            last = self.positions[-1]
            if last.runes == pos.runes and (last.y != pos.y or last.x == pos.x):
                self.positions[-1] = pos
                return
        self.positions.append(pos)

    def glyph(self, gl: Glyph) -> None:
        """Index *gl*, generating caret positions for it."""
        self.glyphs.append(gl)
        self._line_glyphs += 1
        if not self.positions:
            self._line_min = MAX_INT32
            self._line_max = 0
        self._line_min = min(self._line_min, gl.x)
        self._line_max = max(self._line_max, gl.x + gl.advance)

        flags = GlyphFlags(gl.flags)
        needs_new_line = bool(flags & GlyphFlags.LINE_BREAK)
        needs_new_run = bool(flags & GlyphFlags.RUN_BREAK)
        breaks_paragraph = bool(flags & GlyphFlags.PARAGRAPH_BREAK)
        breaks_cluster = bool(flags & GlyphFlags.CLUSTER_BREAK)
        insert_within = breaks_cluster and not breaks_paragraph and gl.runes > 0

        self._prog = flags & GlyphFlags.TOWARD_ORIGIN
        toward = self._prog == GlyphFlags.TOWARD_ORIGIN
        self._pos = replace(self._pos, toward_origin=toward)
        if not self._mid_cluster:
            x = gl.x + gl.advance if toward else gl.x
            self._pos = replace(
                self._pos, x=x, y=gl.y, ascent=gl.ascent, descent=gl.descent
            )
            self._insert_position(self._pos)

        self._mid_cluster = not breaks_cluster

        if breaks_paragraph:
            self._cluster_advance = 0
            self._pos = replace(self._pos, runes=self._pos.runes + gl.runes)
        self._cluster_advance += gl.advance
        if insert_within:
            self._pos = replace(self._pos, y=gl.y, ascent=gl.ascent, descent=gl.descent)
            width = self._cluster_advance
            count = gl.runes
            runes_per_position = 1
            if flags & GlyphFlags.TRUNCATOR:
                count = 1
                runes_per_position = gl.runes
                self.truncated = True
            per_rune = _div_trunc(width, count)
            adjust = 0
            if toward:
                adjust = width
                per_rune = -per_rune
            for i in range(1, count + 1):
                lc = self._pos.line_col
                self._pos = replace(
                    self._pos,
                    x=gl.x + adjust + per_rune * i,
                    runes=self._pos.runes + runes_per_position,
                    line_col=ScreenPos(lc.line, lc.col + runes_per_position),
                )
                self._insert_position(self._pos)
            self._cluster_advance = 0
        if needs_new_run:
            self._pos = replace(self._pos, run_index=self._pos.run_index + 1)
        if needs_new_line:
            last = self.positions[-1]
            self.lines.append(
                LineMetrics(
                    x_off=self._line_min,
                    y_off=gl.y,
                    width=self._line_max - self._line_min,
                    ascent=last.ascent,
                    descent=last.descent,
                    glyphs=self._line_glyphs,
                )
            )
            self._pos = replace(
                self._pos,
                line_col=ScreenPos(self._pos.line_col.line + 1, 0),
                run_index=0,
            )
            self._line_min = MAX_INT32
            self._line_max = 0
            self._line_glyphs = 0

    def closest_to_rune(self, rune_idx: int) -> tuple[CombinedPos, int]:
        """Position at *rune_idx*, or the closest before it, with its index."""
        positions = self.positions
        if not positions:
            return CombinedPos(), 0
        i = _search(len(positions), lambda k: positions[k].runes >= rune_idx)
        if i > 0:
            i -= 1
        closest, closest_i = positions[i], i
        for k in range(i, len(positions)):
            if positions[k].runes == rune_idx:
                return positions[k], k
        return closest, closest_i

    def closest_to_line_col(self, line_col: ScreenPos) -> CombinedPos:
        """Position at the given line and column, or the closest before it."""
        positions = self.positions
        if not positions:
            return CombinedPos()
        target = (line_col.line, line_col.col)
        i = _search(
            len(positions),
            lambda k: (positions[k].line_col.line, positions[k].line_col.col) >= target,
        )
        if i > 0:
            i -= 1
        prior = positions[i]
        if i + 1 >= len(positions):
            return prior
        nxt = positions[i + 1]
        return nxt if nxt.line_col == line_col else prior

    def closest_to_xy(self, x: int, y: int) -> CombinedPos:
        """Position nearest to 26.6 *x* on the first line reaching pixel *y*."""
        positions = self.positions
        if not positions:
            return CombinedPos()
        i = _search(
            len(positions),
            lambda k: positions[k].y + fixed_round(positions[k].descent) >= y,
        )
        if i == len(positions):
            return positions[-1]
        first = positions[i]
        closest = i
        closest_dist = abs(first.x - x)
        line = first.line_col.line
        k = i + 1
        while k < len(positions) and positions[k].line_col.line == line:
            distance = abs(positions[k].x - x)
            if fixed_round(distance) == 0:
                return positions[k]
            if distance < closest_dist:
                closest_dist = distance
                closest = k
            k += 1
        return positions[closest]

    def locate(self, viewport: Rectangle, start_rune: int, end_rune: int) -> list[Region]:
        """Regions covering runes [start_rune, end_rune) relative to *viewport*."""
        if start_rune > end_rune:
            start_rune, end_rune = end_rune, start_rune
        rects: list[Region] = []
        caret_start, _ = self.closest_to_rune(start_rune)
        caret_end, _ = self.closest_to_rune(end_rune)
        first_line = caret_start.line_col.line
        last_line = caret_end.line_col.line

        for line_idx in range(first_line, len(self.lines)):
            if line_idx > last_line:
                break
            pos = self.closest_to_line_col(ScreenPos(line=line_idx))
            if pos.y + fixed_ceil(pos.descent) < viewport.min.y:
                continue
            if pos.y - fixed_ceil(pos.ascent) > viewport.max.y:
                break
            line = self.lines[line_idx]
            if first_line < line_idx < last_line:
                rects.append(make_region(line, pos.y, line.x_off, line.x_off + line.width))
                continue
            sel_start = caret_start
            sel_end = caret_end
            if line_idx != first_line:
                sel_start = self.closest_to_line_col(ScreenPos(line=line_idx))
            if line_idx != last_line:
                sel_end = self.closest_to_line_col(ScreenPos(line=line_idx, col=_MAX_COL))
            rects.extend(self._line_regions(line, pos.y, sel_start, sel_end))

        return [
            Region(bounds=r.bounds.sub(viewport.min), baseline=r.baseline) for r in rects
        ]

    def _line_regions(
        self, line: LineMetrics, y: int, sel_start: CombinedPos, sel_end: CombinedPos
    ) -> list[Region]:
        out: list[Region] = []
        eof = False
        while not eof:
            start_x = sel_start.x
            if sel_start.run_index == sel_end.run_index:
                out.append(make_region(line, y, start_x, sel_end.x))
                break
            direction = sel_start.toward_origin
            previous = sel_start
            while not eof:
                start_run = sel_start.run_index
                while sel_start.run_index == start_run:
                    previous = sel_start
                    sel_start, eof = self.increment_position(sel_start)
                    if eof:
                        out.append(make_region(line, y, start_x, sel_start.x))
                        break
                if eof:
                    break
                if sel_start.toward_origin != direction:
                    out.append(make_region(line, y, start_x, previous.x))
                    break
                if sel_start.run_index == sel_end.run_index:
                    out.append(make_region(line, y, start_x, sel_end.x))
                    return out
        return out