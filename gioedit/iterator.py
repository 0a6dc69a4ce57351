"""Text bounds tracking and grouping of styled glyphs into spans."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .index import (
    Glyph,
    GlyphFlags,
    Point,
    Rectangle,
    fixed_ceil,
    fixed_floor,
)


def _fixed_to_float(v: int) -> float:
    return v / 64.0


@dataclass
class TextStyle:
    """Colouring applied to the runes from *start* to *end*."""

    line: int = 0
    start: int = 0
    end: int = 0
    color: Any = None
    background: Any = None


@dataclass(frozen=True)
class GlyphStyle:
    """A glyph with its foreground and background materials."""

    g: Glyph
    fg: Any = None
    bg: Any = None


@dataclass
class GlyphSpan:
    """Adjacent glyphs sharing the same foreground and background."""

    glyphs: list[Glyph] = field(default_factory=list)
    fg: Any = None
    bg: Any = None
    offset: float = 0.0

    def _add_first(self, s: GlyphStyle, line_off: float) -> None:
        self.glyphs.append(s.g)
        self.fg = s.fg
        self.bg = s.bg
        self.offset = _fixed_to_float(s.g.x) - line_off

    def bg_rect(self) -> Rectangle:
        """Background rectangle of the span, relative to its first glyph."""
        if not self.glyphs:
            return Rectangle()
        min_y = 0
        max_y = 0
        max_x = 0
        for g in self.glyphs:
            min_y = min(min_y, -fixed_ceil(g.ascent))
            max_y = max(max_y, fixed_ceil(g.descent))
            max_x += fixed_ceil(g.advance)
        return Rectangle(Point(0, min_y), Point(max_x, max_y))


@dataclass
class TextIterator:
    """Tracks the bounding box and padding of glyphs within a viewport."""

    viewport: Rectangle = field(default_factory=Rectangle)
    max_lines: int = 0
    truncated: int = 0
    lines_seen: int = 0
    line_off: tuple[float, float] = (0.0, 0.0)
    padding: Rectangle = field(default_factory=Rectangle)
    bounds: Rectangle = field(default_factory=Rectangle)
    visible: bool = False
    first: bool = False
    baseline: int = 0

    def process_glyph(self, g: Glyph, ok: bool) -> bool:
        """Account for *g*; return whether it is visible or before the viewport."""
        flags = GlyphFlags(g.flags)
        if self.max_lines > 0:
            if flags & GlyphFlags.TRUNCATOR and flags & GlyphFlags.CLUSTER_BREAK:
                self.truncated = g.runes
            if flags & GlyphFlags.LINE_BREAK:
                self.lines_seen += 1
            if self.lines_seen == self.max_lines and flags & GlyphFlags.PARAGRAPH_BREAK:
                return False

        pmin, pmax = self.padding.min, self.padding.max
        self.padding = Rectangle(
            Point(
                min(pmin.x, fixed_floor(g.bounds.min.x)),
                min(pmin.y, fixed_floor(g.bounds.min.y + g.ascent)),
            ),
            Point(
                max(pmax.x, fixed_ceil(g.bounds.max.x - g.advance)),
                max(pmax.y, fixed_ceil(g.bounds.max.y - g.descent)),
            ),
        )
        logical = Rectangle(
            Point(fixed_floor(g.x), g.y - fixed_ceil(g.ascent)),
            Point(fixed_ceil(g.x + g.advance), g.y + fixed_ceil(g.descent)),
        )
        if not self.first:
            self.first = True
            self.baseline = g.y
            self.bounds = logical

        vp = self.viewport
        above = logical.max.y < vp.min.y
        below = logical.min.y > vp.max.y
        left = logical.max.x < vp.min.x
        right = logical.min.x > vp.max.x
        self.visible = not (above or below or left or right)
        if self.visible:
            b = self.bounds
            self.bounds = Rectangle(
                Point(min(b.min.x, logical.min.x), min(b.min.y, logical.min.y)),
                Point(max(b.max.x, logical.max.x), max(b.max.y, logical.max.y)),
            )
        return ok and not below

    def group_glyphs(self, line: list[GlyphStyle]) -> list[GlyphSpan]:
        """Split a line of styled glyphs into spans of equal style."""
        spans: list[GlyphSpan] = []
        origin = self.viewport.min.x + self.line_off[0]
        for s in line:
            if spans and spans[-1].fg == s.fg and spans[-1].bg == s.bg:
                spans[-1].glyphs.append(s.g)
                continue
            span = GlyphSpan()
            span._add_first(s, origin)
            spans.append(span)
        return spans