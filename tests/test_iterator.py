from gioedit.index import Glyph, GlyphFlags, Point, Rectangle
from gioedit.iterator import GlyphSpan, GlyphStyle, TextIterator


def _glyph(x=0, y=20, adv=10):
    return Glyph(x=x * 64, y=y, advance=adv * 64, ascent=10 * 64, descent=3 * 64, runes=1,
                 flags=GlyphFlags.CLUSTER_BREAK)


def test_visible_glyph_sets_bounds():
    it = TextIterator(viewport=Rectangle(Point(0, 0), Point(100, 100)))
    assert it.process_glyph(_glyph(), True) is True
    assert it.visible
    assert it.bounds == Rectangle(Point(0, 20 - 10), Point(10, 20 + 3))
    assert it.baseline == 20


def test_bounds_grow_with_glyphs():
    it = TextIterator(viewport=Rectangle(Point(0, 0), Point(100, 100)))
    it.process_glyph(_glyph(x=0), True)
    it.process_glyph(_glyph(x=10), True)
    assert it.bounds.max.x == 20


def test_glyph_below_viewport_stops():
    it = TextIterator(viewport=Rectangle(Point(0, 0), Point(100, 5)))
    it.process_glyph(_glyph(y=0), True)
    assert it.process_glyph(_glyph(y=500), True) is False
    assert not it.visible


def test_not_ok_returns_false():
    it = TextIterator(viewport=Rectangle(Point(0, 0), Point(100, 100)))
    assert it.process_glyph(_glyph(), False) is False


def test_truncator_records_runes():
    it = TextIterator(viewport=Rectangle(Point(0, 0), Point(100, 100)), max_lines=1)
    g = Glyph(runes=7, flags=GlyphFlags.TRUNCATOR | GlyphFlags.CLUSTER_BREAK)
    it.process_glyph(g, True)
    assert it.truncated == 7


def test_group_glyphs_by_style():
    it = TextIterator()
    line = [GlyphStyle(_glyph(x=0), "a"), GlyphStyle(_glyph(x=10), "a"),
            GlyphStyle(_glyph(x=20), "b")]
    spans = it.group_glyphs(line)
    assert [len(s.glyphs) for s in spans] == [2, 1]
    assert [s.fg for s in spans] == ["a", "b"]
    assert spans[1].offset == 20.0


def test_group_empty_line():
    assert TextIterator().group_glyphs([]) == []


def test_bg_rect():
    span = GlyphSpan(glyphs=[_glyph(), _glyph(x=10)])
    assert span.bg_rect() == Rectangle(Point(0, -10), Point(20, 3))
    assert GlyphSpan().bg_rect() == Rectangle()