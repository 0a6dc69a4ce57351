import pytest

from gioedit.index import (
    CombinedPos,
    Glyph,
    GlyphFlags,
    GlyphIndex,
    LineMetrics,
    Point,
    Rectangle,
    ScreenPos,
    fixed_ceil,
    fixed_floor,
    fixed_round,
    grapheme_boundaries,
    make_region,
)

ADV_PX = 10
ASC_PX = 8
DESC_PX = 2
LINE_GAP = 20
FIRST_BASELINE = 10
BIG_VIEW = Rectangle(Point(0, 0), Point(10_000, 10_000))


def shape(lines):
    index = GlyphIndex()
    for n, line in enumerate(lines):
        y = FIRST_BASELINE + n * LINE_GAP
        for i, ch in enumerate(line):
            flags = GlyphFlags.CLUSTER_BREAK
            advance = ADV_PX * 64
            if ch == "\n":
                flags |= GlyphFlags.PARAGRAPH_BREAK
                advance = 0
            if i == len(line) - 1:
                flags |= GlyphFlags.LINE_BREAK | GlyphFlags.RUN_BREAK
            index.glyph(
                Glyph(
                    x=i * ADV_PX * 64,
                    y=y,
                    advance=advance,
                    ascent=ASC_PX * 64,
                    descent=DESC_PX * 64,
                    runes=1,
                    flags=flags,
                )
            )
    return index


@pytest.fixture
def two_lines():
    return shape(["ab\n", "cd"])


@pytest.mark.parametrize("n", [-3, 0, 1, 7])
def test_fixed_conversions(n):
    assert fixed_floor(n * 64) == n
    assert fixed_floor(n * 64 + 63) == n
    assert fixed_ceil(n * 64) == n
    assert fixed_ceil(n * 64 + 1) == n + 1
    assert fixed_round(n * 64 + 31) == n
    assert fixed_round(n * 64 + 32) == n + 1


def test_positions_cover_every_rune(two_lines):
    assert [p.runes for p in two_lines.positions] == list(range(len("ab\ncd") + 1))
    assert len(two_lines.lines) == 2
    assert [ln.glyphs for ln in two_lines.lines] == [3, 2]
    assert len(two_lines.glyphs) == len("ab\ncd")


def test_line_metrics(two_lines):
    first, second = two_lines.lines
    assert first.y_off == FIRST_BASELINE
    assert second.y_off == FIRST_BASELINE + LINE_GAP
    assert second.width == 2 * ADV_PX * 64
    assert first.ascent == ASC_PX * 64


def test_closest_to_rune(two_lines):
    pos, idx = two_lines.closest_to_rune(4)
    assert pos.runes == 4
    assert idx == 4
    assert pos.line_col == ScreenPos(1, 1)
    last, _ = two_lines.closest_to_rune(10**9)
    assert last.runes == len("ab\ncd")


def test_closest_to_rune_empty():
    assert GlyphIndex().closest_to_rune(3) == (CombinedPos(), 0)


def test_closest_to_line_col(two_lines):
    assert two_lines.closest_to_line_col(ScreenPos(1, 0)).runes == 3
    end_first = two_lines.closest_to_line_col(ScreenPos(0, 10**12))
    assert end_first.runes == 2
    assert end_first.line_col.line == 0


def test_closest_to_xy(two_lines):
    pos = two_lines.closest_to_xy(ADV_PX * 64, FIRST_BASELINE + LINE_GAP)
    assert pos.runes == 4
    below = two_lines.closest_to_xy(0, 10**6)
    assert below == two_lines.positions[-1]
    assert GlyphIndex().closest_to_xy(0, 0) == CombinedPos()


def test_increment_position(two_lines):
    nxt, eof = two_lines.increment_position(two_lines.positions[1])
    assert nxt.runes == 2
    assert eof is False
    last = two_lines.positions[-1]
    same, eof = two_lines.increment_position(last)
    assert eof is True
    assert same == last


def test_locate_single_line(two_lines):
    regions = two_lines.locate(BIG_VIEW, 0, 2)
    assert len(regions) == 1
    bounds = regions[0].bounds
    assert bounds.min == Point(0, FIRST_BASELINE - ASC_PX)
    assert bounds.max == Point(2 * ADV_PX, FIRST_BASELINE + DESC_PX)
    assert regions[0].baseline == DESC_PX


def test_locate_spans_lines_and_is_symmetric(two_lines):
    regions = two_lines.locate(BIG_VIEW, 1, 4)
    assert len(regions) == 2
    assert regions[0].bounds.min.x == ADV_PX
    assert regions[1].bounds.min.x == 0
    assert regions[1].bounds.max.x == ADV_PX
    assert two_lines.locate(BIG_VIEW, 4, 1) == regions


def test_locate_relative_to_viewport(two_lines):
    offset = Point(3, 5)
    moved = two_lines.locate(BIG_VIEW.add(offset), 0, 2)
    plain = two_lines.locate(BIG_VIEW, 0, 2)
    assert [r.bounds for r in moved] == [r.bounds.sub(offset) for r in plain]


def test_locate_skips_lines_above_viewport(two_lines):
    view = Rectangle(Point(0, FIRST_BASELINE + LINE_GAP - 1), Point(10_000, 10_000))
    regions = two_lines.locate(view, 0, 5)
    assert len(regions) == 1


def test_make_region_orders_edges():
    line = LineMetrics(ascent=ASC_PX * 64, descent=DESC_PX * 64)
    a = make_region(line, 50, 640, 0)
    b = make_region(line, 50, 0, 640)
    assert a == b
    assert a.bounds.width == ADV_PX


def test_reset_clears(two_lines):
    two_lines.reset()
    assert two_lines.positions == []
    assert two_lines.lines == []
    assert two_lines.glyphs == []
    assert two_lines.truncated is False


def test_truncator_is_one_position():
    index = GlyphIndex()
    index.glyph(
        Glyph(
            advance=640,
            runes=5,
            flags=GlyphFlags.CLUSTER_BREAK | GlyphFlags.TRUNCATOR,
        )
    )
    assert index.truncated is True
    assert [p.runes for p in index.positions] == [0, 5]


def test_toward_origin_positions_start_at_right_edge():
    index = GlyphIndex()
    index.glyph(
        Glyph(
            advance=640,
            runes=1,
            flags=GlyphFlags.CLUSTER_BREAK | GlyphFlags.TOWARD_ORIGIN,
        )
    )
    first, second = index.positions
    assert first.x == 640
    assert second.x == 0
    assert first.toward_origin is True


def test_rectangle_intersect():
    a = Rectangle(Point(0, 0), Point(10, 10))
    b = Rectangle(Point(5, 5), Point(20, 20))
    assert a.intersect(b) == Rectangle(Point(5, 5), Point(10, 10))
    far = Rectangle(Point(30, 30), Point(40, 40))
    assert a.intersect(far).is_empty()


def test_grapheme_boundaries_plain():
    text = "abc"
    assert grapheme_boundaries(text) == list(range(len(text) + 1))
    assert grapheme_boundaries("") == []


def test_grapheme_boundaries_combining_and_newlines():
    assert grapheme_boundaries("e\u0301x") == [0, 2, 3]
    text = "a\nb"
    assert grapheme_boundaries(text) == list(range(len(text) + 1))
    assert grapheme_boundaries("\r\n") == [0, 2]


def test_grapheme_boundaries_invariants():
    text = "x\u0301y\n\nz"
    bounds = grapheme_boundaries(text)
    assert bounds[0] == 0
    assert bounds[-1] == len(text)
    assert bounds == sorted(set(bounds))