import pytest

from gioedit.editor import ChangeEvent, Editor, MatchRange, Modification
from gioedit.iterator import TextStyle
from gioedit.textview import TextView


def make(text="", **kwargs):
    ed = Editor(**kwargs)
    ed.set_text(text)
    return ed


def test_insert_into_empty_editor():
    ed = Editor()
    assert ed.insert("hello") == len("hello")
    assert ed.text() == "hello"
    assert ed.length() == len("hello")
    assert ed.selection() == (len("hello"), len("hello"))


def test_set_text_moves_caret_to_start():
    ed = make("some text")
    assert ed.text() == "some text"
    assert ed.selection() == (0, 0)


def test_set_text_without_history_cannot_be_undone():
    ed = make("abc")
    assert ed.undo() is None
    assert ed.text() == "abc"


def test_set_text_with_history_can_be_undone():
    ed = Editor()
    ed.set_text("abc", True)
    assert ed.undo() == ChangeEvent()
    assert ed.text() == ""


def test_single_line_replaces_newlines():
    ed = Editor(single_line=True)
    ed.insert("a\nb")
    assert "\n" not in ed.text()
    assert ed.length() == 3


def test_max_len_truncates():
    ed = Editor(max_len=3)
    inserted = ed.insert("hello")
    assert ed.text() == "hello"[:3]
    assert inserted == 3


def test_filter_drops_characters():
    ed = Editor(filter="0123456789")
    ed.insert("a1b2")
    assert ed.text() == "12"


def test_insert_replaces_selection():
    ed = make("abcdef")
    ed.set_caret(1, 4)
    ed.insert("X")
    assert ed.text() == "a" + "X" + "ef"
    assert ed.selection() == (2, 2)


def test_undo_redo_round_trip():
    ed = Editor()
    ed.insert("abc")
    ed.insert("def")
    assert ed.undo() == ChangeEvent()
    assert ed.text() == "abc"
    assert ed.redo() == ChangeEvent()
    assert ed.text() == "abcdef"
    assert ed.redo() is None


def test_undo_everything_then_nothing_left():
    ed = Editor()
    ed.insert("ab")
    ed.insert("cd")
    ed.undo()
    ed.undo()
    assert ed.text() == ""
    assert ed.undo() is None


def test_new_edit_discards_redo_history():
    ed = Editor()
    ed.insert("a")
    ed.insert("b")
    ed.undo()
    ed.insert("c")
    assert ed.redo() is None
    assert ed.text() == "a" + "c"
    assert len(ed.history) == 2


def test_history_records_modification():
    ed = make("abc")
    ed.set_caret(0, 3)
    ed.insert("z")
    assert ed.history == (
        Modification(batch_idx=0, start_rune=0, apply_content="z", reverse_content="abc"),
    )


def test_delete_backward():
    ed = make("abc")
    ed.set_caret(3, 3)
    deleted = ed.delete(-1)
    assert abs(deleted) == 1
    assert ed.text() == "abc"[:-1]


def test_delete_forward():
    ed = make("abc")
    deleted = ed.delete(1)
    assert abs(deleted) == 1
    assert ed.text() == "abc"[1:]


def test_delete_zero_does_nothing():
    ed = make("abc")
    assert ed.delete(0) == 0
    assert ed.text() == "abc"


def test_delete_selection_only():
    ed = make("abcdef")
    ed.set_caret(0, 3)
    assert ed.delete(1) == 3
    assert ed.text() == "abcdef"[3:]
    assert ed.selection_len() == 0


def test_delete_then_undo_restores():
    ed = make("abcdef")
    ed.set_caret(2, 5)
    ed.delete(1)
    ed.undo()
    assert ed.text() == "abcdef"


def test_delete_word_backward():
    ed = make("hello world")
    ed.set_caret(11, 11)
    ed.delete_word(-1)
    assert ed.text() == "hello "


def test_delete_word_zero():
    ed = make("hello world")
    assert ed.delete_word(0) == 0
    assert ed.text() == "hello world"


def test_delete_word_with_selection_deletes_selection():
    ed = make("hello world")
    ed.set_caret(0, 5)
    ed.delete_word(1)
    assert ed.text() == "hello world"[5:]


def test_selected_text_and_len():
    ed = make("abcdef")
    ed.set_caret(1, 4)
    assert ed.selected_text() == "abcdef"[1:4]
    assert ed.selection_len() == 3
    ed.clear_selection()
    assert ed.selected_text() == ""
    assert ed.selection() == (1, 1)


def test_set_caret_clamps_to_text():
    ed = make("abc")
    ed.set_caret(100, 100)
    assert ed.selection() == (3, 3)


def test_move_caret():
    ed = make("abc")
    ed.move_caret(2, 2)
    assert ed.selection() == (2, 2)
    ed.move_caret(-5, -5)
    assert ed.selection() == (0, 0)


def test_replace_all_and_undo_redo_as_group():
    ed = make("foo bar foo")
    ed.set_matches([MatchRange(0, 3), MatchRange(8, 11)])
    assert ed.replace_all("baz") == 2
    assert ed.text() == "baz bar baz"
    assert ed.selection() == (0, 0)
    assert ed.undo() == ChangeEvent()
    assert ed.text() == "foo bar foo"
    assert ed.redo() == ChangeEvent()
    assert ed.text() == "baz bar baz"


def test_replace_all_without_matches():
    ed = make("foo")
    assert ed.replace_all("x") == 0
    assert ed.text() == "foo"


def test_set_matches_clears_selection():
    ed = make("foo bar")
    ed.set_caret(0, 3)
    ed.set_matches([MatchRange(4, 7)])
    assert ed.selection_len() == 0
    assert ed.current_match == 0
    assert ed.matches == (MatchRange(4, 7),)


def test_next_match_selects():
    ed = make("foo bar foo")
    ed.set_matches([MatchRange(0, 3), MatchRange(8, 11)])
    ed.next_match(1)
    assert ed.current_match == 1
    assert ed.selection() == (8, 11)
    assert ed.selected_text() == "foo"


@pytest.mark.parametrize("index", [-1, 2, 10])
def test_next_match_out_of_range_ignored(index):
    ed = make("foo bar foo")
    ed.set_matches([MatchRange(0, 3), MatchRange(8, 11)])
    ed.next_match(index)
    assert ed.current_match == 0
    assert ed.selection() == (0, 0)


def test_caret_pos_on_second_line():
    ed = make("a\nb\nc")
    ed.set_caret(3, 3)
    line, col = ed.caret_pos()
    assert line == 1
    assert col == 1


def test_caret_coords_at_start():
    ed = make("ab")
    x, _ = ed.caret_coords()
    assert x == 0.0


def test_visible_lines_numbers():
    ed = make("a\nb\nc")
    ed.view.layout(800)
    lines = ed.visible_lines()
    assert [line.line_num for line in lines] == [1, 2, 3]
    assert [line.start for line in lines] == sorted(line.start for line in lines)


def test_visible_lines_empty_before_layout():
    ed = make("a\nb")
    assert ed.visible_lines() == []


def test_regions_cover_selection():
    ed = make("abc")
    ed.view.layout(800)
    regions = ed.regions(0, 2)
    assert len(regions) == 1
    assert regions[0].bounds.width > 0


def test_view_port_ratio_full_view():
    ed = make("a\nb\nc")
    ed.view.layout(800)
    assert ed.view_port_ratio() == (0.0, 1.0)


def test_scroll_by_ratio_and_clamp():
    ed = Editor(TextView(view_height=16))
    ed.set_text("a\nb\nc")
    ed.view.layout(800)
    ed.scroll_by_ratio(0.5)
    start, end = ed.view_port_ratio()
    assert start == 0.5
    assert end > start
    ed.scroll_by_ratio(10)
    assert ed.view_port_ratio()[1] == 1.0
    ed.scroll_by_ratio(-10)
    assert ed.view_port_ratio()[0] == 0.0


def test_update_text_styles():
    ed = make("abc")
    styles = [TextStyle(start=0, end=2, color="red")]
    ed.update_text_styles(styles)
    assert ed.text_styles == tuple(styles)


def test_non_ascii_round_trip():
    ed = Editor()
    ed.insert("héllo wörld")
    assert ed.text() == "héllo wörld"
    assert ed.length() == len("héllo wörld")
    ed.set_caret(0, 5)
    assert ed.selected_text() == "héllo"