"""An editable text area with undo history, find-and-replace and caret control."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from .buffer import EditBuffer
from .index import Region
from .iterator import TextStyle
from .lines import LineInfo, visible_lines
from .textview import TextView


@dataclass(frozen=True)
class ChangeEvent:
    """The text was changed."""


@dataclass(frozen=True)
class SubmitEvent:
    """A carriage return was entered while submitting is enabled."""

    text: str


@dataclass(frozen=True)
class SelectEvent:
    """The selection changed."""


EditorEvent = Union[ChangeEvent, SubmitEvent, SelectEvent]


@dataclass(frozen=True)
class MatchRange:
    """A matched substring, as rune offsets [start, end)."""

    start: int
    end: int


@dataclass(frozen=True)
class Modification:
    """One recorded change to the text, enough to apply or reverse it.

    ``batch_idx`` groups the changes of a replace-all: undo and redo walk
    through a group until they reach the entry with index 0.
    """

    batch_idx: int
    start_rune: int
    apply_content: str
    reverse_content: str


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


class Editor:
    """Editable text with a caret, a selection and undo/redo history.

    ``max_len`` limits the content length in runes (0 means no limit) and
    ``filter`` lists the only characters accepted (empty accepts all).
    """

    def __init__(
        self,
        view: TextView | None = None,
        *,
        single_line: bool = False,
        submit: bool = False,
        read_only: bool = False,
        max_len: int = 0,
        filter: str = "",
        tab_character: str = "",
        keep_focus: bool = False,
    ) -> None:
        self.view = view if view is not None else TextView()
        self._buffer = EditBuffer()
        self.view.set_source(self._buffer)
        self.view.single_line = single_line
        self.submit = submit
        self.read_only = read_only
        self.max_len = max_len
        self.filter = filter
        self.tab_character = tab_character
        self.keep_focus = keep_focus
        self.scroll_caret = False
        self.pending: list[EditorEvent] = []
        self._history: list[Modification] = []
        self._next_history = 0
        self._matches: list[MatchRange] = []
        self.current_match = 0
        self._text_styles: list[TextStyle] = []

    @property
    def single_line(self) -> bool:
        """Whether the text is kept on a single line."""
        return self.view.single_line

    @single_line.setter
    def single_line(self, value: bool) -> None:
        self.view.single_line = value

    @property
    def history(self) -> tuple[Modification, ...]:
        """Recorded modifications, oldest first."""
        return tuple(self._history)

    @property
    def matches(self) -> tuple[MatchRange, ...]:
        """Current find matches."""
        return tuple(self._matches)

    @property
    def text_styles(self) -> tuple[TextStyle, ...]:
        """Styles applied to runs of text."""
        return tuple(self._text_styles)

    # content

    def length(self) -> int:
        """Length of the contents in runes."""
        return self.view.length()

    def text(self) -> str:
        """The contents of the editor."""
        return self.view.text()

    def set_text(self, s: str, add_history: bool = False) -> None:
        """Replace the whole contents with *s* and move the caret to the start."""
        if self.single_line:
            s = s.replace("\n", " ")
        self._replace(0, self.view.length(), s, add_history, 0)
        self.set_caret(0, 0)

    def caret_pos(self) -> tuple[int, int]:
        """Line and column of the caret."""
        return self.view.caret_pos()

    def caret_coords(self) -> tuple[float, float]:
        """Coordinates of the caret relative to the editor."""
        return self.view.caret_coords()

    def delete(self, grapheme_clusters: int) -> int:
        """Delete clusters from the caret; positive deletes forward.

        A selection is deleted and counts as one cluster. Returns the signed
        rune distance between the ends of the deleted range.
        """
        if grapheme_clusters == 0:
            return 0
        start, end = self.view.selection()
        if start != end:
            grapheme_clusters -= _sign(grapheme_clusters)
        self.view.move_caret(0, grapheme_clusters)
        start, end = self.view.selection()
        self._replace(start, end, "", True, 0)
        self.view.move_caret(0, 0)
        self.clear_selection()
        return end - start

    def delete_word(self, distance: int) -> int:
        """Delete *distance* words from the caret; whitespace counts as a word.

        A selection is deleted first and counts as one word.
        """
        if distance == 0:
            return 0
        deleted = 0
        start, end = self.view.selection()
        if start != end:
            deleted = self.delete(1)
            distance -= _sign(distance)
        if distance == 0:
            return deleted

        words, direction = (-distance, -1) if distance < 0 else (distance, 1)
        caret, _ = self.view.selection()

        def at_end(runes: int) -> bool:
            idx = caret + runes * direction
            return idx <= 0 or idx >= self.length()

        def next_rune(runes: int) -> str:
            idx = max(0, min(caret + runes * direction, self.length()))
            off = self.view.byte_offset(idx)
            if direction < 0:
                return self.view.read_rune_before(off)[0]
            return self.view.read_rune_at(off)[0]

        runes = 1
        for _ in range(words):
            want_space = next_rune(runes).isspace()
            r = next_rune(runes)
            while r.isspace() == want_space and not at_end(runes):
                runes += 1
                r = next_rune(runes)
        deleted += self.delete(runes * direction)
        return deleted

    def insert(self, s: str) -> int:
        """Replace the selection with *s*; return the runes inserted."""
        if self.single_line:
            s = s.replace("\n", " ")
        start, end = self.view.selection()
        moves = self._replace(start, end, s, True, 0)
        if end < start:
            start = end
        self.view.move_caret(0, 0)
        self.set_caret(start + moves, start + moves)
        self.scroll_caret = True
        return moves

    # history

    def undo(self) -> ChangeEvent | None:
        """Reverse the last modification, or a whole replace-all group."""
        if not self._history or self._next_history == 0:
            return None

        def undo_once(mod: Modification) -> None:
            replace_end = mod.start_rune + len(mod.apply_content)
            self._replace(mod.start_rune, replace_end, mod.reverse_content, False, 0)
            caret_end = mod.start_rune + len(mod.reverse_content)
            self.set_caret(caret_end, mod.start_rune)
            self._next_history -= 1

        undo_once(self._history[self._next_history - 1])
        while self._next_history >= 1:
            mod = self._history[self._next_history - 1]
            if mod.batch_idx == 0:
                break
            undo_once(mod)
        return ChangeEvent()

    def redo(self) -> ChangeEvent | None:
        """Reapply the next undone modification, or a whole replace-all group."""
        if not self._history or self._next_history == len(self._history):
            return None

        def redo_once(mod: Modification) -> None:
            end = mod.start_rune + len(mod.reverse_content)
            self._replace(mod.start_rune, end, mod.apply_content, False, 0)
            caret_end = mod.start_rune + len(mod.apply_content)
            self.set_caret(caret_end, mod.start_rune)
            self._next_history += 1

        mod = self._history[self._next_history]
        redo_once(mod)
        if mod.batch_idx != 0:
            while self._next_history < len(self._history):
                mod = self._history[self._next_history]
                if mod.batch_idx >= 0:
                    redo_once(mod)
                if mod.batch_idx == 0:
                    break
        return ChangeEvent()

    def _replace(
        self, start: int, end: int, s: str, add_history: bool = True, batch_idx: int = 0
    ) -> int:
        """Replace runes [start, end) with *s*, honouring max_len and filter."""
        length = self.view.length()
        if start > end:
            start, end = end, start
        start = min(start, length)
        end = min(end, length)
        replace_size = end - start

        kept: list[str] = []
        for ch in s:
            if self.max_len > 0 and length - replace_size + len(kept) >= self.max_len:
                break
            if self.filter and ch not in self.filter:
                continue
            kept.append(ch)
        s = "".join(kept)

        if add_history:
            deleted = self.view.text()[start:end]
            del self._history[self._next_history :]
            self._history.append(
                Modification(
                    batch_idx=batch_idx,
                    start_rune=start,
                    apply_content=s,
                    reverse_content=deleted,
                )
            )
            self._next_history += 1

        return self.view.replace(start, end, s)

    # find and replace

    def set_matches(self, matches: Iterable[MatchRange]) -> None:
        """Set the ranges found by a search and clear the selection."""
        self._matches = list(matches)
        self.clear_selection()
        if self._matches:
            self.current_match = 0

    def next_match(self, index: int) -> None:
        """Select the match at *index*; out-of-range indexes are ignored."""
        if not 0 <= index < len(self._matches):
            return
        self.current_match = index
        m = self._matches[index]
        self.set_caret(m.start, m.end)

    def replace_all(self, new_str: str) -> int:
        """Replace every match with *new_str* as one undoable step."""
        if not self._matches:
            return 0
        final_pos = 0
        for idx in reversed(range(len(self._matches))):
            m = self._matches[idx]
            self._replace(m.start, m.end, new_str, True, idx)
            final_pos = m.start
        self.set_caret(final_pos, final_pos)
        return len(self._matches)

    # caret and selection

    def move_caret(self, start_delta: int, end_delta: int) -> None:
        """Move caret and selection end by grapheme clusters."""
        self.view.move_caret(start_delta, end_delta)

    def selection_len(self) -> int:
        """Length of the selection in runes."""
        return self.view.selection_len()

    def selection(self) -> tuple[int, int]:
        """Caret and selection end as rune offsets; start may exceed end."""
        return self.view.selection()

    def set_caret(self, start: int, end: int) -> None:
        """Put the caret at *start* and the selection end at *end*."""
        self.view.set_caret(start, end)
        self.scroll_caret = True

    def selected_text(self) -> str:
        """The selected text."""
        return self.view.selected_text()

    def clear_selection(self) -> None:
        """Collapse the selection onto the caret."""
        self.view.clear_selection()

    def regions(self, start: int, end: int) -> list[Region]:
        """Visible regions covering runes [start, end)."""
        return self.view.regions(start, end)

    # viewport

    def view_port_ratio(self) -> tuple[float, float]:
        """Start and end of the viewport as fractions of the full text height."""
        full = self.view.full_dimensions().size.y
        if full == 0:
            return 0.0, 0.0
        visible = self.view.dimensions().size.y
        off = self.view.scroll_off.y
        return off / full, (off + visible) / full

    def scroll_by_ratio(self, ratio: float) -> None:
        """Scroll vertically by *ratio* of the full text height."""
        full = self.view.full_dimensions().size.y
        self.view.scroll_rel(0, int(full * ratio))

    def update_text_styles(self, styles: Sequence[TextStyle]) -> None:
        """Replace the styles applied to runs of text."""
        self._text_styles = list(styles)

    def visible_lines(self) -> list[LineInfo]:
        """Logical lines within the viewport."""
        return visible_lines(self.view)