"""Keyboard commands and input-method edits applied to an editor."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag

from .editor import ChangeEvent, Editor, EditorEvent, SubmitEvent
from .textview import SelectionAction

NAME_RETURN = "Return"
NAME_ENTER = "Enter"
NAME_TAB = "Tab"
NAME_DELETE_BACKWARD = "DeleteBackward"
NAME_DELETE_FORWARD = "DeleteForward"
NAME_UP_ARROW = "UpArrow"
NAME_DOWN_ARROW = "DownArrow"
NAME_LEFT_ARROW = "LeftArrow"
NAME_RIGHT_ARROW = "RightArrow"
NAME_PAGE_UP = "PageUp"
NAME_PAGE_DOWN = "PageDown"
NAME_HOME = "Home"
NAME_END = "End"


class Modifier(IntFlag):
    """Modifier keys held during a key press."""

    NONE = 0
    SHIFT = 1 << 0
    CTRL = 1 << 1
    ALT = 1 << 2
    SHORTCUT = 1 << 3


@dataclass(frozen=True)
class KeyEvent:
    """A key press: the key's name and the modifiers held."""

    name: str
    modifiers: Modifier = Modifier.NONE


@dataclass
class Clipboard:
    """Text shared by copy, cut and paste."""

    content: str = ""


def _changed(count: int) -> ChangeEvent | None:
    return ChangeEvent() if count != 0 else None


def _shortcut(
    editor: Editor, name: str, mods: Modifier, sel: SelectionAction, clipboard: Clipboard | None
) -> EditorEvent | None:
    view = editor.view
    if name == "V":
        if not editor.read_only and clipboard is not None:
            return _changed(editor.insert(clipboard.content))
    elif name in ("C", "X"):
        selected = editor.selected_text()
        if selected:
            if clipboard is not None:
                clipboard.content = selected
            if name == "X" and not editor.read_only:
                return _changed(editor.delete(1))
    elif name == "A":
        view.set_caret(0, view.length())
    elif name == "Z":
        if not editor.read_only:
            return editor.redo() if mods & Modifier.SHIFT else editor.undo()
    elif name == NAME_HOME:
        view.move_text_start(sel)
    elif name == NAME_END:
        view.move_text_end(sel)
    return None


def handle_key(
    editor: Editor,
    event: KeyEvent,
    clipboard: Clipboard | None = None,
    right_to_left: bool = False,
) -> EditorEvent | None:
    """Apply a key press to *editor* and return the event it produced, if any."""
    name = event.name
    mods = Modifier(event.modifiers)
    if (
        not editor.read_only
        and editor.submit
        and name in (NAME_RETURN, NAME_ENTER)
        and not mods & Modifier.SHIFT
    ):
        return SubmitEvent(text=editor.text())

    editor.scroll_caret = True
    view = editor.view
    direction = -1 if right_to_left else 1
    by_word = bool(mods & Modifier.CTRL)
    sel = SelectionAction.EXTEND if mods & Modifier.SHIFT else SelectionAction.CLEAR

    if mods & Modifier.SHORTCUT:
        return _shortcut(editor, name, mods, sel, clipboard)

    if name in (NAME_RETURN, NAME_ENTER):
        if not editor.read_only:
            return _changed(editor.insert("\n"))
    elif name == NAME_TAB:
        if not editor.read_only:
            return _changed(editor.insert(editor.tab_character))
    elif name in (NAME_DELETE_BACKWARD, NAME_DELETE_FORWARD):
        if not editor.read_only:
            step = -1 if name == NAME_DELETE_BACKWARD else 1
            count = editor.delete_word(step) if by_word else editor.delete(step)
            return _changed(count)
    elif name == NAME_UP_ARROW:
        view.move_lines(-1, sel)
    elif name == NAME_DOWN_ARROW:
        view.move_lines(1, sel)
    elif name in (NAME_LEFT_ARROW, NAME_RIGHT_ARROW):
        step = (-1 if name == NAME_LEFT_ARROW else 1) * direction
        if by_word:
            view.move_word(step, sel)
        else:
            if sel == SelectionAction.CLEAR:
                view.clear_selection()
            view.move_caret(step, step * int(sel))
    elif name == NAME_PAGE_UP:
        view.move_pages(-1, sel)
    elif name == NAME_PAGE_DOWN:
        view.move_pages(1, sel)
    elif name == NAME_HOME:
        view.move_line_start(sel)
    elif name == NAME_END:
        view.move_line_end(sel)
    return None


def apply_edit(editor: Editor, text: str, start: int, end: int) -> EditorEvent | None:
    """Replace runes [start, end) with text typed through an input method.

    With submitting enabled, a newline ends the input and yields a
    :class:`SubmitEvent`; a change made at the same time is reported first
    and the submit event is queued on ``editor.pending``.
    """
    if editor.read_only:
        return None
    editor.scroll_caret = True
    s = text
    submit = False
    if editor.submit:
        i = s.find("\n")
        if i != -1:
            submit = True
            s = s[:i]
    elif editor.single_line:
        s = s.replace("\n", " ")
    editor._replace(start, end, s, True, 0)
    editor.view.move_caret(0, 0)
    if submit:
        submit_event = SubmitEvent(text=editor.text())
        if editor.view.changed():
            editor.pending.append(submit_event)
            return ChangeEvent()
        return submit_event
    return ChangeEvent() if editor.view.changed() else None