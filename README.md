# gioedit

`gioedit` is a headless text editing engine. It holds the text of an editor
and carries out its editing logic, without drawing anything.

## Modules

- `gioedit.buffer` — `EditBuffer`, UTF-8 text addressed by byte offsets.
  `replace_runes` deletes a number of runes (backwards when negative) and
  inserts text; ill-formed input is replaced with U+FFFD. `changed()`
  reports whether the content changed since it was last asked.
- `gioedit.index` — `GlyphIndex`, which turns shaped `Glyph`s into caret
  positions (`CombinedPos`), line metrics and highlight `Region`s, plus
  `grapheme_boundaries` for grapheme-cluster segmentation and the 26.6
  fixed-point helpers `fixed_floor`, `fixed_ceil` and `fixed_round`.
- `gioedit.iterator` — `TextIterator`, which tracks the bounds of glyphs in
  a viewport, and `TextStyle`/`GlyphStyle`/`GlyphSpan` for grouping styled
  glyphs into spans.
- `gioedit.textview` — `TextView`, which lays text out with a simple
  monospace shaper (every rune `char_width` pixels wide, wrapping at the
  layout width unless `single_line` is set) and moves the caret by grapheme
  cluster, word, line, page, line start/end and text start/end, and scrolls.
- `gioedit.lines` — `visible_lines`, `search_for_line_range` and
  `caret_current_line`, giving logical line numbers (`LineInfo`) for the
  visible part of a view.
- `gioedit.editor` — `Editor`, with insert, delete, word deletion,
  selection, undo/redo, search matches and `replace_all` as one undo step,
  plus `max_len` and `filter` limits on what can be entered.
- `gioedit.commands` — `handle_key` and `apply_edit`, which map key presses
  (`KeyEvent` with `Modifier`s) and input-method edits onto an editor, with
  a `Clipboard` for copy, cut and paste.
- `gioedit.style` — `EditorConf`, `EditorStyle` and `new_editor`, and
  `gioedit.colors` with `NRGBA`, `mul_alpha`, `mix`, `disabled` and related
  colour helpers.

## Installation

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Example

```python
from gioedit.editor import Editor, MatchRange

ed = Editor()
ed.set_text("hello world", False)
ed.set_caret(5, 5)
ed.insert(",")
assert ed.text() == "hello, world"

ed.undo()
assert ed.text() == "hello world"
ed.redo()

ed.set_matches([MatchRange(0, 5)])
ed.replace_all("goodbye")
assert ed.text() == "goodbye, world"
```

Key handling goes through `gioedit.commands`:

```python
from gioedit.commands import Clipboard, KeyEvent, Modifier, handle_key

clipboard = Clipboard()
handle_key(ed, KeyEvent("A", Modifier.SHORTCUT), clipboard)
handle_key(ed, KeyEvent("C", Modifier.SHORTCUT), clipboard)
assert clipboard.content == "goodbye, world"
```

Offsets the editor reports and takes are rune offsets (code points). The
buffer itself works in byte offsets of the UTF-8 text.

## What it does not do

`gioedit` draws nothing and opens no window: `EditorStyle` only holds the
colours, font settings and line-number bar settings an application would
draw with. Layout uses a fixed-width shaper rather than real fonts, and
pointer, scrolling gestures and focus handling are left to the application.
There is no command-line program.