"""Visual configuration of an editor: colours, fonts and the line number bar."""

from __future__ import annotations

from dataclasses import dataclass, field

from .colors import NRGBA, mul_alpha
from .editor import Editor

_DEFAULT_LINE_NUM_PADDING = 32.0


def _zero() -> NRGBA:
    return NRGBA(r=0, g=0, b=0, a=0)


def _with_alpha(c: NRGBA, alpha: int) -> NRGBA:
    return NRGBA(r=c.r, g=c.g, b=c.b, a=alpha)


@dataclass
class EditorConf:
    """Settings from which an :class:`EditorStyle` is built."""

    text_color: NRGBA = field(default_factory=_zero)
    bg: NRGBA = field(default_factory=_zero)
    selection_color: NRGBA = field(default_factory=_zero)
    line_highlight_color: NRGBA = field(default_factory=_zero)
    line_number_color: NRGBA = field(default_factory=_zero)
    text_match_color: NRGBA = field(default_factory=_zero)
    type_face: str = ""
    text_size: float = 0.0
    weight: int = 0
    line_height: float = 0.0
    line_height_scale: float = 0.0
    color_scheme: str = ""
    show_line_num: bool = False
    line_num_padding: float = 0.0
    tab_character: str = ""


@dataclass
class LineNumberBar:
    """Appearance of the line number column."""

    line_height: float = 0.0
    line_height_scale: float = 0.0
    color: NRGBA = field(default_factory=_zero)
    typeface: str = ""
    text_size: float = 0.0
    padding: float = _DEFAULT_LINE_NUM_PADDING


@dataclass
class EditorStyle:
    """An editor together with the colours and font used to draw it."""

    editor: Editor
    typeface: str = ""
    weight: int = 0
    line_height: float = 0.0
    line_height_scale: float = 0.0
    text_size: float = 0.0
    color: NRGBA = field(default_factory=_zero)
    hint: str = ""
    hint_color: NRGBA = field(default_factory=_zero)
    selection_color: NRGBA = field(default_factory=_zero)
    line_highlight_color: NRGBA = field(default_factory=_zero)
    text_match_color: NRGBA = field(default_factory=_zero)
    show_line_num: bool = False
    line_bar: LineNumberBar = field(default_factory=LineNumberBar)


def new_editor(editor: Editor, conf: EditorConf, hint: str) -> EditorStyle:
    """Style *editor* from *conf*, showing *hint* while it is empty."""
    editor.tab_character = conf.tab_character or "\t"

    bar = LineNumberBar(
        line_height=conf.line_height,
        line_height_scale=conf.line_height_scale,
        color=conf.line_number_color,
        typeface=conf.type_face,
        text_size=conf.text_size,
        padding=conf.line_num_padding,
    )
    if conf.line_num_padding <= 0:
        bar.padding = _DEFAULT_LINE_NUM_PADDING
    if conf.line_number_color == _zero():
        bar.color = _with_alpha(conf.text_color, 0xB6)

    return EditorStyle(
        editor=editor,
        typeface=conf.type_face,
        weight=conf.weight,
        line_height_scale=conf.line_height_scale,
        text_size=conf.text_size,
        color=conf.text_color,
        hint=hint,
        hint_color=mul_alpha(conf.text_color, 0xBB),
        selection_color=mul_alpha(conf.selection_color, 0x60),
        line_highlight_color=mul_alpha(conf.line_highlight_color, 0x25),
        text_match_color=conf.text_match_color,
        show_line_num=conf.show_line_num,
        line_bar=bar,
    )