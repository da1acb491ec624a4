"""
Akari grid editor state (headless).

Holds what a front end needs on top of the model: the focused cell and a status
message. Front ends translate their own events into these calls:

- Click a cell: focus it and toggle it opaque / unmarked.
- Keys 0-4 on a focused opaque cell: set that clue. Backspace: drop the clue.
- Click outside the grid: blur().
- Width/Height fields: resize_from_text().

The game id and viewer link are recomputed from the model on every call.
"""

from dataclasses import dataclass, field
from typing import Tuple, Optional

from akari_model import AkariModel, EMPTY, CLUE_CHARS
from akari_codec import encode_game_id, game_url, RUN_BOUNDARY_VIEWER

KEY_BACKSPACE = "Backspace"


@dataclass
class EditorState:
    model: AkariModel = field(default_factory=AkariModel)
    focus: Optional[Tuple[int, int]] = (0, 0)
    message: str = ""
    boundary: str = RUN_BOUNDARY_VIEWER


def click_cell(editor: EditorState, x: int, y: int) -> None:
    if not editor.model.in_bounds(x, y):
        editor.message = f"({x},{y}) is outside the {editor.model.width}x{editor.model.height} grid."
        return
    editor.focus = (x, y)
    editor.model.toggle(x, y)
    editor.message = editor.model.last_edit.message


def press_key(editor: EditorState, key: str) -> bool:
    if editor.focus is None:
        return False
    x, y = editor.focus
    if editor.model.cell_at(x, y) is None:
        return False

    if key in CLUE_CHARS:
        changed = editor.model.set_label(x, y, int(key))
    elif key == KEY_BACKSPACE:
        changed = editor.model.set_label(x, y, EMPTY)
    else:
        return False
    editor.message = editor.model.last_edit.message
    return changed


def blur(editor: EditorState) -> None:
    editor.focus = None


def resize_from_text(editor: EditorState, width_text: str, height_text: str) -> Tuple[bool, str]:
    try:
        width = int(width_text.strip())
        height = int(height_text.strip())
    except ValueError:
        editor.message = f"Bad size: {width_text!r} x {height_text!r}"
        return False, editor.message
    if width < 1 or height < 1:
        editor.message = "Width and height must be at least 1."
        return False, editor.message

    editor.model.resize(width, height)
    if editor.focus is not None and not editor.model.in_bounds(*editor.focus):
        editor.focus = None

    stranded = len(editor.model.stranded_cells())
    editor.message = editor.model.last_edit.message
    if stranded:
        editor.message += f" ({stranded} marked cells hidden)"
    return True, editor.message


def editor_game_id(editor: EditorState) -> str:
    return encode_game_id(editor.model, editor.boundary)


def editor_game_url(editor: EditorState) -> str:
    return game_url(editor.model, editor.boundary)


def format_focus_info(editor: EditorState) -> str:
    if editor.focus is None:
        return "Selected: none"
    x, y = editor.focus
    cell = editor.model.cell_at(x, y)
    if cell is None:
        return f"Selected: ({x},{y}) unmarked"
    value = "opaque" if cell.label is EMPTY else f"clue {cell.label}"
    return f"Selected: ({x},{y}) {value}"
