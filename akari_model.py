from dataclasses import dataclass
from typing import List, Tuple, Dict, Optional

# ----------------------------
# Domain model
# ----------------------------

DEFAULT_WIDTH = 4
DEFAULT_HEIGHT = 4

# Label of a marked cell: EMPTY (opaque, no clue) or a clue count 0..MAX_CLUE
EMPTY = None
MAX_CLUE = 4

Label = Optional[int]
ActionName = str

EMPTY_CHARS = ("#", "B")
UNMARKED_CHAR = "."
CLUE_CHARS = tuple(str(n) for n in range(MAX_CLUE + 1))


@dataclass
class MarkedCell:
    x: int
    y: int
    label: Label = EMPTY

    @property
    def is_clue(self) -> bool:
        return self.label is not None


@dataclass
class EditResult:
    changed_cells: List[Tuple[int, int]]
    message: str
    action: ActionName


def is_valid_label(label: Label) -> bool:
    if label is EMPTY:
        return True
    return isinstance(label, int) and not isinstance(label, bool) and 0 <= label <= MAX_CLUE


def label_to_char(label: Label) -> str:
    return "#" if label is EMPTY else str(label)


class AkariModel:
    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> None:
        self.width = 0
        self.height = 0
        self.resize(width, height)

        # Marked cells keyed by (x, y). Cells stranded outside the extents by a
        # shrinking resize are kept here; the encoder never visits them.
        self.cells: Dict[Tuple[int, int], MarkedCell] = {}

        # UI/log support
        self.last_edit: Optional[EditResult] = None

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_at(self, x: int, y: int) -> Optional[MarkedCell]:
        return self.cells.get((x, y))

    def is_marked(self, x: int, y: int) -> bool:
        return (x, y) in self.cells

    def marked_cells(self, include_stranded: bool = False) -> List[MarkedCell]:
        """Marked cells in row-major order (y first, then x)."""
        out = [
            cell for cell in self.cells.values()
            if include_stranded or self.in_bounds(cell.x, cell.y)
        ]
        out.sort(key=lambda cell: (cell.y, cell.x))
        return out

    def stranded_cells(self) -> List[MarkedCell]:
        return [cell for cell in self.marked_cells(include_stranded=True) if not self.in_bounds(cell.x, cell.y)]

    def toggle(self, x: int, y: int) -> bool:
        """Remove the marked cell at (x, y), or mark it as EMPTY. Returns True if a cell was added."""
        key = (x, y)
        if key in self.cells:
            del self.cells[key]
            self.last_edit = EditResult([key], f"Cleared ({x},{y})", "toggle")
            return False
        self.cells[key] = MarkedCell(x=x, y=y, label=EMPTY)
        self.last_edit = EditResult([key], f"Marked ({x},{y})", "toggle")
        return True

    def set_label(self, x: int, y: int, label: Label) -> bool:
        """Replace the label of the marked cell at (x, y). No-op if nothing is marked there."""
        if not is_valid_label(label):
            raise ValueError(f"Invalid label {label!r}: expected None or a clue 0..{MAX_CLUE}.")
        cell = self.cells.get((x, y))
        if cell is None:
            self.last_edit = EditResult([], f"No marked cell at ({x},{y})", "set_label")
            return False
        if cell.label == label:
            self.last_edit = EditResult([], f"Label at ({x},{y}) unchanged", "set_label")
            return False
        cell.label = label
        self.last_edit = EditResult([(x, y)], f"Set ({x},{y}) to {label_to_char(label)}", "set_label")
        return True

    def resize(self, width: int, height: int) -> None:
        # Existing cells are left alone; out-of-bounds ones come back if the grid grows again.
        for name, v in (("width", width), ("height", height)):
            if not isinstance(v, int) or isinstance(v, bool) or v < 1:
                raise ValueError(f"Invalid {name}: {v!r}. Must be a positive integer.")
        self.width = width
        self.height = height
        self.last_edit = EditResult([], f"Resized to {width}x{height}", "resize")

    def clear(self) -> None:
        removed = sorted(self.cells.keys(), key=lambda k: (k[1], k[0]))
        self.cells = {}
        self.last_edit = EditResult(removed, f"Cleared {len(removed)} cells", "clear")

    def parse_puzzle_text(self, text: str) -> Tuple[bool, str]:
        lines = [ln.rstrip("\n") for ln in text.splitlines() if ln.strip() != ""]
        if not lines:
            return False, "Empty input."

        # tokenized if spaces exist, else one char per cell
        grid: List[List[Label]] = []
        marked: List[List[bool]] = []
        for ln in lines:
            stripped = ln.strip()
            if " " in stripped:
                toks = [t for t in stripped.split(" ") if t != ""]
            else:
                toks = list(stripped)
            row: List[Label] = []
            row_marked: List[bool] = []
            for t in toks:
                if t == UNMARKED_CHAR:
                    row.append(EMPTY)
                    row_marked.append(False)
                elif t in EMPTY_CHARS:
                    row.append(EMPTY)
                    row_marked.append(True)
                elif t in CLUE_CHARS:
                    row.append(int(t))
                    row_marked.append(True)
                else:
                    return False, f"Bad token: {t}"
            grid.append(row)
            marked.append(row_marked)

        cols = len(grid[0])
        if any(len(r) != cols for r in grid):
            return False, "Ragged rows: all rows must have the same number of columns."

        self.load_grid(grid, marked)
        return True, "Loaded."

    def load_grid(self, labels: List[List[Label]], marked: List[List[bool]]) -> None:
        """Replace the whole state with a dense grid (row lists, y-major)."""
        self.resize(len(labels[0]), len(labels))
        self.cells = {}
        for y in range(self.height):
            for x in range(self.width):
                if marked[y][x]:
                    self.cells[(x, y)] = MarkedCell(x=x, y=y, label=labels[y][x])
        self.last_edit = EditResult(
            [(c.x, c.y) for c in self.marked_cells()],
            f"Loaded {self.width}x{self.height} grid",
            "load",
        )

    def to_text(self) -> str:
        lines = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                cell = self.cells.get((x, y))
                row.append(UNMARKED_CHAR if cell is None else label_to_char(cell.label))
            lines.append("".join(row))
        return "\n".join(lines) + "\n"

    def snapshot(self) -> Dict[str, object]:
        """Return a self-contained, JSON-friendly snapshot of the current state.

        Stranded cells are included so that restore() followed by a resize back up
        brings them back, exactly like the live model.
        """
        return {
            "width": self.width,
            "height": self.height,
            "cells": [[c.x, c.y, c.label] for c in self.marked_cells(include_stranded=True)],
        }

    def restore(self, state: Dict[str, object]) -> None:
        """Restore a state previously produced by snapshot()."""
        width = state.get("width")
        height = state.get("height")
        if not isinstance(width, int) or not isinstance(height, int):
            raise ValueError("Invalid snapshot: missing/invalid 'width' or 'height'.")

        cells = state.get("cells")
        if not isinstance(cells, list):
            raise ValueError("Invalid snapshot: missing 'cells'.")

        restored: Dict[Tuple[int, int], MarkedCell] = {}
        for entry in cells:
            if not isinstance(entry, (list, tuple)) or len(entry) != 3:
                raise ValueError(f"Invalid snapshot cell: {entry!r}")
            x, y, label = entry
            for v in (x, y):
                if not isinstance(v, int) or isinstance(v, bool):
                    raise ValueError(f"Invalid snapshot coordinate: {v!r}")
            if not is_valid_label(label):
                raise ValueError(f"Invalid snapshot label: {label!r}")
            restored[(x, y)] = MarkedCell(x=x, y=y, label=label)

        self.resize(width, height)
        self.cells = restored
        self.last_edit = None
