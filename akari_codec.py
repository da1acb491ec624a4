import re
from typing import Optional

from akari_model import AkariModel, MarkedCell, EMPTY, CLUE_CHARS

# ----------------------------
# Game id format: "<width>x<height>:<body>"
# ----------------------------
#
# body, in row-major order:
#   'B'        opaque cell without a clue
#   '0'..'4'   opaque cell with that clue
#   'a'..'z'   run of 1..26 unmarked cells; consecutive letters add up

VIEWER_URL = "https://www.chiark.greenend.org.uk/~sgtatham/puzzles/js/lightup.html"

EMPTY_TOKEN = "B"
RUN_ALPHABET = 26
RUN_BASE = ord("a") - 1  # 96: 'a' is a run of 1

# How a run whose length is an exact multiple of 26 ends.
# viewer: "z" * k and nothing else, which is what the viewer parses.
# legacy: "z" * k followed by chr(96) ('`'), the historical editor output.
RUN_BOUNDARY_VIEWER = "viewer"
RUN_BOUNDARY_LEGACY = "legacy"
RUN_BOUNDARIES = (RUN_BOUNDARY_VIEWER, RUN_BOUNDARY_LEGACY)

LEGACY_TERMINATOR = chr(RUN_BASE)

_HEADER_RE = re.compile(r"([0-9]+)x([0-9]+):")
# Header sizes are plain decimals with no leading zeros and at most this many digits
MAX_HEADER_DIGITS = 6


class MalformedIdentifier(ValueError):
    def __init__(self, message: str, position: Optional[int] = None, char: Optional[str] = None) -> None:
        self.position = position
        self.char = char
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)


def _check_boundary(boundary: str) -> None:
    if boundary not in RUN_BOUNDARIES:
        raise ValueError(f"Unknown run boundary policy: {boundary!r}. Expected one of {RUN_BOUNDARIES}.")


def serialize_run(run: int, boundary: str = RUN_BOUNDARY_VIEWER) -> str:
    """Encode a run of `run` unmarked cells as 'z' * (run // 26) plus a final letter."""
    _check_boundary(boundary)
    if run < 1:
        raise ValueError(f"Run length must be >= 1, got {run}.")
    leading_zs = run // RUN_ALPHABET
    rest = run - RUN_ALPHABET * leading_zs
    if rest == 0 and boundary == RUN_BOUNDARY_VIEWER:
        return "z" * leading_zs
    return "z" * leading_zs + chr(RUN_BASE + rest)


def cell_token(cell: MarkedCell) -> str:
    return EMPTY_TOKEN if cell.label is EMPTY else str(cell.label)


def encode_game_id(model: AkariModel, boundary: str = RUN_BOUNDARY_VIEWER) -> str:
    _check_boundary(boundary)
    parts = [f"{model.width}x{model.height}:"]
    current_run = 0
    for y in range(model.height):
        for x in range(model.width):
            cell = model.cell_at(x, y)
            if cell is None:
                current_run += 1
                continue
            if current_run > 0:
                parts.append(serialize_run(current_run, boundary))
            parts.append(cell_token(cell))
            current_run = 0

    if current_run > 0:
        parts.append(serialize_run(current_run, boundary))
    return "".join(parts)


def decode_game_id(game_id: str, boundary: str = RUN_BOUNDARY_VIEWER) -> AkariModel:
    """Parse a game id back into a model.

    Raises MalformedIdentifier when the header is not "<w>x<h>:" with positive
    integers, when the body holds an unknown character, or when the body does
    not cover exactly w*h cells.
    """
    _check_boundary(boundary)
    text = game_id.strip()
    m = _HEADER_RE.match(text)
    if not m:
        raise MalformedIdentifier(f"Bad header in {text!r}: expected '<width>x<height>:'", position=0)
    for digits in m.groups():
        if len(digits) > MAX_HEADER_DIGITS:
            raise MalformedIdentifier(f"Grid size has more than {MAX_HEADER_DIGITS} digits", position=0)
        if len(digits) > 1 and digits.startswith("0"):
            raise MalformedIdentifier(f"Grid size {digits!r} has a leading zero", position=0)
    width, height = int(m.group(1)), int(m.group(2))
    if width < 1 or height < 1:
        raise MalformedIdentifier(f"Grid size must be positive, got {width}x{height}", position=0)

    model = AkariModel(width, height)
    total = width * height
    pos = 0
    run = 0
    run_start: Optional[int] = None

    def advance(run_len: int, at: int) -> int:
        if pos + run_len > total:
            raise MalformedIdentifier(
                f"Run of {run_len} overflows the {width}x{height} grid", position=at, char=text[at]
            )
        return pos + run_len

    for i in range(m.end(), len(text)):
        ch = text[i]
        if "a" <= ch <= "z" or (ch == LEGACY_TERMINATOR and boundary == RUN_BOUNDARY_LEGACY):
            if run_start is None:
                run_start = i
            run += ord(ch) - RUN_BASE
            if ch != "z":
                # any letter but 'z' ends the run
                pos = advance(run, run_start)
                run = 0
                run_start = None
            continue

        if ch == EMPTY_TOKEN or ch in CLUE_CHARS:
            if run_start is not None:
                pos = advance(run, run_start)
                run = 0
                run_start = None
            if pos >= total:
                raise MalformedIdentifier(f"Cell {ch!r} past the end of the {width}x{height} grid", position=i, char=ch)
            x, y = pos % width, pos // width
            model.cells[(x, y)] = MarkedCell(x=x, y=y, label=EMPTY if ch == EMPTY_TOKEN else int(ch))
            pos += 1
            continue

        raise MalformedIdentifier(f"Unexpected character {ch!r}", position=i, char=ch)

    if run_start is not None:
        pos = advance(run, run_start)

    if pos != total:
        raise MalformedIdentifier(f"Body covers {pos} of {total} cells", position=len(text))

    model.last_edit = None
    return model


def game_url(model: AkariModel, boundary: str = RUN_BOUNDARY_VIEWER) -> str:
    return f"{VIEWER_URL}#{encode_game_id(model, boundary)}"


def game_id_from_url(text: str) -> str:
    """Return the game id from a viewer link, or the text itself if it has no '#'."""
    text = text.strip()
    if "#" in text:
        return text.split("#", 1)[1]
    return text
