import pytest
import json
import glob
import sys
import os

# Add project root to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from akari_model import AkariModel
from akari_codec import encode_game_id, decode_game_id

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

PUZZLE_FILES = sorted(glob.glob(os.path.join(PROJECT_ROOT, 'puzzles', '*.lu.txt')))


def test_puzzle_files_present():
    assert PUZZLE_FILES, "No puzzle files found under puzzles/"


@pytest.mark.parametrize("grid_path", PUZZLE_FILES, ids=os.path.basename)
def test_puzzle_matches_reference(grid_path):
    ref_path = grid_path + ".reference.json"
    if not os.path.exists(ref_path):
        pytest.fail(f"Reference file not found: {ref_path}")

    with open(ref_path, 'r') as f:
        reference = json.load(f)
    with open(grid_path, 'r') as f:
        content = f.read()

    model = AkariModel()
    ok, msg = model.parse_puzzle_text(content)
    assert ok, msg

    assert encode_game_id(model) == reference['game_id']
    assert (model.width, model.height) == (reference['width'], reference['height'])
    assert len(model.marked_cells()) == reference['marked_cells']

    decoded = decode_game_id(reference['game_id'])
    assert decoded.to_text() == model.to_text()
