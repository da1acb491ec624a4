import json
import shutil
import sys
import os

# Add project root to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import akari_tool
from akari_codec import VIEWER_URL

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
CLASSIC = os.path.join(PROJECT_ROOT, 'puzzles', 'classic_7x7.lu.txt')


def write_puzzle(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_encode_mode_prints_game_id(capsys):
    assert akari_tool.main([CLASSIC]) == 0
    assert capsys.readouterr().out == "7x7:bBi1a2iBiBa0i2b\n"


def test_url_mode_prints_viewer_link(capsys):
    assert akari_tool.main([CLASSIC, "--mode", "url"]) == 0
    assert capsys.readouterr().out == VIEWER_URL + "#7x7:bBi1a2iBiBa0i2b\n"


def test_decode_mode_accepts_link(capsys):
    assert akari_tool.main([VIEWER_URL + "#3x2:Bb1b", "--mode", "decode"]) == 0
    assert capsys.readouterr().out == "#..\n1..\n"


def test_decode_mode_reports_malformed_id(capsys):
    assert akari_tool.main(["3x2:Bb9", "--mode", "decode"]) == 1
    out = capsys.readouterr().out
    assert out.startswith("Error: Unexpected character '9'")


def test_legacy_runs_flag(tmp_path, capsys):
    path = write_puzzle(tmp_path, "row.lu.txt", "." * 26 + "\n")
    assert akari_tool.main([path]) == 0
    assert akari_tool.main([path, "--legacy-runs"]) == 0
    assert capsys.readouterr().out == "26x1:z\n26x1:z`\n"

    assert akari_tool.main(["26x1:z`", "--mode", "decode", "--legacy-runs"]) == 0
    assert capsys.readouterr().out == "." * 26 + "\n"


def test_missing_and_bad_files(tmp_path, capsys):
    assert akari_tool.main([str(tmp_path / "nope.lu.txt")]) == 1
    assert "not found" in capsys.readouterr().out

    path = write_puzzle(tmp_path, "bad.lu.txt", "..\n.7\n")
    assert akari_tool.main([path]) == 1
    assert "Bad token: 7" in capsys.readouterr().out


def test_generate_then_test_directory(tmp_path, capsys):
    shutil.copy(CLASSIC, tmp_path / "classic_7x7.lu.txt")
    write_puzzle(tmp_path, "small.lu.txt", "2.\n.#\n")

    assert akari_tool.main([str(tmp_path), "--mode", "generate"]) == 0
    with open(tmp_path / "small.lu.txt.reference.json") as f:
        assert json.load(f) == {"game_id": "2x2:2bB", "height": 2, "marked_cells": 2, "width": 2}

    capsys.readouterr()
    assert akari_tool.main([str(tmp_path), "--mode", "test"]) == 0
    out = capsys.readouterr().out
    assert "2/2 passed" in out


def test_test_mode_flags_mismatch(tmp_path, capsys):
    path = write_puzzle(tmp_path, "small.lu.txt", "2.\n.#\n")
    akari_tool.generate_reference(path)
    write_puzzle(tmp_path, "small.lu.txt", "2.\n..\n")

    row = akari_tool.check_reference(path)
    assert row["status"] == "FAIL"
    assert row["cur"] == "2x2:2c"
    assert row["ref"] == "2x2:2bB"
    assert "Reference game_id decodes to a different grid." in row["logs"]

    assert akari_tool.main([path, "--mode", "test"]) == 1
    assert "0/1 passed" in capsys.readouterr().out


def test_test_mode_without_reference(tmp_path):
    path = write_puzzle(tmp_path, "small.lu.txt", "2.\n.#\n")
    row = akari_tool.check_reference(path)
    assert row["status"] == "NO REF"


def test_test_mode_on_empty_directory(tmp_path, capsys):
    assert akari_tool.main([str(tmp_path), "--mode", "test"]) == 1
    assert "No '.lu.txt' files" in capsys.readouterr().out


def test_shipped_puzzles_match_references(capsys):
    assert akari_tool.main([os.path.join(PROJECT_ROOT, 'puzzles'), "--mode", "test"]) == 0


def test_decode_mode_reports_oversized_header(capsys):
    assert akari_tool.main(["1" * 5000 + "x1:a", "--mode", "decode"]) == 1
    assert capsys.readouterr().out.startswith("Error: Grid size has more than")


def test_generate_mode_on_empty_directory(tmp_path, capsys):
    assert akari_tool.main([str(tmp_path), "--mode", "generate"]) == 1
    assert "No '.lu.txt' files" in capsys.readouterr().out
    assert list(tmp_path.iterdir()) == []
