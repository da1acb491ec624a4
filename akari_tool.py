import os
import sys
import json
import glob
import argparse
from typing import Dict, Any, List, Optional

from akari_model import AkariModel
from akari_codec import (
    encode_game_id,
    decode_game_id,
    game_url,
    game_id_from_url,
    MalformedIdentifier,
    RUN_BOUNDARY_LEGACY,
    RUN_BOUNDARY_VIEWER,
)

PUZZLE_SUFFIX = ".lu.txt"
REFERENCE_SUFFIX = ".reference.json"


class ToolError(Exception):
    pass


def load_puzzle(grid_path: str) -> AkariModel:
    model = AkariModel()
    try:
        with open(grid_path, 'r') as f:
            content = f.read()
    except FileNotFoundError:
        raise ToolError(f"File '{grid_path}' not found.")

    success, msg = model.parse_puzzle_text(content)
    if not success:
        raise ToolError(f"Error parsing grid '{grid_path}': {msg}")
    return model


def encode_puzzle(grid_path: str, boundary: str = RUN_BOUNDARY_VIEWER) -> Dict[str, Any]:
    """Loads a grid file and returns its identifier and stats."""
    model = load_puzzle(grid_path)
    return {
        "game_id": encode_game_id(model, boundary),
        "width": model.width,
        "height": model.height,
        "marked_cells": len(model.marked_cells()),
    }


def get_reference_path(grid_path: str) -> str:
    return grid_path + REFERENCE_SUFFIX


def find_puzzle_files(target: str) -> List[str]:
    if os.path.isdir(target):
        return sorted(glob.glob(os.path.join(target, "**", "*" + PUZZLE_SUFFIX), recursive=True))
    return [target]


def generate_reference(grid_path: str, boundary: str = RUN_BOUNDARY_VIEWER) -> str:
    """Encodes the grid and saves the result as a reference JSON."""
    result = encode_puzzle(grid_path, boundary)
    ref_path = get_reference_path(grid_path)
    with open(ref_path, 'w') as f:
        json.dump(result, f, indent=2, sort_keys=True)
        f.write("\n")
    return ref_path


def check_reference(grid_path: str, boundary: str = RUN_BOUNDARY_VIEWER) -> Dict[str, Any]:
    """
    Encodes the grid and compares with the existing reference JSON.
    Returns a row for the summary table: name, cur, ref, status, logs.
    """
    row: Dict[str, Any] = {"name": os.path.basename(grid_path), "cur": "-", "ref": "-", "logs": []}
    try:
        current = encode_puzzle(grid_path, boundary)
    except ToolError as e:
        row["status"] = "ERROR"
        row["logs"].append(str(e))
        return row
    row["cur"] = current["game_id"]

    ref_path = get_reference_path(grid_path)
    try:
        with open(ref_path, 'r') as f:
            reference = json.load(f)
    except FileNotFoundError:
        row["status"] = "NO REF"
        row["logs"].append(f"Reference file '{ref_path}' not found. Run in 'generate' mode first.")
        return row
    except json.JSONDecodeError:
        row["status"] = "BAD REF"
        row["logs"].append(f"Reference file '{ref_path}' is not a valid JSON.")
        return row
    row["ref"] = reference.get("game_id", "-")

    if current == reference:
        row["status"] = "PASS"
        return row

    row["status"] = "FAIL"
    for key in sorted(set(current) | set(reference)):
        if current.get(key) != reference.get(key):
            row["logs"].append(f"{key}: reference={reference.get(key)!r} current={current.get(key)!r}")

    # The decoded reference must still describe the same grid
    try:
        decoded = decode_game_id(str(reference.get("game_id", "")), boundary)
        if decoded.to_text() != load_puzzle(grid_path).to_text():
            row["logs"].append("Reference game_id decodes to a different grid.")
    except MalformedIdentifier as e:
        row["logs"].append(f"Reference game_id is malformed: {e}")
    return row


def print_reference_summary(rows: List[Dict[str, Any]]) -> None:
    """Prints a table comparing current identifiers with references."""
    header = f"{'Puzzle':<40} | {'Status':<8} | {'Current':<30} | {'Reference':<30}"
    width = len(header)
    print("\n" + "=" * width)
    title = 'REFERENCE CHECK SUMMARY'
    print(f"{title:^{width}}")
    print("=" * width)
    print(header)
    print("-" * width)
    for row in rows:
        print(f"{row['name']:<40} | {row['status']:<8} | {row['cur']:<30} | {row['ref']:<30}")
        for line in row["logs"]:
            print(f"    {line}")
    print("-" * width)
    passed = sum(1 for row in rows if row["status"] == "PASS")
    print(f"{passed}/{len(rows)} passed\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Akari game id tool")
    parser.add_argument("target", help="Puzzle file (.lu.txt), directory, or game id / viewer link for decode")
    parser.add_argument("--mode", choices=["encode", "url", "decode", "generate", "test"], default="encode",
                        help="encode/url a puzzle file, decode a game id, or generate/test reference JSON.")
    parser.add_argument("--legacy-runs", action="store_true",
                        help="Emit/accept '`' after runs that are an exact multiple of 26, like the old editor.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    boundary = RUN_BOUNDARY_LEGACY if args.legacy_runs else RUN_BOUNDARY_VIEWER

    try:
        if args.mode == "encode":
            print(encode_puzzle(args.target, boundary)["game_id"])
        elif args.mode == "url":
            print(game_url(load_puzzle(args.target), boundary))
        elif args.mode == "decode":
            model = decode_game_id(game_id_from_url(args.target), boundary)
            print(model.to_text(), end="")
        elif args.mode == "generate":
            files = find_puzzle_files(args.target)
            if not files:
                print(f"Error: No '{PUZZLE_SUFFIX}' files found in '{args.target}'.")
                return 1
            for grid_path in files:
                ref_path = generate_reference(grid_path, boundary)
                print(f"Success: Reference generated and saved to '{ref_path}'")
        else:
            files = find_puzzle_files(args.target)
            if not files:
                print(f"Error: No '{PUZZLE_SUFFIX}' files found in '{args.target}'.")
                return 1
            rows = [check_reference(p, boundary) for p in files]
            print_reference_summary(rows)
            if any(row["status"] != "PASS" for row in rows):
                return 1
    except (ToolError, MalformedIdentifier) as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
