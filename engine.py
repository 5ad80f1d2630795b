import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

from tileplan.errors import InvalidRoomGraph
from tileplan.generator import generate

# ========== SAMPLE GRAPH ==========
SAMPLE_GRAPH: Dict = {
    "width": 40,
    "height": 40,
    "description": "A small house: one hallway with a bedroom and a kitchen off it",
    "rooms": [
        {"id": "r1", "name": "Hallway", "type": "corridor", "connections": ["r2", "r3"], "furniture": []},
        {"id": "r2", "name": "Bedroom", "type": "bedroom", "connections": ["r1"], "furniture": ["bed", "chest"]},
        {"id": "r3", "name": "Kitchen", "type": "kitchen", "connections": ["r1"], "furniture": ["table", "chair"]},
    ],
}


def load_graph(path: Optional[str]) -> Dict:
    if not path:
        return SAMPLE_GRAPH
    if path == "-":
        return json.load(sys.stdin)
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Generate a tile map from a RoomGraph JSON file.")
    p.add_argument("graph", nargs="?", help="RoomGraph JSON file, '-' for stdin; omit for a built-in sample")
    p.add_argument("--seed", type=int, default=None, help="seed for a reproducible layout")
    p.add_argument("--style", choices=["structured", "organic", "geometric"], default=None,
                   help="generator to use (default: the graph's own 'type')")
    p.add_argument("--hint", default=None, help="layout hint, e.g. 'spine', 'hub', 'cluster' or 'bsp'")
    p.add_argument("--out", default=None, help="write the TileMap JSON here instead of stdout")
    p.add_argument("--indent", type=int, default=None)
    p.add_argument("-v", "--verbose", action="store_true", help="log layout decisions")
    return p


# ========== MAIN ==========
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        graph = load_graph(args.graph)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not read room graph: {e}", file=sys.stderr)
        return 1

    try:
        tilemap = generate(graph, seed=args.seed, style=args.style, hint=args.hint)
    except InvalidRoomGraph as e:
        print("Invalid room graph:", file=sys.stderr)
        for problem in e.errors:
            print(f"  - {problem}", file=sys.stderr)
        return 2

    text = tilemap.to_json(indent=args.indent)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as fh:
            fh.write(text)
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
