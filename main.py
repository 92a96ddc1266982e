"""CLI entrypoint for the logic puzzle generators."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from flowpuzzles.core.exceptions import PuzzleError
from flowpuzzles.engine.bridges import BridgePuzzleGenerator, BridgesConfig
from flowpuzzles.engine.keen import KeenConfig, KeenGenerator
from flowpuzzles.engine.region_map import MapConfig, RegionMapGenerator
from flowpuzzles.engine.untangle import PlanarGraphGenerator, UntangleConfig
from flowpuzzles.utils.logger import configure_logging, get_logger
from flowpuzzles.utils.pretty import pretty_print_puzzle

LOGGER = get_logger("flowpuzzles.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate Keen, Bridges, Map and Untangle puzzles",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Also render the puzzle as text on stderr",
    )
    games = parser.add_subparsers(dest="game", required=True)

    keen = games.add_parser("keen", help="Latin square with arithmetic cages")
    keen.add_argument("--size", type=int, default=4, help="Grid side length (1-9)")
    keen.add_argument("--max-cage-size", type=int, default=3, help="Largest cage in cells")
    keen.add_argument(
        "--check-unique",
        action="store_true",
        help="Regenerate until CP-SAT proves the clues have a single solution",
    )
    keen.add_argument("--solver-timeout", type=float, default=10.0, help="CP-SAT time limit in seconds")

    bridges = games.add_parser("bridges", help="Connect islands with bridges")
    bridges.add_argument("--width", type=int, default=7, help="Grid width in cells")
    bridges.add_argument("--height", type=int, default=7, help="Grid height in cells")
    bridges.add_argument("--min-islands", type=int, default=6, help="Smallest accepted island count")
    bridges.add_argument("--max-islands", type=int, default=10, help="Largest island target")

    region_map = games.add_parser("map", help="Four-color a region map")
    region_map.add_argument("--width", type=int, default=6, help="Grid width in cells")
    region_map.add_argument("--height", type=int, default=8, help="Grid height in cells")
    region_map.add_argument("--regions", type=int, default=12, help="Number of regions")
    region_map.add_argument(
        "--clue-probability",
        type=float,
        default=0.3,
        help="Chance that a region starts with its color revealed",
    )

    untangle = games.add_parser("untangle", help="Untangle a scrambled planar graph")
    untangle.add_argument("--nodes", type=int, default=6, help="Number of graph nodes")
    untangle.add_argument("--lattice", type=int, default=4, help="Side of the hidden solved lattice")
    return parser


def generate_payload(args: argparse.Namespace) -> tuple[Any, Dict[str, Any]]:
    """Build the requested puzzle and its JSON payload."""

    if args.game == "keen":
        keen_config = KeenConfig(
            size=args.size,
            max_cage_size=args.max_cage_size,
            seed=args.seed,
            require_unique=args.check_unique,
            solver_timeout=args.solver_timeout,
        )
        puzzle = KeenGenerator(keen_config).generate()
        payload = puzzle.to_jsonable()
        report = puzzle.solver_report
        if report is not None:
            payload["solver"] = {
                "status": report.status,
                "solutions_found": len(report.solutions),
                "unique": report.unique,
                "wall_time": report.wall_time,
            }
    elif args.game == "bridges":
        bridges_config = BridgesConfig(
            width=args.width,
            height=args.height,
            min_islands=args.min_islands,
            max_islands=args.max_islands,
            seed=args.seed,
        )
        puzzle = BridgePuzzleGenerator(bridges_config).generate()
        payload = puzzle.to_jsonable()
    elif args.game == "map":
        map_config = MapConfig(
            width=args.width,
            height=args.height,
            region_count=args.regions,
            clue_probability=args.clue_probability,
            seed=args.seed,
        )
        puzzle = RegionMapGenerator(map_config).generate()
        payload = puzzle.to_jsonable()
    else:
        untangle_config = UntangleConfig(node_count=args.nodes, lattice_size=args.lattice, seed=args.seed)
        puzzle = PlanarGraphGenerator(untangle_config).generate()
        payload = puzzle.to_jsonable()
        payload["crossings"] = puzzle.crossings()

    return puzzle, {"game": args.game, "seed": args.seed, "puzzle": payload}


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.INFO)
    configure_logging(level)

    try:
        puzzle, payload = generate_payload(args)
    except PuzzleError as exc:
        LOGGER.error("Generation failed: %s", exc)
        raise SystemExit(1) from exc

    if args.pretty:
        pretty_print_puzzle(args.game, puzzle, label=f"{args.game} (seed={args.seed})", stream=sys.stderr)

    output_text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(output_text, encoding="utf-8")
    else:
        print(output_text)


if __name__ == "__main__":  # pragma: no cover
    main()
