"""Pretty-print helpers for generated puzzles."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from ..core.constants import UNSET_COLOR, Quadrant

if TYPE_CHECKING:
    from ..core.models import Cell
    from ..engine.bridges import BridgesPuzzle
    from ..engine.keen import KeenPuzzle
    from ..engine.region_map import MapPuzzle
    from ..engine.untangle import UntanglePuzzle


COLOR_SYMBOLS = "RGBY"
BRIDGE_SYMBOLS = {(True, 1): "-", (True, 2): "=", (False, 1): "|", (False, 2): "H"}


def _header(width: int) -> List[str]:
    header_cells = [f"{c:>2}" for c in range(width)]
    return ["    " + " ".join(header_cells), "    " + "-" * (3 * width - 1)]


def _rows(grid: Sequence[Sequence[str]]) -> List[str]:
    return [f"{r:>2} | " + " ".join(f"{symbol:>2}" for symbol in row) for r, row in enumerate(grid)]


def format_keen(puzzle: KeenPuzzle, cells: Optional[Sequence[Sequence[Cell]]] = None) -> str:
    """Grid of cage ids (or entered values), followed by the cage clues."""

    grid = []
    for r in range(puzzle.size):
        row = []
        for c in range(puzzle.size):
            cell = cells[r][c] if cells else None
            if cell is not None and not cell.is_empty():
                row.append(str(cell.value))
            else:
                row.append(chr(ord("a") + puzzle.cage_at(r, c).id % 26))
        grid.append(row)
    lines = _header(puzzle.size) + _rows(grid)
    lines.append("")
    for cage in puzzle.cages:
        lines.append(f"  {chr(ord('a') + cage.id % 26)}: {cage.label():<5} {cage.cells}")
    return "\n".join(lines)


def format_bridges(puzzle: BridgesPuzzle, show_solution: bool = True) -> str:
    grid = [["." for _ in range(puzzle.width)] for _ in range(puzzle.height)]
    if show_solution:
        for bridge in puzzle.solution:
            start, end = puzzle.islands[bridge.a], puzzle.islands[bridge.b]
            horizontal = start.y == end.y
            symbol = BRIDGE_SYMBOLS[(horizontal, bridge.count)]
            if horizontal:
                for x in range(min(start.x, end.x) + 1, max(start.x, end.x)):
                    grid[start.y][x] = symbol
            else:
                for y in range(min(start.y, end.y) + 1, max(start.y, end.y)):
                    grid[y][start.x] = symbol
    for island in puzzle.islands:
        grid[island.y][island.x] = str(island.required)
    return "\n".join(_header(puzzle.width) + _rows(grid))


def format_map(puzzle: MapPuzzle, colors: Optional[Sequence[int]] = None) -> str:
    """One symbol per cell: the color of its top quadrant, lower-case when clued."""

    colors = list(colors) if colors is not None else puzzle.initial_colors()
    grid = []
    for y in range(puzzle.height):
        row = []
        for x in range(puzzle.width):
            region = puzzle.region_of(y * puzzle.width + x, Quadrant.TOP)
            color = colors[region]
            symbol = "." if color == UNSET_COLOR else COLOR_SYMBOLS[color]
            row.append(symbol.lower() if puzzle.clues[region] is not None else symbol)
        grid.append(row)
    return "\n".join(_header(puzzle.width) + _rows(grid))


def format_untangle(puzzle: UntanglePuzzle) -> str:
    lines = [f"  node {node.id}: ({node.x:5.1f}, {node.y:5.1f})" for node in puzzle.nodes]
    lines.append("  edges: " + " ".join(f"{edge.a}-{edge.b}" for edge in puzzle.edges))
    lines.append(f"  crossings: {puzzle.crossings()}")
    return "\n".join(lines)


def pretty_print_puzzle(kind: str, puzzle, *, label: str | None = None, stream=None) -> None:
    """Print any generated puzzle in a human-friendly format."""

    renderers: Dict[str, object] = {
        "keen": format_keen,
        "bridges": format_bridges,
        "map": format_map,
        "untangle": format_untangle,
    }
    stream = stream or sys.stdout
    if label:
        print(label, file=stream)
    print(renderers[kind](puzzle), file=stream)
