"""Rule checks for generated puzzles and for player input.

Two layers live here:

- ``verify_*`` functions judge player input (partial or complete) and never
  raise. They are pure, so calling them twice on unchanged input gives the
  same answer.
- :class:`PuzzleValidator` runs integrity checks over a freshly generated
  instance; generators use it to reject and retry broken layouts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import combinations
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Set, Tuple

from ..core.constants import COLOR_COUNT, UNSET_COLOR
from ..core.exceptions import ValidationError
from ..core.models import Bridge, Edge, Island
from ..utils.logger import get_logger
from .geometry import Point, segments_intersect
from .graph import is_connected

if TYPE_CHECKING:
    from .bridges import BridgesPuzzle
    from .keen import KeenPuzzle
    from .region_map import MapPuzzle
    from .untangle import UntanglePuzzle


LOGGER = get_logger(__name__)


@dataclass
class VerificationResult:
    solved: bool
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationResult:
    ok: bool
    messages: List[str]


# ----------------------------------------------------------------------
# Keen
# ----------------------------------------------------------------------
def is_latin_square(grid: Sequence[Sequence[int]]) -> bool:
    size = len(grid)
    expected = set(range(1, size + 1))
    if any(len(row) != size or set(row) != expected for row in grid):
        return False
    return all({grid[r][c] for r in range(size)} == expected for c in range(size))


def _duplicate_lines(values: Sequence[Sequence[Optional[int]]], size: int, by_column: bool) -> List[int]:
    conflicts: List[int] = []
    for line in range(size):
        seen: Set[int] = set()
        for index in range(size):
            value = values[index][line] if by_column else values[line][index]
            if value is None:
                continue
            if value in seen:
                conflicts.append(line)
                break
            seen.add(value)
    return conflicts


def verify_keen(puzzle: "KeenPuzzle", values: Sequence[Sequence[Optional[int]]]) -> VerificationResult:
    """Check a (possibly partial) Keen grid; ``None`` marks an empty cell.

    A cage is reported as failed only once all its cells are filled.
    """

    size = puzzle.size
    empty_cells = sum(1 for row in values for value in row if value is None)
    out_of_range = [
        (r, c)
        for r in range(size)
        for c in range(size)
        if values[r][c] is not None and not 1 <= values[r][c] <= size
    ]
    row_conflicts = _duplicate_lines(values, size, by_column=False)
    col_conflicts = _duplicate_lines(values, size, by_column=True)

    failed_cages: List[int] = []
    for cage in puzzle.cages:
        cage_values = [values[r][c] for r, c in cage.cells]
        if any(value is None for value in cage_values):
            continue
        if not cage.is_satisfied(cage_values):
            failed_cages.append(cage.id)

    solved = not (empty_cells or out_of_range or row_conflicts or col_conflicts or failed_cages)
    return VerificationResult(
        solved=solved,
        details={
            "empty_cells": empty_cells,
            "out_of_range": out_of_range,
            "row_conflicts": row_conflicts,
            "col_conflicts": col_conflicts,
            "failed_cages": failed_cages,
        },
    )


# ----------------------------------------------------------------------
# Bridges
# ----------------------------------------------------------------------
def bridge_counts(island_count: int, bridges: Sequence[Bridge]) -> List[int]:
    counts = [0] * island_count
    for bridge in bridges:
        counts[bridge.a] += bridge.count
        counts[bridge.b] += bridge.count
    return counts


def bridges_cross(islands: Sequence[Island], first: Bridge, second: Bridge) -> bool:
    """Whether two bridges intersect anywhere other than a shared island."""

    if first.key == second.key:
        return False
    if {first.a, first.b} & {second.a, second.b}:
        return False
    return segments_intersect(
        islands[first.a].position,
        islands[first.b].position,
        islands[second.a].position,
        islands[second.b].position,
    )


def island_status(required: int, current: int) -> str:
    if current == required:
        return "satisfied"
    if current > required:
        return "overflow"
    return "normal"


def verify_bridges(puzzle: "BridgesPuzzle", bridges: Sequence[Bridge]) -> VerificationResult:
    """Win when every island count matches and the bridge graph is connected."""

    counts = bridge_counts(len(puzzle.islands), bridges)
    statuses = [island_status(island.required, counts[island.id]) for island in puzzle.islands]
    counts_match = all(status == "satisfied" for status in statuses)
    connected = bool(puzzle.islands) and is_connected(
        len(puzzle.islands), [(bridge.a, bridge.b) for bridge in bridges]
    )
    return VerificationResult(
        solved=counts_match and connected,
        details={
            "counts": counts,
            "statuses": statuses,
            "counts_match": counts_match,
            "connected": connected,
        },
    )


# ----------------------------------------------------------------------
# Region map
# ----------------------------------------------------------------------
def color_conflicts(adjacency: Sequence[Set[int]], colors: Sequence[int]) -> List[Tuple[int, int]]:
    conflicts: List[Tuple[int, int]] = []
    for region, neighbors in enumerate(adjacency):
        for neighbor in neighbors:
            if region < neighbor and colors[region] != UNSET_COLOR and colors[region] == colors[neighbor]:
                conflicts.append((region, neighbor))
    return conflicts


def verify_map(puzzle: "MapPuzzle", colors: Sequence[int]) -> VerificationResult:
    """Win when every region is colored and no neighbors share a color."""

    uncolored = [region for region, color in enumerate(colors) if color == UNSET_COLOR]
    conflicts = color_conflicts(puzzle.adjacency, colors)
    clue_mismatches = [
        region
        for region, clue in enumerate(puzzle.clues)
        if clue is not None and colors[region] != clue
    ]
    return VerificationResult(
        solved=not (uncolored or conflicts or clue_mismatches),
        details={
            "uncolored": uncolored,
            "conflicts": conflicts,
            "clue_mismatches": clue_mismatches,
        },
    )


# ----------------------------------------------------------------------
# Untangle
# ----------------------------------------------------------------------
def edges_cross(positions: Sequence[Point], first: Edge, second: Edge) -> bool:
    if first.shares_endpoint(second):
        return False
    return segments_intersect(
        positions[first.a], positions[first.b], positions[second.a], positions[second.b]
    )


def crossing_pairs(positions: Sequence[Point], edges: Sequence[Edge]) -> List[Tuple[int, int]]:
    """Index pairs of edges that cross at the given node positions."""

    return [
        (i, j)
        for (i, first), (j, second) in combinations(enumerate(edges), 2)
        if edges_cross(positions, first, second)
    ]


def count_crossings(positions: Sequence[Point], edges: Sequence[Edge]) -> int:
    return len(crossing_pairs(positions, edges))


def verify_untangle(
    puzzle: "UntanglePuzzle", positions: Optional[Sequence[Point]] = None
) -> VerificationResult:
    """Win when no two non-adjacent edges cross; defaults to the nodes' current positions."""

    if positions is None:
        positions = [node.position for node in puzzle.nodes]
    pairs = crossing_pairs(positions, puzzle.edges)
    return VerificationResult(
        solved=bool(puzzle.edges) and not pairs,
        details={"crossings": len(pairs), "crossing_pairs": pairs},
    )


# ----------------------------------------------------------------------
# Integrity checks for generated instances
# ----------------------------------------------------------------------
class PuzzleValidator:
    """Runs deterministic validation over generated puzzles."""

    def validate_keen(self, puzzle: "KeenPuzzle") -> ValidationResult:
        return self._run(lambda: self._check_keen(puzzle))

    def validate_bridges(self, puzzle: "BridgesPuzzle") -> ValidationResult:
        return self._run(lambda: self._check_bridges(puzzle))

    def validate_map(self, puzzle: "MapPuzzle") -> ValidationResult:
        return self._run(lambda: self._check_map(puzzle))

    def validate_untangle(self, puzzle: "UntanglePuzzle") -> ValidationResult:
        return self._run(lambda: self._check_untangle(puzzle))

    @staticmethod
    def _run(check) -> ValidationResult:
        try:
            check()
        except ValidationError as exc:
            LOGGER.error("Validation failed: %s", exc)
            return ValidationResult(ok=False, messages=[str(exc)])
        return ValidationResult(ok=True, messages=[])

    # ------------------------------------------------------------------
    # Keen
    # ------------------------------------------------------------------
    def _check_keen(self, puzzle: "KeenPuzzle") -> None:
        if not is_latin_square(puzzle.solution):
            raise ValidationError("Solution is not a Latin square")
        seen: Set[Tuple[int, int]] = set()
        for cage in puzzle.cages:
            for cell in cage.cells:
                if cell in seen:
                    raise ValidationError(f"Cell {cell} belongs to more than one cage")
                seen.add(cell)
            values = [puzzle.solution[r][c] for r, c in cage.cells]
            if not cage.is_satisfied(values):
                raise ValidationError(f"Cage {cage.id} clue {cage.label()} does not hold for {values}")
        if len(seen) != puzzle.size * puzzle.size:
            raise ValidationError(f"Cages cover {len(seen)} of {puzzle.size * puzzle.size} cells")

    # ------------------------------------------------------------------
    # Bridges
    # ------------------------------------------------------------------
    def _check_bridges(self, puzzle: "BridgesPuzzle") -> None:
        islands = puzzle.islands
        positions = {island.position for island in islands}
        if len(positions) != len(islands):
            raise ValidationError("Two islands share a position")
        for index, island in enumerate(islands):
            if island.id != index:
                raise ValidationError(f"Island ids are not contiguous at {index}")

        keys: Set[Tuple[int, int]] = set()
        for bridge in puzzle.solution:
            if bridge.key in keys:
                raise ValidationError(f"Duplicate bridge {bridge.key}")
            keys.add(bridge.key)
            if bridge.count not in (1, 2):
                raise ValidationError(f"Bridge {bridge.key} has multiplicity {bridge.count}")
            start, end = islands[bridge.a], islands[bridge.b]
            if start.x != end.x and start.y != end.y:
                raise ValidationError(f"Bridge {bridge.key} is not axis aligned")
            if puzzle.blocking_island(start, end) is not None:
                raise ValidationError(f"Bridge {bridge.key} passes over an island")

        for first, second in combinations(puzzle.solution, 2):
            if bridges_cross(islands, first, second):
                raise ValidationError(f"Bridges {first.key} and {second.key} cross")

        counts = bridge_counts(len(islands), puzzle.solution)
        for island in islands:
            if counts[island.id] != island.required or island.required == 0:
                raise ValidationError(
                    f"Island {island.id} requires {island.required} but solution gives {counts[island.id]}"
                )
        if not is_connected(len(islands), [(b.a, b.b) for b in puzzle.solution]):
            raise ValidationError("Solution bridges do not connect every island")

    # ------------------------------------------------------------------
    # Region map
    # ------------------------------------------------------------------
    def _check_map(self, puzzle: "MapPuzzle") -> None:
        present = set(puzzle.quadrants)
        if present != set(range(puzzle.region_count)):
            raise ValidationError(f"Quadrant grid holds regions {sorted(present)}")
        for region, neighbors in enumerate(puzzle.adjacency):
            if region in neighbors:
                raise ValidationError(f"Region {region} is adjacent to itself")
            for neighbor in neighbors:
                if region not in puzzle.adjacency[neighbor]:
                    raise ValidationError(f"Adjacency {region}-{neighbor} is not symmetric")
        if any(not 0 <= color < COLOR_COUNT for color in puzzle.solution):
            raise ValidationError("Solution leaves a region uncolored")
        conflicts = color_conflicts(puzzle.adjacency, puzzle.solution)
        if conflicts:
            raise ValidationError(f"Solution colors clash on {conflicts}")
        for region, clue in enumerate(puzzle.clues):
            if clue is not None and clue != puzzle.solution[region]:
                raise ValidationError(f"Clue for region {region} disagrees with the solution")

    # ------------------------------------------------------------------
    # Untangle
    # ------------------------------------------------------------------
    def _check_untangle(self, puzzle: "UntanglePuzzle") -> None:
        node_count = len(puzzle.nodes)
        pairs = set()
        for edge in puzzle.edges:
            if edge.a == edge.b or not (0 <= edge.a < node_count and 0 <= edge.b < node_count):
                raise ValidationError(f"Edge {edge} has invalid endpoints")
            key = (min(edge.a, edge.b), max(edge.a, edge.b))
            if key in pairs:
                raise ValidationError(f"Duplicate edge {key}")
            pairs.add(key)
        crossings = count_crossings(puzzle.solution, puzzle.edges)
        if crossings:
            raise ValidationError(f"Solved layout still has {crossings} crossings")
