"""Bridges (Hashiwokakero) puzzle generator.

Islands are grown as a tree: each step walks from the current island in a
straight line to a free cell 2-4 steps away and records the bridge it used.
Because new islands and bridge paths only ever occupy free cells, the recorded
bridge set is crossing-free and connects every island.
"""

from __future__ import annotations

import dataclasses
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from ..core.exceptions import BridgeLayoutError, ConfigError
from ..core.models import Bridge, Island
from ..utils.logger import get_logger
from .graph import compact_and_relabel, remap_references
from .validator import PuzzleValidator, VerificationResult, bridges_cross, verify_bridges

LOGGER = get_logger(__name__)

DIRECTIONS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
MAX_MULTIPLICITY = 2


@dataclass
class BridgesConfig:
    width: int = 7
    height: int = 7
    min_islands: int = 6
    max_islands: int = 10
    min_distance: int = 2
    max_distance: int = 4
    double_bridge_probability: float = 0.3
    max_steps: int = 200
    retry_limit: int = 10
    seed: Optional[int] = None

    def validate(self) -> None:
        if self.width < 3 or self.height < 3:
            raise ConfigError(f"Bridges grid must be at least 3x3, got {self.width}x{self.height}")
        if not 1 <= self.min_islands <= self.max_islands:
            raise ConfigError(
                f"Island range {self.min_islands}..{self.max_islands} is empty or non-positive"
            )
        if not 2 <= self.min_distance <= self.max_distance:
            raise ConfigError(
                f"Step distance range {self.min_distance}..{self.max_distance} must start at 2 or more"
            )
        if not 0.0 <= self.double_bridge_probability <= 1.0:
            raise ConfigError("double_bridge_probability must be within [0, 1]")
        if self.retry_limit < 1:
            raise ConfigError("retry_limit must be at least 1")

    def make_rng(self) -> random.Random:
        return random.Random(self.seed)


@dataclass
class BridgesPuzzle:
    width: int
    height: int
    islands: List[Island]
    solution: List[Bridge]

    def island_at(self, x: int, y: int) -> Optional[Island]:
        for island in self.islands:
            if island.x == x and island.y == y:
                return island
        return None

    def blocking_island(self, start: Island, end: Island) -> Optional[Island]:
        """First island strictly between two islands on a shared row or column."""

        for island in self.islands:
            if island.id in (start.id, end.id):
                continue
            if start.x == end.x == island.x and min(start.y, end.y) < island.y < max(start.y, end.y):
                return island
            if start.y == end.y == island.y and min(start.x, end.x) < island.x < max(start.x, end.x):
                return island
        return None

    def can_link(self, first_id: int, second_id: int) -> bool:
        if first_id == second_id:
            return False
        if not (0 <= first_id < len(self.islands) and 0 <= second_id < len(self.islands)):
            return False
        first, second = self.islands[first_id], self.islands[second_id]
        if first.x != second.x and first.y != second.y:
            return False
        return self.blocking_island(first, second) is None

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "islands": [
                {"id": island.id, "x": island.x, "y": island.y, "required": island.required}
                for island in self.islands
            ],
            "solution": [{"a": bridge.a, "b": bridge.b, "count": bridge.count} for bridge in self.solution],
        }


def toggle_bridge(puzzle: BridgesPuzzle, bridges: Sequence[Bridge], first_id: int, second_id: int) -> Optional[List[Bridge]]:
    """Cycle the bridge between two islands through 1 -> 2 -> removed.

    Returns the new bridge list, or ``None`` when the islands cannot be linked
    (not aligned, blocked by an island, or crossing another bridge).
    """

    if not puzzle.can_link(first_id, second_id):
        return None
    candidate = Bridge(a=first_id, b=second_id)
    for existing in bridges:
        if bridges_cross(puzzle.islands, candidate, existing):
            return None

    current = next((bridge for bridge in bridges if bridge.key == candidate.key), None)
    next_count = ((current.count if current else 0) + 1) % (MAX_MULTIPLICITY + 1)
    updated = [bridge for bridge in bridges if bridge.key != candidate.key]
    if next_count:
        updated.append(Bridge(a=first_id, b=second_id, count=next_count))
    return updated


@dataclass
class _Layout:
    """Mutable occupancy state for one growth attempt."""

    islands: List[Island] = field(default_factory=list)
    bridges: List[Bridge] = field(default_factory=list)
    island_cells: Dict[Tuple[int, int], int] = field(default_factory=dict)
    bridge_cells: Set[Tuple[int, int]] = field(default_factory=set)

    def add_island(self, x: int, y: int) -> Island:
        island = Island(id=len(self.islands), x=x, y=y)
        self.islands.append(island)
        self.island_cells[(x, y)] = island.id
        return island

    def is_free(self, cell: Tuple[int, int]) -> bool:
        return cell not in self.island_cells and cell not in self.bridge_cells


class BridgePuzzleGenerator:
    """Grows island trees until the requested island count is met."""

    def __init__(self, config: Optional[BridgesConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or BridgesConfig()
        self.config.validate()
        self.rng = rng or self.config.make_rng()
        self.validator = PuzzleValidator()

    # ------------------------------------------------------------------
    # Public entrypoints
    # ------------------------------------------------------------------
    def generate(self) -> BridgesPuzzle:
        best: Optional[BridgesPuzzle] = None
        for attempt in range(1, self.config.retry_limit + 1):
            target = self.rng.randint(self.config.min_islands, self.config.max_islands)
            LOGGER.debug("Bridges layout attempt %s/%s targeting %s islands", attempt, self.config.retry_limit, target)
            puzzle = self._build_puzzle(self._grow(target))
            validation = self.validator.validate_bridges(puzzle)
            if not validation.ok:
                LOGGER.warning("Bridges layout rejected: %s", validation.messages)
                continue
            if len(puzzle.islands) >= target:
                LOGGER.info("Bridges puzzle generated with %s islands", len(puzzle.islands))
                return puzzle
            LOGGER.debug("Layout stalled at %s/%s islands", len(puzzle.islands), target)
            if best is None or len(puzzle.islands) > len(best.islands):
                best = puzzle

        if best is not None and len(best.islands) >= self.config.min_islands:
            LOGGER.warning(
                "No layout reached its island target; using best layout with %s islands",
                len(best.islands),
            )
            return best
        raise BridgeLayoutError(
            f"Unable to grow {self.config.min_islands}+ islands after {self.config.retry_limit} layouts"
        )

    def solve(self, puzzle: BridgesPuzzle) -> List[Bridge]:
        return [dataclasses.replace(bridge) for bridge in puzzle.solution]

    @staticmethod
    def verify(puzzle: BridgesPuzzle, bridges: Sequence[Bridge]) -> VerificationResult:
        return verify_bridges(puzzle, bridges)

    # ------------------------------------------------------------------
    # Growth
    # ------------------------------------------------------------------
    def _grow(self, target: int) -> _Layout:
        layout = _Layout()
        first = layout.add_island(
            self.rng.randint(1, self.config.width - 2),
            self.rng.randint(1, self.config.height - 2),
        )
        current = first.id
        exhausted: Set[int] = set()
        steps = 0
        while len(layout.islands) < target and steps < self.config.max_steps:
            steps += 1
            extension = self._find_extension(layout, layout.islands[current])
            if extension is None:
                exhausted.add(current)
                candidates = [island.id for island in layout.islands if island.id not in exhausted]
                if not candidates:
                    LOGGER.debug("Every island is boxed in at %s islands", len(layout.islands))
                    break
                current = self.rng.choice(candidates)
                continue

            (x, y), path = extension
            source = layout.islands[current]
            island = layout.add_island(x, y)
            count = 2 if self.rng.random() < self.config.double_bridge_probability else 1
            layout.bridges.append(Bridge(a=source.id, b=island.id, count=count))
            source.required += count
            island.required += count
            layout.bridge_cells.update(path)
            current = island.id
        return layout

    def _find_extension(
        self, layout: _Layout, source: Island
    ) -> Optional[Tuple[Tuple[int, int], List[Tuple[int, int]]]]:
        options = [
            (dx, dy, distance)
            for dx, dy in DIRECTIONS
            for distance in range(self.config.min_distance, self.config.max_distance + 1)
        ]
        self.rng.shuffle(options)
        for dx, dy, distance in options:
            x, y = source.x + dx * distance, source.y + dy * distance
            if not (0 <= x < self.config.width and 0 <= y < self.config.height):
                continue
            if not layout.is_free((x, y)):
                continue
            path = [(source.x + dx * step, source.y + dy * step) for step in range(1, distance)]
            if not all(layout.is_free(cell) for cell in path):
                continue
            if self._touches_island(layout, x, y, source.id):
                continue
            return (x, y), path
        return None

    @staticmethod
    def _touches_island(layout: _Layout, x: int, y: int, source_id: int) -> bool:
        for dx, dy in DIRECTIONS:
            neighbor = layout.island_cells.get((x + dx, y + dy))
            if neighbor is not None and neighbor != source_id:
                return True
        return False

    def _build_puzzle(self, layout: _Layout) -> BridgesPuzzle:
        islands, mapping = compact_and_relabel(
            layout.islands,
            keep=lambda island: island.required > 0,
            id_of=lambda island: island.id,
            with_id=lambda island, new_id: dataclasses.replace(island, id=new_id),
        )
        dropped = len(layout.islands) - len(islands)
        if dropped:
            LOGGER.debug("Dropped %s islands without bridges", dropped)
        bridges = remap_references(
            layout.bridges,
            mapping,
            endpoints_of=lambda bridge: (bridge.a, bridge.b),
            with_endpoints=lambda bridge, ends: dataclasses.replace(bridge, a=ends[0], b=ends[1]),
        )
        return BridgesPuzzle(
            width=self.config.width,
            height=self.config.height,
            islands=islands,
            solution=bridges,
        )
