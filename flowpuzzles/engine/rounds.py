"""Round lifecycle and player interaction for the four mini-games.

A round owns one generated puzzle plus the player's mutable input. Every
mutation re-runs the game's verifier; the first clean solve, or an explicit
auto-solve, finishes the round and reports ``on_complete(score, is_clean)``
exactly once. Invalid moves are ignored and reported as ``False``.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Callable, Generic, List, Optional, Tuple, TypeVar

from ..core.constants import (
    BOARD_MAX,
    BOARD_MIN,
    BYPASS_SCORE,
    CLEAN_SCORES,
    COLOR_COUNT,
    UNSET_COLOR,
    GameState,
    PuzzleKind,
)
from ..core.models import Bridge, Cell, Node
from ..utils.logger import get_logger
from .bridges import BridgePuzzleGenerator, BridgesConfig, BridgesPuzzle, toggle_bridge
from .geometry import Point
from .keen import KeenConfig, KeenGenerator, KeenPuzzle
from .region_map import MapConfig, MapPuzzle, RegionMapGenerator
from .untangle import PlanarGraphGenerator, UntangleConfig, UntanglePuzzle
from .validator import (
    VerificationResult,
    bridge_counts,
    island_status,
    verify_bridges,
    verify_keen,
    verify_map,
    verify_untangle,
)

LOGGER = get_logger(__name__)

CompletionCallback = Callable[[int, bool], None]
P = TypeVar("P")


class GameRound(ABC, Generic[P]):
    """Shared IDLE -> PLAYING -> FINISHED bookkeeping."""

    kind: PuzzleKind

    def __init__(self, on_complete: Optional[CompletionCallback] = None) -> None:
        self.on_complete = on_complete
        self.state = GameState.IDLE
        self.puzzle: Optional[P] = None
        self.auto_solved = False
        self.outcome: Optional[Tuple[int, bool]] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> P:
        """Generate a fresh puzzle and begin play; also used for resets."""

        self.puzzle = self._generate()
        self._reset_input()
        self.auto_solved = False
        self.outcome = None
        self.state = GameState.PLAYING
        LOGGER.info("%s round started", self.kind.value)
        return self.puzzle

    def deactivate(self) -> None:
        self.state = GameState.IDLE
        self.puzzle = None

    def auto_solve(self) -> bool:
        """Apply the generator's solution and finish the round as non-clean."""

        if not self.is_playing:
            return False
        self._apply_solution()
        self.auto_solved = True
        self._finish(BYPASS_SCORE, False)
        return True

    @property
    def is_playing(self) -> bool:
        return self.state == GameState.PLAYING and self.puzzle is not None

    @abstractmethod
    def verify(self) -> VerificationResult:
        """Run the game's verifier over the current player input."""

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    @abstractmethod
    def _generate(self) -> P:
        """Build the puzzle for a new round."""

    @abstractmethod
    def _reset_input(self) -> None:
        """Clear player input for the current puzzle."""

    @abstractmethod
    def _apply_solution(self) -> None:
        """Overwrite player input with the generator's solution."""

    def _after_input(self) -> VerificationResult:
        result = self.verify()
        if result.solved and self.is_playing and not self.auto_solved:
            self._finish(CLEAN_SCORES[self.kind], True)
        return result

    def _finish(self, score: int, is_clean: bool) -> None:
        self.state = GameState.FINISHED
        self.outcome = (score, is_clean)
        LOGGER.info("%s round finished: score=%s clean=%s", self.kind.value, score, is_clean)
        if self.on_complete is not None:
            self.on_complete(score, is_clean)


# ----------------------------------------------------------------------
# Keen
# ----------------------------------------------------------------------
class KeenRound(GameRound[KeenPuzzle]):
    kind = PuzzleKind.KEEN

    def __init__(
        self,
        config: Optional[KeenConfig] = None,
        on_complete: Optional[CompletionCallback] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(on_complete)
        self.generator = KeenGenerator(config, rng=rng)
        self.cells: List[List[Cell]] = []

    def _generate(self) -> KeenPuzzle:
        return self.generator.generate()

    def _reset_input(self) -> None:
        size = self.puzzle.size
        self.cells = [[Cell(row=r, col=c) for c in range(size)] for r in range(size)]

    def _apply_solution(self) -> None:
        for row, values in enumerate(self.generator.solve(self.puzzle)):
            for col, value in enumerate(values):
                self.cells[row][col].value = value

    def values(self) -> List[List[Optional[int]]]:
        return [[cell.value for cell in row] for row in self.cells]

    def verify(self) -> VerificationResult:
        return verify_keen(self.puzzle, self.values())

    def _cell(self, row: int, col: int) -> Optional[Cell]:
        if not self.is_playing or not (0 <= row < self.puzzle.size and 0 <= col < self.puzzle.size):
            return None
        return self.cells[row][col]

    def enter_value(self, row: int, col: int, value: int) -> bool:
        """Write ``value`` into a cell; entering the same value again clears it."""

        cell = self._cell(row, col)
        if cell is None or not 1 <= value <= self.puzzle.size:
            return False
        cell.value = None if cell.value == value else value
        self._after_input()
        return True

    def clear_cell(self, row: int, col: int) -> bool:
        cell = self._cell(row, col)
        if cell is None:
            return False
        cell.value = None
        cell.pencil_marks.clear()
        return True

    def toggle_pencil_mark(self, row: int, col: int, value: int) -> bool:
        cell = self._cell(row, col)
        if cell is None or not 1 <= value <= self.puzzle.size:
            return False
        cell.pencil_marks ^= {value}
        return True


# ----------------------------------------------------------------------
# Bridges
# ----------------------------------------------------------------------
class BridgesRound(GameRound[BridgesPuzzle]):
    kind = PuzzleKind.BRIDGES

    def __init__(
        self,
        config: Optional[BridgesConfig] = None,
        on_complete: Optional[CompletionCallback] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(on_complete)
        self.generator = BridgePuzzleGenerator(config, rng=rng)
        self.bridges: List[Bridge] = []
        self.selected: Optional[int] = None

    def _generate(self) -> BridgesPuzzle:
        return self.generator.generate()

    def _reset_input(self) -> None:
        self.bridges = []
        self.selected = None

    def _apply_solution(self) -> None:
        self.bridges = self.generator.solve(self.puzzle)
        self.selected = None

    def verify(self) -> VerificationResult:
        return verify_bridges(self.puzzle, self.bridges)

    def select_island(self, island_id: int) -> bool:
        """Tap an island. The second tap on a different island toggles a bridge.

        Returns ``True`` only when the bridge set changed.
        """

        if not self.is_playing or not 0 <= island_id < len(self.puzzle.islands):
            return False
        if self.selected is None:
            self.selected = island_id
            return False
        if self.selected == island_id:
            self.selected = None
            return False
        first, self.selected = self.selected, None
        return self.link(first, island_id)

    def link(self, first_id: int, second_id: int) -> bool:
        if not self.is_playing:
            return False
        updated = toggle_bridge(self.puzzle, self.bridges, first_id, second_id)
        if updated is None:
            LOGGER.debug("Rejected bridge %s-%s", first_id, second_id)
            return False
        self.bridges = updated
        self._after_input()
        return True

    def bridges_at(self, island_id: int) -> List[Bridge]:
        return [bridge for bridge in self.bridges if bridge.touches(island_id)]

    def bridge_count(self, first_id: int, second_id: int) -> int:
        key = (min(first_id, second_id), max(first_id, second_id))
        return next((bridge.count for bridge in self.bridges if bridge.key == key), 0)

    def island_statuses(self) -> List[str]:
        counts = bridge_counts(len(self.puzzle.islands), self.bridges)
        return [island_status(island.required, counts[island.id]) for island in self.puzzle.islands]


# ----------------------------------------------------------------------
# Region map
# ----------------------------------------------------------------------
class MapRound(GameRound[MapPuzzle]):
    kind = PuzzleKind.MAP

    def __init__(
        self,
        config: Optional[MapConfig] = None,
        on_complete: Optional[CompletionCallback] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(on_complete)
        self.generator = RegionMapGenerator(config, rng=rng)
        self.colors: List[int] = []

    def _generate(self) -> MapPuzzle:
        return self.generator.generate()

    def _reset_input(self) -> None:
        self.colors = self.puzzle.initial_colors()

    def _apply_solution(self) -> None:
        self.colors = self.generator.solve(self.puzzle)

    def verify(self) -> VerificationResult:
        return verify_map(self.puzzle, self.colors)

    def tap_region(self, region_id: int) -> bool:
        """Cycle a region through unset, 0, 1, 2, 3 and back; clued regions are fixed."""

        if not self.is_playing or not 0 <= region_id < self.puzzle.region_count:
            return False
        if self.puzzle.clues[region_id] is not None:
            return False
        current = self.colors[region_id]
        self.colors[region_id] = UNSET_COLOR if current == COLOR_COUNT - 1 else current + 1
        self._after_input()
        return True

    def tap_point(self, x: float, y: float) -> bool:
        """Tap at board coordinates measured in cells."""

        if not self.is_playing:
            return False
        region = self.puzzle.region_at(x, y)
        if region is None:
            return False
        return self.tap_region(region)


# ----------------------------------------------------------------------
# Untangle
# ----------------------------------------------------------------------
class UntangleRound(GameRound[UntanglePuzzle]):
    kind = PuzzleKind.UNTANGLE

    def __init__(
        self,
        config: Optional[UntangleConfig] = None,
        on_complete: Optional[CompletionCallback] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(on_complete)
        self.generator = PlanarGraphGenerator(config, rng=rng)
        self.nodes: List[Node] = []
        self.crossings = 0

    def _generate(self) -> UntanglePuzzle:
        return self.generator.generate()

    def _reset_input(self) -> None:
        self.nodes = [Node(id=node.id, x=node.x, y=node.y) for node in self.puzzle.nodes]
        self.crossings = verify_untangle(self.puzzle, self.positions()).details["crossings"]

    def _apply_solution(self) -> None:
        for node, (x, y) in zip(self.nodes, self.generator.solve(self.puzzle)):
            node.x, node.y = x, y
        self.crossings = 0

    def positions(self) -> List[Point]:
        return [node.position for node in self.nodes]

    def verify(self) -> VerificationResult:
        return verify_untangle(self.puzzle, self.positions())

    def move_node(self, node_id: int, x: float, y: float) -> bool:
        """Drag update: reposition a node (clamped to the board) and re-count crossings."""

        if not self.is_playing or not 0 <= node_id < len(self.nodes):
            return False
        node = self.nodes[node_id]
        node.x = min(BOARD_MAX, max(BOARD_MIN, x))
        node.y = min(BOARD_MAX, max(BOARD_MIN, y))
        result = self._after_input()
        self.crossings = result.details["crossings"]
        return True
