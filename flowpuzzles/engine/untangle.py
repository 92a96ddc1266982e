"""Planar graph generator for the untangle puzzle."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from itertools import combinations
from typing import Any, Dict, List, Optional, Sequence

from ..core.constants import BOARD_MAX, BOARD_MIN
from ..core.exceptions import ConfigError, UntangleLayoutError, ValidationError
from ..core.models import Edge, Node
from ..utils.logger import get_logger
from .geometry import Point, distance, point_inside_segment
from .validator import PuzzleValidator, VerificationResult, count_crossings, edges_cross, verify_untangle

LOGGER = get_logger(__name__)


@dataclass
class UntangleConfig:
    node_count: int = 6
    lattice_size: int = 4
    edge_factor: float = 1.5
    solved_min: float = 25.0
    solved_max: float = 75.0
    scramble_min: float = 15.0
    scramble_max: float = 85.0
    scramble_attempts: int = 20
    retry_limit: int = 3
    seed: Optional[int] = None

    def validate(self) -> None:
        if self.lattice_size < 2:
            raise ConfigError(f"lattice_size must be at least 2, got {self.lattice_size}")
        if not 2 <= self.node_count <= self.lattice_size ** 2:
            raise ConfigError(
                f"node_count must be within 2..{self.lattice_size ** 2}, got {self.node_count}"
            )
        if self.edge_factor <= 0:
            raise ConfigError(f"edge_factor must be positive, got {self.edge_factor}")
        if not BOARD_MIN <= self.scramble_min < self.scramble_max <= BOARD_MAX:
            raise ConfigError("Scramble range must sit inside the board")
        if self.retry_limit < 1 or self.scramble_attempts < 1:
            raise ConfigError("retry_limit and scramble_attempts must be at least 1")

    def make_rng(self) -> random.Random:
        return random.Random(self.seed)

    @property
    def edge_cap(self) -> int:
        return math.ceil(self.edge_factor * self.node_count)


@dataclass
class UntanglePuzzle:
    nodes: List[Node]
    edges: List[Edge]
    solution: List[Point]

    def positions(self) -> List[Point]:
        return [node.position for node in self.nodes]

    def crossings(self) -> int:
        return count_crossings(self.positions(), self.edges)

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "nodes": [{"id": node.id, "x": node.x, "y": node.y} for node in self.nodes],
            "edges": [{"a": edge.a, "b": edge.b} for edge in self.edges],
            "solution": [list(point) for point in self.solution],
        }


class PlanarGraphGenerator:
    """Builds a graph that is crossing-free in a hidden layout, then scrambles it.

    Candidate edges are taken shortest first and kept only when they cross no
    edge already kept (at the hidden layout), so the hidden layout is always a
    valid answer to the scrambled puzzle.
    """

    def __init__(self, config: Optional[UntangleConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or UntangleConfig()
        self.config.validate()
        self.rng = rng or self.config.make_rng()
        self.validator = PuzzleValidator()

    def generate(self) -> UntanglePuzzle:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.config.retry_limit + 1):
            LOGGER.debug("Untangle generation attempt %s/%s", attempt, self.config.retry_limit)
            solved = self._place_nodes()
            edges = self._select_edges(solved)
            nodes = self._scramble(edges)
            puzzle = UntanglePuzzle(nodes=nodes, edges=edges, solution=solved)
            validation = self.validator.validate_untangle(puzzle)
            if validation.ok:
                LOGGER.info(
                    "Untangle graph generated: %s nodes, %s edges, %s starting crossings",
                    len(nodes),
                    len(edges),
                    puzzle.crossings(),
                )
                return puzzle
            last_error = ValidationError(f"Untangle validation failed: {validation.messages}")
            LOGGER.warning("%s", last_error)
        raise UntangleLayoutError("Unable to generate untangle graph after retries") from last_error

    def solve(self, puzzle: UntanglePuzzle) -> List[Point]:
        return list(puzzle.solution)

    @staticmethod
    def verify(puzzle: UntanglePuzzle, positions: Optional[Sequence[Point]] = None) -> VerificationResult:
        return verify_untangle(puzzle, positions)

    # ------------------------------------------------------------------
    # Construction steps
    # ------------------------------------------------------------------
    def _place_nodes(self) -> List[Point]:
        size = self.config.lattice_size
        lattice = [(col, row) for row in range(size) for col in range(size)]
        span = self.config.solved_max - self.config.solved_min
        picked = self.rng.sample(lattice, self.config.node_count)
        return [
            (
                self.config.solved_min + col / (size - 1) * span,
                self.config.solved_min + row / (size - 1) * span,
            )
            for col, row in picked
        ]

    def _select_edges(self, solved: Sequence[Point]) -> List[Edge]:
        candidates = sorted(
            combinations(range(len(solved)), 2),
            key=lambda pair: (distance(solved[pair[0]], solved[pair[1]]), pair),
        )
        accepted: List[Edge] = []
        for a, b in candidates:
            if len(accepted) >= self.config.edge_cap:
                break
            edge = Edge(a=a, b=b)
            if any(
                point_inside_segment(solved[other], solved[a], solved[b])
                for other in range(len(solved))
                if other not in (a, b)
            ):
                continue
            if any(edges_cross(solved, edge, kept) for kept in accepted):
                continue
            accepted.append(edge)
        LOGGER.debug("Kept %s of %s candidate edges", len(accepted), len(candidates))
        return accepted

    def _scramble(self, edges: Sequence[Edge]) -> List[Node]:
        low, high = self.config.scramble_min, self.config.scramble_max
        nodes: List[Node] = []
        for _ in range(self.config.scramble_attempts):
            nodes = [
                Node(id=index, x=self.rng.uniform(low, high), y=self.rng.uniform(low, high))
                for index in range(self.config.node_count)
            ]
            if count_crossings([node.position for node in nodes], edges):
                return nodes
        LOGGER.warning(
            "No tangled layout found in %s scrambles; starting layout is already solved",
            self.config.scramble_attempts,
        )
        return nodes
