"""Partition a solved Latin square into arithmetic cages."""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, Tuple

from ..core.constants import ORTHOGONAL_STEPS, Bounds, Operator
from ..core.exceptions import ConfigError
from ..core.models import Cage
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

PAIR_OPERATORS: Tuple[Operator, ...] = (Operator.ADD, Operator.SUB, Operator.MUL)
GROUP_OPERATORS: Tuple[Operator, ...] = (Operator.ADD, Operator.MUL)


class CageAssigner:
    """Grows random connected cages and derives a clue from the solved values."""

    def __init__(self, rng: Optional[random.Random] = None, max_cage_size: int = 3) -> None:
        if max_cage_size < 1:
            raise ConfigError(f"max_cage_size must be at least 1, got {max_cage_size}")
        self.rng = rng or random.Random()
        self.max_cage_size = max_cage_size

    def assign(self, size: int, solved: Sequence[Sequence[int]]) -> List[Cage]:
        bounds = Bounds(rows=size, cols=size)
        visited = [[False] * size for _ in range(size)]
        cages: List[Cage] = []

        for row in range(size):
            for col in range(size):
                if visited[row][col]:
                    continue
                target_size = self.rng.randint(1, self.max_cage_size)
                cells = self._grow(row, col, target_size, visited, bounds)
                values = [solved[r][c] for r, c in cells]
                cage = self._make_cage(len(cages), cells, values)
                LOGGER.debug("Cage %s: %s cells %s", cage.id, cage.label(), cells)
                cages.append(cage)
        return cages

    # ------------------------------------------------------------------
    # Growth
    # ------------------------------------------------------------------
    def _grow(
        self,
        row: int,
        col: int,
        target_size: int,
        visited: List[List[bool]],
        bounds: Bounds,
    ) -> List[Tuple[int, int]]:
        cells = [(row, col)]
        visited[row][col] = True
        while len(cells) < target_size:
            frontier = self._frontier(cells, visited, bounds)
            if not frontier:
                break
            nr, nc = self.rng.choice(frontier)
            visited[nr][nc] = True
            cells.append((nr, nc))
        return cells

    @staticmethod
    def _frontier(
        cells: Sequence[Tuple[int, int]], visited: List[List[bool]], bounds: Bounds
    ) -> List[Tuple[int, int]]:
        frontier: List[Tuple[int, int]] = []
        for r, c in cells:
            for dr, dc in ORTHOGONAL_STEPS:
                nr, nc = r + dr, c + dc
                if not bounds.contains(nr, nc) or visited[nr][nc]:
                    continue
                if (nr, nc) not in frontier:
                    frontier.append((nr, nc))
        return frontier

    # ------------------------------------------------------------------
    # Clues
    # ------------------------------------------------------------------
    def _make_cage(self, cage_id: int, cells: List[Tuple[int, int]], values: List[int]) -> Cage:
        operator = self._choose_operator(values)
        cage = Cage(id=cage_id, cells=cells, operator=operator, target=0)
        target = cage.evaluate(values)
        if target is None:
            raise ValueError(f"Operator {operator} undefined for cage values {values}")
        cage.target = target
        return cage

    def _choose_operator(self, values: Sequence[int]) -> Operator:
        if len(values) == 1:
            return Operator.NONE
        if len(values) == 2:
            options = list(PAIR_OPERATORS)
            high, low = max(values), min(values)
            if high % low == 0:
                options.append(Operator.DIV)
            return self.rng.choice(options)
        return self.rng.choice(GROUP_OPERATORS)
