"""Randomized backtracking generator for Latin squares."""

from __future__ import annotations

import random
from typing import List, Optional, Set

from ..core.exceptions import ConfigError, LatinSquareError
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 200_000


class LatinSquareSolver:
    """Fills an N x N grid so every row and column is a permutation of 1..N.

    Cells are visited in row-major order. Each cell owns a choice point: the
    shuffled values it has not tried yet. Backtracking pops the choice point and
    undoes the value placed in the previous cell, so no grid copies are made.
    """

    def __init__(self, rng: Optional[random.Random] = None, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts

    def generate(self, size: int) -> List[List[int]]:
        if size < 1:
            raise ConfigError(f"Latin square size must be positive, got {size}")

        total = size * size
        grid: List[List[int]] = [[0] * size for _ in range(size)]
        row_used: List[Set[int]] = [set() for _ in range(size)]
        col_used: List[Set[int]] = [set() for _ in range(size)]
        stack: List[List[int]] = [self._candidates(size)]
        attempts = 0

        while stack:
            index = len(stack) - 1
            row, col = divmod(index, size)

            previous = grid[row][col]
            if previous:
                row_used[row].discard(previous)
                col_used[col].discard(previous)
                grid[row][col] = 0

            candidates = stack[-1]
            placed = False
            while candidates:
                value = candidates.pop()
                if value in row_used[row] or value in col_used[col]:
                    continue
                attempts += 1
                if attempts > self.max_attempts:
                    raise LatinSquareError(
                        f"Latin square {size}x{size} not found within {self.max_attempts} placements"
                    )
                grid[row][col] = value
                row_used[row].add(value)
                col_used[col].add(value)
                placed = True
                break

            if not placed:
                stack.pop()
                continue
            if index + 1 == total:
                LOGGER.debug("Latin square %sx%s built after %s placements", size, size, attempts)
                return grid
            stack.append(self._candidates(size))

        raise LatinSquareError(f"Latin square search space exhausted for size {size}")

    def _candidates(self, size: int) -> List[int]:
        values = list(range(1, size + 1))
        self.rng.shuffle(values)
        return values
