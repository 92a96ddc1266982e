"""Keen puzzle orchestration: Latin square, cages, clues.

Generation runs in two phases:
  1. Solution: a random Latin square from :class:`LatinSquareSolver`.
  2. Clues: :class:`CageAssigner` partitions the square and derives cage clues.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.exceptions import ConfigError, GenerationError, ValidationError
from ..core.models import Cage
from ..utils.logger import get_logger
from .cages import CageAssigner
from .latin import DEFAULT_MAX_ATTEMPTS, LatinSquareSolver
from .solver import KeenSolveReport, solve_keen
from .validator import PuzzleValidator, VerificationResult, verify_keen

LOGGER = get_logger(__name__)

MAX_KEEN_SIZE = 9


@dataclass
class KeenConfig:
    size: int = 4
    max_cage_size: int = 3
    seed: Optional[int] = None
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_limit: int = 3
    require_unique: bool = False
    unique_attempts: int = 50
    solver_timeout: float = 10.0

    def validate(self) -> None:
        if not 1 <= self.size <= MAX_KEEN_SIZE:
            raise ConfigError(f"Keen size must be within 1..{MAX_KEEN_SIZE}, got {self.size}")
        if self.max_cage_size < 1:
            raise ConfigError(f"max_cage_size must be positive, got {self.max_cage_size}")
        if self.retry_limit < 1:
            raise ConfigError("retry_limit must be at least 1")

    def make_rng(self) -> random.Random:
        return random.Random(self.seed)


@dataclass
class KeenPuzzle:
    size: int
    solution: List[List[int]]
    cages: List[Cage]
    solver_report: Optional[KeenSolveReport] = None

    def __post_init__(self) -> None:
        self._cage_index: Dict[Tuple[int, int], int] = {
            cell: position for position, cage in enumerate(self.cages) for cell in cage.cells
        }

    def cage_at(self, row: int, col: int) -> Cage:
        return self.cages[self._cage_index[(row, col)]]

    def empty_values(self) -> List[List[Optional[int]]]:
        return [[None] * self.size for _ in range(self.size)]

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "cages": [
                {
                    "id": cage.id,
                    "cells": [list(cell) for cell in cage.cells],
                    "operator": cage.operator.value,
                    "target": cage.target,
                }
                for cage in self.cages
            ],
            "solution": [row[:] for row in self.solution],
        }


class KeenGenerator:
    """Builds Keen puzzles and exposes their solution and verifier."""

    def __init__(self, config: Optional[KeenConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or KeenConfig()
        self.config.validate()
        self.rng = rng or self.config.make_rng()
        self.latin = LatinSquareSolver(self.rng, max_attempts=self.config.max_attempts)
        self.assigner = CageAssigner(self.rng, max_cage_size=self.config.max_cage_size)
        self.validator = PuzzleValidator()

    # ------------------------------------------------------------------
    # Public entrypoints
    # ------------------------------------------------------------------
    def generate(self) -> KeenPuzzle:
        size = self.config.size
        attempts = self.config.unique_attempts if self.config.require_unique else self.config.retry_limit
        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            LOGGER.debug("Keen generation attempt %s/%s", attempt, attempts)
            try:
                solution = self.latin.generate(size)
                cages = self.assigner.assign(size, solution)
                puzzle = KeenPuzzle(size=size, solution=solution, cages=cages)
                validation = self.validator.validate_keen(puzzle)
                if not validation.ok:
                    raise ValidationError(f"Keen validation failed: {validation.messages}")
                if self.config.require_unique:
                    report = solve_keen(size, cages, timeout=self.config.solver_timeout, max_solutions=2)
                    if not report.unique:
                        raise ValidationError(f"Clues admit {len(report.solutions)} solutions")
                    puzzle.solver_report = report
                LOGGER.info("Keen %sx%s generated with %s cages", size, size, len(cages))
                return puzzle
            except (GenerationError, ValidationError) as exc:
                LOGGER.warning("Keen generation attempt failed: %s", exc)
                last_error = exc
        raise GenerationError(f"Unable to generate a {size}x{size} keen puzzle after {attempts} attempts") from last_error

    def solve(self, puzzle: KeenPuzzle) -> List[List[int]]:
        return [row[:] for row in puzzle.solution]

    @staticmethod
    def verify(puzzle: KeenPuzzle, values: Sequence[Sequence[Optional[int]]]) -> VerificationResult:
        return verify_keen(puzzle, values)
