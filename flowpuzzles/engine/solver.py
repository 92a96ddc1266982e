"""CP-SAT Keen solver using OR-Tools.

The generator already knows one solution of every puzzle it builds. This solver
works from the clues alone, which lets callers confirm the clues are
satisfiable and count how many grids satisfy them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import product
from typing import Dict, List, Sequence, Tuple

from ortools.sat.python import cp_model

from ..core.models import Cage
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)

Grid = List[List[int]]


@dataclass
class KeenSolveReport:
    status: str
    solutions: List[Grid] = field(default_factory=list)
    wall_time: float = 0.0

    @property
    def satisfiable(self) -> bool:
        return bool(self.solutions)

    @property
    def unique(self) -> bool:
        return len(self.solutions) == 1


class _SolutionCollector(cp_model.CpSolverSolutionCallback):
    """Records solutions until ``limit`` is reached, then stops the search."""

    def __init__(self, cell_vars: Dict[Tuple[int, int], cp_model.IntVar], size: int, limit: int) -> None:
        super().__init__()
        self._cell_vars = cell_vars
        self._size = size
        self._limit = limit
        self.solutions: List[Grid] = []

    def on_solution_callback(self) -> None:
        grid = [
            [self.value(self._cell_vars[(r, c)]) for c in range(self._size)]
            for r in range(self._size)
        ]
        self.solutions.append(grid)
        if len(self.solutions) >= self._limit:
            self.stop_search()


def solve_keen(
    size: int,
    cages: Sequence[Cage],
    timeout: float = 10.0,
    max_solutions: int = 2,
) -> KeenSolveReport:
    """Enumerate up to ``max_solutions`` grids satisfying the cage clues.

    Args:
        size: Grid side length N; cells take values 1..N.
        cages: Cages partitioning the grid.
        timeout: Solver time limit in seconds.
        max_solutions: Stop after this many solutions (2 is enough to tell
            unique puzzles from ambiguous ones).

    Returns:
        A :class:`KeenSolveReport`; ``solutions`` is empty when the clues are
        contradictory or the time limit expired first.
    """

    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: Cell variables and Latin constraints
    # ------------------------------------------------------------------
    cell_vars: Dict[Tuple[int, int], cp_model.IntVar] = {
        (r, c): model.new_int_var(1, size, f"V_{r}_{c}")
        for r in range(size)
        for c in range(size)
    }
    for r in range(size):
        model.add_all_different([cell_vars[(r, c)] for c in range(size)])
    for c in range(size):
        model.add_all_different([cell_vars[(r, c)] for r in range(size)])

    # ------------------------------------------------------------------
    # Step 2: Cage tables
    # ------------------------------------------------------------------
    for cage in cages:
        cage_vars = [cell_vars[cell] for cell in cage.cells]
        if cage.size == 1:
            model.add(cage_vars[0] == cage.target)
            continue
        tuples = _cage_assignments(cage, size)
        if not tuples:
            LOGGER.debug("Cage %s (%s) admits no assignment", cage.id, cage.label())
            return KeenSolveReport(status="INFEASIBLE")
        model.add_allowed_assignments(cage_vars, tuples)

    # ------------------------------------------------------------------
    # Step 3: Enumerate
    # ------------------------------------------------------------------
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.enumerate_all_solutions = True
    solver.parameters.num_workers = 1

    collector = _SolutionCollector(cell_vars, size, max(1, max_solutions))
    status = solver.solve(model, collector)

    LOGGER.info(
        "CP-SAT: %sx%s keen, %d cages, %d solution(s) (status=%s, %.2fs)",
        size,
        size,
        len(cages),
        len(collector.solutions),
        solver.status_name(status),
        solver.wall_time,
    )
    return KeenSolveReport(
        status=solver.status_name(status),
        solutions=collector.solutions,
        wall_time=solver.wall_time,
    )


def _cage_assignments(cage: Cage, size: int) -> List[List[int]]:
    """All value tuples (in cage cell order) that satisfy the cage clue."""

    return [
        list(values)
        for values in product(range(1, size + 1), repeat=cage.size)
        if cage.is_satisfied(values)
    ]
