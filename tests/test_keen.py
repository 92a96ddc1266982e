import random
import unittest

from flowpuzzles.core.constants import Operator
from flowpuzzles.core.exceptions import ConfigError, LatinSquareError
from flowpuzzles.core.models import Cage
from flowpuzzles.engine.cages import CageAssigner
from flowpuzzles.engine.keen import KeenConfig, KeenGenerator, KeenPuzzle
from flowpuzzles.engine.latin import LatinSquareSolver
from flowpuzzles.engine.solver import solve_keen
from flowpuzzles.engine.validator import PuzzleValidator, is_latin_square


class LatinSquareTests(unittest.TestCase):
    def test_generates_latin_square(self) -> None:
        grid = LatinSquareSolver(random.Random(1)).generate(5)
        self.assertTrue(is_latin_square(grid))

    def test_single_cell(self) -> None:
        self.assertEqual(LatinSquareSolver(random.Random(1)).generate(1), [[1]])

    def test_rejects_non_positive_size(self) -> None:
        with self.assertRaises(ConfigError):
            LatinSquareSolver(random.Random(1)).generate(0)

    def test_attempt_budget(self) -> None:
        with self.assertRaises(LatinSquareError):
            LatinSquareSolver(random.Random(1), max_attempts=1).generate(4)

    def test_same_seed_same_square(self) -> None:
        first = LatinSquareSolver(random.Random(42)).generate(6)
        second = LatinSquareSolver(random.Random(42)).generate(6)
        self.assertEqual(first, second)


class CageTests(unittest.TestCase):
    def test_evaluate_operators(self) -> None:
        self.assertEqual(Cage(0, [(0, 0), (0, 1)], Operator.SUB, 3).evaluate([2, 5]), 3)
        self.assertEqual(Cage(0, [(0, 0), (0, 1)], Operator.DIV, 2).evaluate([3, 6]), 2)
        self.assertIsNone(Cage(0, [(0, 0), (0, 1)], Operator.DIV, 2).evaluate([5, 3]))
        self.assertEqual(Cage(0, [(0, 0)], Operator.NONE, 4).evaluate([4]), 4)
        self.assertEqual(Cage(0, [(0, 0), (0, 1), (1, 0)], Operator.MUL, 24).evaluate([2, 3, 4]), 24)

    def test_label(self) -> None:
        self.assertEqual(Cage(0, [(0, 0), (0, 1)], Operator.ADD, 7).label(), "7+")

    def test_assigner_partitions_grid(self) -> None:
        rng = random.Random(3)
        solution = LatinSquareSolver(rng).generate(5)
        cages = CageAssigner(rng, max_cage_size=3).assign(5, solution)

        cells = [cell for cage in cages for cell in cage.cells]
        self.assertEqual(len(cells), 25)
        self.assertEqual(len(set(cells)), 25)
        for cage in cages:
            self.assertLessEqual(cage.size, 3)
            self.assertTrue(cage.is_satisfied([solution[r][c] for r, c in cage.cells]))
            if cage.size == 1:
                self.assertEqual(cage.operator, Operator.NONE)
            if cage.size > 2:
                self.assertIn(cage.operator, (Operator.ADD, Operator.MUL))


class KeenSolverTests(unittest.TestCase):
    def test_ambiguous_clues_report_two_solutions(self) -> None:
        cages = [Cage(0, [(0, 0), (0, 1), (1, 0), (1, 1)], Operator.ADD, 6)]
        report = solve_keen(2, cages)
        self.assertTrue(report.satisfiable)
        self.assertFalse(report.unique)
        self.assertEqual(len(report.solutions), 2)

    def test_unique_clues(self) -> None:
        cages = [
            Cage(0, [(0, 0)], Operator.NONE, 1),
            Cage(1, [(0, 1), (1, 0), (1, 1)], Operator.ADD, 5),
        ]
        report = solve_keen(2, cages)
        self.assertTrue(report.unique)
        self.assertEqual(report.solutions[0], [[1, 2], [2, 1]])

    def test_contradictory_clues(self) -> None:
        cages = [
            Cage(0, [(0, 0), (0, 1)], Operator.ADD, 10),
            Cage(1, [(1, 0), (1, 1)], Operator.ADD, 3),
        ]
        report = solve_keen(2, cages)
        self.assertFalse(report.satisfiable)


class KeenGeneratorTests(unittest.TestCase):
    def test_generated_puzzle_verifies_against_solution(self) -> None:
        generator = KeenGenerator(KeenConfig(size=4, seed=7))
        puzzle = generator.generate()

        self.assertTrue(PuzzleValidator().validate_keen(puzzle).ok)
        result = generator.verify(puzzle, generator.solve(puzzle))
        self.assertTrue(result.solved)

    def test_partial_and_conflicting_input(self) -> None:
        puzzle = KeenGenerator(KeenConfig(size=4, seed=11)).generate()

        empty = KeenGenerator.verify(puzzle, puzzle.empty_values())
        self.assertFalse(empty.solved)
        self.assertEqual(empty.details["empty_cells"], 16)

        values = [row[:] for row in puzzle.solution]
        values[0][0] = values[0][1]
        conflicted = KeenGenerator.verify(puzzle, values)
        self.assertFalse(conflicted.solved)
        self.assertIn(0, conflicted.details["row_conflicts"])

    def test_singleton_cages_are_unique(self) -> None:
        config = KeenConfig(size=3, max_cage_size=1, seed=5, require_unique=True)
        puzzle = KeenGenerator(config).generate()
        self.assertEqual(len(puzzle.cages), 9)
        self.assertTrue(solve_keen(3, puzzle.cages).unique)
        self.assertIsNotNone(puzzle.solver_report)
        self.assertTrue(puzzle.solver_report.unique)

    def test_solver_report_absent_without_uniqueness_check(self) -> None:
        puzzle = KeenGenerator(KeenConfig(size=3, seed=5)).generate()
        self.assertIsNone(puzzle.solver_report)

    def test_cage_lookup(self) -> None:
        cage = Cage(0, [(0, 0), (0, 1)], Operator.ADD, 3)
        puzzle = KeenPuzzle(size=2, solution=[[1, 2], [2, 1]], cages=[cage, Cage(1, [(1, 0), (1, 1)], Operator.ADD, 3)])
        self.assertIs(puzzle.cage_at(0, 1), cage)

    def test_config_validation(self) -> None:
        with self.assertRaises(ConfigError):
            KeenConfig(size=10).validate()
        with self.assertRaises(ConfigError):
            KeenGenerator(KeenConfig(max_cage_size=0))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
