import random
import unittest

from flowpuzzles.engine.bridges import BridgePuzzleGenerator, BridgesConfig
from flowpuzzles.engine.keen import KeenConfig, KeenGenerator
from flowpuzzles.engine.region_map import MapConfig, RegionMapGenerator
from flowpuzzles.engine.untangle import PlanarGraphGenerator, UntangleConfig
from flowpuzzles.engine.validator import (
    PuzzleValidator,
    is_latin_square,
    verify_bridges,
    verify_keen,
    verify_map,
    verify_untangle,
)


class SeededPropertyTests(unittest.TestCase):
    """Each generator, over a range of seeds, yields a self-consistent instance."""

    SEEDS = range(8)

    def setUp(self) -> None:
        self.validator = PuzzleValidator()

    def test_keen(self) -> None:
        for seed in self.SEEDS:
            with self.subTest(seed=seed):
                puzzle = KeenGenerator(KeenConfig(size=5, seed=seed)).generate()
                self.assertTrue(is_latin_square(puzzle.solution))
                self.assertTrue(verify_keen(puzzle, puzzle.solution).solved)
                partial = puzzle.empty_values()
                partial[0] = list(puzzle.solution[0])
                self.assertEqual(verify_keen(puzzle, partial), verify_keen(puzzle, partial))
                self.assertEqual(verify_keen(puzzle, puzzle.solution), verify_keen(puzzle, puzzle.solution))

    def test_region_map(self) -> None:
        for seed in self.SEEDS:
            with self.subTest(seed=seed):
                puzzle = RegionMapGenerator(MapConfig(seed=seed)).generate()
                self.assertTrue(self.validator.validate_map(puzzle).ok)
                first = verify_map(puzzle, puzzle.solution)
                second = verify_map(puzzle, puzzle.solution)
                self.assertTrue(first.solved)
                self.assertEqual(first, second)

    def test_bridges(self) -> None:
        for seed in self.SEEDS:
            with self.subTest(seed=seed):
                config = BridgesConfig(seed=seed)
                puzzle = BridgePuzzleGenerator(config).generate()
                self.assertLessEqual(len(puzzle.islands), config.max_islands)
                self.assertTrue(self.validator.validate_bridges(puzzle).ok)
                self.assertTrue(verify_bridges(puzzle, puzzle.solution).solved)
                partial = puzzle.solution[:1]
                self.assertEqual(verify_bridges(puzzle, partial), verify_bridges(puzzle, partial))
                self.assertEqual(verify_bridges(puzzle, puzzle.solution), verify_bridges(puzzle, puzzle.solution))

    def test_untangle(self) -> None:
        for seed in self.SEEDS:
            with self.subTest(seed=seed):
                puzzle = PlanarGraphGenerator(UntangleConfig(seed=seed)).generate()
                self.assertTrue(verify_untangle(puzzle, puzzle.solution).solved)
                self.assertEqual(verify_untangle(puzzle), verify_untangle(puzzle))
                self.assertEqual(
                    verify_untangle(puzzle, puzzle.solution), verify_untangle(puzzle, puzzle.solution)
                )

    def test_injected_rng_is_reproducible(self) -> None:
        first = RegionMapGenerator(rng=random.Random(99)).generate()
        second = RegionMapGenerator(rng=random.Random(99)).generate()
        self.assertEqual(first.quadrants, second.quadrants)
        self.assertEqual(first.solution, second.solution)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
