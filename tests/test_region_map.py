import unittest

from flowpuzzles.core.constants import UNSET_COLOR, Quadrant
from flowpuzzles.core.exceptions import ConfigError
from flowpuzzles.engine.region_map import MapConfig, RegionMapGenerator, quadrant_at
from flowpuzzles.engine.validator import PuzzleValidator, verify_map


class QuadrantTests(unittest.TestCase):
    def test_quadrant_lookup(self) -> None:
        self.assertEqual(quadrant_at(0.5, 0.1), Quadrant.TOP)
        self.assertEqual(quadrant_at(0.5, 0.9), Quadrant.BOTTOM)
        self.assertEqual(quadrant_at(0.1, 0.5), Quadrant.LEFT)
        self.assertEqual(quadrant_at(0.9, 0.5), Quadrant.RIGHT)


class RegionMapGeneratorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.generator = RegionMapGenerator(MapConfig(seed=21))
        self.puzzle = self.generator.generate()

    def test_every_region_is_present_and_colored(self) -> None:
        self.assertEqual(len(self.puzzle.quadrants), 4 * 6 * 8)
        self.assertEqual(set(self.puzzle.quadrants), set(range(12)))
        self.assertTrue(all(0 <= color < 4 for color in self.puzzle.solution))
        self.assertTrue(PuzzleValidator().validate_map(self.puzzle).ok)

    def test_adjacency_is_symmetric(self) -> None:
        for region, neighbors in enumerate(self.puzzle.adjacency):
            self.assertNotIn(region, neighbors)
            for neighbor in neighbors:
                self.assertIn(region, self.puzzle.adjacency[neighbor])

    def test_solution_verifies(self) -> None:
        result = self.generator.verify(self.puzzle, self.generator.solve(self.puzzle))
        self.assertTrue(result.solved)

    def test_neighbor_conflict_is_reported(self) -> None:
        colors = list(self.puzzle.solution)
        region = next(r for r, neighbors in enumerate(self.puzzle.adjacency) if neighbors)
        neighbor = min(self.puzzle.adjacency[region])
        colors[region] = colors[neighbor]
        result = verify_map(self.puzzle, colors)
        self.assertFalse(result.solved)
        self.assertIn((min(region, neighbor), max(region, neighbor)), result.details["conflicts"])

    def test_clues_match_solution(self) -> None:
        for region, clue in enumerate(self.puzzle.clues):
            if clue is not None:
                self.assertEqual(clue, self.puzzle.solution[region])
        regions = self.puzzle.regions()
        self.assertEqual(len(regions), 12)
        for region in regions:
            self.assertEqual(region.is_locked, self.puzzle.clues[region.id] is not None)
            self.assertTrue(region.quadrants)

    def test_region_at(self) -> None:
        self.assertIsNone(self.puzzle.region_at(-1, 0))
        self.assertIsNone(self.puzzle.region_at(6, 0))
        self.assertEqual(self.puzzle.region_at(1.5, 2.1), self.puzzle.region_of(2 * 6 + 1, Quadrant.TOP))


class ClueProbabilityTests(unittest.TestCase):
    def test_no_clues(self) -> None:
        puzzle = RegionMapGenerator(MapConfig(seed=4, clue_probability=0.0)).generate()
        self.assertTrue(all(clue is None for clue in puzzle.clues))
        result = verify_map(puzzle, puzzle.initial_colors())
        self.assertFalse(result.solved)
        self.assertEqual(len(result.details["uncolored"]), 12)
        self.assertTrue(all(color == UNSET_COLOR for color in puzzle.initial_colors()))

    def test_all_clues(self) -> None:
        puzzle = RegionMapGenerator(MapConfig(seed=4, clue_probability=1.0)).generate()
        self.assertEqual(puzzle.clues, puzzle.solution)

    def test_config_validation(self) -> None:
        with self.assertRaises(ConfigError):
            MapConfig(region_count=0).validate()
        with self.assertRaises(ConfigError):
            MapConfig(width=2, height=2, region_count=5).validate()


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
