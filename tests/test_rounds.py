import random
import unittest

from flowpuzzles.core.constants import GameState
from flowpuzzles.engine.bridges import BridgesConfig
from flowpuzzles.engine.keen import KeenConfig
from flowpuzzles.engine.region_map import MapConfig
from flowpuzzles.engine.rounds import BridgesRound, GameRound, KeenRound, MapRound, UntangleRound
from flowpuzzles.engine.untangle import UntangleConfig


class RecordingCallback:
    def __init__(self) -> None:
        self.calls = []

    def __call__(self, score: int, is_clean: bool) -> None:
        self.calls.append((score, is_clean))


class GameRoundTests(unittest.TestCase):
    def test_round_without_hooks_cannot_be_built(self) -> None:
        class PartialRound(GameRound):
            def _generate(self):
                return None

        with self.assertRaises(TypeError):
            PartialRound()


class KeenRoundTests(unittest.TestCase):
    def setUp(self) -> None:
        self.callback = RecordingCallback()
        self.round = KeenRound(KeenConfig(size=4), on_complete=self.callback, rng=random.Random(9))
        self.puzzle = self.round.start()

    def test_lifecycle_starts_playing(self) -> None:
        self.assertEqual(self.round.state, GameState.PLAYING)
        self.assertEqual(self.round.values(), self.puzzle.empty_values())

    def test_clean_solve_reports_once(self) -> None:
        for r, row in enumerate(self.puzzle.solution):
            for c, value in enumerate(row):
                self.round.enter_value(r, c, value)
        self.assertEqual(self.round.state, GameState.FINISHED)
        self.assertEqual(self.callback.calls, [(10, True)])
        self.assertFalse(self.round.enter_value(0, 0, 1))
        self.assertEqual(self.callback.calls, [(10, True)])

    def test_same_value_clears_cell(self) -> None:
        self.assertTrue(self.round.enter_value(0, 0, 2))
        self.assertEqual(self.round.cells[0][0].value, 2)
        self.round.enter_value(0, 0, 2)
        self.assertIsNone(self.round.cells[0][0].value)

    def test_out_of_range_input_is_ignored(self) -> None:
        self.assertFalse(self.round.enter_value(0, 0, 5))
        self.assertFalse(self.round.enter_value(4, 0, 1))

    def test_pencil_marks_toggle(self) -> None:
        self.round.toggle_pencil_mark(1, 1, 3)
        self.round.toggle_pencil_mark(1, 1, 4)
        self.assertEqual(self.round.cells[1][1].pencil_marks, {3, 4})
        self.round.toggle_pencil_mark(1, 1, 3)
        self.assertEqual(self.round.cells[1][1].pencil_marks, {4})
        self.assertTrue(self.round.clear_cell(1, 1))
        self.assertEqual(self.round.cells[1][1].pencil_marks, set())

    def test_auto_solve_reports_bypass(self) -> None:
        self.assertTrue(self.round.auto_solve())
        self.assertEqual(self.round.values(), self.puzzle.solution)
        self.assertTrue(self.round.verify().solved)
        self.assertEqual(self.round.state, GameState.FINISHED)
        self.assertEqual(self.callback.calls, [(0, False)])
        self.assertFalse(self.round.auto_solve())
        self.assertEqual(self.callback.calls, [(0, False)])

    def test_deactivate_stops_input(self) -> None:
        self.round.deactivate()
        self.assertEqual(self.round.state, GameState.IDLE)
        self.assertFalse(self.round.enter_value(0, 0, 1))
        self.assertFalse(self.round.auto_solve())
        self.assertEqual(self.callback.calls, [])


class BridgesRoundTests(unittest.TestCase):
    def setUp(self) -> None:
        self.callback = RecordingCallback()
        self.round = BridgesRound(BridgesConfig(), on_complete=self.callback, rng=random.Random(5))
        self.puzzle = self.round.start()

    def test_tapping_the_solution(self) -> None:
        for bridge in self.puzzle.solution:
            for _ in range(bridge.count):
                self.round.select_island(bridge.a)
                self.round.select_island(bridge.b)
        self.assertEqual(self.callback.calls, [(50, True)])
        self.assertEqual(self.round.state, GameState.FINISHED)

    def test_selection_state_machine(self) -> None:
        bridge = self.puzzle.solution[0]
        self.assertFalse(self.round.select_island(bridge.a))
        self.assertEqual(self.round.selected, bridge.a)
        self.assertFalse(self.round.select_island(bridge.a))
        self.assertIsNone(self.round.selected)

        self.round.select_island(bridge.a)
        self.assertTrue(self.round.select_island(bridge.b))
        self.assertIsNone(self.round.selected)
        self.assertEqual(self.round.bridge_count(bridge.a, bridge.b), 1)
        self.assertEqual(len(self.round.bridges_at(bridge.a)), 1)

    def test_statuses_follow_counts(self) -> None:
        self.assertTrue(all(status == "normal" for status in self.round.island_statuses()))

    def test_auto_solve(self) -> None:
        self.round.auto_solve()
        self.assertTrue(self.round.verify().solved)
        self.assertEqual(self.callback.calls, [(0, False)])


class MapRoundTests(unittest.TestCase):
    def setUp(self) -> None:
        self.callback = RecordingCallback()
        self.round = MapRound(MapConfig(clue_probability=0.0), on_complete=self.callback, rng=random.Random(13))
        self.puzzle = self.round.start()

    def test_tap_cycles_colors(self) -> None:
        seen = []
        for _ in range(5):
            self.round.tap_region(0)
            seen.append(self.round.colors[0])
        self.assertEqual(seen, [0, 1, 2, 3, -1])

    def test_tap_point_hits_region(self) -> None:
        region = self.puzzle.region_at(0.5, 0.1)
        self.assertTrue(self.round.tap_point(0.5, 0.1))
        self.assertEqual(self.round.colors[region], 0)
        self.assertFalse(self.round.tap_point(100.0, 100.0))

    def test_coloring_by_taps_finishes_clean(self) -> None:
        for region, color in enumerate(self.puzzle.solution):
            for _ in range(color + 1):
                self.round.tap_region(region)
        self.assertEqual(self.callback.calls, [(25, True)])

    def test_clued_regions_are_locked(self) -> None:
        clued = MapRound(MapConfig(clue_probability=1.0), rng=random.Random(13))
        puzzle = clued.start()
        for _ in range(6):
            self.assertFalse(clued.tap_region(0))
        self.assertEqual(clued.colors, puzzle.solution)


class UntangleRoundTests(unittest.TestCase):
    def setUp(self) -> None:
        self.callback = RecordingCallback()
        self.round = UntangleRound(UntangleConfig(), on_complete=self.callback, rng=random.Random(17))
        self.puzzle = self.round.start()

    def test_moves_are_clamped(self) -> None:
        self.round.move_node(0, -10.0, 200.0)
        self.assertEqual(self.round.nodes[0].position, (8.0, 92.0))

    def test_dragging_to_solution_finishes_clean(self) -> None:
        for node_id, (x, y) in enumerate(self.puzzle.solution):
            self.round.move_node(node_id, x, y)
        self.assertEqual(self.callback.calls, [(50, True)])
        self.assertEqual(self.round.crossings, 0)

    def test_moves_do_not_touch_generated_puzzle(self) -> None:
        before = self.puzzle.positions()
        self.round.move_node(0, 50.0, 50.0)
        self.assertEqual(self.puzzle.positions(), before)

    def test_auto_solve(self) -> None:
        self.assertTrue(self.round.auto_solve())
        self.assertEqual(self.round.crossings, 0)
        self.assertEqual(self.callback.calls, [(0, False)])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
