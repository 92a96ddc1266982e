"""Shared constants and enumerations for the puzzle engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Tuple


class PuzzleKind(str, Enum):
    """The four logic mini-games backed by the engine."""

    KEEN = "keen"
    BRIDGES = "bridges"
    MAP = "map"
    UNTANGLE = "untangle"


class GameState(str, Enum):
    """Round lifecycle as seen by the host application."""

    IDLE = "IDLE"
    PLAYING = "PLAYING"
    FINISHED = "FINISHED"


class Operator(str, Enum):
    """Arithmetic operator attached to a Keen cage."""

    NONE = ""
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


class Quadrant(IntEnum):
    """Triangular quarter of a map cell, split along both diagonals."""

    TOP = 0
    BOTTOM = 1
    LEFT = 2
    RIGHT = 3


ORTHOGONAL_STEPS: Tuple[Tuple[int, int], ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))

# Region map palette size and the "no color" marker used in player colorings.
COLOR_COUNT = 4
UNSET_COLOR = -1

# Untangle board coordinates are percentages of the drawing area.
BOARD_MIN = 8.0
BOARD_MAX = 92.0

# Score reported through on_complete for an unaided solve.
CLEAN_SCORES: Dict[PuzzleKind, int] = {
    PuzzleKind.KEEN: 10,
    PuzzleKind.MAP: 25,
    PuzzleKind.BRIDGES: 50,
    PuzzleKind.UNTANGLE: 50,
}
BYPASS_SCORE = 0


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    rows: int
    cols: int

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols
