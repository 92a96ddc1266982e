"""Data models shared by the puzzle generators and verifiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

from .constants import UNSET_COLOR, Operator, Quadrant


# ----------------------------------------------------------------------
# Keen
# ----------------------------------------------------------------------
@dataclass
class Cell:
    """A Keen grid cell as edited by the player."""

    row: int
    col: int
    value: Optional[int] = None
    pencil_marks: Set[int] = field(default_factory=set)

    def is_empty(self) -> bool:
        return self.value is None


@dataclass
class Cage:
    """Connected group of cells sharing one arithmetic clue."""

    id: int
    cells: List[Tuple[int, int]]
    operator: Operator
    target: int

    @property
    def size(self) -> int:
        return len(self.cells)

    def evaluate(self, values: Sequence[int]) -> Optional[int]:
        """Apply the cage operator to ``values``; ``None`` if undefined."""

        if not values:
            return None
        if self.operator == Operator.NONE:
            return values[0] if len(values) == 1 else None
        if self.operator == Operator.ADD:
            return sum(values)
        if self.operator == Operator.MUL:
            product = 1
            for value in values:
                product *= value
            return product
        if len(values) != 2:
            return None
        high, low = max(values), min(values)
        if self.operator == Operator.SUB:
            return high - low
        if self.operator == Operator.DIV:
            if low == 0 or high % low:
                return None
            return high // low
        raise ValueError(f"Unknown cage operator {self.operator!r}")

    def is_satisfied(self, values: Sequence[int]) -> bool:
        return self.evaluate(values) == self.target

    def label(self) -> str:
        return f"{self.target}{self.operator.value}"


# ----------------------------------------------------------------------
# Bridges
# ----------------------------------------------------------------------
@dataclass
class Island:
    """A Bridges node at an integer grid position."""

    id: int
    x: int
    y: int
    required: int = 0

    @property
    def position(self) -> Tuple[int, int]:
        return (self.x, self.y)


@dataclass
class Bridge:
    """A horizontal or vertical link between two islands."""

    a: int
    b: int
    count: int = 1

    @property
    def key(self) -> Tuple[int, int]:
        return (self.a, self.b) if self.a <= self.b else (self.b, self.a)

    def touches(self, island_id: int) -> bool:
        return island_id in (self.a, self.b)


# ----------------------------------------------------------------------
# Region map
# ----------------------------------------------------------------------
@dataclass
class Region:
    """A map region: its quadrant cells, neighbors and color state."""

    id: int
    quadrants: Set[Tuple[int, Quadrant]] = field(default_factory=set)
    neighbors: Set[int] = field(default_factory=set)
    clue: Optional[int] = None
    color: int = UNSET_COLOR

    @property
    def is_locked(self) -> bool:
        return self.clue is not None


# ----------------------------------------------------------------------
# Untangle
# ----------------------------------------------------------------------
@dataclass
class Node:
    """Untangle graph vertex with a mutable board position."""

    id: int
    x: float
    y: float

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Edge:
    """Immutable untangle edge between two node ids."""

    a: int
    b: int

    def shares_endpoint(self, other: "Edge") -> bool:
        return bool({self.a, self.b} & {other.a, other.b})
