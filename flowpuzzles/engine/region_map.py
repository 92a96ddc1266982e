"""Four-color region map generator.

The board is a ``width x height`` grid whose cells are each split along both
diagonals into four triangular quadrants. Regions are grown over whole cells,
then some 2x2 blocks are re-cut along a diagonal so borders are not purely
rectilinear. The region adjacency graph is planar by construction, so a
four-coloring always exists; a randomized backtracking search finds one.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from ..core.constants import COLOR_COUNT, UNSET_COLOR, Quadrant
from ..core.exceptions import ColoringError, ConfigError, GenerationError, ValidationError
from ..core.models import Region
from ..utils.logger import get_logger
from .geometry import orientation
from .graph import add_edge
from .validator import PuzzleValidator, VerificationResult, verify_map

LOGGER = get_logger(__name__)

QUADRANTS_PER_CELL = 4

# Quadrant pairs inside one cell that can carry a region border.
_INNER_PAIRS = (
    (Quadrant.TOP, Quadrant.BOTTOM),
    (Quadrant.LEFT, Quadrant.RIGHT),
    (Quadrant.TOP, Quadrant.LEFT),
    (Quadrant.TOP, Quadrant.RIGHT),
    (Quadrant.BOTTOM, Quadrant.LEFT),
    (Quadrant.BOTTOM, Quadrant.RIGHT),
)


@dataclass
class MapConfig:
    width: int = 6
    height: int = 8
    region_count: int = 12
    clue_probability: float = 0.3
    seed: Optional[int] = None
    max_attempts: int = 100_000
    retry_limit: int = 3

    def validate(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ConfigError(f"Map grid must be at least 1x1, got {self.width}x{self.height}")
        if not 1 <= self.region_count <= self.width * self.height:
            raise ConfigError(
                f"region_count must be within 1..{self.width * self.height}, got {self.region_count}"
            )
        if not 0.0 <= self.clue_probability <= 1.0:
            raise ConfigError(f"clue_probability must be within [0, 1], got {self.clue_probability}")
        if self.retry_limit < 1:
            raise ConfigError("retry_limit must be at least 1")

    def make_rng(self) -> random.Random:
        return random.Random(self.seed)


def quadrant_at(local_x: float, local_y: float) -> Quadrant:
    """Quadrant of a unit cell containing the point (local_x, local_y).

    Coordinates grow right and down. Points exactly on a diagonal resolve to
    the lower or outer side of that diagonal.
    """

    above_main = orientation((0.0, 0.0), (1.0, 1.0), (local_x, local_y)) < 0
    above_anti = orientation((0.0, 1.0), (1.0, 0.0), (local_x, local_y)) < 0
    if above_main and above_anti:
        return Quadrant.TOP
    if not above_main and not above_anti:
        return Quadrant.BOTTOM
    if above_anti:
        return Quadrant.LEFT
    return Quadrant.RIGHT


@dataclass
class MapPuzzle:
    width: int
    height: int
    region_count: int
    quadrants: List[int]
    adjacency: List[Set[int]]
    solution: List[int]
    clues: List[Optional[int]]

    def region_of(self, cell_index: int, quadrant: Quadrant) -> int:
        return self.quadrants[cell_index * QUADRANTS_PER_CELL + quadrant]

    def region_at(self, x: float, y: float) -> Optional[int]:
        """Region under a point given in cell units; ``None`` outside the board."""

        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        cell_x, cell_y = int(x), int(y)
        quadrant = quadrant_at(x - cell_x, y - cell_y)
        return self.region_of(cell_y * self.width + cell_x, quadrant)

    def initial_colors(self) -> List[int]:
        return [UNSET_COLOR if clue is None else clue for clue in self.clues]

    def regions(self) -> List[Region]:
        regions = [
            Region(id=region, neighbors=set(self.adjacency[region]), clue=self.clues[region])
            for region in range(self.region_count)
        ]
        for index, region in enumerate(self.quadrants):
            cell_index, quadrant = divmod(index, QUADRANTS_PER_CELL)
            regions[region].quadrants.add((cell_index, Quadrant(quadrant)))
        for region in regions:
            region.color = UNSET_COLOR if region.clue is None else region.clue
        return regions

    def to_jsonable(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "region_count": self.region_count,
            "quadrants": list(self.quadrants),
            "adjacency": [sorted(neighbors) for neighbors in self.adjacency],
            "clues": list(self.clues),
            "solution": list(self.solution),
        }


class RegionMapGenerator:
    """Grows a planar subdivision and four-colors its regions."""

    def __init__(self, config: Optional[MapConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or MapConfig()
        self.config.validate()
        self.rng = rng or self.config.make_rng()
        self.validator = PuzzleValidator()

    # ------------------------------------------------------------------
    # Public entrypoints
    # ------------------------------------------------------------------
    def generate(self) -> MapPuzzle:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.config.retry_limit + 1):
            LOGGER.debug("Map generation attempt %s/%s", attempt, self.config.retry_limit)
            try:
                cell_regions = self._grow_regions()
                quadrants = [region for region in cell_regions for _ in range(QUADRANTS_PER_CELL)]
                self._cut_diagonals(cell_regions, quadrants)
                adjacency = self._extract_adjacency(quadrants)
                solution = self._four_color(adjacency)
                clues = [
                    color if self.rng.random() < self.config.clue_probability else None
                    for color in solution
                ]
                puzzle = MapPuzzle(
                    width=self.config.width,
                    height=self.config.height,
                    region_count=self.config.region_count,
                    quadrants=quadrants,
                    adjacency=adjacency,
                    solution=solution,
                    clues=clues,
                )
                validation = self.validator.validate_map(puzzle)
                if not validation.ok:
                    raise ValidationError(f"Map validation failed: {validation.messages}")
                LOGGER.info(
                    "Map %sx%s generated with %s regions, %s clues",
                    puzzle.width,
                    puzzle.height,
                    puzzle.region_count,
                    sum(1 for clue in clues if clue is not None),
                )
                return puzzle
            except (GenerationError, ValidationError) as exc:
                LOGGER.warning("Map generation attempt failed: %s", exc)
                last_error = exc
        raise GenerationError("Unable to generate region map after retries") from last_error

    def solve(self, puzzle: MapPuzzle) -> List[int]:
        return list(puzzle.solution)

    @staticmethod
    def verify(puzzle: MapPuzzle, colors: List[int]) -> VerificationResult:
        return verify_map(puzzle, colors)

    # ------------------------------------------------------------------
    # Region growth
    # ------------------------------------------------------------------
    def _cell_neighbors(self, index: int) -> List[int]:
        width, height = self.config.width, self.config.height
        y, x = divmod(index, width)
        neighbors = []
        if y > 0:
            neighbors.append(index - width)
        if y < height - 1:
            neighbors.append(index + width)
        if x > 0:
            neighbors.append(index - 1)
        if x < width - 1:
            neighbors.append(index + 1)
        return neighbors

    def _grow_regions(self) -> List[int]:
        cell_count = self.config.width * self.config.height
        cells = list(range(cell_count))
        self.rng.shuffle(cells)
        cell_regions = [UNSET_COLOR] * cell_count
        for region, cell in enumerate(cells[: self.config.region_count]):
            cell_regions[cell] = region

        frontier: Set[int] = set()
        for cell in cells[: self.config.region_count]:
            frontier.update(n for n in self._cell_neighbors(cell) if cell_regions[n] == UNSET_COLOR)

        filled = self.config.region_count
        while filled < cell_count:
            if not frontier:
                raise GenerationError("Region growth ran out of frontier cells")
            target = self.rng.choice(sorted(frontier))
            frontier.discard(target)
            owners = [n for n in self._cell_neighbors(target) if cell_regions[n] != UNSET_COLOR]
            cell_regions[target] = cell_regions[self.rng.choice(owners)]
            filled += 1
            frontier.update(n for n in self._cell_neighbors(target) if cell_regions[n] == UNSET_COLOR)
        return cell_regions

    def _cut_diagonals(self, cell_regions: List[int], quadrants: List[int]) -> None:
        width = self.config.width
        cuts = 0
        for y in range(1, self.config.height):
            for x in range(1, width):
                top_left = (y - 1) * width + (x - 1)
                top_right = (y - 1) * width + x
                bottom_left = y * width + (x - 1)
                bottom_right = y * width + x
                main = cell_regions[top_left]
                anti = cell_regions[top_right]
                if main != cell_regions[bottom_right] or anti != cell_regions[bottom_left] or main == anti:
                    continue
                if self.rng.random() < 0.5:
                    quadrants[top_right * QUADRANTS_PER_CELL + Quadrant.LEFT] = main
                    quadrants[bottom_left * QUADRANTS_PER_CELL + Quadrant.RIGHT] = main
                else:
                    quadrants[top_left * QUADRANTS_PER_CELL + Quadrant.RIGHT] = anti
                    quadrants[bottom_right * QUADRANTS_PER_CELL + Quadrant.LEFT] = anti
                cuts += 1
        LOGGER.debug("Applied %s diagonal cuts", cuts)

    # ------------------------------------------------------------------
    # Adjacency and coloring
    # ------------------------------------------------------------------
    def _extract_adjacency(self, quadrants: List[int]) -> List[Set[int]]:
        width, height = self.config.width, self.config.height
        adjacency: List[Set[int]] = [set() for _ in range(self.config.region_count)]

        def region(cell: int, quadrant: Quadrant) -> int:
            return quadrants[cell * QUADRANTS_PER_CELL + quadrant]

        for y in range(height):
            for x in range(width):
                cell = y * width + x
                for first, second in _INNER_PAIRS:
                    add_edge(adjacency, region(cell, first), region(cell, second))
                if x < width - 1:
                    add_edge(adjacency, region(cell, Quadrant.RIGHT), region(cell + 1, Quadrant.LEFT))
                if y < height - 1:
                    add_edge(adjacency, region(cell, Quadrant.BOTTOM), region(cell + width, Quadrant.TOP))
        return adjacency

    def _four_color(self, adjacency: List[Set[int]]) -> List[int]:
        """Backtracking four-coloring over region ids in index order."""

        count = len(adjacency)
        colors = [UNSET_COLOR] * count
        stack: List[List[int]] = [self._color_order()]
        attempts = 0
        while stack:
            region = len(stack) - 1
            colors[region] = UNSET_COLOR
            options = stack[-1]
            placed = False
            while options:
                color = options.pop()
                if any(colors[neighbor] == color for neighbor in adjacency[region]):
                    continue
                attempts += 1
                if attempts > self.config.max_attempts:
                    raise ColoringError(f"Four-coloring exceeded {self.config.max_attempts} attempts")
                colors[region] = color
                placed = True
                break
            if not placed:
                stack.pop()
                continue
            if region + 1 == count:
                LOGGER.debug("Four-coloring found after %s attempts", attempts)
                return colors
            stack.append(self._color_order())
        raise ColoringError("Region adjacency graph is not four-colorable")

    def _color_order(self) -> List[int]:
        palette = list(range(COLOR_COUNT))
        self.rng.shuffle(palette)
        return palette
