"""Procedural generators and verifiers for four logic mini-games.

This package exposes the public API surface via:

- ``flowpuzzles.engine.keen.KeenGenerator``: Latin square plus arithmetic cages.
- ``flowpuzzles.engine.bridges.BridgePuzzleGenerator``: island and bridge layouts.
- ``flowpuzzles.engine.region_map.RegionMapGenerator``: four-colorable region maps.
- ``flowpuzzles.engine.untangle.PlanarGraphGenerator``: scrambled planar graphs.
- ``flowpuzzles.engine.rounds``: round lifecycle and scoring for a host UI.
"""

from .engine.bridges import BridgePuzzleGenerator, BridgesConfig
from .engine.keen import KeenConfig, KeenGenerator
from .engine.region_map import MapConfig, RegionMapGenerator
from .engine.rounds import BridgesRound, KeenRound, MapRound, UntangleRound
from .engine.untangle import PlanarGraphGenerator, UntangleConfig

__all__ = [
    "KeenGenerator",
    "KeenConfig",
    "BridgePuzzleGenerator",
    "BridgesConfig",
    "RegionMapGenerator",
    "MapConfig",
    "PlanarGraphGenerator",
    "UntangleConfig",
    "KeenRound",
    "BridgesRound",
    "MapRound",
    "UntangleRound",
]

__version__ = "0.1.0"
