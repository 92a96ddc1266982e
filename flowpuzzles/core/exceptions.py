"""Custom exception hierarchy for puzzle generation."""


class PuzzleError(Exception):
    """Base exception for engine failures."""


class ConfigError(PuzzleError, ValueError):
    """Raised when generator parameters are out of range."""


class GenerationError(PuzzleError):
    """Raised when a generator cannot produce an instance within its budget."""


class LatinSquareError(GenerationError):
    """Raised when the Latin square search exhausts its attempt budget."""


class ColoringError(GenerationError):
    """Raised when the region map cannot be four-colored within budget."""


class BridgeLayoutError(GenerationError):
    """Raised when island growth never reaches the minimum island count."""


class UntangleLayoutError(GenerationError):
    """Raised when the planar graph cannot be laid out or scrambled."""


class ValidationError(PuzzleError):
    """Raised when a generated instance fails its integrity checks."""
