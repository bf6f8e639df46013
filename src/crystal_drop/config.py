from dataclasses import dataclass


DEFAULT_PLAYBACK_DELAY = 0.3
DEFAULT_DEMO_ENDPOINT = "http://127.0.0.1:8000/api"

# Buildings taller than this are summarized instead of drawn floor by floor.
MAX_BUILDING_FLOORS = 40


class InvalidConfiguration(ValueError):
    pass


def validate_floor_count(n: int) -> int:
    """Reject floor counts the planner cannot work with."""
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidConfiguration(f"Number of floors must be an integer, got {n!r}")
    if n <= 0:
        raise InvalidConfiguration(f"Number of floors must be > 0, got {n}")
    return n


@dataclass(frozen=True, slots=True)
class SearchConfig:
    """Floor count and hidden breaking floor for a single search."""

    n: int
    secret_f: int

    def __post_init__(self):
        validate_floor_count(self.n)
        if isinstance(self.secret_f, bool) or not isinstance(self.secret_f, int):
            raise InvalidConfiguration(f"Breaking floor must be an integer, got {self.secret_f!r}")
        if not (0 <= self.secret_f < self.n):
            raise InvalidConfiguration(f"Breaking floor must satisfy 0 <= f < {self.n}, got {self.secret_f}")
