import os
import secrets
from dataclasses import dataclass

import structlog


log = structlog.get_logger()

DEFAULT_FLOORS = 100
FLOORS_ENV = "CRYSTAL_DROP_FLOORS"
SECRET_ENV = "CRYSTAL_DROP_SECRET"


@dataclass(frozen=True, slots=True)
class Building:
    floors: int
    breaking_floor: int

    def __post_init__(self):
        if self.floors <= 0:
            raise ValueError(f"floors must be > 0, got {self.floors}")
        if not (0 <= self.breaking_floor < self.floors):
            raise ValueError(f"breaking floor must satisfy 0 <= f < {self.floors}, got {self.breaking_floor}")

    def drop(self, floor: int) -> bool:
        """Drop a probe from the given floor. True means it broke."""
        if not (0 <= floor < self.floors):
            raise ValueError(f"floor {floor} is outside the building [0, {self.floors})")
        return floor >= self.breaking_floor


def load_building() -> Building:
    """Build the hidden building from the environment, picking a random secret if unset."""
    floors = int(os.environ.get(FLOORS_ENV, DEFAULT_FLOORS))
    secret = os.environ.get(SECRET_ENV)
    breaking_floor = int(secret) if secret is not None else secrets.randbelow(max(floors, 1))
    building = Building(floors=floors, breaking_floor=breaking_floor)
    log.info("building loaded", floors=building.floors, secret_from_env=secret is not None)
    return building
