from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple

type PhaseName = Literal["descend", "scan", "done"]


@dataclass(frozen=True, slots=True)
class SearchState:
    """Immutable snapshot of a threshold search, handed to the view layer."""

    n: int
    k: int
    phase: PhaseName
    finished: bool
    found_floor: Optional[int] = None
    inconsistency: Optional[str] = None
    version: int = 0

    sequence: Tuple[int, ...] = field(default_factory=tuple)
    drops: Tuple[int, ...] = field(default_factory=tuple)
    outcomes: Tuple[bool, ...] = field(default_factory=tuple)  # parallel to drops; True where the probe broke

    @property
    def total_drops(self) -> int:
        return len(self.drops)

    def broke_at(self, floor: int) -> bool:
        """Whether any recorded drop from this floor broke the probe."""
        return any(broke for tested, broke in zip(self.drops, self.outcomes) if tested == floor)

    @property
    def current_floor(self) -> Optional[int]:
        """The most recently tested floor, if any."""
        return self.drops[-1] if self.drops else None
