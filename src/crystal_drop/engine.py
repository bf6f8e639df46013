from __future__ import annotations
from dataclasses import dataclass, replace
from typing import List, Literal, Optional

import structlog

from crystal_drop.config import SearchConfig
from crystal_drop.oracle import BreakOracleFn, threshold_oracle
from crystal_drop.planner import ProbePlan, plan
from crystal_drop.state_snapshot import PhaseName, SearchState

log = structlog.get_logger(__name__)

type ProbeAction = Literal["safe", "break", "linear-safe", "found", "finished", "inconsistent"]


class SearchInconsistency(RuntimeError):
    """A linear scan ran out of floors without the probe ever breaking."""


# ---------- Search phases ----------
@dataclass(frozen=True, slots=True)
class Descending:
    index: int  # next position in the planned sequence


@dataclass(frozen=True, slots=True)
class Scanning:
    next_floor: int
    last_floor: int  # inclusive
    break_index: Optional[int]  # position in drops of the breaking probe; None above the plan


@dataclass(frozen=True, slots=True)
class Done:
    found_floor: Optional[int]


type Phase = Descending | Scanning | Done


@dataclass(frozen=True, slots=True)
class ProbeStep:
    """Outcome of a single advance() call."""

    action: ProbeAction
    floor: Optional[int] = None
    broke: Optional[bool] = None


class ThresholdSearchEngine:
    """
    Two-probe threshold search over a planned descent.

    The first probe walks the planned sequence until it breaks; the second
    then scans linearly from just above the last safe planned floor up to and
    including the breaking floor. When the whole plan stays safe, the scan
    continues from above the last planned floor to the top of the building.

    Drive it with advance() one probe at a time or with run_to_completion().
    Both walk the same phase transitions, so they record identical drops.
    """

    def __init__(self, probe_plan: ProbePlan, breaks: BreakOracleFn) -> None:
        self.plan = probe_plan
        self._breaks = breaks
        self._sequence = probe_plan.sequence
        self._drops: List[int] = []
        self._outcomes: List[bool] = []
        self._inconsistency: Optional[str] = None
        self._version = 0
        self._phase: Phase = self._initial_phase()

    @classmethod
    def from_config(cls, config: SearchConfig) -> "ThresholdSearchEngine":
        """Plan the descent for config.n and test drops against config.secret_f."""
        return cls(plan(config.n), threshold_oracle(config.secret_f))

    @property
    def n(self) -> int:
        return self.plan.n

    @property
    def k(self) -> int:
        return self.plan.k

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def finished(self) -> bool:
        return isinstance(self._phase, Done)

    def _initial_phase(self) -> Phase:
        if self.n <= 0:
            # Nothing to search.
            return Done(found_floor=None)
        return Descending(index=0)

    def _drop(self, floor: int) -> bool:
        broke = bool(self._breaks(floor))
        self._drops.append(floor)
        self._outcomes.append(broke)
        log.debug("probe", floor=floor, broke=broke, drop=len(self._drops))
        return broke

    def _transition(self, phase: Phase) -> None:
        self._phase = phase
        self._version += 1

    def advance(self) -> ProbeStep:
        """Test exactly one floor, or report that the search is over."""
        phase = self._phase

        if isinstance(phase, Done):
            return ProbeStep(action="finished")

        if isinstance(phase, Descending):
            if phase.index < len(self._sequence):
                floor = self._sequence[phase.index]
                if self._drop(floor):
                    previous_safe = -1 if phase.index == 0 else self._sequence[phase.index - 1]
                    self._transition(Scanning(
                        next_floor=previous_safe + 1,
                        last_floor=floor,
                        break_index=len(self._drops) - 1,
                    ))
                    return ProbeStep(action="break", floor=floor, broke=True)

                self._transition(Descending(index=phase.index + 1))
                return ProbeStep(action="safe", floor=floor, broke=False)

            if not self._sequence:
                # Reset engines have no plan left to follow.
                self._transition(Done(found_floor=None))
                return ProbeStep(action="finished")

            # The whole plan stayed safe: keep scanning above it to the top floor.
            phase = Scanning(next_floor=self._sequence[-1] + 1, last_floor=self.n - 1, break_index=None)

        if phase.next_floor > phase.last_floor:
            return self._fail(phase)

        floor = phase.next_floor
        if self._drop(floor):
            self._transition(Done(found_floor=floor))
            return ProbeStep(action="found", floor=floor, broke=True)

        self._transition(replace(phase, next_floor=floor + 1))
        return ProbeStep(action="linear-safe", floor=floor, broke=False)

    def _fail(self, phase: Scanning) -> ProbeStep:
        if phase.break_index is None:
            self._inconsistency = (
                f"no floor in [0, {self.n}) broke the probe; "
                "the breaking floor is outside the building"
            )
        else:
            self._inconsistency = (
                f"probe broke at floor {self._drops[phase.break_index]} but no floor up to it "
                "broke during the linear scan; the oracle is not monotone"
            )
        log.warning(
            "search inconsistency",
            reason=self._inconsistency,
            drops=list(self._drops),
            n=self.n,
        )
        self._transition(Done(found_floor=None))
        return ProbeStep(action="inconsistent")

    def run_to_completion(self) -> SearchState:
        """Solve from scratch, discarding any probes already recorded."""
        self._drops = []
        self._outcomes = []
        self._inconsistency = None
        self._phase = self._initial_phase()
        while not self.finished:
            self.advance()
        return self.snapshot()

    def reset(self) -> None:
        """Forget the plan and all probes. Re-planning is up to the caller."""
        self._sequence = ()
        self._drops = []
        self._outcomes = []
        self._inconsistency = None
        self.plan = replace(self.plan, sequence=())
        self._transition(Descending(index=0))

    def snapshot(self) -> SearchState:
        phase = self._phase
        phase_name: PhaseName
        if isinstance(phase, Done):
            phase_name = "done"
        elif isinstance(phase, Scanning):
            phase_name = "scan"
        else:
            phase_name = "descend"

        return SearchState(
            n=self.n,
            k=self.k,
            phase=phase_name,
            finished=isinstance(phase, Done),
            found_floor=phase.found_floor if isinstance(phase, Done) else None,
            inconsistency=self._inconsistency,
            version=self._version,
            sequence=tuple(self._sequence),
            drops=tuple(self._drops),
            outcomes=tuple(self._outcomes),
        )

    def raise_for_inconsistency(self) -> None:
        if self._inconsistency is not None:
            raise SearchInconsistency(self._inconsistency)
