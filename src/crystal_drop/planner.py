import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class ProbePlan:
    """First-phase drop plan for an n-floor building."""

    n: int
    k: int
    sequence: Tuple[int, ...]


def compute_k(n: int) -> int:
    """
    Smallest non-negative k with k * (k + 1) / 2 >= n.

    Each first-phase drop spends one unit of the step budget, so the steps
    k, k-1, ..., 1 must add up to at least n floors of coverage.
    """
    if n <= 0:
        return 0
    k = (math.isqrt(8 * n + 1) - 1) // 2
    if k * (k + 1) // 2 < n:
        k += 1
    return k


def plan_sequence(n: int, k: int) -> Tuple[int, ...]:
    """Floors for the first probe, with gaps shrinking by one from k."""
    if n <= 0:
        return ()

    sequence = []
    step = k
    current = step
    while current < n and step > 0:
        sequence.append(current)
        step -= 1
        current += step

    # Tiny buildings: the first step already overshoots the top floor.
    if not sequence:
        sequence.append(min(k, n - 1))
    return tuple(sequence)


def plan(n: int) -> ProbePlan:
    k = compute_k(n)
    return ProbePlan(n=n, k=k, sequence=plan_sequence(n, k))


def worst_case_drops(probe_plan: ProbePlan) -> int:
    """
    Upper bound on the probes a search over this plan can take.

    Every planned probe may be spent, followed by a scan of the widest
    bracket: either between two consecutive planned floors (inclusive of the
    breaking one) or above the last planned floor up to n - 1.
    """
    if probe_plan.n <= 0:
        return 0

    widest = 0
    previous_safe = -1
    for floor in probe_plan.sequence:
        widest = max(widest, floor - previous_safe)
        previous_safe = floor
    widest = max(widest, probe_plan.n - 1 - previous_safe)
    return len(probe_plan.sequence) + widest
