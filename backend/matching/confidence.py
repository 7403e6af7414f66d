import math
from typing import Protocol

from .types import MachineMatch


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class ConfidenceStrategy(Protocol):
    name: str

    def score(self, matches: list[MachineMatch], required_operation_count: int) -> int:
        ...


class InlineConfidenceStrategy:
    """Confidence is the rounded score of the best machine."""

    name = "inline"

    def score(self, matches: list[MachineMatch], required_operation_count: int) -> int:
        if not matches:
            return 0
        return round_half_up(matches[0].match_score)


class WeightedConfidenceStrategy:
    """Blend of the mean match score and the top machine's operation coverage, capped at 100."""

    name = "weighted"

    def score(self, matches: list[MachineMatch], required_operation_count: int) -> int:
        if not matches:
            return 0
        avg_score = sum(m.match_score for m in matches) / len(matches)
        coverage = len(matches[0].matched_operations) / max(1, required_operation_count)
        return min(100, round_half_up(avg_score * 0.6 + coverage * 40))
