from dataclasses import dataclass

from .confidence import (
    ConfidenceStrategy,
    InlineConfidenceStrategy,
    WeightedConfidenceStrategy,
)


@dataclass(frozen=True)
class MatchingProfile:
    """Switches that separate the request-handler matcher from the service matcher."""

    name: str
    score_tolerance: bool
    score_preferences: bool
    infer_operations: bool
    evaluate_tolerance: bool
    list_missing_capabilities: bool
    confidence: ConfidenceStrategy


INLINE_PROFILE = MatchingProfile(
    name="inline",
    score_tolerance=False,
    score_preferences=False,
    infer_operations=False,
    evaluate_tolerance=False,
    list_missing_capabilities=False,
    confidence=InlineConfidenceStrategy(),
)

WEIGHTED_PROFILE = MatchingProfile(
    name="weighted",
    score_tolerance=True,
    score_preferences=True,
    infer_operations=True,
    evaluate_tolerance=True,
    list_missing_capabilities=True,
    confidence=WeightedConfidenceStrategy(),
)

PROFILES = {p.name: p for p in (INLINE_PROFILE, WEIGHTED_PROFILE)}


def get_profile(name: str) -> MatchingProfile:
    try:
        return PROFILES[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown matching profile '{name}'. Expected one of: {', '.join(sorted(PROFILES))}"
        ) from None
