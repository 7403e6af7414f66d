"""Whole-job feasibility from per-machine match scores.

``match_equipment_to_job`` scores every machine, keeps the positive ones,
and decides whether the job runs fully in-house, partly in-house with some
steps outsourced, or not at all. Finishing certifications (anodizing,
plating, coating) are always outsourced even when every listed operation
is covered, so ``operations_outsourced`` can exceed the operations that
were actually missing.
"""

import logging
from datetime import datetime, timezone

from .profiles import INLINE_PROFILE, MatchingProfile
from .scoring import required_operations, score_machine
from .types import (
    CapabilityAnalysis,
    EquipmentRecord,
    JobRequirements,
    MachineMatch,
    MatchResult,
    ValidationResult,
)

logger = logging.getLogger(__name__)

OUTSOURCED_FINISH_MARKERS = ("anodiz", "plate", "coat")
MAX_MATCHES = 5
MAX_RECOMMENDED = 3
TOLERANCE_CONFIDENT_SCORE = 50


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def outsourced_certifications(certifications: list[str] | None) -> list[str]:
    return [
        c for c in certifications or []
        if any(marker in c.lower() for marker in OUTSOURCED_FINISH_MARKERS)
    ]


def classify_feasibility(
    matches: list[MachineMatch], outsourced: list[str], covered: set[str]
) -> str:
    if not matches:
        return "none"
    if not outsourced:
        return "full"
    if covered:
        return "partial"
    return "none"


def feasibility_summary(
    feasibility: str,
    matches: list[MachineMatch],
    outsourced: list[str],
    profile: MatchingProfile,
) -> str:
    if feasibility == "full":
        return f"Fully manufacturable in-house. {len(matches)} compatible machine(s) identified."
    if feasibility == "partial":
        return (
            f"Partially manufacturable in-house. {len(matches)} machine(s) matched, "
            f"but requires outsourcing: {', '.join(outsourced)}."
        )
    summary = "Cannot be manufactured in-house. Recommend vendor network."
    if profile.list_missing_capabilities:
        summary += f" Missing capabilities: {', '.join(outsourced)}."
    return summary


def _tolerance_achievable(
    requirements: JobRequirements, matches: list[MachineMatch], profile: MatchingProfile
) -> bool:
    if not profile.evaluate_tolerance:
        return True
    if not (requirements.tolerances and requirements.tolerances.min_tolerance_mm):
        return True
    return any(m.match_score > TOLERANCE_CONFIDENT_SCORE for m in matches)


def match_equipment_to_job(
    requirements: JobRequirements,
    equipment: list[EquipmentRecord],
    profile: MatchingProfile = INLINE_PROFILE,
) -> MatchResult:
    required_ops = required_operations(requirements, profile)
    matches = []
    covered = set()

    for machine in equipment:
        result = score_machine(machine, requirements, profile)
        if result.total_score <= 0:
            continue
        matches.append(MachineMatch(
            machine_id=machine.machine_id,
            name=machine.name,
            match_score=result.total_score,
            matched_operations=result.matched_operations,
            matched_materials=result.matched_materials,
            notes=result.notes,
        ))
        covered.update(result.matched_operations)

    # Stable: equal scores keep input order.
    matches.sort(key=lambda m: m.match_score, reverse=True)

    outsourced = [op for op in required_ops if op not in covered]
    for cert in outsourced_certifications(requirements.certifications):
        if cert not in outsourced:
            outsourced.append(cert)

    feasibility = classify_feasibility(matches, outsourced, covered)

    setup_time = None
    if matches:
        top = next(e for e in equipment if e.machine_id == matches[0].machine_id)
        setup_time = top.setup_time_min

    analysis = CapabilityAnalysis(
        feasibility_summary=feasibility_summary(feasibility, matches, outsourced, profile),
        total_operations_required=len(required_ops),
        operations_matched=len(covered),
        operations_outsourced=len(outsourced),
        material_compatibility=any(m.matched_materials for m in matches),
        tolerance_achievable=_tolerance_achievable(requirements, matches, profile),
        estimated_setup_time_min=setup_time,
        recommended_sequence=[m.name for m in matches[:MAX_RECOMMENDED]],
        confidence_score=profile.confidence.score(matches, len(required_ops)),
        analysis_timestamp=_timestamp(),
    )
    logger.debug(
        "Feasibility %s (%d matches, %d outsourced, profile=%s)",
        feasibility, len(matches), len(outsourced), profile.name,
    )
    return MatchResult(
        feasibility=feasibility,
        matches=matches[:MAX_MATCHES],
        outsourced_steps=outsourced,
        analysis=analysis,
    )


def insufficient_data_result(validation: ValidationResult) -> MatchResult:
    """Result recorded when a request fails validation; no equipment is consulted."""
    return MatchResult(
        feasibility="none",
        matches=[],
        outsourced_steps=[],
        analysis=CapabilityAnalysis(
            feasibility_summary=validation.message,
            total_operations_required=0,
            operations_matched=0,
            operations_outsourced=0,
            material_compatibility=False,
            tolerance_achievable=False,
            confidence_score=0,
            validation_errors=validation.errors,
            analysis_timestamp=_timestamp(),
        ),
    )
