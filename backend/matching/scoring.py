import logging
import math
import re

from .profiles import MatchingProfile
from .types import EquipmentRecord, JobRequirements, MachineScore

logger = logging.getLogger(__name__)

MATERIAL_WEIGHT = 30
OPERATION_WEIGHT = 20
ENVELOPE_FIT_BONUS = 15
ENVELOPE_MISS_PENALTY = 20
TOLERANCE_BONUS = 10
TOLERANCE_PENALTY = 10
PREFERENCE_BONUS = 5

HIGH_VOLUME_QUANTITY = 100
PROTOTYPE_QUANTITY = 10

DEFAULT_OPERATIONS = ("milling", "drilling")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def required_operations(requirements: JobRequirements, profile: MatchingProfile) -> list[str]:
    """Operations the job needs, falling back to a default set when none are given."""
    if requirements.operations:
        return list(requirements.operations)
    ops = list(DEFAULT_OPERATIONS)
    if profile.infer_operations and any(
        "shaft" in m.lower() or "rod" in m.lower() for m in requirements.materials
    ):
        ops.append("turning")
    return ops


def parse_quantity(quantity) -> int | None:
    """Integer part of a quantity, or None when it can't be read as one.

    Strings are read by their leading digits, so "150 pcs" is 150.
    """
    if quantity is None or isinstance(quantity, bool):
        return None
    if isinstance(quantity, (int, float)):
        if not math.isfinite(quantity):
            return None
        return int(quantity)
    match = _LEADING_INT.match(str(quantity))
    if match is None:
        return None
    return int(match.group(1))


def _material_matches(required: str, supported: list[str]) -> bool:
    req = required.lower()
    return any(req in m.lower() or m.lower() in req for m in supported)


def _operation_matches(required: str, supported: list[str]) -> bool:
    req = required.lower()
    return any(req in op.lower() for op in supported)


def _fits_envelope(requirements: JobRequirements, machine: EquipmentRecord) -> bool:
    dims = requirements.dimensions
    envelope = machine.work_envelope_mm
    for axis in ("x", "y", "z"):
        wanted = getattr(dims, axis)
        if not wanted:
            continue
        limit = getattr(envelope, axis)
        if limit is None or wanted > limit:
            return False
    return True


def score_machine(
    machine: EquipmentRecord,
    requirements: JobRequirements,
    profile: MatchingProfile,
) -> MachineScore:
    """Score one machine against one job. Never negative.

    Unavailable machines score zero whatever else matches.
    """
    if machine.status != "available":
        return MachineScore(total_score=0, notes=f"Machine status is {machine.status}")

    score = 0
    matched_ops = []
    matched_mats = []
    notes = []

    for req_mat in requirements.materials:
        if _material_matches(req_mat, machine.materials):
            matched_mats.append(req_mat)
            score += MATERIAL_WEIGHT

    for req_op in required_operations(requirements, profile):
        if _operation_matches(req_op, machine.operations):
            matched_ops.append(req_op)
            score += OPERATION_WEIGHT

    if requirements.dimensions and machine.work_envelope_mm:
        if _fits_envelope(requirements, machine):
            score += ENVELOPE_FIT_BONUS
            notes.append("Part fits work envelope")
        else:
            score -= ENVELOPE_MISS_PENALTY
            notes.append("Part may exceed work envelope")

    if profile.score_tolerance:
        wanted = requirements.tolerances.min_tolerance_mm if requirements.tolerances else None
        if wanted and machine.min_tolerance_mm:
            if machine.min_tolerance_mm <= wanted:
                score += TOLERANCE_BONUS
                notes.append("Tolerance achievable")
            else:
                score -= TOLERANCE_PENALTY
                notes.append("Tolerance may be challenging")

    if profile.score_preferences:
        qty = parse_quantity(requirements.quantity)
        if qty is not None:
            if qty > HIGH_VOLUME_QUANTITY and "high_volume" in machine.preferred_for:
                score += PREFERENCE_BONUS
                notes.append("Well-suited for volume")
            elif qty < PROTOTYPE_QUANTITY and "prototype" in machine.preferred_for:
                score += PREFERENCE_BONUS
                notes.append("Good for prototypes")

    logger.debug("Scored %s: %s", machine.machine_id, score)
    return MachineScore(
        total_score=max(0, score),
        matched_operations=matched_ops,
        matched_materials=matched_mats,
        notes="; ".join(notes),
    )
