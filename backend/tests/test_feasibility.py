import pytest
from matching.confidence import (
    InlineConfidenceStrategy,
    WeightedConfidenceStrategy,
    round_half_up,
)
from matching.feasibility import (
    classify_feasibility,
    insufficient_data_result,
    match_equipment_to_job,
    outsourced_certifications,
)
from matching.profiles import INLINE_PROFILE, WEIGHTED_PROFILE, get_profile
from matching.types import EquipmentRecord, JobRequirements, MachineMatch
from matching.validator import validate_request


MILL = EquipmentRecord(
    machine_id="HAAS_VF2_001",
    name="Haas VF-2",
    status="available",
    operations=["milling", "drilling"],
    materials=["Aluminum"],
    setup_time_min=45,
)


def _mill(n: int, **overrides) -> EquipmentRecord:
    return MILL.model_copy(update={"machine_id": f"MILL_{n}", "name": f"Mill {n}", **overrides})


def _match(score: int, ops: list[str] | None = None) -> MachineMatch:
    return MachineMatch(
        machine_id=f"M{score}", name=f"M{score}", match_score=score,
        matched_operations=ops or [],
    )


# --- End-to-end scenarios ---

@pytest.mark.parametrize("profile", [INLINE_PROFILE, WEIGHTED_PROFILE])
def test_scenario_a_full(profile):
    job = JobRequirements(materials=["6061 Aluminum"], operations=["milling"], quantity=50)
    result = match_equipment_to_job(job, [MILL], profile)
    assert result.feasibility == "full"
    assert result.outsourced_steps == []
    assert len(result.matches) == 1
    assert result.matches[0].match_score == 50
    assert result.analysis.operations_matched == 1
    assert result.analysis.material_compatibility is True
    assert result.analysis.estimated_setup_time_min == 45
    assert result.analysis.recommended_sequence == ["Haas VF-2"]


def test_scenario_b_partial():
    job = JobRequirements(materials=["6061 Aluminum"], operations=["milling", "EDM"], quantity=50)
    result = match_equipment_to_job(job, [MILL])
    assert result.outsourced_steps == ["EDM"]
    assert result.matches[0].matched_operations == ["milling"]
    assert result.feasibility == "partial"
    assert result.analysis.total_operations_required == 2
    assert result.analysis.operations_outsourced == 1
    assert "EDM" in result.analysis.feasibility_summary


def test_scenario_c_none():
    job = JobRequirements(materials=["Titanium"], operations=["5-axis"], quantity=10)
    result = match_equipment_to_job(job, [MILL])
    assert result.matches == []
    assert result.feasibility == "none"
    assert result.outsourced_steps == ["5-axis"]
    assert result.analysis.confidence_score == 0
    assert result.analysis.estimated_setup_time_min is None
    assert result.analysis.material_compatibility is False


def test_scenario_d_invalid_request_short_circuits():
    validation = validate_request({"materials": [], "quantity": 10, "description": "CNC bracket"})
    assert validation.is_valid is False
    result = insufficient_data_result(validation)
    assert result.feasibility == "none"
    assert result.matches == []
    assert result.outsourced_steps == []
    assert result.analysis.confidence_score == 0
    assert result.analysis.tolerance_achievable is False
    assert result.analysis.validation_errors == ["No materials specified"]
    assert result.analysis.feasibility_summary == validation.message


def test_scenario_e_anodizing_always_outsourced():
    job = JobRequirements(
        materials=["6061 Aluminum"], operations=["milling", "drilling"],
        quantity=50, certifications=["Anodize Type II", "AS9100"],
    )
    result = match_equipment_to_job(job, [MILL])
    assert result.analysis.operations_matched == 2
    assert result.outsourced_steps == ["Anodize Type II"]
    assert result.feasibility == "partial"


# --- Aggregation details ---

def test_no_equipment_is_none():
    job = JobRequirements(materials=["Aluminum"], operations=["milling"], quantity=5)
    assert match_equipment_to_job(job, []).feasibility == "none"


def test_unavailable_equipment_is_ignored():
    job = JobRequirements(materials=["Aluminum"], operations=["milling"], quantity=5)
    result = match_equipment_to_job(job, [_mill(1, status="down")])
    assert result.matches == []
    assert result.feasibility == "none"


def test_matches_sorted_and_truncated():
    job = JobRequirements(materials=["Aluminum"], operations=["milling", "drilling"], quantity=5)
    equipment = [_mill(i) for i in range(6)] + [_mill(9, operations=["milling"])]
    result = match_equipment_to_job(job, equipment)
    assert len(result.matches) == 5
    # Ties keep input order
    assert [m.name for m in result.matches] == [f"Mill {i}" for i in range(5)]
    assert result.analysis.recommended_sequence == ["Mill 0", "Mill 1", "Mill 2"]


def test_highest_score_first():
    job = JobRequirements(materials=["Aluminum"], operations=["milling", "drilling"], quantity=5)
    equipment = [_mill(1, operations=["milling"]), _mill(2, setup_time_min=90)]
    result = match_equipment_to_job(job, equipment)
    assert [m.machine_id for m in result.matches] == ["MILL_2", "MILL_1"]
    assert result.analysis.estimated_setup_time_min == 90


def test_certification_markers():
    certs = ["Anodize Type III", "Zinc Plate", "Powder coat", "ISO9001", "ANODIZING"]
    assert outsourced_certifications(certs) == [
        "Anodize Type III", "Zinc Plate", "Powder coat", "ANODIZING",
    ]
    assert outsourced_certifications(None) == []


def test_outsourced_without_any_covered_operation_is_none():
    # A material-only match covers no operation, so the job is not partial
    job = JobRequirements(materials=["Aluminum"], operations=["EDM"], quantity=5)
    result = match_equipment_to_job(job, [MILL])
    assert len(result.matches) == 1
    assert result.feasibility == "none"


def test_classify_feasibility():
    assert classify_feasibility([], [], set()) == "none"
    assert classify_feasibility([_match(10)], [], set()) == "full"
    assert classify_feasibility([_match(10)], ["EDM"], {"milling"}) == "partial"
    assert classify_feasibility([_match(10)], ["EDM"], set()) == "none"


def test_default_operations_used_when_missing():
    job = JobRequirements(materials=["Aluminum"], quantity=5)
    result = match_equipment_to_job(job, [MILL])
    assert result.analysis.total_operations_required == 2
    assert result.feasibility == "full"


def test_weighted_profile_infers_turning():
    job = JobRequirements(materials=["Steel rod"], quantity=5)
    result = match_equipment_to_job(job, [MILL], WEIGHTED_PROFILE)
    assert result.outsourced_steps == ["turning"]
    assert result.feasibility == "partial"


# --- Profile differences ---

def test_confidence_per_profile():
    job = JobRequirements(materials=["6061 Aluminum"], operations=["milling"], quantity=50)
    assert match_equipment_to_job(job, [MILL], INLINE_PROFILE).analysis.confidence_score == 50
    # 50 * 0.6 + 1/1 * 40
    assert match_equipment_to_job(job, [MILL], WEIGHTED_PROFILE).analysis.confidence_score == 70


def test_tolerance_achievable_per_profile():
    job = JobRequirements(
        materials=["Aluminum"], operations=["milling"], quantity=50,
        tolerances={"min_tolerance_mm": 0.02},
    )
    assert match_equipment_to_job(job, [MILL], INLINE_PROFILE).analysis.tolerance_achievable is True
    assert match_equipment_to_job(job, [MILL], WEIGHTED_PROFILE).analysis.tolerance_achievable is False

    precise = MILL.model_copy(update={"min_tolerance_mm": 0.01})
    assert match_equipment_to_job(job, [precise], WEIGHTED_PROFILE).analysis.tolerance_achievable is True


def test_none_summary_per_profile():
    job = JobRequirements(materials=["Titanium"], operations=["5-axis"], quantity=10)
    inline = match_equipment_to_job(job, [MILL], INLINE_PROFILE).analysis.feasibility_summary
    weighted = match_equipment_to_job(job, [MILL], WEIGHTED_PROFILE).analysis.feasibility_summary
    assert "Missing capabilities" not in inline
    assert "Missing capabilities: 5-axis" in weighted


def test_inline_confidence_strategy():
    strategy = InlineConfidenceStrategy()
    assert strategy.score([], 3) == 0
    assert strategy.score([_match(73), _match(10)], 3) == 73


def test_weighted_confidence_strategy():
    strategy = WeightedConfidenceStrategy()
    assert strategy.score([], 3) == 0
    # avg 40 * 0.6 = 24, coverage 1/2 * 40 = 20
    assert strategy.score([_match(60, ["milling"]), _match(20)], 2) == 44
    assert strategy.score([_match(200, ["a", "b"])], 2) == 100
    # zero required operations still divides by at least one
    assert strategy.score([_match(10)], 0) == 6


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.4) == 2


def test_get_profile():
    assert get_profile("inline") is INLINE_PROFILE
    assert get_profile(" Weighted ") is WEIGHTED_PROFILE
    with pytest.raises(ValueError):
        get_profile("fastest")
