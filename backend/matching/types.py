from typing import Literal

from pydantic import BaseModel, ConfigDict


Feasibility = Literal["full", "partial", "none"]


class Dimensions(BaseModel):
    x: float | None = None
    y: float | None = None
    z: float | None = None


class Tolerances(BaseModel):
    min_tolerance_mm: float | None = None


class JobRequirements(BaseModel):
    materials: list[str] = []
    operations: list[str] | None = None
    quantity: int | float | str | None = None
    dimensions: Dimensions | None = None
    tolerances: Tolerances | None = None
    certifications: list[str] | None = None
    description: str = ""


class EquipmentRecord(BaseModel):
    """Read-only snapshot of one machine at query time."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    machine_id: str
    name: str
    type: str | None = None
    status: str
    operations: list[str] = []
    materials: list[str] = []
    preferred_for: list[str] = []
    work_envelope_mm: Dimensions | None = None
    min_tolerance_mm: float | None = None
    setup_time_min: int | None = None
    estimated_hourly_rate_usd: float | None = None


class MachineScore(BaseModel):
    total_score: int
    matched_operations: list[str] = []
    matched_materials: list[str] = []
    notes: str = ""


class MachineMatch(BaseModel):
    machine_id: str
    name: str
    match_score: int
    matched_operations: list[str] = []
    matched_materials: list[str] = []
    notes: str = ""


class ValidationResult(BaseModel):
    is_valid: bool
    message: str = ""
    errors: list[str] = []


class CapabilityAnalysis(BaseModel):
    feasibility_summary: str
    total_operations_required: int
    operations_matched: int
    operations_outsourced: int
    material_compatibility: bool
    tolerance_achievable: bool
    estimated_setup_time_min: int | None = None
    recommended_sequence: list[str] = []
    confidence_score: int = 0
    validation_errors: list[str] | None = None
    analysis_timestamp: str


class MatchResult(BaseModel):
    feasibility: Feasibility
    matches: list[MachineMatch] = []
    outsourced_steps: list[str] = []
    analysis: CapabilityAnalysis
