from typing import Any

from pydantic import BaseModel

from matching.types import Dimensions, Tolerances


class AnalyzeCapabilityRequest(BaseModel):
    # materials, quantity and description stay raw; validate_request judges them.
    quote_id: int | None = None
    materials: Any = None
    operations: list[str] | None = None
    quantity: Any = None
    dimensions: Dimensions | None = None
    tolerances: Tolerances | None = None
    certifications: list[str] | None = None
    description: Any = None


class QuoteFile(BaseModel):
    filename: str
    file_extension: str | None = None
    file_size_bytes: int | None = None


class QuoteRequestCreate(BaseModel):
    quote_number: str
    company_name: str
    contact_name: str
    email: str
    phone: str | None = None
    project_name: str
    description: str | None = None
    quantity: int
    lead_time: str | None = None
    part_notes: str | None = None
    materials: list[str] = []
    finishes: list[str] = []
    certifications: list[str] = []
    files: list[QuoteFile] = []
