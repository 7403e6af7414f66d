import math

from .types import ValidationResult


MANUFACTURING_KEYWORDS = (
    "machine", "machining", "cnc", "mill", "turn", "lathe", "drill",
    "part", "parts", "component", "fabricate", "fabrication", "manufacture",
    "tolerance", "surface", "finish", "material", "aluminum", "steel", "titanium",
    "bracket", "shaft", "housing", "plate", "fixture", "assembly",
)

MIN_DESCRIPTION_LENGTH = 20

NO_MATERIALS = "No materials specified"
INVALID_QUANTITY = "Invalid or missing quantity"
WEAK_DESCRIPTION = "Description lacks manufacturing context or details"


def _valid_quantity(quantity) -> bool:
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        return False
    return math.isfinite(quantity) and quantity > 0


def _valid_materials(materials) -> bool:
    if not isinstance(materials, list) or not materials:
        return False
    return all(isinstance(m, str) and m.strip() for m in materials)


def validate_request(payload: dict) -> ValidationResult:
    """Check a raw analysis payload carries enough detail to match against.

    A short description is only rejected when it also has none of the
    manufacturing keywords; a long keyword-free description passes.
    """
    errors = []

    if not _valid_materials(payload.get("materials")):
        errors.append(NO_MATERIALS)

    if not _valid_quantity(payload.get("quantity")):
        errors.append(INVALID_QUANTITY)

    description = payload.get("description") or ""
    if not isinstance(description, str):
        description = str(description)
    lowered = description.lower()
    has_context = any(keyword in lowered for keyword in MANUFACTURING_KEYWORDS)
    if not has_context and len(description) < MIN_DESCRIPTION_LENGTH:
        errors.append(WEAK_DESCRIPTION)

    if not errors:
        return ValidationResult(is_valid=True)

    message = (
        f"Insufficient data for capability analysis: {', '.join(errors)}. "
        "Please provide complete manufacturing specifications."
    )
    return ValidationResult(is_valid=False, message=message, errors=errors)
