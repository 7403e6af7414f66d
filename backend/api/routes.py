import logging

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .schemas import AnalyzeCapabilityRequest, QuoteRequestCreate
from matching.feasibility import insufficient_data_result, match_equipment_to_job
from matching.profiles import INLINE_PROFILE
from matching.types import JobRequirements, MatchResult
from matching.validator import validate_request
from store.quotes import (
    DuplicateQuoteError,
    QuoteNotFoundError,
    review_status_for,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _equipment_repo(request: Request):
    repo = getattr(request.app.state, "equipment_repo", None)
    if repo is None:
        raise HTTPException(503, "Equipment database not available")
    return repo


def _quote_store(request: Request):
    store = getattr(request.app.state, "quote_store", None)
    if store is None:
        raise HTTPException(503, "Quote database not available")
    return store


def _failure(error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": error, "details": str(exc)},
    )


def _result_payload(quote_id: int, result: MatchResult) -> dict:
    return {
        "quote_id": quote_id,
        "feasibility": result.feasibility,
        "machine_matches": [m.model_dump() for m in result.matches],
        "outsourced_steps": result.outsourced_steps,
        "analysis": result.analysis.model_dump(exclude_none=True),
    }


@router.post("/analyze-capability")
async def analyze_capability(request: Request, body: AnalyzeCapabilityRequest):
    """Match a quote's job requirements against available equipment and store the result."""
    if body.quote_id is None:
        raise HTTPException(400, "quote_id is required")

    quotes = _quote_store(request)
    equipment_repo = _equipment_repo(request)
    profile = getattr(request.app.state, "matching_profile", None) or INLINE_PROFILE

    if await quotes.get_quote(body.quote_id) is None:
        raise HTTPException(404, f"Quote request {body.quote_id} not found")

    payload = body.model_dump(exclude={"quote_id"})
    try:
        validation = validate_request(payload)
        if not validation.is_valid:
            logger.warning(
                "Quote %d: insufficient data for analysis (%s)",
                body.quote_id, "; ".join(validation.errors),
            )
            result = insufficient_data_result(validation)
            await quotes.save_analysis(
                body.quote_id, result, review_status_for(result, validation_failed=True)
            )
            data = _result_payload(body.quote_id, result)
            data["validation_failed"] = True
            return {"success": True, "data": data}

        requirements = JobRequirements.model_validate(
            {k: v for k, v in payload.items() if v is not None}
        )
        equipment = await equipment_repo.fetch_available()
        result = match_equipment_to_job(requirements, equipment, profile)
        await quotes.save_analysis(body.quote_id, result, review_status_for(result))
        logger.info(
            "Quote %d: feasibility=%s matches=%d outsourced=%d",
            body.quote_id, result.feasibility, len(result.matches), len(result.outsourced_steps),
        )
        return {"success": True, "data": _result_payload(body.quote_id, result)}
    except QuoteNotFoundError as e:
        raise HTTPException(404, str(e)) from e
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e
    except Exception as e:
        logger.error("Error analyzing capability: %s", e, exc_info=True)
        return _failure("Failed to analyze capability", e)


@router.get("/equipment")
async def list_equipment(
    request: Request,
    status: str | None = Query(None),
    type: str | None = Query(None),
):
    """All equipment with its operations, materials and preferences."""
    repo = _equipment_repo(request)
    equipment = await repo.list_equipment(status=status, type=type)
    return {"success": True, "data": equipment, "count": len(equipment)}


@router.get("/equipment/machine/{machine_id}")
async def get_equipment_by_machine_id(machine_id: str, request: Request):
    repo = _equipment_repo(request)
    equipment = await repo.get_by_machine_id(machine_id)
    if not equipment:
        raise HTTPException(404, "Equipment not found")
    return {"success": True, "data": equipment}


@router.get("/equipment/{equipment_id}")
async def get_equipment(equipment_id: int, request: Request):
    repo = _equipment_repo(request)
    equipment = await repo.get_by_id(equipment_id)
    if not equipment:
        raise HTTPException(404, "Equipment not found")
    return {"success": True, "data": equipment}


@router.post("/quote-requests", status_code=201)
async def create_quote_request(request: Request, body: QuoteRequestCreate):
    quotes = _quote_store(request)
    try:
        created = await quotes.create_quote(body.model_dump())
    except DuplicateQuoteError as e:
        raise HTTPException(409, str(e)) from e
    except Exception as e:
        logger.error("Error creating quote request: %s", e, exc_info=True)
        return _failure("Failed to create quote request", e)
    return {
        "success": True,
        "data": created,
        "message": "Quote request created successfully",
    }


@router.get("/quote-requests")
async def list_quote_requests(
    request: Request,
    status: str | None = Query(None),
    company_name: str | None = Query(None),
    from_date: str | None = Query(None),
    to_date: str | None = Query(None),
):
    quotes = _quote_store(request)
    results = await quotes.list_quotes(
        status=status, company_name=company_name, from_date=from_date, to_date=to_date
    )
    return {"success": True, "data": results}


@router.get("/quote-requests/{quote_id}")
async def get_quote_request(quote_id: int, request: Request):
    quotes = _quote_store(request)
    quote = await quotes.get_quote(quote_id)
    if not quote:
        raise HTTPException(404, f"Quote request {quote_id} not found")
    return {"success": True, "data": quote}


@router.get("/health")
async def health(request: Request):
    """Liveness check -- reports store connectivity and the active matching profile."""
    connected = getattr(request.app.state, "quote_store", None) is not None
    profile = getattr(request.app.state, "matching_profile", None) or INLINE_PROFILE
    return {
        "status": "healthy" if connected else "degraded",
        "database": "connected" if connected else "not available",
        "matching_profile": profile.name,
    }
