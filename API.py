from typing import Optional
import json
import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field, field_validator
import uvicorn

from calculator import DoseCalculator
from database import MedicineRegistry, load_registry
from errors import (
    AdvisoryError,
    AdvisoryTimeoutError,
    DoseCalculationError,
    MedicineNotFoundError,
)
from log import configure_logging
from models import AdvisoryRequest, DoseRequest, DoseResult
from orchestrator import AdvisoryOrchestrator, create_orchestrator

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Pediatric Dose Advisory API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class DoseCalculateIn(BaseModel):
    medicine_name: str = Field(..., min_length=1)
    weight_kg: float
    concentration_mg: Optional[float] = None
    concentration_ml: Optional[float] = None

    @field_validator("medicine_name")
    @classmethod
    def normalize_medicine_name(cls, v: str) -> str:
        return v.strip()

    def to_request(self) -> DoseRequest:
        return DoseRequest(
            medicine_name=self.medicine_name,
            weight_kg=self.weight_kg,
            concentration_mg=self.concentration_mg,
            concentration_ml=self.concentration_ml,
        )


class AdvisoryIn(DoseCalculateIn):
    medicine_description: Optional[str] = None


# ============================================
# LAZY-LOADED SINGLETONS
# ============================================

_registry: MedicineRegistry | None = None
_orchestrator: AdvisoryOrchestrator | None = None


def get_registry() -> MedicineRegistry:
    global _registry
    if _registry is None:
        _registry = load_registry()
    return _registry


def get_orchestrator() -> AdvisoryOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = create_orchestrator()
    return _orchestrator


def _calculate(payload: DoseCalculateIn, registry: MedicineRegistry) -> DoseResult:
    try:
        return DoseCalculator(registry).calculate(payload.to_request())
    except MedicineNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DoseCalculationError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _description_for(payload: AdvisoryIn, registry: MedicineRegistry) -> Optional[str]:
    if payload.medicine_description:
        return payload.medicine_description
    profile = registry.find_by_name(payload.medicine_name)
    return profile.description if profile else None


# ============================================
# ENDPOINTS
# ============================================

@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "Pediatric Dose Advisory API"}


@app.get("/medicines")
def list_medicines(registry: MedicineRegistry = Depends(get_registry)):
    return [
        {
            "name": p.name,
            "description": p.description,
            "mg_kg_day": p.mg_kg_day,
            "doses_per_day": p.doses_per_day,
            "concentration_mg": p.concentration_mg,
            "concentration_ml": p.concentration_ml,
            "min_safe_ml": p.min_safe_ml,
            "max_safe_ml": p.max_safe_ml,
        }
        for p in registry.all()
    ]


@app.post("/dose/calculate")
def calculate_dose(payload: DoseCalculateIn, registry: MedicineRegistry = Depends(get_registry)):
    """Deterministic dose calculation, no AI involved."""
    return _calculate(payload, registry).to_dict()


@app.post("/advisory")
async def advisory(
    payload: AdvisoryIn,
    registry: MedicineRegistry = Depends(get_registry),
    orchestrator: AdvisoryOrchestrator = Depends(get_orchestrator),
):
    """
    Dose calculation followed by the AI advisory.

    Advisory failures map to 504 (timeout) or 502 (any other failure) with a
    user-facing message; dose errors map to 404/400 as in /dose/calculate.
    """
    dose = _calculate(payload, registry)
    request = AdvisoryRequest.from_dose(dose, _description_for(payload, registry))
    try:
        result = await orchestrator.generate_advisory(request)
    except AdvisoryTimeoutError as e:
        raise HTTPException(status_code=504, detail=e.user_message)
    except AdvisoryError as e:
        raise HTTPException(status_code=502, detail=e.user_message)
    return {"dose": dose.to_dict(), "advisory": result.to_dict()}


@app.post("/dose/stream")
async def dose_stream(
    payload: AdvisoryIn,
    registry: MedicineRegistry = Depends(get_registry),
    orchestrator: AdvisoryOrchestrator = Depends(get_orchestrator),
):
    """
    Streaming endpoint: the dose is sent first, the advisory is patched in when it resolves.

    Returns NDJSON lines:
    - {"type": "dose", "content": {...}}
    - {"type": "advisory", "content": {...}} or {"type": "error", "content": "message"}
    - {"type": "end"}
    """
    dose = _calculate(payload, registry)
    request = AdvisoryRequest.from_dose(dose, _description_for(payload, registry))

    async def generate():
        yield json.dumps({"type": "dose", "content": dose.to_dict()}) + "\n"
        try:
            result = await orchestrator.generate_advisory(request)
            yield json.dumps({"type": "advisory", "content": result.to_dict()}) + "\n"
        except AdvisoryError as e:
            logger.warning("Advisory unavailable for %s: %s", dose.medicine, e)
            yield json.dumps({"type": "error", "content": e.user_message}) + "\n"
        yield json.dumps({"type": "end"}) + "\n"

    return StreamingResponse(generate(), media_type="application/x-ndjson")


if __name__ == "__main__":
    uvicorn.run(
        "API:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
