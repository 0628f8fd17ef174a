"""
DOSE CALCULATOR
Turns a medicine's dosing profile and a patient's weight into a per-dose
administration plan.

Steps:
1. Daily mass      = dosing rate (mg/kg/day) x weight (kg)
2. Mass per dose   = daily mass / doses per day
3. Volume per dose = mass per dose x (concentration ml / concentration mg)
4. Round mg/ml outputs to 2 decimals (half-up)
5. Classify the rounded volume against the safe band
"""
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Optional
import logging
import math

from database import MedicineRegistry
from errors import InvalidConcentrationError, InvalidWeightError, MedicineNotFoundError
from models import DoseRequest, DoseResult, MedicineProfile
from rules_engine import classify_safety, format_safe_range

logger = logging.getLogger(__name__)

_TWO_PLACES = Decimal("0.01")


def round2(value: float) -> float:
    """Half-up rounding to 2 decimals for any finite value."""
    exact = Decimal(str(value))
    with localcontext() as ctx:
        # integer digits + 2 decimals must fit in the working precision
        ctx.prec = max(ctx.prec, exact.adjusted() + 4)
        return float(exact.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def _is_positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _effective_axis(axis: str, override: Optional[float], reference: float) -> float:
    if override is None:
        return reference
    if not _is_positive(float(override)):
        raise InvalidConcentrationError(axis, override)
    return float(override)


def compute_dose(
    profile: MedicineProfile,
    weight_kg: float,
    concentration_mg: Optional[float] = None,
    concentration_ml: Optional[float] = None,
) -> DoseResult:
    """
    Compute the dose plan for one patient.

    A missing concentration axis falls back to the profile's reference
    value for that axis. Classification runs on the rounded volume.
    """
    if weight_kg is None or not _is_positive(float(weight_kg)):
        raise InvalidWeightError(weight_kg)
    weight_kg = float(weight_kg)

    conc_mg = _effective_axis("mg", concentration_mg, profile.concentration_mg)
    conc_ml = _effective_axis("ml", concentration_ml, profile.concentration_ml)

    mg_per_day = profile.mg_kg_day * weight_kg
    mg_per_dose = mg_per_day / profile.doses_per_day
    ml_per_dose = mg_per_dose * (conc_ml / conc_mg)
    if not (math.isfinite(mg_per_day) and math.isfinite(ml_per_dose)):
        # float overflow for weights near the top of the float range
        raise InvalidWeightError(weight_kg)

    rounded_ml = round2(ml_per_dose)
    status = classify_safety(rounded_ml, profile.min_safe_ml, profile.max_safe_ml)

    return DoseResult(
        medicine=profile.name,
        weight_kg=weight_kg,
        mg_per_day=round2(mg_per_day),
        doses_per_day=profile.doses_per_day,
        mg_per_dose=round2(mg_per_dose),
        ml_per_dose=rounded_ml,
        status=status,
        safe_range=format_safe_range(profile.min_safe_ml, profile.max_safe_ml),
    )


class DoseCalculator:
    """Resolves medicines from a read-only registry and computes doses."""

    def __init__(self, registry: MedicineRegistry):
        self.registry = registry

    def calculate(self, request: DoseRequest) -> DoseResult:
        profile = self.registry.find_by_name(request.medicine_name)
        if profile is None:
            raise MedicineNotFoundError(request.medicine_name)

        result = compute_dose(
            profile,
            request.weight_kg,
            concentration_mg=request.concentration_mg,
            concentration_ml=request.concentration_ml,
        )
        logger.info(
            "Dose for %s at %.2f kg: %.2f mg / %.2f ml per dose (%s)",
            result.medicine, result.weight_kg, result.mg_per_dose, result.ml_per_dose, result.status.value,
        )
        return result
