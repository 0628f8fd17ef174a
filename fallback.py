"""
Deterministic advisory fallback

Purpose: build a safe default advisory from the dose arithmetic alone, and patch partial
model output so callers never see an advisory with missing parts.

Input: DoseResult (and, for ensure_complete, the parsed AdvisoryResult).

Output: AdvisoryResult with non-empty advice, recommendations and warnings.

Example: build_fallback_advisory(dose).advice ->
    "Give 50.00 mg (0.50 ml) per dose, 3 times a day, staying within the safe range 0.50 - 5.00 ml. ..."
"""
from dataclasses import replace
from typing import List

from models import AdvisoryResult, AdvisorySource, DoseResult
from parser import is_placeholder


def build_fallback_advice(dose: DoseResult) -> str:
    return (
        f"Give {dose.mg_per_dose:.2f} mg ({dose.ml_per_dose:.2f} ml) per dose, "
        f"{dose.doses_per_day} times a day, staying within the safe range {dose.safe_range}. "
        "Keep the patient hydrated and check that the medicine is tolerated."
    )


def build_fallback_recommendations(dose: DoseResult) -> List[str]:
    return [
        "Confirm the patient's weight before every dose adjustment.",
        f"Use an oral syringe to measure {dose.ml_per_dose:.2f} ml per dose without exceeding the range {dose.safe_range}.",
        "Watch for signs of improvement within the first 48 hours and record every administration.",
    ]


def build_fallback_warnings(dose: DoseResult) -> List[str]:
    return [
        "Stop the medicine and consult the pediatrician if persistent vomiting, rashes or breathing difficulty appear.",
        "Do not combine this medicine with others containing the same active ingredient without medical advice.",
        f"If a dose is missed and the next one is due in less than 4 hours, do not double the {dose.mg_per_dose:.2f} mg dose.",
    ]


def build_fallback_advisory(dose: DoseResult) -> AdvisoryResult:
    return AdvisoryResult(
        advice=build_fallback_advice(dose),
        recommendations=build_fallback_recommendations(dose),
        warnings=build_fallback_warnings(dose),
        source=AdvisorySource.FALLBACK,
    )


def ensure_complete(parsed: AdvisoryResult, dose: DoseResult) -> AdvisoryResult:
    """
    Replace an unusable advisory outright, or backfill its missing parts.

    An advisory is unusable when its advice is empty or a placeholder and
    both lists are empty. Otherwise real model content is kept and only the
    empty parts are filled; their names are recorded in ``patched``.
    """
    has_recommendations = bool(parsed.recommendations)
    has_warnings = bool(parsed.warnings)
    has_advice = bool(parsed.advice.strip()) and not is_placeholder(parsed.advice)

    if not (has_advice or has_recommendations or has_warnings):
        return build_fallback_advisory(dose)

    patched = []
    advice = parsed.advice
    recommendations = parsed.recommendations
    warnings = parsed.warnings
    if not has_advice:
        advice = build_fallback_advice(dose)
        patched.append("advice")
    if not has_recommendations:
        recommendations = build_fallback_recommendations(dose)
        patched.append("recommendations")
    if not has_warnings:
        warnings = build_fallback_warnings(dose)
        patched.append("warnings")

    return replace(
        parsed,
        advice=advice,
        recommendations=recommendations,
        warnings=warnings,
        patched=tuple(patched),
    )
