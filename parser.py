"""
Parse raw model text into a structured advisory

Purpose: decode untrusted, loosely-structured LLM output into advice / recommendations / warnings.

Input: raw text from llm_client (may be empty, fenced JSON, bare JSON, legacy labelled
sections, or free prose) plus the finish reason reported by the service.

Output: AdvisoryResult tagged with the branch that produced it (AdvisorySource).

Example: '```json\n{"advice": ["Give with food"], "warnings": []}\n```'
    -> AdvisoryResult(advice="Give with food", recommendations=[], warnings=[], source=JSON)

Notes: branches are tried in a fixed order and the first one that recovers any field wins.
The parser never raises for content and never applies the deterministic fallback;
that is the orchestrator's job.
"""
from typing import Any, Dict, List, Optional
import json
import logging
import re

from models import AdvisoryResult, AdvisorySource

logger = logging.getLogger(__name__)

EMPTY_PLACEHOLDER = "The AI produced no content. Please try again in a moment."
BLOCKED_PLACEHOLDER = "The AI response was blocked by safety policies. Please review the data entered."

_PLACEHOLDER_MARKERS = ("ai produced no content", "response was blocked")

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_ADVICE_RE = re.compile(r"CONSEJOS:\s*([\s\S]*?)(?=RECOMENDACIONES:|PRECAUCIONES:|\Z)", re.IGNORECASE)
_RECOMMENDATIONS_RE = re.compile(r"RECOMENDACIONES:\s*([\s\S]*?)(?=PRECAUCIONES:|CONSEJOS:|\Z)", re.IGNORECASE)
_WARNINGS_RE = re.compile(r"PRECAUCIONES:\s*([\s\S]*?)(?=CONSEJOS:|RECOMENDACIONES:|\Z)", re.IGNORECASE)
_BULLET_RE = re.compile(r"^(?:-|•|\d+\.)\s*")


def is_placeholder(text: str) -> bool:
    normalized = (text or "").lower()
    return any(marker in normalized for marker in _PLACEHOLDER_MARKERS)


def parse_advisory(text: Optional[str], finish_reason: Optional[str] = None) -> AdvisoryResult:
    if not text or not text.strip():
        advice = BLOCKED_PLACEHOLDER if finish_reason == "SAFETY" else EMPTY_PLACEHOLDER
        logger.warning("[PARSER] Empty model text (finish reason: %s)", finish_reason)
        return AdvisoryResult(advice=advice, recommendations=[], warnings=[], source=AdvisorySource.EMPTY)

    structured = parse_json_advice(text)
    if structured is not None:
        return structured

    sections = parse_sections(text)
    if sections is not None:
        return sections

    logger.info("[PARSER] No structure recognised, using raw text as advice")
    return AdvisoryResult(advice=text, recommendations=[], warnings=[], source=AdvisorySource.RAW_TEXT)


# ═════════════════════════════════════════════════════════════
# JSON BRANCH
# ═════════════════════════════════════════════════════════════

def parse_json_advice(raw: str) -> Optional[AdvisoryResult]:
    """Return a JSON-sourced advisory, or None when nothing usable was decoded."""
    trimmed = raw.strip()
    if not trimmed:
        return None

    match = _FENCE_RE.search(trimmed)
    json_text = match.group(1) if match else trimmed

    try:
        parsed = json.loads(json_text)
    except (ValueError, RecursionError):
        logger.debug("[PARSER] JSON decode failed, trying labelled sections")
        return None
    if not isinstance(parsed, dict):
        return None

    advice_items = ensure_string_list(_first_truthy(parsed, "consejos", "advice"))
    recommendations = ensure_string_list(_first_truthy(parsed, "recomendaciones", "recommendations"))
    warnings = ensure_string_list(_first_truthy(parsed, "precauciones", "warnings"))
    observations = _first_truthy(parsed, "observaciones", "observations")

    advice = "\n".join(advice_items)
    if not advice and isinstance(observations, str):
        advice = observations.strip()

    if advice or recommendations or warnings:
        return AdvisoryResult(
            advice=advice,
            recommendations=recommendations,
            warnings=warnings,
            source=AdvisorySource.JSON,
        )
    return None


def _first_truthy(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


def ensure_string_list(value: Any) -> List[str]:
    if isinstance(value, list):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    if isinstance(value, str):
        return [line.strip() for line in re.split(r"[\r\n]", value) if line.strip()]
    return []


# ═════════════════════════════════════════════════════════════
# LEGACY SECTION BRANCH
# ═════════════════════════════════════════════════════════════

def parse_sections(text: str) -> Optional[AdvisoryResult]:
    advice = ""
    recommendations: List[str] = []
    warnings: List[str] = []

    advice_match = _ADVICE_RE.search(text)
    if advice_match:
        items = extract_list_items(advice_match.group(1))
        advice = "\n".join(items) if items else advice_match.group(1).strip()

    recommendations_match = _RECOMMENDATIONS_RE.search(text)
    if recommendations_match:
        recommendations = extract_list_items(recommendations_match.group(1))

    warnings_match = _WARNINGS_RE.search(text)
    if warnings_match:
        warnings = extract_list_items(warnings_match.group(1))

    if not advice and not recommendations and not warnings:
        return None
    return AdvisoryResult(
        advice=advice,
        recommendations=recommendations,
        warnings=warnings,
        source=AdvisorySource.SECTIONS,
    )


def extract_list_items(block: str) -> List[str]:
    """Split a section into items, stripping '-', '•' and 'N.' markers."""
    items = []
    for line in block.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("```"):
            continue
        if _BULLET_RE.match(stripped):
            cleaned = _BULLET_RE.sub("", stripped, count=1).strip()
            if cleaned:
                items.append(cleaned)
        else:
            items.append(stripped)
    return items
