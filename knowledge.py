"""
Pharmacological knowledge lookup (RxNav)

Purpose: enrich the advisory prompt with mechanism, indications and contraindications
found for a medicine name in the NIH RxNav / RxClass services.

Input: medicine name (free text as stored in the registry).

Output: KnowledgeSnippet or None when nothing authoritative was found.

Example: fetch_knowledge("ibuprofen") ->
    KnowledgeSnippet(mechanism="Cyclooxygenase Inhibitors", indications=["Pain", "Fever"], ...)

Notes: best effort only. Transport and decode failures raise KnowledgeLookupError,
which the orchestrator logs and treats as "no knowledge".
"""
from typing import Any, Dict, List, Optional
import logging

import requests

import config
from errors import KnowledgeLookupError
from models import KnowledgeSnippet

logger = logging.getLogger(__name__)

INDICATION_RELATIONS = ("may_treat", "may_prevent")
CONTRAINDICATION_RELATIONS = ("ci_with",)


class KnowledgeLookup:
    def __init__(self, base_url: str = config.RXNAV_BASE, timeout: float = config.KNOWLEDGE_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session

    def fetch_knowledge(self, medicine_name: str) -> Optional[KnowledgeSnippet]:
        normalized = (medicine_name or "").strip()
        if not normalized:
            return None

        rxcui = self._lookup_rxcui(normalized)
        if not rxcui:
            logger.info("[KNOWLEDGE] No RxNorm concept for %r", normalized)
            return None

        data = self._get_json("/rxclass/class/byRxcui.json", {"rxcui": rxcui, "relaSource": "MEDRT"})
        snippet = to_knowledge(data)
        if snippet is None:
            logger.info("[KNOWLEDGE] No MED-RT classes for %r (rxcui %s)", normalized, rxcui)
        return snippet

    def _lookup_rxcui(self, name: str) -> Optional[str]:
        data = self._get_json("/rxcui.json", {"name": name})
        ids = ((data or {}).get("idGroup") or {}).get("rxnormId") or []
        return ids[0] if ids else None

    def _get_json(self, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            get = self.session.get if self.session is not None else requests.get
            response = get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json() or {}
        except requests.exceptions.RequestException as e:
            raise KnowledgeLookupError(f"RxNav request failed for {path}: {e}") from e
        except ValueError as e:
            raise KnowledgeLookupError(f"RxNav returned invalid JSON for {path}: {e}") from e


def to_knowledge(response: Optional[Dict[str, Any]]) -> Optional[KnowledgeSnippet]:
    entries = ((response or {}).get("rxclassDrugInfoList") or {}).get("rxclassDrugInfo") or []
    if not entries:
        return None

    indications = _extract_by_relation(entries, INDICATION_RELATIONS, "DISEASE")
    contraindications = _extract_by_relation(entries, CONTRAINDICATION_RELATIONS, "DISEASE")
    mechanism = _extract_first_by_type(entries, "MOA")

    if not indications and not contraindications and not mechanism:
        return None

    return KnowledgeSnippet(
        mechanism=mechanism,
        indications=indications[:config.MAX_INDICATIONS],
        contraindications=contraindications[:config.MAX_CONTRAINDICATIONS],
    )


def _extract_by_relation(entries: List[Dict[str, Any]], relations, class_type: str) -> List[str]:
    unique: List[str] = []
    for entry in entries:
        concept = entry.get("rxclassMinConceptItem") or {}
        class_name = (concept.get("className") or "").strip()
        if entry.get("rela") in relations and concept.get("classType") == class_type and class_name:
            if class_name not in unique:
                unique.append(class_name)
    return unique


def _extract_first_by_type(entries: List[Dict[str, Any]], class_type: str) -> Optional[str]:
    for entry in entries:
        concept = entry.get("rxclassMinConceptItem") or {}
        if concept.get("classType") == class_type:
            return (concept.get("className") or "").strip() or None
    return None
