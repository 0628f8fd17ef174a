"""
Data model shared by the calculator and the advisory pipeline.

All records are frozen dataclasses: a DoseResult is produced once per
DoseRequest and never patched afterwards, and advisories are returned
as new objects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import math

from errors import InvalidRangeError


class SafetyStatus(str, Enum):
    SAFE = "safe"
    BELOW_RANGE = "below_range"
    ABOVE_RANGE = "above_range"

    @property
    def alert(self) -> str:
        return _ALERTS[self]


_ALERTS = {
    SafetyStatus.SAFE: "Dose within the safe range",
    SafetyStatus.BELOW_RANGE: "Dose below the safe range",
    SafetyStatus.ABOVE_RANGE: "Dose above the safe range",
}


@dataclass(frozen=True)
class MedicineProfile:
    """Reference dosing data for one medicine (mg, ml)."""
    name: str
    mg_kg_day: float
    doses_per_day: int
    concentration_mg: float
    concentration_ml: float
    min_safe_ml: float
    max_safe_ml: float
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MedicineProfile":
        """Build a profile from snake_case or camelCase keys."""
        def pick(snake: str, camel: str):
            if snake in data:
                return data[snake]
            if camel in data:
                return data[camel]
            raise KeyError(f"Medicine record is missing '{snake}'")

        profile = cls(
            name=str(data["name"]).strip(),
            mg_kg_day=float(pick("mg_kg_day", "mgKgDay")),
            doses_per_day=int(pick("doses_per_day", "dosesPerDay")),
            concentration_mg=float(pick("concentration_mg", "concentrationMg")),
            concentration_ml=float(pick("concentration_ml", "concentrationMl")),
            min_safe_ml=float(pick("min_safe_ml", "minSafeMl")),
            max_safe_ml=float(pick("max_safe_ml", "maxSafeMl")),
            description=data.get("description") or None,
        )
        profile.validate()
        return profile

    def validate(self) -> None:
        """Reject reference data the calculator cannot use."""
        if self.doses_per_day < 1:
            raise ValueError(f"{self.name}: doses_per_day must be at least 1 (got {self.doses_per_day})")
        numbers = (self.mg_kg_day, self.concentration_mg, self.concentration_ml, self.min_safe_ml, self.max_safe_ml)
        if not all(math.isfinite(n) for n in numbers):
            raise ValueError(f"{self.name}: dosing values must be finite numbers")
        if self.mg_kg_day <= 0 or self.concentration_mg <= 0 or self.concentration_ml <= 0:
            raise ValueError(f"{self.name}: dosing rate and concentration must be greater than 0")
        if self.min_safe_ml > self.max_safe_ml:
            raise InvalidRangeError(self.min_safe_ml, self.max_safe_ml)


@dataclass(frozen=True)
class DoseRequest:
    medicine_name: str
    weight_kg: float
    concentration_mg: Optional[float] = None
    concentration_ml: Optional[float] = None


@dataclass(frozen=True)
class DoseResult:
    medicine: str
    weight_kg: float
    mg_per_day: float
    doses_per_day: int
    mg_per_dose: float
    ml_per_dose: float
    status: SafetyStatus
    safe_range: str

    @property
    def alert(self) -> str:
        return self.status.alert

    def to_dict(self) -> Dict[str, Any]:
        return {
            "medicine": self.medicine,
            "weight_kg": self.weight_kg,
            "mg_per_day": self.mg_per_day,
            "doses_per_day": self.doses_per_day,
            "mg_per_dose": self.mg_per_dose,
            "ml_per_dose": self.ml_per_dose,
            "status": self.status.value,
            "alert": self.alert,
            "safe_range": self.safe_range,
        }


@dataclass(frozen=True)
class KnowledgeSnippet:
    """Pharmacological facts found for a medicine name."""
    mechanism: Optional[str] = None
    indications: List[str] = field(default_factory=list)
    contraindications: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AdvisoryRequest:
    dose: DoseResult
    medicine_description: Optional[str] = None

    @classmethod
    def from_dose(cls, dose: DoseResult, description: Optional[str] = None) -> "AdvisoryRequest":
        return cls(dose=dose, medicine_description=description)


class AdvisorySource(str, Enum):
    """Which decoding branch produced an advisory."""
    EMPTY = "empty"
    JSON = "json"
    SECTIONS = "sections"
    RAW_TEXT = "raw_text"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class AdvisoryResult:
    advice: str
    recommendations: List[str]
    warnings: List[str]
    source: AdvisorySource
    patched: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not self.advice.strip() and not self.recommendations and not self.warnings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "advice": self.advice,
            "recommendations": list(self.recommendations),
            "warnings": list(self.warnings),
            "source": self.source.value,
            "patched": list(self.patched),
        }


@dataclass(frozen=True)
class GenerationResponse:
    """Raw output of the text-generation service."""
    text: str
    finish_reason: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


class AdvisoryStage(str, Enum):
    IDLE = "idle"
    LOOKING_UP_KNOWLEDGE = "looking_up_knowledge"
    BUILDING_PROMPT = "building_prompt"
    CALLING_MODEL = "calling_model"
    PARSING_RESPONSE = "parsing_response"
    ENSURING_COMPLETENESS = "ensuring_completeness"
    DONE = "done"
    FAILED = "failed"


@dataclass
class AdvisoryTrace:
    """Stages visited by one advisory run."""
    stages: List[AdvisoryStage] = field(default_factory=lambda: [AdvisoryStage.IDLE])

    @property
    def stage(self) -> AdvisoryStage:
        return self.stages[-1]

    def advance(self, stage: AdvisoryStage) -> None:
        self.stages.append(stage)
