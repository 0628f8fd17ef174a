"""
Medicine reference data

Purpose: read-only registry of medicine dosing profiles, passed explicitly to the calculator.

Input: a JSON list of medicine records (snake_case or camelCase keys).

Output: MedicineProfile lookups by name (case-insensitive exact match).

Example: load_registry().find_by_name("IBUPROFEN") -> MedicineProfile(name="Ibuprofen", ...)
"""
from pathlib import Path
from typing import Dict, Iterable, List, Optional
import json
import logging
import sys

import config
from models import MedicineProfile

logger = logging.getLogger(__name__)


class MedicineRegistry:
    def __init__(self, profiles: Iterable[MedicineProfile]):
        self._by_name: Dict[str, MedicineProfile] = {}
        for profile in profiles:
            key = profile.name.strip().lower()
            if key in self._by_name:
                logger.warning("Duplicate medicine %r in registry, keeping the first entry", profile.name)
                continue
            self._by_name[key] = profile

    @classmethod
    def from_json(cls, path) -> "MedicineRegistry":
        with open(path, "r", encoding="utf-8") as f:
            records = json.load(f)
        profiles = [MedicineProfile.from_dict(record) for record in records]
        logger.info("Loaded %d medicine profiles from %s", len(profiles), path)
        return cls(profiles)

    def find_by_name(self, name: str) -> Optional[MedicineProfile]:
        if not name:
            return None
        return self._by_name.get(name.strip().lower())

    def all(self) -> List[MedicineProfile]:
        return sorted(self._by_name.values(), key=lambda p: p.name.lower())

    def __len__(self) -> int:
        return len(self._by_name)


def load_registry(path: Optional[str] = None) -> MedicineRegistry:
    """
    Load the registry from MEDICINES_PATH.

    A relative path is tried against the working directory, the source tree,
    then the install prefix (where data-files are placed by a wheel install).
    """
    path = Path(path or config.MEDICINES_PATH)
    if not path.is_absolute():
        candidates = [path, Path(__file__).parent / path, Path(sys.prefix) / path]
        path = next((c for c in candidates if c.exists()), path)
    return MedicineRegistry.from_json(path)
