import pytest

from calculator import compute_dose
from database import MedicineRegistry
from models import AdvisoryRequest, MedicineProfile


@pytest.fixture
def syrup():
    """15 mg/kg/day in 3 doses, 100 mg per 1 ml, safe band 0.5 - 5 ml."""
    return MedicineProfile(
        name="Testamol",
        mg_kg_day=15,
        doses_per_day=3,
        concentration_mg=100,
        concentration_ml=1,
        min_safe_ml=0.5,
        max_safe_ml=5,
        description="Oral test suspension",
    )


@pytest.fixture
def registry(syrup):
    return MedicineRegistry([syrup])


@pytest.fixture
def dose(syrup):
    return compute_dose(syrup, 40)


@pytest.fixture
def advisory_request(dose):
    return AdvisoryRequest.from_dose(dose, "Oral test suspension")
