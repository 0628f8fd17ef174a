import pytest

from calculator import DoseCalculator, compute_dose, round2
from errors import InvalidConcentrationError, InvalidWeightError, MedicineNotFoundError
from models import DoseRequest, MedicineProfile, SafetyStatus


class TestComputeDose:

    def test_ten_kg_lands_on_lower_boundary(self, syrup):
        result = compute_dose(syrup, 10)
        assert result.mg_per_day == 150.0
        assert result.mg_per_dose == 50.0
        assert result.ml_per_dose == 0.5
        assert result.status is SafetyStatus.SAFE

    def test_forty_kg_is_safe(self, syrup):
        result = compute_dose(syrup, 40)
        assert result.mg_per_day == 600.0
        assert result.mg_per_dose == 200.0
        assert result.ml_per_dose == 2.0
        assert result.status is SafetyStatus.SAFE
        assert result.safe_range == "0.50 - 5.00 ml"
        assert result.doses_per_day == 3

    def test_one_kg_is_below_range(self, syrup):
        result = compute_dose(syrup, 1)
        assert result.mg_per_dose == 5.0
        assert result.ml_per_dose == 0.05
        assert result.status is SafetyStatus.BELOW_RANGE

    def test_heavy_patient_is_above_range(self, syrup):
        result = compute_dose(syrup, 120)
        assert result.ml_per_dose == 6.0
        assert result.status is SafetyStatus.ABOVE_RANGE

    def test_upper_boundary_is_safe(self, syrup):
        # 100 kg -> 500 mg per dose -> 5.00 ml, exactly the max
        result = compute_dose(syrup, 100)
        assert result.ml_per_dose == 5.0
        assert result.status is SafetyStatus.SAFE

    def test_same_inputs_give_identical_results(self, syrup):
        assert compute_dose(syrup, 13.7) == compute_dose(syrup, 13.7)

    def test_outputs_are_rounded_to_two_decimals(self, syrup):
        result = compute_dose(syrup, 7)
        # 105 mg/day / 3 = 35 mg, 0.35 ml
        assert result.mg_per_dose == 35.0
        assert result.ml_per_dose == 0.35

    def test_rounding_happens_before_classification(self):
        # Unrounded volume is 0.499 ml (below 0.5) but rounds to 0.50 and classifies as safe.
        profile = MedicineProfile(
            name="Edge", mg_kg_day=14.97, doses_per_day=3,
            concentration_mg=100, concentration_ml=1, min_safe_ml=0.5, max_safe_ml=5,
        )
        result = compute_dose(profile, 10)
        assert result.ml_per_dose == 0.5
        assert result.status is SafetyStatus.SAFE

    def test_mass_override_only_keeps_reference_volume(self, syrup):
        result = compute_dose(syrup, 10, concentration_mg=200)
        assert result.ml_per_dose == 0.25
        assert result.status is SafetyStatus.BELOW_RANGE

    def test_volume_override_only_keeps_reference_mass(self, syrup):
        result = compute_dose(syrup, 10, concentration_ml=2)
        assert result.ml_per_dose == 1.0
        assert result.status is SafetyStatus.SAFE

    def test_full_override(self, syrup):
        result = compute_dose(syrup, 10, concentration_mg=250, concentration_ml=5)
        assert result.ml_per_dose == 1.0
        # mass figures do not depend on concentration
        assert result.mg_per_dose == 50.0

    @pytest.mark.parametrize("weight", [0, -3, None])
    def test_invalid_weight(self, syrup, weight):
        with pytest.raises(InvalidWeightError):
            compute_dose(syrup, weight)

    @pytest.mark.parametrize("weight", [float("nan"), float("inf"), float("-inf"), 1e308])
    def test_non_finite_weight_is_rejected(self, syrup, weight):
        with pytest.raises(InvalidWeightError):
            compute_dose(syrup, weight)

    def test_huge_finite_weight_is_classified(self, syrup):
        result = compute_dose(syrup, 1e30)
        assert result.mg_per_day == pytest.approx(1.5e31)
        assert result.status is SafetyStatus.ABOVE_RANGE

    @pytest.mark.parametrize("kwargs", [
        {"concentration_mg": 0},
        {"concentration_ml": -1},
        {"concentration_mg": float("nan")},
        {"concentration_ml": float("inf")},
    ])
    def test_invalid_concentration(self, syrup, kwargs):
        with pytest.raises(InvalidConcentrationError):
            compute_dose(syrup, 10, **kwargs)

    def test_alert_follows_status(self, syrup):
        assert compute_dose(syrup, 1).alert == "Dose below the safe range"
        assert compute_dose(syrup, 40).alert == "Dose within the safe range"


class TestDoseCalculator:

    def test_resolves_medicine_case_insensitively(self, registry):
        result = DoseCalculator(registry).calculate(DoseRequest(medicine_name="  TESTAMOL ", weight_kg=40))
        assert result.medicine == "Testamol"
        assert result.ml_per_dose == 2.0

    def test_unknown_medicine(self, registry):
        with pytest.raises(MedicineNotFoundError) as excinfo:
            DoseCalculator(registry).calculate(DoseRequest(medicine_name="Unknownol", weight_kg=10))
        assert excinfo.value.name == "Unknownol"

    def test_partial_name_does_not_match(self, registry):
        with pytest.raises(MedicineNotFoundError):
            DoseCalculator(registry).calculate(DoseRequest(medicine_name="Testa", weight_kg=10))

    def test_passes_overrides_through(self, registry):
        request = DoseRequest(medicine_name="testamol", weight_kg=10, concentration_ml=2)
        assert DoseCalculator(registry).calculate(request).ml_per_dose == 1.0


def test_round2_is_half_up():
    assert round2(0.125) == 0.13
    assert round2(2.675) == 2.68
    assert round2(1.0) == 1.0


def test_round2_handles_values_beyond_default_precision():
    assert round2(1e30) == 1e30
    assert round2(123456789012345678901234567890.125) == pytest.approx(1.2345678901234568e29)
