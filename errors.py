"""
Error taxonomy for dose calculation and advisory generation.

Dose errors are fatal to the request that raised them. Knowledge lookup
errors are always recovered by the orchestrator. Advisory errors carry a
user-facing message and never invalidate an already computed dose.
"""

TIMEOUT_MESSAGE = "The AI service took too long to respond. Please try again."
TRANSPORT_MESSAGE = "Could not generate medical advice. Please consult a healthcare professional."


class DoseCalculationError(ValueError):
    """Base class for errors that abort a dose calculation."""


class MedicineNotFoundError(DoseCalculationError):
    def __init__(self, name: str):
        super().__init__(f"Medicine not found: {name!r}")
        self.name = name


class InvalidWeightError(DoseCalculationError):
    def __init__(self, weight_kg):
        super().__init__(f"Patient weight must be greater than 0 kg (got {weight_kg})")
        self.weight_kg = weight_kg


class InvalidRangeError(DoseCalculationError):
    def __init__(self, min_ml: float, max_ml: float):
        super().__init__(f"Invalid safe range: min {min_ml} ml is greater than max {max_ml} ml")
        self.min_ml = min_ml
        self.max_ml = max_ml


class InvalidConcentrationError(DoseCalculationError):
    def __init__(self, axis: str, value):
        super().__init__(f"Concentration {axis} must be greater than 0 (got {value})")
        self.axis = axis
        self.value = value


class KnowledgeLookupError(RuntimeError):
    """Raised by the knowledge lookup; recovered locally by the orchestrator."""


class AdvisoryError(RuntimeError):
    user_message = TRANSPORT_MESSAGE

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.user_message)
        self.detail = detail


class AdvisoryTimeoutError(AdvisoryError):
    user_message = TIMEOUT_MESSAGE


class AdvisoryTransportError(AdvisoryError):
    user_message = TRANSPORT_MESSAGE
