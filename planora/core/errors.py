from typing import Dict


class PlanoraError(Exception):
    """Base exception for the itinerary service."""


class PreferenceValidationError(PlanoraError):
    """Raised when a trip request fails validation. Carries one message per field."""

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        fields = ", ".join(sorted(self.field_errors))
        super().__init__(f"Invalid trip request ({fields})")


class ProviderError(PlanoraError):
    """Base for failures of the generative itinerary provider."""


class ProviderTransportError(ProviderError):
    """Network failure, timeout or non-2xx response from the provider."""


class ProviderContractError(ProviderError):
    """Provider answered, but the payload is not JSON or breaks the itinerary schema."""


class SynthesisInvariantViolation(PlanoraError):
    """A generated itinerary has no days, or a day without activities."""


class EnrichmentUnavailable(PlanoraError):
    """An enrichment service (weather) has no credentials configured."""


class EnrichmentError(PlanoraError):
    """An enrichment upstream failed or could not resolve the request."""

    def __init__(self, message: str, status_code: int = 502):
        self.status_code = status_code
        super().__init__(message)
