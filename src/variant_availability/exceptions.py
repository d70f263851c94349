"""Domain exceptions for the variant availability engine.

These map to consistent HTTP responses when handled by the global exception handler.
Bad catalog data is never reported through these: the engine degrades instead.
"""


class AvailabilityEngineError(Exception):
    """Base exception for availability engine domain errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail or message


class ConfigurationError(AvailabilityEngineError):
    """Raised when resolution configuration or settings values are invalid."""

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message, status_code=400, detail=detail or message)


class PayloadDecodeError(AvailabilityEngineError):
    """Raised at the boundary when a catalog payload is not a JSON object."""

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message, status_code=422, detail=detail or message)
