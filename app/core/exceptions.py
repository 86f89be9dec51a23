from typing import Any, Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(AppError):
    status_code = 400


class InvalidWeights(ValidationError):
    """Formative and summative weights do not add up to 100%."""

    def __init__(self, formative: float, summative: float):
        super().__init__(
            f"Weights must sum to 100% (got {formative} + {summative} = {formative + summative})"
        )
        self.formative = formative
        self.summative = summative


class NotFound(AppError):
    status_code = 404

    def __init__(self, resource: str, identifier: Optional[Any] = None):
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.identifier = identifier
