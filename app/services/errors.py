from __future__ import annotations

GENERIC_REMOTE_MESSAGE = "Invalid API key or request failed"
DETECTION_REMOTE_MESSAGE = "Detection failed"


class EvaluationError(RuntimeError):
    code = "evaluation_failed"
    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class InputValidationError(EvaluationError):
    """Missing or invalid document type, text or file."""

    code = "invalid_input"
    status_code = 400


class FileReadError(EvaluationError):
    """The uploaded binary could not be read."""

    code = "file_read_failed"
    status_code = 400


class RemoteError(EvaluationError):
    """Transport failure or an error object returned by the inference endpoint."""

    code = "remote_error"
    status_code = 502

    def __init__(
        self,
        message: str | None = None,
        *,
        fallback: str = GENERIC_REMOTE_MESSAGE,
        status_code: int | None = None,
    ):
        self.remote_message = (message or "").strip() or None
        super().__init__(f"API Error: {self.remote_message or fallback}", status_code=status_code)


class SchemaError(EvaluationError):
    """The model response lacked the expected fields."""

    code = "invalid_schema"
    status_code = 502


class DetectionParseError(EvaluationError):
    code = "detection_parse_failed"
    status_code = 502
