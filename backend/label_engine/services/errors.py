"""Engine exception types."""


class LabelEngineError(Exception):
    """Base class for errors raised by the engine."""


class PipelineTimeoutError(LabelEngineError):
    """OCR and classification did not finish within the configured window."""

    def __init__(self, timeout_seconds: float, label_id: str | None = None):
        self.timeout_seconds = timeout_seconds
        self.label_id = label_id
        target = f" for label {label_id}" if label_id else ""
        super().__init__(f"Extraction pipeline timed out after {timeout_seconds:g}s{target}")


class CollaboratorError(LabelEngineError):
    """An OCR provider or field classifier call failed."""

    def __init__(self, stage: str, cause: Exception, label_id: str | None = None):
        self.stage = stage
        self.cause = cause
        self.label_id = label_id
        target = f" for label {label_id}" if label_id else ""
        super().__init__(f"{stage} failed{target}: {cause}")
