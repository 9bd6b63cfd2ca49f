"""Exception hierarchy for the analysis pipeline."""

from pathlib import Path


class DebtCollectorError(Exception):
    """Base class for all debt collector errors."""


class FileReadError(DebtCollectorError):
    """A source file could not be read; the caller skips it and continues."""

    def __init__(self, path: str | Path, cause: Exception):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"cannot read {self.path}: {cause}")


class EmbeddingError(DebtCollectorError):
    """The embedding provider failed to produce a vector."""


class BackendError(DebtCollectorError):
    """A language-model backend call failed."""


class NoBackendAvailableError(BackendError):
    """No registered backend is currently available."""

    def __init__(self, message: str = "no AI backend available"):
        super().__init__(message)


class AnalysisFailedError(DebtCollectorError):
    """The initial assessment of an item failed; fatal for that item only."""

    def __init__(self, cause: BaseException, item_id: str | None = None):
        self.cause = cause
        self.item_id = item_id
        super().__init__(f"analysis failed: {cause}")
