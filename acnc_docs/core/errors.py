"""
Error taxonomy for ABN lookups

InvalidInput is a client error. NotFound and FetchFailed end the current
strategy and hand over to the fallback. RetrievalFailed is terminal.
"""
from typing import Optional

STEP_INPUT = "input-validation"
STEP_HTTP = "http-strategy"
STEP_BROWSER = "browser-fallback"


class AcncError(Exception):
    """Base class for lookup errors"""

    def __init__(self, message: str, step: Optional[str] = None, abn: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.step = step
        self.abn = abn

    def to_dict(self) -> dict:
        return {"error": self.message, "step": self.step, "abn": self.abn}


class InvalidInput(AcncError):
    """Malformed ABN - never retried, never falls back"""

    def __init__(self, message: str, abn: Optional[str] = None):
        super().__init__(message, step=STEP_INPUT, abn=abn)


class NotFound(AcncError):
    """No matching register entry or no document rows"""


class FetchFailed(AcncError):
    """Non-success status, transport error or timeout"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ExtractionDegraded(AcncError):
    """PDF text could not be produced; becomes an advisory note"""


class RetrievalFailed(AcncError):
    """Every configured strategy failed"""

    def __init__(self, message: str, step: str, abn: Optional[str] = None):
        super().__init__(message, step=step, abn=abn)
