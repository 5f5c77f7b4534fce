"""
Failure taxonomy for statement analysis.

Each error carries a stable ``code`` for API clients and the HTTP status
it maps to, so callers never have to match on message text.
"""
from typing import Any, Dict


class StatementAnalysisError(Exception):
    """Base class for failures surfaced to the caller."""

    code: str = "internal_error"
    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the ``{error, code}`` response shape."""
        return {'error': self.message, 'code': self.code}


class InvalidUpload(StatementAnalysisError):
    """The uploaded file was missing, not a PDF, or too large."""

    http_status = 400

    def __init__(self, message: str, code: str = "invalid_upload"):
        super().__init__(message)
        self.code = code


class DocumentTypeMismatch(StatementAnalysisError):
    """The model recognised the document as something other than a bank statement."""

    code = "document_type_mismatch"
    http_status = 400


class ExtractionFailure(StatementAnalysisError):
    """The model gave no usable answer, or the answer could not be parsed."""

    code = "extraction_failed"
    http_status = 500
