"""
Main analysis orchestrator.

Sends the PDF to the extraction service, parses the answer and reconciles
the resulting statement.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from config import get_config
from extraction.errors import ExtractionFailure, StatementAnalysisError
from extraction.oracle import ExtractionOracle
from extraction.response_parser import parse_statement_dict, parse_statement_response
from models.statement import StatementRecord
from normalizer.amount_parser import is_finite_amount
from reconciler.balance_checker import StatementReconciler, UnknownTransactionType

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred while analyzing the file"


class StatementAnalyzer:
    """
    Orchestrates statement analysis.

    Strategy:
    1. Ask the extraction service for a JSON statement
    2. Parse it, classifying wrong-document and malformed answers
    3. Normalize amounts and recompute the reconciliation locally
    """

    def __init__(
        self,
        oracle: Optional[ExtractionOracle],
        reconciler: Optional[StatementReconciler] = None,
        invalid_number_policy: Optional[str] = None
    ):
        """
        Initialize the analyzer.

        Args:
            oracle: Extraction service; may be None when only
                    reconciling already-extracted JSON
            reconciler: Reconciler to use (defaults to one built from config)
            invalid_number_policy: "reject" or "zero" (defaults to config)
        """
        self.oracle = oracle
        self.reconciler = reconciler or StatementReconciler.from_config()
        self.invalid_number_policy = (
            invalid_number_policy or get_config().get("invalid_number_policy", "reject")
        )

    def analyze(self, pdf_bytes: bytes) -> StatementRecord:
        """
        Analyze a PDF bank statement.

        Args:
            pdf_bytes: Raw PDF contents

        Returns:
            Reconciled StatementRecord

        Raises:
            DocumentTypeMismatch: the document is not a bank statement
            ExtractionFailure: the service gave no usable answer
        """
        if self.oracle is None:
            raise ExtractionFailure("No extraction service configured")

        response_text = self.oracle.extract(pdf_bytes)
        record = parse_statement_response(response_text, self.invalid_number_policy)
        return self._reconcile(record)

    def analyze_json(self, data: Dict[str, Any]) -> StatementRecord:
        """
        Reconcile a statement that was already extracted.

        Args:
            data: Decoded statement JSON

        Returns:
            Reconciled StatementRecord
        """
        record = parse_statement_dict(data, self.invalid_number_policy)
        return self._reconcile(record)

    def _reconcile(self, record: StatementRecord) -> StatementRecord:
        try:
            processed = self.reconciler.process(record)
        except UnknownTransactionType as e:
            raise ExtractionFailure(str(e)) from e

        # Finite inputs can still overflow when summed
        if not is_finite_amount(processed.reconciliation.calculated_balance):
            raise ExtractionFailure("Calculated balance is not a finite number")
        return processed

    def outcome(self, pdf_bytes: bytes) -> Tuple[Dict[str, Any], int]:
        """
        Analyze a PDF and return the response body and HTTP status.

        Every failure is converted to the ``{error, code}`` shape; nothing
        escapes this call.

        Returns:
            Tuple of (response body, HTTP status)
        """
        try:
            record = self.analyze(pdf_bytes)
        except StatementAnalysisError as e:
            logger.warning(f"Statement analysis failed ({e.code}): {e.message}")
            return e.to_dict(), e.http_status
        except Exception:
            logger.exception("Unexpected error while analyzing statement")
            return {'error': GENERIC_ERROR_MESSAGE, 'code': 'internal_error'}, 500

        return record.to_dict(), 200
