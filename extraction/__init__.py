"""
Extraction module: sends PDFs to the model and turns its answers into statements.
"""
from .errors import (
    DocumentTypeMismatch, ExtractionFailure, InvalidUpload, StatementAnalysisError
)
from .oracle import ExtractionOracle
from .claude_client import ClaudeStatementExtractor
from .response_parser import parse_statement_response
from .analyzer import StatementAnalyzer

__all__ = [
    'DocumentTypeMismatch', 'ExtractionFailure', 'InvalidUpload', 'StatementAnalysisError',
    'ExtractionOracle', 'ClaudeStatementExtractor', 'parse_statement_response',
    'StatementAnalyzer',
]
