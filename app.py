#!/usr/bin/env python3
"""
Bank Statement Analyzer - Web Interface

A Flask-based service that accepts a PDF bank statement, has it read by
the Claude API and returns the extracted statement with a locally computed
balance reconciliation.

Uploaded files are held in memory for the duration of the request only.
"""
import logging
import os
from datetime import datetime
from typing import Optional

from flask import Flask, request, jsonify

from config import (
    ACCEPTED_CONTENT_TYPES, APP_NAME, APP_VERSION, MAX_UPLOAD_BYTES, PDF_SIGNATURE,
    get_api_key, get_config
)
from extraction.analyzer import GENERIC_ERROR_MESSAGE, StatementAnalyzer
from extraction.claude_client import ClaudeStatementExtractor
from extraction.errors import InvalidUpload


# =============================================================================
# Application Configuration
# =============================================================================

app = Flask(__name__)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

MAX_FILE_SIZE = get_config().get("max_upload_bytes", MAX_UPLOAD_BYTES)

# Leave room for multipart framing; the file itself is checked in the route
app.config['MAX_CONTENT_LENGTH'] = MAX_FILE_SIZE + 1024 * 1024

# Set to a StatementAnalyzer to bypass the Claude-backed default (tests)
app.config['STATEMENT_ANALYZER'] = None


def get_analyzer() -> StatementAnalyzer:
    """Return the configured analyzer, building the Claude-backed one on demand."""
    analyzer: Optional[StatementAnalyzer] = app.config.get('STATEMENT_ANALYZER')
    if analyzer is None:
        api_key = get_api_key()
        if not api_key:
            logger.warning("ANTHROPIC_API_KEY is not set; analysis requests will fail")
        analyzer = StatementAnalyzer(ClaudeStatementExtractor(api_key=api_key))
        app.config['STATEMENT_ANALYZER'] = analyzer
    return analyzer


def _too_large_message() -> str:
    return f'File size should not exceed {MAX_FILE_SIZE // (1024 * 1024)}MB'


def read_uploaded_pdf() -> bytes:
    """
    Validate the multipart upload and return the PDF bytes.

    Raises:
        InvalidUpload: missing file, wrong type, or oversize file
    """
    file = request.files.get('file')
    if file is None or file.filename == '':
        raise InvalidUpload('No file provided', code='missing_file')

    if file.mimetype not in ACCEPTED_CONTENT_TYPES:
        raise InvalidUpload('Only PDF files are accepted', code='invalid_file_type')

    data = file.read()
    if len(data) > MAX_FILE_SIZE:
        raise InvalidUpload(_too_large_message(), code='file_too_large')

    if not data.startswith(PDF_SIGNATURE):
        raise InvalidUpload('Only PDF files are accepted', code='invalid_file_type')

    logger.info(f"File uploaded: {file.filename} ({len(data)} bytes)")
    return data


# =============================================================================
# Routes
# =============================================================================

@app.route('/api/analyze', methods=['POST'])
def analyze_statement():
    """Analyze an uploaded PDF bank statement."""
    try:
        pdf_bytes = read_uploaded_pdf()
    except InvalidUpload as e:
        logger.info(f"Rejected upload ({e.code}): {e.message}")
        return jsonify(e.to_dict()), e.http_status

    try:
        analyzer = get_analyzer()
    except Exception:
        logger.exception("Could not initialize the statement analyzer")
        return jsonify({'error': GENERIC_ERROR_MESSAGE, 'code': 'internal_error'}), 500

    body, status = analyzer.outcome(pdf_bytes)
    if status == 200:
        logger.info(
            f"Analyzed statement with {len(body['transactions'])} transactions "
            f"(reconciled: {body['reconciliation']['isReconciled']})"
        )
    return jsonify(body), status


@app.route('/health')
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'app': APP_NAME,
        'version': APP_VERSION,
        'timestamp': datetime.now().isoformat()
    })


@app.errorhandler(413)
def file_too_large(e):
    """Handle request bodies over the upload limit."""
    return jsonify({
        'error': _too_large_message(),
        'code': 'file_too_large'
    }), 400


@app.errorhandler(500)
def internal_error(e):
    """Handle internal server error."""
    logger.error(f"Internal server error: {e}")
    return jsonify({
        'error': 'An internal error occurred. Please try again.',
        'code': 'internal_error'
    }), 500


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'

    logger.info(f"Starting {APP_NAME} v{APP_VERSION} on port {port}")

    app.run(host='0.0.0.0', port=port, debug=debug)
