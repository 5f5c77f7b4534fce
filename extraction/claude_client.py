"""
Claude API client for bank statement extraction.
"""
import base64
import logging
from typing import Optional

import anthropic

from config import (
    API_RETRY_COUNT, API_TIMEOUT, EXTRACTION_MAX_TOKENS, EXTRACTION_MODEL, get_config
)
from extraction.errors import ExtractionFailure
from extraction.oracle import ExtractionOracle

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are a financial document analysis assistant. Extract structured "
    "information from bank statements with high accuracy. Always return valid "
    "JSON without explanatory text. Use null for missing values. CRITICAL: "
    "Always extract transaction amounts as positive numbers and use the type "
    "field to indicate debit/credit."
)

EXTRACTION_PROMPT = """Analyze this bank statement PDF and extract the following information in JSON format:

{
  "accountHolder": {
    "name": "Full Name",
    "address": "Complete address"
  },
  "documentDate": "Date of the statement in format 'DD MMM YYYY' (e.g., '22 May 2025')",
  "currency": "Currency code (e.g., USD, EUR, GBP) or symbol (e.g., $, €, £)",
  "startingBalance": number,
  "endingBalance": number,
  "transactions": [
    {
      "date": "Transaction date",
      "description": "Transaction description",
      "amount": number (ALWAYS positive),
      "type": "debit" or "credit",
      "balance": number (optional)
    }
  ]
}

IMPORTANT: For transaction amounts, always extract the absolute value (positive number) and use the "type" field to indicate if it's a debit or credit.

If the document is not a bank statement, respond with ONLY:
{"errorType": "not_bank_statement", "error": "This document appears to be <what it is> rather than a bank statement"}

If the statement cannot be read for any other reason, respond with ONLY:
{"errorType": "unreadable", "error": "<short reason>"}"""


class ClaudeStatementExtractor(ExtractionOracle):
    """
    Uses the Claude API to read a PDF bank statement.
    """

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        client: Optional[anthropic.Anthropic] = None
    ):
        """
        Initialize the extractor.

        Args:
            api_key: Anthropic API key
            model: Model name (defaults to the configured extraction model)
            max_tokens: Response token limit
            timeout: Seconds to wait for a response
            max_retries: Retries performed by the SDK on transient errors
            client: Pre-built client, mainly for tests
        """
        config = get_config()
        self.api_key = api_key
        self.model = model or config.get("extraction_model", EXTRACTION_MODEL)
        self.max_tokens = max_tokens or config.get("extraction_max_tokens", EXTRACTION_MAX_TOKENS)
        self.timeout = timeout or config.get("api_timeout", API_TIMEOUT)
        self.max_retries = (
            max_retries if max_retries is not None
            else config.get("api_retry_count", API_RETRY_COUNT)
        )
        self._client = client
        if self._client is None:
            self._initialize_client()

    def _initialize_client(self) -> None:
        """Initialize the Anthropic client."""
        if not self.api_key:
            logger.warning("No API key provided for statement extraction")
            return

        self._client = anthropic.Anthropic(
            api_key=self.api_key,
            timeout=self.timeout,
            max_retries=self.max_retries,
        )

    def extract(self, pdf_bytes: bytes) -> str:
        """
        Send the PDF to Claude as a document block.

        Args:
            pdf_bytes: Raw PDF contents

        Returns:
            The model's text answer
        """
        if not self._client:
            raise ExtractionFailure("Statement extraction is not configured (missing API key)")

        encoded = base64.standard_b64encode(pdf_bytes).decode("ascii")
        logger.info(f"Sending {len(pdf_bytes)} bytes to {self.model}")

        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "document",
                                "source": {
                                    "type": "base64",
                                    "media_type": "application/pdf",
                                    "data": encoded,
                                },
                            },
                            {"type": "text", "text": EXTRACTION_PROMPT},
                        ],
                    }
                ],
                temperature=0,
            )
        except anthropic.APIError as e:
            logger.error(f"Claude API error during extraction: {e}")
            raise ExtractionFailure("The extraction service could not process the document") from e

        return self._response_text(response)

    def _response_text(self, response) -> str:
        """Pull the first text block out of a Messages API response."""
        blocks = getattr(response, "content", None) or []
        first = blocks[0] if blocks else None
        if first is None or getattr(first, "type", None) != "text":
            raise ExtractionFailure("Failed to get text response from AI")

        text = first.text.strip()
        if not text:
            raise ExtractionFailure("Failed to get text response from AI")
        return text

    def is_available(self) -> bool:
        """
        Check if the Claude client is available.

        Returns:
            True if the client is initialized and ready
        """
        return self._client is not None
