"""
Parse the extraction model's text answer into a StatementRecord.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from config import INVALID_NUMBER_POLICIES
from extraction.errors import DocumentTypeMismatch, ExtractionFailure
from models.statement import AccountHolder, StatementRecord, Transaction
from normalizer.amount_parser import is_finite_amount, parse_amount

logger = logging.getLogger(__name__)

# Greedy: from the first "{" to the last "}" so nested objects stay intact
JSON_OBJECT_PATTERN = re.compile(r'\{.*\}', re.DOTALL)

REQUIRED_FIELDS = ('startingBalance', 'endingBalance', 'transactions')

# Marks an error payload as "this is not a bank statement"
NOT_BANK_STATEMENT = "not_bank_statement"
WRONG_DOCUMENT_PATTERN = re.compile(r"\bappears to be\b", re.IGNORECASE)


def extract_json_object(response_text: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a model answer.

    The model sometimes wraps its answer in prose or code fences.

    Args:
        response_text: Raw response text

    Returns:
        The decoded object
    """
    if not response_text:
        raise ExtractionFailure("Failed to get text response from AI")

    match = JSON_OBJECT_PATTERN.search(response_text)
    if not match:
        logger.warning(f"No JSON object in model response: {response_text[:200]}")
        raise ExtractionFailure("Failed to extract JSON from AI response")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning(f"Model response is not valid JSON: {e}")
        raise ExtractionFailure("Failed to parse JSON from AI response") from e

    if not isinstance(data, dict):
        raise ExtractionFailure("Failed to extract JSON from AI response")
    return data


def parse_statement_response(
    response_text: str,
    invalid_number_policy: str = "reject"
) -> StatementRecord:
    """
    Turn a model answer into a statement record.

    Args:
        response_text: Raw response text
        invalid_number_policy: "reject" to fail on missing or non-finite
                               numbers, "zero" to substitute 0.0

    Returns:
        StatementRecord, not yet normalized or reconciled
    """
    data = extract_json_object(response_text)
    return parse_statement_dict(data, invalid_number_policy)


def parse_statement_dict(
    data: Dict[str, Any],
    invalid_number_policy: str = "reject"
) -> StatementRecord:
    """
    Build a statement record from decoded JSON.

    Args:
        data: Decoded statement (or error) payload
        invalid_number_policy: see parse_statement_response

    Returns:
        StatementRecord
    """
    if invalid_number_policy not in INVALID_NUMBER_POLICIES:
        raise ValueError(f"Invalid number policy must be one of {INVALID_NUMBER_POLICIES}")

    error = data.get('error')
    if error:
        _raise_error_payload(str(error), data.get('errorType'))

    missing = [name for name in REQUIRED_FIELDS if data.get(name) is None]
    if missing:
        raise ExtractionFailure(
            f"AI response is missing required fields: {', '.join(missing)}"
        )

    raw_transactions = data['transactions']
    if not isinstance(raw_transactions, list):
        raise ExtractionFailure("AI response field 'transactions' is not a list")

    strict = invalid_number_policy == "reject"

    transactions: List[Transaction] = []
    for i, item in enumerate(raw_transactions):
        if not isinstance(item, dict):
            raise ExtractionFailure(f"Transaction {i + 1} is not an object")
        transactions.append(_parse_transaction(item, i, strict))

    holder = data.get('accountHolder') or {}
    if not isinstance(holder, dict):
        holder = {}

    return StatementRecord(
        account_holder=AccountHolder(
            name=_text(holder.get('name')),
            address=_text(holder.get('address')),
        ),
        starting_balance=_required_number(data['startingBalance'], 'startingBalance', strict),
        ending_balance=_required_number(data['endingBalance'], 'endingBalance', strict),
        transactions=transactions,
        currency=_text(data.get('currency')) or None,
        document_date=_text(data.get('documentDate')) or None,
    )


def _raise_error_payload(message: str, error_type: Any) -> None:
    """Classify an error answer: wrong document (400) or anything else (500)."""
    if error_type == NOT_BANK_STATEMENT or (
        error_type is None and WRONG_DOCUMENT_PATTERN.search(message)
    ):
        raise DocumentTypeMismatch(message)
    logger.warning(f"Extraction service reported an error: {message}")
    raise ExtractionFailure(message)


def _parse_transaction(item: Dict[str, Any], index: int, strict: bool) -> Transaction:
    label = f"transactions[{index}]"
    return Transaction(
        date=_text(item.get('date')),
        description=_text(item.get('description')),
        amount=_required_number(item.get('amount'), f"{label}.amount", strict),
        type=_text(item.get('type')),
        balance=_optional_number(item.get('balance'), f"{label}.balance", strict),
    )


def _required_number(value: Any, field_name: str, strict: bool) -> float:
    amount = parse_amount(value)
    if is_finite_amount(amount):
        return amount
    if strict:
        raise ExtractionFailure(f"AI response has an invalid number for {field_name}: {value!r}")
    logger.warning(f"Invalid number for {field_name} ({value!r}), using 0.0")
    return 0.0


def _optional_number(value: Any, field_name: str, strict: bool) -> Optional[float]:
    if value is None or value == "":
        return None
    amount = parse_amount(value)
    if is_finite_amount(amount):
        return amount
    if strict:
        raise ExtractionFailure(f"AI response has an invalid number for {field_name}: {value!r}")
    logger.warning(f"Invalid number for {field_name} ({value!r}), dropping it")
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
