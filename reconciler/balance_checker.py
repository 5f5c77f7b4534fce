"""
Balance Reconciliation Module.

Validates an extracted statement by:
1. Normalizing transaction amounts to magnitudes (direction stays in ``type``)
2. Folding credits and debits into a net change
3. Comparing starting balance + net change against the reported ending balance
4. Producing a reconciled/discrepant verdict

Transactions are never re-sorted; statement order is kept as extracted.
"""
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from config import (
    CREDIT, DEBIT, DEFAULT_CURRENCY, RECONCILIATION_TOLERANCE,
    UNKNOWN_TYPE_POLICIES, get_config
)
from models.statement import ReconciliationResult, StatementRecord, Transaction

logger = logging.getLogger(__name__)


class UnknownTransactionType(ValueError):
    """Raised under the "reject" policy for a type other than debit/credit."""

    def __init__(self, index: int, txn_type: str):
        self.index = index
        self.txn_type = txn_type
        super().__init__(
            f"Transaction {index + 1} has unknown type {txn_type!r} "
            f"(expected '{CREDIT}' or '{DEBIT}')"
        )


class StatementReconciler:
    """
    Normalizes and reconciles extracted bank statements.

    This helps detect:
    - Missing transactions
    - Transactions with the wrong direction
    - Misread amounts or balances
    """

    def __init__(
        self,
        tolerance: float = RECONCILIATION_TOLERANCE,
        default_currency: str = DEFAULT_CURRENCY,
        unknown_type_policy: str = "ignore"
    ):
        """
        Initialize the reconciler.

        Args:
            tolerance: Allowed absolute difference between calculated and
                       reported ending balance (default 0.01 to absorb rounding)
            default_currency: Currency assigned when the statement has none
            unknown_type_policy: "ignore" to let unknown types contribute
                                 nothing, "reject" to raise UnknownTransactionType
        """
        if unknown_type_policy not in UNKNOWN_TYPE_POLICIES:
            raise ValueError(f"Unknown type policy must be one of {UNKNOWN_TYPE_POLICIES}")
        self.tolerance = tolerance
        self.default_currency = default_currency
        self.unknown_type_policy = unknown_type_policy

    @classmethod
    def from_config(cls) -> 'StatementReconciler':
        """Build a reconciler from the global configuration."""
        config = get_config()
        return cls(
            tolerance=config.get("reconciliation_tolerance", RECONCILIATION_TOLERANCE),
            default_currency=config.get("default_currency", DEFAULT_CURRENCY),
            unknown_type_policy=config.get("unknown_type_policy", "ignore"),
        )

    def normalize(self, transactions: List[Transaction]) -> List[Transaction]:
        """
        Replace every amount with its absolute value.

        NaN and other non-finite values pass through as they are.

        Args:
            transactions: Transactions in statement order

        Returns:
            New list, same length and order
        """
        return [txn.with_amount(abs(txn.amount)) for txn in transactions]

    def net_change(self, transactions: List[Transaction]) -> float:
        """
        Sum credits and subtract debits.

        Args:
            transactions: Normalized transactions

        Returns:
            Net change in balance over the statement period
        """
        net = 0.0
        for i, txn in enumerate(transactions):
            if txn.type == CREDIT:
                net += txn.amount
            elif txn.type == DEBIT:
                net -= txn.amount
            elif self.unknown_type_policy == "reject":
                raise UnknownTransactionType(i, txn.type)
            else:
                logger.debug(f"Ignoring transaction {i + 1} with type {txn.type!r}")
        return net

    def reconcile(
        self,
        starting_balance: float,
        transactions: List[Transaction],
        ending_balance: float
    ) -> ReconciliationResult:
        """
        Reconcile normalized transactions against the reported ending balance.

        Args:
            starting_balance: Opening balance printed on the statement
            transactions: Normalized transactions
            ending_balance: Closing balance printed on the statement

        Returns:
            ReconciliationResult; discrepancy is None when reconciled
        """
        calculated_balance = starting_balance + self.net_change(transactions)
        discrepancy = ending_balance - calculated_balance
        is_reconciled = abs(discrepancy) < self.tolerance

        return ReconciliationResult(
            calculated_balance=calculated_balance,
            is_reconciled=is_reconciled,
            discrepancy=None if is_reconciled else discrepancy,
        )

    def apply_currency_default(self, record: StatementRecord) -> StatementRecord:
        """
        Fill in the default currency when the statement has none.

        Args:
            record: Extracted statement

        Returns:
            The record with ``currency`` set
        """
        if not record.currency:
            record.currency = self.default_currency
        return record

    def process(self, record: StatementRecord) -> StatementRecord:
        """
        Run the full pass over an extracted statement.

        Any reconciliation supplied with the record is replaced.

        Args:
            record: Extracted statement

        Returns:
            New record with currency defaulted, amounts normalized and
            a fresh reconciliation attached
        """
        transactions = self.normalize(record.transactions)
        result = self.reconcile(record.starting_balance, transactions, record.ending_balance)

        processed = replace(record, transactions=transactions, reconciliation=result)
        self.apply_currency_default(processed)

        if result.is_reconciled:
            logger.info(f"Statement reconciled ({len(transactions)} transactions)")
        else:
            logger.info(
                f"Statement not reconciled: discrepancy {result.discrepancy:.2f} "
                f"over {len(transactions)} transactions"
            )
        return processed

    def summarize(self, record: StatementRecord) -> Dict[str, Any]:
        """
        Get summary totals for a normalized statement.

        Returns:
            Dictionary with summary statistics
        """
        debits = [t for t in record.transactions if t.is_debit]
        credits = [t for t in record.transactions if t.is_credit]
        total_debits = sum(t.amount for t in debits)
        total_credits = sum(t.amount for t in credits)
        reconciliation: Optional[ReconciliationResult] = record.reconciliation

        return {
            'total_transactions': len(record.transactions),
            'debit_count': len(debits),
            'credit_count': len(credits),
            'other_count': len(record.transactions) - len(debits) - len(credits),
            'total_debits': total_debits,
            'total_credits': total_credits,
            'net_change': total_credits - total_debits,
            'reconciliation_status': (
                "PASS" if reconciliation and reconciliation.is_reconciled
                else "FAIL - Review Required"
            ),
        }
