"""
Statement records exchanged between the extraction service, the reconciler
and the HTTP/CLI surfaces.

Attributes are snake_case; ``to_dict`` produces the camelCase wire format
and omits optional fields that are not set.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from config import CREDIT, DEBIT


@dataclass
class Transaction:
    """
    A single statement line.

    ``amount`` is a magnitude once normalized; direction lives in ``type``.
    """
    date: str
    description: str
    amount: float
    type: str
    balance: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert transaction to its wire dictionary."""
        data: Dict[str, Any] = {
            'date': self.date,
            'description': self.description,
            'amount': self.amount,
            'type': self.type,
        }
        if self.balance is not None:
            data['balance'] = self.balance
        return data

    def with_amount(self, amount: float) -> 'Transaction':
        """Return a copy with a different amount."""
        return replace(self, amount=amount)

    @property
    def is_debit(self) -> bool:
        return self.type == DEBIT

    @property
    def is_credit(self) -> bool:
        return self.type == CREDIT


@dataclass
class AccountHolder:
    """Name and postal address printed on the statement."""
    name: str = ""
    address: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'address': self.address}


@dataclass
class ReconciliationResult:
    """
    Outcome of checking transactions against the reported ending balance.

    ``discrepancy`` is only set when the statement does not reconcile.
    """
    calculated_balance: float
    is_reconciled: bool
    discrepancy: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'calculatedBalance': self.calculated_balance,
            'isReconciled': self.is_reconciled,
        }
        if not self.is_reconciled and self.discrepancy is not None:
            data['discrepancy'] = self.discrepancy
        return data


@dataclass
class StatementRecord:
    """
    A bank statement as returned to callers.
    """
    account_holder: AccountHolder
    starting_balance: float
    ending_balance: float
    transactions: List[Transaction] = field(default_factory=list)
    currency: Optional[str] = None
    document_date: Optional[str] = None
    reconciliation: Optional[ReconciliationResult] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the statement to its JSON wire shape."""
        data: Dict[str, Any] = {
            'accountHolder': self.account_holder.to_dict(),
        }
        if self.document_date:
            data['documentDate'] = self.document_date
        data['currency'] = self.currency
        data['startingBalance'] = self.starting_balance
        data['endingBalance'] = self.ending_balance
        data['transactions'] = [txn.to_dict() for txn in self.transactions]
        if self.reconciliation is not None:
            data['reconciliation'] = self.reconciliation.to_dict()
        return data
