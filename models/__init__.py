"""
Data model for extracted bank statements.
"""
from .statement import AccountHolder, ReconciliationResult, StatementRecord, Transaction

__all__ = ['AccountHolder', 'ReconciliationResult', 'StatementRecord', 'Transaction']
