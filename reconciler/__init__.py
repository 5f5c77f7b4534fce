"""Reconciliation module for balance verification."""
from reconciler.balance_checker import StatementReconciler, UnknownTransactionType

__all__ = ["StatementReconciler", "UnknownTransactionType"]
