"""
Unit tests for statement normalization and balance reconciliation.
"""
import math
import unittest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.statement import AccountHolder, ReconciliationResult, StatementRecord, Transaction
from reconciler.balance_checker import StatementReconciler, UnknownTransactionType


def txn(amount, txn_type, date="01 May 2025", description="PAYMENT", balance=None):
    """Build a transaction with sensible defaults."""
    return Transaction(
        date=date, description=description, amount=amount, type=txn_type, balance=balance
    )


def statement(transactions, starting=1000.0, ending=1000.0, currency=None):
    """Build a statement record with sensible defaults."""
    return StatementRecord(
        account_holder=AccountHolder(name="Jane Doe", address="1 Main St"),
        starting_balance=starting,
        ending_balance=ending,
        transactions=transactions,
        currency=currency,
    )


class TestNormalize(unittest.TestCase):
    """Tests for amount normalization."""

    def setUp(self):
        self.reconciler = StatementReconciler()

    def test_negative_amounts_become_magnitudes(self):
        """Negative amounts become positive; other fields are untouched."""
        original = [
            txn(-200.0, "debit", date="02 May", description="RENT", balance=800.0),
            txn(-35.5, "credit", date="03 May", description="REFUND", balance=835.5),
        ]
        result = self.reconciler.normalize(original)

        self.assertEqual([t.amount for t in result], [200.0, 35.5])
        for before, after in zip(original, result):
            self.assertEqual(after.type, before.type)
            self.assertEqual(after.date, before.date)
            self.assertEqual(after.description, before.description)
            self.assertEqual(after.balance, before.balance)

    def test_input_not_modified(self):
        """Normalization returns new transactions."""
        original = [txn(-50.0, "debit")]
        self.reconciler.normalize(original)
        self.assertEqual(original[0].amount, -50.0)

    def test_idempotent(self):
        """Normalizing twice gives the same result as once."""
        once = self.reconciler.normalize([txn(-10.0, "debit"), txn(20.0, "credit")])
        twice = self.reconciler.normalize(once)
        self.assertEqual(once, twice)

    def test_order_preserved(self):
        """Statement order is never changed."""
        original = [
            txn(5.0, "debit", date="30 May"),
            txn(-1.0, "credit", date="01 May"),
            txn(3.0, "debit", date="15 May"),
        ]
        result = self.reconciler.normalize(original)
        self.assertEqual([t.date for t in result], ["30 May", "01 May", "15 May"])

    def test_nan_passes_through(self):
        """NaN amounts are left as they are."""
        result = self.reconciler.normalize([txn(float('nan'), "debit")])
        self.assertTrue(math.isnan(result[0].amount))

    def test_empty(self):
        """An empty list stays empty."""
        self.assertEqual(self.reconciler.normalize([]), [])


class TestReconcile(unittest.TestCase):
    """Tests for the reconciliation verdict."""

    def setUp(self):
        self.reconciler = StatementReconciler()

    def test_single_credit_reconciles(self):
        """A credit that explains the ending balance reconciles."""
        result = self.reconciler.reconcile(1000, [txn(500, "credit")], 1500)
        self.assertEqual(result.calculated_balance, 1500)
        self.assertTrue(result.is_reconciled)
        self.assertIsNone(result.discrepancy)

    def test_shortfall_is_discrepancy(self):
        """A shortfall beyond tolerance is reported as a negative discrepancy."""
        result = self.reconciler.reconcile(1000, [txn(500, "credit")], 1499.98)
        self.assertFalse(result.is_reconciled)
        self.assertAlmostEqual(result.discrepancy, -0.02, places=6)

    def test_one_cent_boundary_uses_float_difference(self):
        """1499.99 - 1500 is just under 0.01 in binary floating point."""
        result = self.reconciler.reconcile(1000, [txn(500, "credit")], 1499.99)
        self.assertEqual(result.calculated_balance, 1500)
        self.assertLess(abs(1499.99 - 1500), 0.01)
        self.assertTrue(result.is_reconciled)

    def test_within_tolerance(self):
        """Differences below one cent are treated as rounding noise."""
        result = self.reconciler.reconcile(1000, [], 1000.009)
        self.assertTrue(result.is_reconciled)
        self.assertIsNone(result.discrepancy)

    def test_just_over_tolerance(self):
        """Differences above one cent are reported."""
        result = self.reconciler.reconcile(1000, [], 1000.011)
        self.assertFalse(result.is_reconciled)
        self.assertAlmostEqual(result.discrepancy, 0.011, places=6)
        self.assertEqual(result.calculated_balance, 1000)

    def test_discrepancy_sign(self):
        """Discrepancy is reported minus calculated."""
        result = self.reconciler.reconcile(1000, [txn(100, "debit")], 950)
        self.assertEqual(result.calculated_balance, 900)
        self.assertAlmostEqual(result.discrepancy, 50)

    def test_unknown_type_contributes_nothing(self):
        """Types other than debit/credit are ignored."""
        transactions = [txn(300, "credit"), txn(999, "transfer"), txn(100, "debit")]
        with self.assertNoLogs('reconciler.balance_checker', level='WARNING'):
            result = self.reconciler.reconcile(1000, transactions, 1200)
        self.assertEqual(result.calculated_balance, 1200)
        self.assertTrue(result.is_reconciled)

    def test_type_match_is_exact(self):
        """Capitalised tags are not counted."""
        result = self.reconciler.reconcile(0, [txn(10, "Credit")], 0)
        self.assertEqual(result.calculated_balance, 0)

    def test_unknown_type_rejected_when_configured(self):
        """The reject policy raises on unknown types."""
        reconciler = StatementReconciler(unknown_type_policy="reject")
        with self.assertRaises(UnknownTransactionType) as ctx:
            reconciler.reconcile(0, [txn(1, "debit"), txn(1, "fee")], 0)
        self.assertEqual(ctx.exception.index, 1)
        self.assertEqual(ctx.exception.txn_type, "fee")

    def test_invalid_policy(self):
        """Unrecognised policies are refused."""
        with self.assertRaises(ValueError):
            StatementReconciler(unknown_type_policy="maybe")

    def test_custom_tolerance(self):
        """Tolerance is configurable."""
        reconciler = StatementReconciler(tolerance=1.0)
        result = reconciler.reconcile(100, [], 100.5)
        self.assertTrue(result.is_reconciled)

    def test_order_not_changed(self):
        """Reconciling leaves the transaction list alone."""
        transactions = [txn(1, "debit", date="b"), txn(2, "credit", date="a")]
        self.reconciler.reconcile(0, transactions, 1)
        self.assertEqual([t.date for t in transactions], ["b", "a"])


class TestCurrencyDefault(unittest.TestCase):
    """Tests for the currency default."""

    def setUp(self):
        self.reconciler = StatementReconciler()

    def test_missing_currency(self):
        record = self.reconciler.apply_currency_default(statement([], currency=None))
        self.assertEqual(record.currency, "USD")

    def test_empty_currency(self):
        record = self.reconciler.apply_currency_default(statement([], currency=""))
        self.assertEqual(record.currency, "USD")

    def test_existing_currency_kept(self):
        record = self.reconciler.apply_currency_default(statement([], currency="EUR"))
        self.assertEqual(record.currency, "EUR")

    def test_configurable_default(self):
        reconciler = StatementReconciler(default_currency="GBP")
        record = reconciler.apply_currency_default(statement([]))
        self.assertEqual(record.currency, "GBP")


class TestProcess(unittest.TestCase):
    """Tests for the full statement pass."""

    def setUp(self):
        self.reconciler = StatementReconciler()

    def test_end_to_end(self):
        """Signed amounts are normalized and the statement reconciles."""
        record = statement(
            [txn(-200, "debit"), txn(300, "credit")],
            starting=1000.00,
            ending=1100.00,
        )
        result = self.reconciler.process(record)

        self.assertEqual([t.amount for t in result.transactions], [200, 300])
        self.assertEqual(self.reconciler.net_change(result.transactions), 100)
        self.assertEqual(result.reconciliation.calculated_balance, 1100.00)
        self.assertTrue(result.reconciliation.is_reconciled)
        self.assertEqual(result.currency, "USD")

    def test_supplied_reconciliation_replaced(self):
        """A reconciliation that came with the record is recomputed."""
        record = statement([txn(50, "debit")], starting=100, ending=100)
        record.reconciliation = ReconciliationResult(
            calculated_balance=100, is_reconciled=True
        )
        result = self.reconciler.process(record)
        self.assertFalse(result.reconciliation.is_reconciled)
        self.assertEqual(result.reconciliation.discrepancy, 50)

    def test_original_record_untouched(self):
        """The input record is not mutated."""
        record = statement([txn(-5, "debit")], starting=5, ending=0)
        self.reconciler.process(record)
        self.assertEqual(record.transactions[0].amount, -5)
        self.assertIsNone(record.reconciliation)
        self.assertIsNone(record.currency)

    def test_wire_format(self):
        """Wire output omits discrepancy when reconciled and keeps camelCase names."""
        record = statement([txn(-200, "debit", balance=800.0)], starting=1000, ending=800)
        data = self.reconciler.process(record).to_dict()

        self.assertEqual(data['accountHolder'], {'name': 'Jane Doe', 'address': '1 Main St'})
        self.assertEqual(data['currency'], 'USD')
        self.assertEqual(data['startingBalance'], 1000)
        self.assertEqual(data['endingBalance'], 800)
        self.assertNotIn('documentDate', data)
        self.assertEqual(data['transactions'][0], {
            'date': '01 May 2025',
            'description': 'PAYMENT',
            'amount': 200,
            'type': 'debit',
            'balance': 800.0,
        })
        self.assertEqual(data['reconciliation'], {
            'calculatedBalance': 800,
            'isReconciled': True,
        })

    def test_wire_format_with_discrepancy(self):
        """Wire output carries discrepancy when not reconciled."""
        record = statement([txn(10, "credit")], starting=0, ending=15)
        data = self.reconciler.process(record).to_dict()
        self.assertFalse(data['reconciliation']['isReconciled'])
        self.assertEqual(data['reconciliation']['discrepancy'], 5)
        self.assertNotIn('balance', data['transactions'][0])


class TestSummarize(unittest.TestCase):
    """Tests for statement totals."""

    def test_totals(self):
        reconciler = StatementReconciler()
        record = reconciler.process(statement(
            [txn(-200, "debit"), txn(300, "credit"), txn(50, "credit"), txn(7, "hold")],
            starting=1000,
            ending=1150,
        ))
        summary = reconciler.summarize(record)

        self.assertEqual(summary['total_transactions'], 4)
        self.assertEqual(summary['debit_count'], 1)
        self.assertEqual(summary['credit_count'], 2)
        self.assertEqual(summary['other_count'], 1)
        self.assertEqual(summary['total_debits'], 200)
        self.assertEqual(summary['total_credits'], 350)
        self.assertEqual(summary['net_change'], 150)
        self.assertEqual(summary['reconciliation_status'], "PASS")


if __name__ == '__main__':
    unittest.main()
