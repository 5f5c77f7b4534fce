"""
Excel output generator for analyzed bank statements.

Creates a formatted Excel workbook with two sheets:
1. Transactions
2. Reconciliation
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from config import TRANSACTION_TYPES
from models.statement import StatementRecord

logger = logging.getLogger(__name__)


# Style definitions
HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
FLAGGED_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
ALT_ROW_FILL = PatternFill(start_color="F2F2F2", end_color="F2F2F2", fill_type="solid")
PASS_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
FAIL_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
CURRENCY_FORMAT = '#,##0.00'

TRANSACTIONS_SHEET = "Transactions"
RECONCILIATION_SHEET = "Reconciliation"
SECTION_HEADERS = ("Account Holder", "Balance Summary", "Transaction Totals")


def generate_statement_excel(
    record: StatementRecord,
    output_path: str,
    summary: Optional[Dict[str, Any]] = None
) -> str:
    """
    Generate an Excel workbook for a reconciled statement.

    Args:
        record: Normalized and reconciled statement
        output_path: Path to save the Excel file
        summary: Totals from StatementReconciler.summarize (optional)

    Returns:
        Path to the generated file
    """
    logger.info(f"Generating Excel output: {output_path}")

    wb = Workbook()

    # Remove default sheet
    if 'Sheet' in wb.sheetnames:
        del wb['Sheet']

    _create_transactions_sheet(wb, record)
    _create_reconciliation_sheet(wb, record, summary or {})

    wb.save(output_path)
    logger.info(f"Excel file saved: {output_path}")

    return output_path


def _create_transactions_sheet(wb: Workbook, record: StatementRecord) -> None:
    """Create the Transactions sheet."""
    ws = wb.create_sheet(TRANSACTIONS_SHEET)

    currency = record.currency or ""
    headers = [
        "Date", "Description", f"Amount ({currency})".replace(" ()", ""),
        "Type", f"Balance ({currency})".replace(" ()", "")
    ]

    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal='center')

    for row_idx, txn in enumerate(record.transactions, 2):
        ws.cell(row=row_idx, column=1, value=txn.date)
        ws.cell(row=row_idx, column=2, value=txn.description)

        cell = ws.cell(row=row_idx, column=3, value=txn.amount)
        cell.number_format = CURRENCY_FORMAT

        ws.cell(row=row_idx, column=4, value=txn.type)

        cell = ws.cell(row=row_idx, column=5, value=txn.balance)
        if txn.balance is not None:
            cell.number_format = CURRENCY_FORMAT

        # Types the reconciler does not count
        if txn.type not in TRANSACTION_TYPES:
            for col in range(1, len(headers) + 1):
                ws.cell(row=row_idx, column=col).fill = FLAGGED_FILL
        elif row_idx % 2 == 0:
            for col in range(1, len(headers) + 1):
                ws.cell(row=row_idx, column=col).fill = ALT_ROW_FILL

    for col, width in enumerate([14, 50, 16, 10, 16], 1):
        ws.column_dimensions[get_column_letter(col)].width = width

    ws.auto_filter.ref = f"A1:{get_column_letter(len(headers))}{len(record.transactions) + 1}"
    ws.freeze_panes = "A2"


def _create_reconciliation_sheet(
    wb: Workbook,
    record: StatementRecord,
    summary: Dict[str, Any]
) -> None:
    """Create the Reconciliation sheet."""
    ws = wb.create_sheet(RECONCILIATION_SHEET)

    result = record.reconciliation
    is_reconciled = bool(result and result.is_reconciled)

    rows: List[Tuple[str, Any]] = [
        ("Account Holder", ""),
        ("Name", record.account_holder.name),
        ("Address", record.account_holder.address),
        ("Statement Date", record.document_date or "N/A"),
        ("Currency", record.currency or ""),
        ("", ""),
        ("Balance Summary", ""),
        ("Starting Balance", float(record.starting_balance)),
        ("Ending Balance", float(record.ending_balance)),
        ("Calculated Balance", float(result.calculated_balance) if result else "N/A"),
        ("Discrepancy", float(result.discrepancy) if result and result.discrepancy is not None else ""),
        ("Status", "Reconciled" if is_reconciled else "Not reconciled"),
    ]

    if summary:
        rows += [
            ("", ""),
            ("Transaction Totals", ""),
            ("Total Transactions", summary.get('total_transactions', 0)),
            ("Total Credits", float(summary.get('total_credits', 0.0))),
            ("Total Debits", float(summary.get('total_debits', 0.0))),
            ("Net Change", float(summary.get('net_change', 0.0))),
        ]

    for row_idx, (label, value) in enumerate(rows, 1):
        cell = ws.cell(row=row_idx, column=1, value=label)
        if label in SECTION_HEADERS:
            cell.font = Font(bold=True, size=12)
        cell = ws.cell(row=row_idx, column=2, value=value)
        if isinstance(value, float):
            cell.number_format = CURRENCY_FORMAT
        if label == "Status":
            cell.fill = PASS_FILL if is_reconciled else FAIL_FILL

    ws.column_dimensions['A'].width = 24
    ws.column_dimensions['B'].width = 50
