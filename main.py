#!/usr/bin/env python3
"""
Bank Statement Analyzer - Main Entry Point

Reads a PDF bank statement with the Claude API, normalizes the extracted
transactions and checks that they reconcile with the reported balances.

Usage:
    python main.py --input <statement.pdf> [--output <result.json|result.xlsx>] [options]

Examples:
    python main.py --input statement.pdf
    python main.py --input statement.pdf --output result.xlsx --api-key $ANTHROPIC_API_KEY
    python main.py --input extracted.json --from-json --output result.json
"""
import argparse
import json
import logging
import os
import sys
from pathlib import Path

from config import APP_NAME, APP_VERSION, get_api_key, get_config
from extraction.analyzer import StatementAnalyzer
from extraction.claude_client import ClaudeStatementExtractor
from extraction.errors import DocumentTypeMismatch, StatementAnalysisError
from models.statement import StatementRecord
from normalizer.amount_parser import format_amount
from output.excel_generator import generate_statement_excel
from reconciler.balance_checker import StatementReconciler

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_WRONG_DOCUMENT = 2


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Extract and reconcile a PDF bank statement.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --input statement.pdf
  python main.py --input statement.pdf --output result.xlsx
  python main.py --input extracted.json --from-json --tolerance 0.05

Environment Variables:
  ANTHROPIC_API_KEY        - Claude API key for statement extraction
  EXTRACTION_MODEL         - Model used for extraction
  RECONCILIATION_TOLERANCE - Allowed balance difference (default: 0.01)
  DEFAULT_CURRENCY         - Currency used when none is found (default: USD)
        """
    )

    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the PDF statement (or extracted JSON with --from-json)'
    )
    parser.add_argument(
        '--output', '-o',
        default=None,
        help='Write the result to a .json or .xlsx file (prints JSON if omitted)'
    )
    parser.add_argument(
        '--api-key', '-k',
        default=None,
        help='Anthropic API key (or set ANTHROPIC_API_KEY env var)'
    )
    parser.add_argument(
        '--model', '-m',
        default=None,
        help='Claude model to use for extraction'
    )
    parser.add_argument(
        '--from-json',
        action='store_true',
        help='Input is an already-extracted statement JSON; skip the API call'
    )
    parser.add_argument(
        '--tolerance',
        type=float,
        default=None,
        help='Reconciliation tolerance in currency units'
    )
    parser.add_argument(
        '--strict-types',
        action='store_true',
        help='Fail on transaction types other than debit/credit instead of ignoring them'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    return parser.parse_args(argv)


def build_reconciler(args: argparse.Namespace) -> StatementReconciler:
    """Build a reconciler from config, applying command line overrides."""
    reconciler = StatementReconciler.from_config()
    if args.tolerance is not None:
        reconciler.tolerance = args.tolerance
    if args.strict_types:
        reconciler.unknown_type_policy = "reject"
    return reconciler


def print_summary(record: StatementRecord, summary: dict) -> None:
    """Print a human-readable summary of the analysis."""
    currency = record.currency
    result = record.reconciliation

    print(f"\n--- Statement Summary ---")
    print(f"Account holder: {record.account_holder.name or 'N/A'}")
    if record.document_date:
        print(f"Statement date: {record.document_date}")
    print(f"Starting balance: {format_amount(record.starting_balance, currency)}")
    print(f"Ending balance: {format_amount(record.ending_balance, currency)}")
    print(f"Transactions: {summary['total_transactions']} "
          f"({summary['credit_count']} credits, {summary['debit_count']} debits)")
    if summary['other_count']:
        print(f"  Not counted (unknown type): {summary['other_count']}")
    print(f"Total credits: {format_amount(summary['total_credits'], currency)}")
    print(f"Total debits: {format_amount(summary['total_debits'], currency)}")
    print(f"Calculated balance: {format_amount(result.calculated_balance, currency)}")

    if result.is_reconciled:
        print("Reconciliation: PASS - transactions match the ending balance")
    else:
        print(f"Reconciliation: FAIL - discrepancy {format_amount(result.discrepancy, currency)}")


def write_output(record: StatementRecord, summary: dict, output: str) -> None:
    """Write the result as JSON or Excel depending on the file extension."""
    ext = Path(output).suffix.lower()
    if ext == '.xlsx':
        generate_statement_excel(record, output, summary=summary)
    elif ext == '.json':
        with open(output, 'w', encoding='utf-8') as f:
            json.dump(record.to_dict(), f, ensure_ascii=False, indent=2)
    else:
        raise ValueError(f"Unknown output extension: {ext}. Use .json or .xlsx")


def run(args: argparse.Namespace) -> int:
    """Run the analysis for parsed arguments."""
    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}")
        return EXIT_FAILURE

    reconciler = build_reconciler(args)

    print(f"\n{'='*60}")
    print(f"{APP_NAME} v{APP_VERSION}")
    print(f"{'='*60}")
    print(f"Input file: {args.input}")
    if args.output:
        print(f"Output file: {args.output}")
    print(f"Tolerance: {reconciler.tolerance}")
    print(f"{'='*60}\n")

    if args.from_json:
        analyzer = StatementAnalyzer(oracle=None, reconciler=reconciler)
        with open(args.input, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                print(f"Error: {args.input} is not valid JSON: {e}")
                return EXIT_FAILURE
        if not isinstance(data, dict):
            print(f"Error: {args.input} does not contain a statement object")
            return EXIT_FAILURE
        record = analyzer.analyze_json(data)
    else:
        api_key = args.api_key or get_api_key()
        if not api_key:
            print("Error: No API key provided. Use --api-key or set ANTHROPIC_API_KEY.")
            return EXIT_FAILURE

        with open(args.input, 'rb') as f:
            pdf_bytes = f.read()

        print(f"Sending statement to {args.model or get_config().get('extraction_model')}...")
        extractor = ClaudeStatementExtractor(api_key=api_key, model=args.model)
        analyzer = StatementAnalyzer(oracle=extractor, reconciler=reconciler)
        record = analyzer.analyze(pdf_bytes)

    summary = reconciler.summarize(record)
    print_summary(record, summary)

    if args.output:
        write_output(record, summary, args.output)
        print(f"\nOutput saved to: {args.output}")
    else:
        print()
        print(json.dumps(record.to_dict(), ensure_ascii=False, indent=2))

    return EXIT_OK


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        return run(args)
    except DocumentTypeMismatch as e:
        print(f"Error: {e.message}")
        return EXIT_WRONG_DOCUMENT
    except (StatementAnalysisError, ValueError) as e:
        print(f"Error: {e}")
        return EXIT_FAILURE
    except Exception:
        logger.exception("Unexpected error")
        print("Error: An unexpected error occurred. Run with --verbose for details.")
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
