"""
Output module for writing analyzed statements.
"""
from .excel_generator import generate_statement_excel

__all__ = ['generate_statement_excel']
