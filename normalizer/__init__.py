"""
Normalizer module for parsing and formatting amounts.
"""
from .amount_parser import parse_amount, is_finite_amount, format_amount

__all__ = ['parse_amount', 'is_finite_amount', 'format_amount']
