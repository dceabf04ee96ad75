"""
Ingestion Engine

Rule-based extraction of structured transactions from free text.
"""

__version__ = "0.1.0"

from .text_parser import ParsedTransaction, parse_transaction_text, DEBIT, CREDIT

__all__ = [
    "ParsedTransaction",
    "parse_transaction_text",
    "DEBIT",
    "CREDIT",
]
