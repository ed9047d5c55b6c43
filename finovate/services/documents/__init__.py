"""
Document Services Package

Builders produce structured receipts, loan statements and invoices;
the renderer turns them into PDF files or preview URIs.
"""

from finovate.services.documents.builders import (
    build_invoice,
    build_loan_statement,
    build_receipt,
    default_invoice_details,
    format_date,
    format_money,
    statement_rows,
)
from finovate.services.documents.pdf_renderer import DocumentOutputError, PdfRenderer

__all__ = [
    # Builders
    "build_invoice",
    "build_loan_statement",
    "build_receipt",
    "default_invoice_details",
    "format_date",
    "format_money",
    "statement_rows",
    # Rendering
    "DocumentOutputError",
    "PdfRenderer",
]
