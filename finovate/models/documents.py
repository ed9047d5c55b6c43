"""
Document Models

A receipt, loan statement or invoice is first built as a plain structured
Document (labels, values, tables). Rendering to PDF is a separate step, so
the content of a document can be checked without looking at pixels.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DocumentKind(str, Enum):
    RECEIPT = "receipt"
    LOAN_STATEMENT = "loan_statement"
    INVOICE = "invoice"


class OutputMode(str, Enum):
    """
    How a rendered document is handed back.

    DOWNLOAD writes a PDF file and returns its path.
    PREVIEW returns an embeddable data: URI.
    """
    DOWNLOAD = "download"
    PREVIEW = "preview"


class DocumentField(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


class DocumentSection(BaseModel):
    """A heading followed by label/value lines (or bare lines when label is empty)."""
    model_config = ConfigDict(frozen=True)

    heading: str
    fields: tuple[DocumentField, ...] = ()

    def value_of(self, label: str) -> Optional[str]:
        for entry in self.fields:
            if entry.label == label:
                return entry.value
        return None


class DocumentTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    heading: str
    columns: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...] = ()


class Document(BaseModel):
    """Everything a renderer needs to lay out one document."""
    model_config = ConfigDict(frozen=True)

    kind: DocumentKind
    title: str
    subtitle: str = ""
    header_lines: tuple[str, ...] = ()
    sections: tuple[DocumentSection, ...] = ()
    tables: tuple[DocumentTable, ...] = ()
    highlight: Optional[DocumentField] = Field(
        default=None,
        description="Large amount line (amount paid / total due)"
    )
    image_caption: str = ""
    image_png: Optional[bytes] = Field(default=None, repr=False)
    footer_lines: tuple[str, ...] = ()
    filename: str
    generated_at: datetime = Field(default_factory=datetime.now)

    def section(self, heading: str) -> Optional[DocumentSection]:
        for section in self.sections:
            if section.heading == heading:
                return section
        return None

    def table(self, heading: str) -> Optional[DocumentTable]:
        for table in self.tables:
            if table.heading == heading:
                return table
        return None
