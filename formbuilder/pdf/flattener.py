"""Lock a filled form by baking its widgets into static page content."""

from __future__ import annotations

import logging
from pathlib import Path

import fitz

from formbuilder import config

logger = logging.getLogger(__name__)

_PDF_HEADER = b"%PDF-"
_HEADER_SEARCH_WINDOW = 1024
_VALUE_WIDGET_TYPES = frozenset(
    {
        fitz.PDF_WIDGET_TYPE_TEXT,
        fitz.PDF_WIDGET_TYPE_COMBOBOX,
        fitz.PDF_WIDGET_TYPE_LISTBOX,
    }
)


class PdfFormatError(RuntimeError):
    """Raised when the input is not a readable PDF document."""


class PdfFlattenError(RuntimeError):
    """Raised when a readable PDF cannot be flattened."""


def readonly_filename(name: str | Path) -> str:
    source = Path(name)
    stem = source.stem if source.suffix.lower() == ".pdf" else source.name
    return f"{stem or 'form'}{config.READONLY_SUFFIX}.pdf"


def flatten_pdf(data: bytes) -> bytes:
    document = _open_document(data)
    try:
        widget_count = 0
        for page in document:
            for widget in page.widgets():
                widget_count += 1
                if widget.field_type in _VALUE_WIDGET_TYPES and widget.field_value:
                    # Filled values may lack an appearance stream when the
                    # filling viewer relied on /NeedAppearances.
                    widget.update()

        document.bake(annots=False, widgets=True)

        catalog = document.pdf_catalog()
        if document.xref_get_key(catalog, "AcroForm")[0] != "null":
            document.xref_set_key(catalog, "AcroForm", "null")

        output = document.tobytes(garbage=3, deflate=True)
    except Exception as exc:
        raise PdfFlattenError(f"Failed to flatten PDF: {exc}") from exc
    finally:
        document.close()

    logger.info("Flattened %d widget(s), %d bytes", widget_count, len(output))
    return output


def _open_document(data: bytes) -> fitz.Document:
    if not data or _PDF_HEADER not in data[:_HEADER_SEARCH_WINDOW]:
        raise PdfFormatError("Input is not a PDF document")

    try:
        document = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise PdfFormatError(f"Failed to open PDF: {exc}") from exc

    try:
        usable = document.is_pdf and not document.needs_pass and document.page_count > 0
    except Exception as exc:
        document.close()
        raise PdfFormatError(f"Failed to read PDF structure: {exc}") from exc
    if not usable:
        document.close()
        raise PdfFormatError("PDF is encrypted or has no pages")
    return document
