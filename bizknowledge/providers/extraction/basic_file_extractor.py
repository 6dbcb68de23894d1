"""Basic file-to-text extractor.

Only plain text and CSV are real readers.  PDF gets a best-effort scrape of
literal string objects, which works for simple text PDFs and fails cleanly
for scanned or compressed ones.  Images and Office formats are reported as
unsupported with a hint on how to get the text in (paste it, or convert
the file), so the upload form can tell the user what to do next.
"""

from __future__ import annotations

import csv
import io
import re
from pathlib import PurePath

import structlog

from bizknowledge.interfaces.file_extractor import IFileExtractor
from bizknowledge.models.extraction import ExtractedText, ExtractionErrorKind

logger = structlog.get_logger(logger_name=__name__)

SUPPORTED_EXTENSIONS: tuple[str, ...] = (
    ".txt",
    ".pdf",
    ".docx",
    ".xlsx",
    ".csv",
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
)

FILE_TYPE_DESCRIPTION = (
    "Supported formats: Text (.txt), PDF (.pdf), Word (.docx), Excel (.xlsx), "
    "CSV (.csv), Images (.jpg, .png)"
)

_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})

_DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
_XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# PDF literal strings: "(Hello world) Tj"
_PDF_LITERAL_RE = re.compile(r"\(([^)]+)\)")
_HAS_LETTER_RE = re.compile(r"[a-zA-Z]")

_PDF_MIN_TEXT_CHARS = 50
_CSV_MAX_ROWS = 50

_MESSAGES = {
    "pdf": (
        "Could not extract text from this PDF file. The PDF may be image-based "
        "or encrypted. Please try: 1) Copy and paste text directly from the PDF, "
        "2) Use a PDF-to-text converter, or 3) Contact administrator for advanced "
        "PDF processing setup."
    ),
    "image": (
        "Image text extraction (OCR) requires external service integration. "
        "Please transcribe the text manually or contact administrator for OCR setup."
    ),
    "docx": (
        "Word document processing requires external service integration. "
        "Please copy and paste the content directly."
    ),
    "doc": (
        "Legacy .doc files are not supported. Please save as .docx or paste "
        "the content directly."
    ),
    "xlsx": (
        "Excel file processing requires external service integration. "
        "Please export to CSV or paste the data directly."
    ),
    "xls": (
        "Legacy .xls files are not supported. Please save as .xlsx or paste "
        "the content directly."
    ),
    "csv_empty": "CSV file appears to be empty",
}


class BasicFileExtractor(IFileExtractor):
    """Extract text from plain-text, CSV and simple PDF uploads."""

    async def extract(self, file_name: str, content_type: str | None, data: bytes) -> ExtractedText:
        name = (file_name or "").lower()
        mime = (content_type or "").lower()
        ext = PurePath(name).suffix

        if mime == "text/plain" or ext == ".txt":
            return self._from_text(data)
        if mime == "application/pdf" or ext == ".pdf":
            return self._from_pdf(data)
        if mime.startswith("image/") or ext in _IMAGE_EXTENSIONS:
            return self._unsupported(_MESSAGES["image"])
        if mime == _DOCX_MIME or ext == ".docx":
            return self._unsupported(_MESSAGES["docx"])
        if mime == "application/msword" or ext == ".doc":
            return self._unsupported(_MESSAGES["doc"])
        if mime == _XLSX_MIME or ext == ".xlsx":
            return self._unsupported(_MESSAGES["xlsx"])
        if mime == "application/vnd.ms-excel" or ext == ".xls":
            return self._unsupported(_MESSAGES["xls"])
        if mime == "text/csv" or ext == ".csv":
            return self._from_csv(data)

        declared = mime or ext or "unknown"
        logger.info("file_type_unsupported", file_name=file_name, content_type=content_type)
        return self._unsupported(
            f'File type "{declared}" is not supported. '
            f"Supported formats: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    def supported_extensions(self) -> list[str]:
        return list(SUPPORTED_EXTENSIONS)

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def _from_text(self, data: bytes) -> ExtractedText:
        content = data.decode("utf-8", errors="replace")
        if not content.strip():
            return self._empty()
        return ExtractedText(content=content, supported_types=self.supported_extensions())

    def _from_pdf(self, data: bytes) -> ExtractedText:
        # latin-1 maps every byte to one code point, so offsets stay aligned.
        raw = data.decode("latin-1")
        pieces = [
            m.group(1)
            for m in _PDF_LITERAL_RE.finditer(raw)
            if len(m.group(1)) > 3 and _HAS_LETTER_RE.search(m.group(1))
        ]
        text = " ".join(pieces).strip()
        if len(text) <= _PDF_MIN_TEXT_CHARS:
            return self._unsupported(_MESSAGES["pdf"])
        content = (
            f"[PDF Content Extracted]\n\n{text}\n\n"
            "[Note: Basic PDF extraction - some formatting may be lost]"
        )
        return ExtractedText(content=content, supported_types=self.supported_extensions())

    def _from_csv(self, data: bytes) -> ExtractedText:
        text = data.decode("utf-8-sig", errors="replace")
        lines = [line for line in text.splitlines() if line.strip()]
        if not lines:
            return self._empty(_MESSAGES["csv_empty"])

        reader = csv.reader(io.StringIO("\n".join(lines)))
        table = [[cell.strip() for cell in row] for row in reader]
        headers, rows = table[0], table[1:]

        parts = [
            f"Data Table ({len(rows)} rows):\n\n",
            f"Columns: {', '.join(headers)}\n\n",
        ]
        shown = rows[:_CSV_MAX_ROWS]
        for number, values in enumerate(shown, start=1):
            parts.append(f"Row {number}:\n")
            for header, value in zip(headers, values):
                if value:
                    parts.append(f"  {header}: {value}\n")
            parts.append("\n")
        if len(rows) > len(shown):
            parts.append(f"... and {len(rows) - len(shown)} more rows\n")

        return ExtractedText(content="".join(parts), supported_types=self.supported_extensions())

    # ------------------------------------------------------------------
    # Failure helpers
    # ------------------------------------------------------------------

    def _unsupported(self, message: str) -> ExtractedText:
        return ExtractedText(
            error=message,
            error_kind=ExtractionErrorKind.UNSUPPORTED,
            supported_types=self.supported_extensions(),
        )

    def _empty(self, message: str | None = None) -> ExtractedText:
        return ExtractedText(
            error=message or "No content found in the document.",
            error_kind=ExtractionErrorKind.EMPTY,
            supported_types=self.supported_extensions(),
        )
