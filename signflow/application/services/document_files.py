"""Storage-ref conventions and upload checks for document PDFs.

Every working file has a sibling "-original" copy holding the pristine,
unsigned bytes. It is written once at upload and never regenerated; the
reapply path re-renders all signatures onto it.
"""

import os
from pathlib import PurePosixPath

from signflow.domain.exceptions import ValidationException

PDF_MAGIC = b"%PDF-"
ORIGINAL_SUFFIX = "-original"


def sanitize_filename(filename: str) -> str:
    """Strip path separators and dangerous characters from filename."""
    name = os.path.basename(filename.replace("\\", "/"))
    name = name.replace("\x00", "").strip(". ")
    if not name:
        raise ValidationException("Filename is empty or invalid", field="file")
    return name


def build_storage_ref(document_id: str, version: int, filename: str) -> str:
    """documents/{id}/v{version}/{safe filename}."""
    safe = sanitize_filename(filename)
    if not safe.lower().endswith(".pdf"):
        safe = f"{safe}.pdf"
    return f"documents/{document_id}/v{version}/{safe}"


def original_ref_for(storage_ref: str) -> str:
    """Sibling ref of the pristine copy: report.pdf -> report-original.pdf."""
    path = PurePosixPath(storage_ref)
    return str(path.with_name(f"{path.stem}{ORIGINAL_SUFFIX}{path.suffix}"))


def validate_pdf_upload(content: bytes | None, max_bytes: int) -> bytes:
    """Reject missing, oversized or non-PDF uploads before any mutation."""
    if not content:
        raise ValidationException("A PDF file is required", field="file")
    if len(content) > max_bytes:
        raise ValidationException(
            f"File exceeds the maximum size of {max_bytes} bytes", field="file"
        )
    if content.lstrip()[: len(PDF_MAGIC)] != PDF_MAGIC:
        raise ValidationException("Only PDF files are accepted", field="file")
    return content
