"""
Document-text extraction for the documentation explanation path.

Architectural role:
- Convert a local PDF, DOCX or TXT file into plain text.
- Enforce size/extension constraints before extraction.
- Provide adapter-level preprocessing only; the caller forwards the text to
  `FallbackOrchestrator.resolve_documentation`.

Processing lifecycle:
1. Normalize the path and check existence, size and extension.
2. Dispatch extraction by extension.
3. Return stripped text (possibly empty).

Error handling strategy:
- Validation failures raise `ValueError` with a short reason.
- Parser errors from `pdfplumber` / `python-docx` propagate to the caller.
"""

import os

import pdfplumber
import docx


# ============================================================
# CONFIG
# ============================================================

MAX_FILE_SIZE_MB = 10
ALLOWED_EXTENSIONS = {".pdf", ".docx", ".txt"}


# ============================================================
# PUBLIC ENTRYPOINT
# ============================================================

def extract_document_text(path: str) -> str:
    """Validate `path` and return its extracted plain text."""
    normalized = _validate_file(path)
    return _extract_content(normalized).strip()


# ============================================================
# VALIDATION
# ============================================================

def _normalize_path(path: str):
    """Expand and canonicalize a path; return `None` for empty input."""
    if not path:
        return None
    expanded = os.path.expanduser(path)
    return os.path.realpath(expanded)


def _validate_file(path: str) -> str:
    """
    Enforce existence, size and file-type constraints before extraction.

    Returns the normalized path.
    """
    normalized = _normalize_path(path)
    if not normalized:
        raise ValueError("Invalid file path")

    if not os.path.isfile(normalized):
        raise ValueError(f"File does not exist: {path}")

    size_mb = os.path.getsize(normalized) / (1024 * 1024)

    if size_mb > MAX_FILE_SIZE_MB:
        raise ValueError("File exceeds max size limit")

    _, ext = os.path.splitext(normalized)

    if ext.lower() not in ALLOWED_EXTENSIONS:
        raise ValueError(f"Unsupported file type: {ext or '(none)'}")

    return normalized


# ============================================================
# EXTRACTION ROUTER
# ============================================================

def _extract_content(path: str) -> str:
    _, ext = os.path.splitext(path)
    ext = ext.lower()

    if ext == ".pdf":
        return _extract_pdf(path)

    if ext == ".docx":
        return _extract_docx(path)

    return _extract_txt(path)


def _extract_pdf(path: str) -> str:
    """Extract text from each PDF page and concatenate with newlines."""
    text = []

    with pdfplumber.open(path) as pdf:
        for page in pdf.pages:
            text.append(page.extract_text() or "")

    return "\n".join(text)


def _extract_txt(path: str) -> str:
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        return f.read()


def _extract_docx(path: str) -> str:
    doc = docx.Document(path)
    return "\n".join(p.text for p in doc.paragraphs)
