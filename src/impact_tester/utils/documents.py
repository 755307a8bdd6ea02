"""
Document text extraction.

Turns an uploaded PDF, Word or plain-text file into a single description
string for the analysis.
"""
import io
import logging
import os

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".pdf", ".docx", ".txt", ".md"}


class DocumentExtractionError(Exception):
    """Raised when a document cannot be decoded into text"""


def _extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def extract_text_from_pdf(pdf_bytes: bytes) -> str:
    """
    Extract text from PDF bytes.

    Whitespace inside a page collapses to single spaces; pages are joined
    with a newline.
    """
    import PyPDF2

    try:
        reader = PyPDF2.PdfReader(io.BytesIO(pdf_bytes))
        pages = []
        for page in reader.pages:
            pages.append(" ".join((page.extract_text() or "").split()))
    except Exception as e:
        raise DocumentExtractionError(f"No se pudo leer el PDF: {e}") from e

    logger.debug("Extracted %d pages from PDF", len(pages))
    return "\n".join(pages)


def extract_text_from_word(docx_bytes: bytes) -> str:
    """Extract the non-empty paragraphs of a Word document, one per line."""
    import docx

    try:
        document = docx.Document(io.BytesIO(docx_bytes))
    except Exception as e:
        raise DocumentExtractionError(f"No se pudo leer el documento Word: {e}") from e

    paragraphs = [p.text for p in document.paragraphs if p.text.strip()]
    return "\n".join(paragraphs)


def extract_text_from_plain(raw: bytes) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DocumentExtractionError(f"El archivo de texto no está en UTF-8: {e}") from e


def extract_document_text(filename: str, content: bytes) -> str:
    """
    Extract text from an uploaded document, choosing the reader by extension.

    Args:
        filename: Original file name (used for the extension)
        content: Raw file bytes

    Returns:
        Extracted text, stripped of surrounding whitespace

    Raises:
        DocumentExtractionError: Unsupported type or undecodable content
    """
    ext = _extension(filename)
    if ext not in SUPPORTED_EXTENSIONS:
        raise DocumentExtractionError(
            f"Tipo de archivo no soportado: '{ext or filename}'. "
            f"Tipos permitidos: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )

    if ext == ".pdf":
        text = extract_text_from_pdf(content)
    elif ext == ".docx":
        text = extract_text_from_word(content)
    else:
        text = extract_text_from_plain(content)

    logger.info("Extracted %d characters from %s", len(text), filename)
    return text.strip()
