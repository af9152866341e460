"""
Module: extractor.pdf

Purpose:
    PDF access utilities. Opens documents from a path or raw bytes,
    extracts positioned text fragments and renders pages to PNG images
    for the model-assisted path.

Key Functions:
    - open_document(): Open a PDF from a path or bytes
    - page_fragments(): Positioned text fragments of a page
    - render_page_png(): Render a page to PNG bytes

Dependencies:
    - fitz (PyMuPDF): PDF rendering and text extraction
    - PIL.Image: Image handling and encoding

Used By:
    - extractor.pipeline: Document loading and heuristic text
    - extractor.model_extractor: Page rendering
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import List, Union

import fitz
from PIL import Image

from .errors import ExtractionError
from .normalizer import TextFragment

logger = logging.getLogger(__name__)

DocumentSource = Union[str, Path, bytes]

# Default configuration
DEFAULT_RENDER_SCALE = 2.0
DEFAULT_MAX_IMAGE_SIDE = 3000


def open_document(source: DocumentSource) -> fitz.Document:
    """
    Open a PDF document.

    Args:
        source: Path to a PDF file, or the raw bytes of one.

    Returns:
        Open PyMuPDF document. Caller closes it (use as context manager).

    Raises:
        ExtractionError: If the document cannot be opened.

    Example:
        >>> with open_document(Path("paper.pdf")) as doc:
        ...     print(doc.page_count)
        12
    """
    try:
        if isinstance(source, (bytes, bytearray)):
            return fitz.open(stream=bytes(source), filetype="pdf")
        return fitz.open(Path(source))
    except (RuntimeError, ValueError, OSError) as e:
        raise ExtractionError(f"Failed to open PDF: {e}") from e


def page_fragments(page: fitz.Page) -> List[TextFragment]:
    """
    Extract positioned text fragments from a PDF page.

    One fragment is produced per text span. PyMuPDF reports span
    origins top-down; they are flipped to bottom-up page space so
    that a larger y means higher on the page.

    Args:
        page: PyMuPDF page object.

    Returns:
        Fragments in document order (not yet reading-ordered).

    Example:
        >>> page_fragments(doc[0])[0]
        TextFragment(text='1. What is X?', x=72.0, y=770.0)
    """
    height = page.rect.height
    fragments: List[TextFragment] = []

    data = page.get_text("dict")
    for block in data.get("blocks", []):
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                origin = span.get("origin")
                if not text or not origin:
                    continue
                fragments.append(
                    TextFragment(text=text, x=float(origin[0]), y=float(height - origin[1]))
                )

    return fragments


def render_page_png(
    page: fitz.Page,
    scale: float = DEFAULT_RENDER_SCALE,
    *,
    max_side: int = DEFAULT_MAX_IMAGE_SIDE,
) -> bytes:
    """
    Render a PDF page to PNG bytes.

    Args:
        page: PyMuPDF page object.
        scale: Upscale factor over PDF points. Defaults to 2.0.
        max_side: Longest allowed image side in pixels; larger renders
            are downsampled keeping the aspect ratio. Defaults to 3000.

    Returns:
        PNG-encoded image bytes.

    Raises:
        ValueError: If scale is not positive.
    """
    if scale <= 0:
        raise ValueError(f"Invalid render scale: {scale}")

    matrix = fitz.Matrix(scale, scale)
    pix = page.get_pixmap(matrix=matrix, alpha=False)
    image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)

    if max(image.size) > max_side:
        image.thumbnail((max_side, max_side))
        logger.debug(f"Downsampled page render to {image.size}")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
