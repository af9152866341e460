"""
Module: extractor

Purpose:
    Extraction pipeline for turning bilingual exam PDFs into question
    records, either heuristically (text reflow + line patterns) or with
    a multimodal generative model reading rendered pages.

Key Functions:
    - extract_questions(): Main entry point for extraction

Key Classes:
    - ExtractionConfig: Configuration for extraction settings
    - ExtractionResult: Container for extraction output

Dependencies:
    - fitz (PyMuPDF): PDF rendering and text extraction
    - PIL: Page image encoding
    - requests: Generative model REST calls

Used By:
    - quizbank.cli: Command-line extraction
"""

from .config import (
    AVAILABLE_MODELS,
    DEFAULT_MODEL,
    CollisionPolicy,
    ContinuationPolicy,
    ExtractionConfig,
    ExtractionMode,
)
from .errors import ExtractionError, ModelRequestError, PreconditionError
from .pipeline import (
    ExtractionResult,
    ExtractionStage,
    ExtractionStatus,
    ProgressEvent,
    build_questions,
    extract_questions,
)

__all__ = [
    "AVAILABLE_MODELS",
    "DEFAULT_MODEL",
    "CollisionPolicy",
    "ContinuationPolicy",
    "ExtractionConfig",
    "ExtractionError",
    "ExtractionMode",
    "ExtractionResult",
    "ExtractionStage",
    "ExtractionStatus",
    "ModelRequestError",
    "PreconditionError",
    "ProgressEvent",
    "build_questions",
    "extract_questions",
]
