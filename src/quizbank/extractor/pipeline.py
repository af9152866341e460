"""
Module: extractor.pipeline

Purpose:
    Main orchestrator for PDF question extraction. Validates
    preconditions, drives the per-page loop for the selected path
    (heuristic or model-assisted), fills placeholder defaults and
    reports the id-keyed question mapping.

Key Functions:
    - extract_questions(): Main entry point for extraction
    - build_questions(): Segmenter drafts -> complete Questions

Key Classes:
    - ExtractionResult: Container for extraction output
    - ExtractionStage / ProgressEvent: Progress notifications
    - ExtractionStatus: EXTRACTED vs EMPTY outcome

Dependencies:
    - fitz (PyMuPDF): PDF access
    - extractor.normalizer / extractor.segmenter: Heuristic path
    - extractor.model_extractor / extractor.model_client: AI path

Used By:
    - quizbank.cli: Command-line extraction

Notes:
    Pages are processed strictly one at a time. A failure on one page
    is recorded as a warning and the run continues; a failure to load
    the document aborts the run with ExtractionError. No retries.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

import fitz

from quizbank.core.models import Question, now_millis, parse_base_id

from .config import DEFAULT_MODEL, ExtractionConfig, ExtractionMode
from .errors import ExtractionError, PreconditionError
from .model_client import GeminiClient
from .model_extractor import ModelClient, extract_page_with_model, merge_questions
from .normalizer import join_pages, normalize_page
from .pdf import DocumentSource, open_document, page_fragments
from .segmenter import QuestionMap, segment_questions
from .timing import TimingLog, timed_phase

logger = logging.getLogger(__name__)


class ExtractionStage(str, Enum):
    """Stage of an extraction run, in order."""
    IDLE = "idle"
    LOADING = "loading"
    EXTRACTING = "extracting"
    PARSING = "parsing"
    DONE = "done"
    FAILED = "failed"


class ExtractionStatus(str, Enum):
    """Outcome of a completed run."""
    EXTRACTED = "extracted"
    EMPTY = "empty"


@dataclass(frozen=True)
class ProgressEvent:
    """
    Progress notification for display.

    Attributes:
        stage: Current stage.
        page: 1-based page being processed (EXTRACTING only).
        total: Page count (0 until the document is loaded).
        message: Human-readable status line.
    """
    stage: ExtractionStage
    page: int = 0
    total: int = 0
    message: str = ""


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass
class ExtractionResult:
    """
    Result of extracting a PDF.

    Attributes:
        status: EXTRACTED, or EMPTY when no question was found.
        questions: Mapping of question id -> complete Question.
        warnings: Page-level problems encountered.
        page_count: Pages in the document.
        mode: Path used for the run.
        raw_text: Normalized document text (heuristic path only).
        timing: Stage and page timings.
    """
    status: ExtractionStatus
    questions: Dict[str, Question]
    warnings: List[str]
    page_count: int
    mode: ExtractionMode
    raw_text: str = ""
    timing: TimingLog = field(default_factory=TimingLog)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def is_empty(self) -> bool:
        return self.status is ExtractionStatus.EMPTY


def build_questions(
    drafts: QuestionMap,
    base_id: str,
    created_at: Optional[int] = None,
) -> Dict[str, Question]:
    """
    Turn segmenter drafts into complete, id-keyed Questions.

    Exam and year come from the base id. Empty question text becomes
    "Text not extracted" and a completely empty option list becomes the
    four placeholder options of its language; partially captured option
    lists are kept as they are.

    Args:
        drafts: Question number -> QuestionDraft.
        base_id: Id seed.
        created_at: Timestamp in ms; defaults to now.

    Returns:
        Mapping of id -> Question, in question-number order.
    """
    exam, year = parse_base_id(base_id)
    created_at = created_at if created_at is not None else now_millis()

    questions: Dict[str, Question] = {}
    for number in sorted(drafts):
        draft = drafts[number]
        question = Question(
            id=draft.id,
            exam=exam,
            year=year,
            question_en=draft.question_en,
            question_hi=draft.question_hi,
            options_en=draft.options_en,
            options_hi=draft.options_hi,
            created_at=created_at,
        ).with_placeholders()
        questions[question.id] = question
    return questions


def extract_questions(
    source: Optional[DocumentSource],
    base_id: str,
    *,
    mode: Union[ExtractionMode, str] = ExtractionMode.HEURISTIC,
    model_id: str = DEFAULT_MODEL,
    api_key: Optional[str] = None,
    client: Optional[ModelClient] = None,
    config: Optional[ExtractionConfig] = None,
    progress: Optional[ProgressCallback] = None,
) -> ExtractionResult:
    """
    Extract questions from an exam PDF.

    Pipeline:
    1. Validate preconditions (file, base id, credential for AI mode)
    2. Load the document
    3. For each page, in order:
       a. Heuristic: collect text fragments and reflow them
       b. AI: render, ask the model, parse its JSON reply
    4. Heuristic only: segment the document text into drafts
    5. Fill placeholders and key questions by id

    Args:
        source: Path to a PDF, or its raw bytes.
        base_id: Id seed like "q_uppsc_2024_gs".
        mode: "heuristic" or "ai".
        model_id: Model variant for the AI path.
        api_key: Credential for the AI path. Required unless ``client``
            is given.
        client: Preconfigured model client (AI path).
        config: Optional extraction configuration.
        progress: Optional callback receiving ProgressEvent updates.

    Returns:
        ExtractionResult. A run that finds nothing has status EMPTY.

    Raises:
        PreconditionError: Missing file, base id or credential.
        ExtractionError: The document could not be loaded or processed.

    Example:
        >>> result = extract_questions(Path("uppsc_2024.pdf"), "q_uppsc_2024_gs")
        >>> print(f"Extracted {result.question_count} questions")
        Extracted 150 questions
    """
    config = config or ExtractionConfig()
    mode = ExtractionMode(mode)
    base_id = (base_id or "").strip()

    def emit(stage: ExtractionStage, page: int = 0, total: int = 0, message: str = "") -> None:
        if progress is not None:
            progress(ProgressEvent(stage=stage, page=page, total=total, message=message))

    # Preconditions: nothing is loaded or sent before these pass
    if source is None or (isinstance(source, (bytes, bytearray)) and not source):
        raise PreconditionError("Please select a PDF file")
    if isinstance(source, (str, Path)) and not Path(source).is_file():
        raise PreconditionError(f"PDF not found: {source}")
    if not base_id:
        raise PreconditionError("Please provide a base id")
    if mode is ExtractionMode.AI and client is None:
        client = GeminiClient(
            api_key or "",
            model_id,
            endpoint=config.endpoint,
            timeout=config.request_timeout,
        )

    timing = TimingLog()
    warnings: List[str] = []
    name = Path(source).name if isinstance(source, (str, Path)) else "<bytes>"

    emit(ExtractionStage.LOADING, message="Loading PDF...")
    try:
        with timed_phase(timing, "loading"):
            doc = open_document(source)
    except ExtractionError as e:
        emit(ExtractionStage.FAILED, message=str(e))
        raise

    try:
        with doc:
            page_count = doc.page_count
            if mode is ExtractionMode.HEURISTIC:
                questions, raw_text = _extract_heuristic(
                    doc, base_id, config, emit, timing, warnings, name,
                )
            else:
                questions = _extract_with_model(
                    doc, base_id, client, config, emit, timing, warnings, name,
                )
                raw_text = ""
    except ExtractionError as e:
        emit(ExtractionStage.FAILED, message=str(e))
        raise
    except Exception as e:
        emit(ExtractionStage.FAILED, message=str(e))
        raise ExtractionError(f"Failed to parse PDF: {e}") from e

    status = ExtractionStatus.EXTRACTED if questions else ExtractionStatus.EMPTY
    if questions:
        message = f"Extracted {len(questions)} questions"
    else:
        message = "No questions extracted. Please check the PDF format."
    emit(ExtractionStage.DONE, total=page_count, message=message)

    logger.debug(timing.summary())
    logger.info(
        f"Completed {mode.value} extraction for {name}: {len(questions)} questions",
        extra={"pdf_name": name, "base_id": base_id, "question_count": len(questions)},
    )

    return ExtractionResult(
        status=status,
        questions=questions,
        warnings=warnings,
        page_count=page_count,
        mode=mode,
        raw_text=raw_text,
        timing=timing,
    )


def _page_failed(warnings: List[str], name: str, page_number: int, error: Exception) -> None:
    msg = f"Page {page_number} contributed no questions: {error} [PDF: {name}]"
    logger.warning(
        msg,
        extra={"pdf_name": name, "page_number": page_number, "error": str(error)},
    )
    warnings.append(msg)


def _extract_heuristic(
    doc: fitz.Document,
    base_id: str,
    config: ExtractionConfig,
    emit: Callable[..., None],
    timing: TimingLog,
    warnings: List[str],
    name: str,
) -> Tuple[Dict[str, Question], str]:
    """Heuristic path: reflow every page, then segment the whole text."""
    total = doc.page_count
    page_texts: List[str] = []

    with timed_phase(timing, "extracting"):
        for index in range(total):
            page_number = index + 1
            emit(
                ExtractionStage.EXTRACTING, page=page_number, total=total,
                message=f"Extracting text from page {page_number}/{total}...",
            )
            start = time.perf_counter()
            try:
                fragments = page_fragments(doc[index])
            except Exception as e:
                _page_failed(warnings, name, page_number, e)
                fragments = []
            page_texts.append(normalize_page(fragments, config.line_threshold))
            timing.log_page(page_number, time.perf_counter() - start)

    emit(ExtractionStage.PARSING, total=total, message="Parsing questions...")
    with timed_phase(timing, "parsing"):
        raw_text = join_pages(page_texts)
        drafts = segment_questions(raw_text, base_id, config.continuation_policy)
        questions = build_questions(drafts, base_id)

    return questions, raw_text


def _extract_with_model(
    doc: fitz.Document,
    base_id: str,
    client: ModelClient,
    config: ExtractionConfig,
    emit: Callable[..., None],
    timing: TimingLog,
    warnings: List[str],
    name: str,
) -> Dict[str, Question]:
    """AI path: one model request per page, merged by id."""
    total = doc.page_count
    questions: Dict[str, Question] = {}

    with timed_phase(timing, "extracting"):
        for index in range(total):
            page_number = index + 1
            emit(
                ExtractionStage.EXTRACTING, page=page_number, total=total,
                message=f"Analyzing page {page_number}/{total} with AI...",
            )
            start = time.perf_counter()
            try:
                page_questions = extract_page_with_model(
                    doc[index], page_number, client, base_id, config,
                )
            except Exception as e:
                _page_failed(warnings, name, page_number, e)
                page_questions = []
            timing.log_page(page_number, time.perf_counter() - start)

            collisions = merge_questions(questions, page_questions, config.collision_policy)
            if collisions:
                warnings.append(
                    f"Page {page_number}: duplicate ids {', '.join(collisions)} "
                    f"({config.collision_policy.value})"
                )

    return questions
