"""
Module: extractor.model_extractor

Purpose:
    Model-assisted extraction path. Renders a page, asks a multimodal
    model for a JSON array of questions and normalizes each object into
    a Question. Records from all pages are merged into one id-keyed
    mapping under a configurable collision policy.

Key Functions:
    - build_prompt(): Extraction instructions for one page
    - strip_code_fences(): Remove markdown fencing from a reply
    - parse_model_reply(): Reply text -> list of question objects
    - question_from_model(): Question object -> Question
    - extract_page_with_model(): Render + request + parse for one page
    - merge_questions(): Accumulate page results by id

Dependencies:
    - fitz (PyMuPDF): Page objects
    - extractor.model_client: Generative model transport

Used By:
    - extractor.pipeline: AI extraction path
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Optional, Protocol

import fitz

from quizbank.core.models import Level, Question, now_millis, parse_base_id

from .config import CollisionPolicy, ExtractionConfig
from .pdf import render_page_png

logger = logging.getLogger(__name__)

_FENCE_OPEN_RE = re.compile(r"^\s*```[a-zA-Z]*\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```\s*$")


class ModelClient(Protocol):
    """Anything that can answer a prompt about an image."""

    def generate(self, prompt: str, image_png: bytes) -> str:
        ...


PROMPT_TEMPLATE = """\
You are extracting multiple-choice questions from one page of a bilingual \
(English/Hindi) exam paper. Return a JSON array. Each element must be an object:
{{
  "id": "{base_id}_P{page}_Q{{number}}",
  "exam": "{exam}",
  "year": "{year}",
  "category": "General",
  "question_en": "English question text",
  "question_hi": "Hindi question text",
  "options_en": ["option 1", "option 2", "option 3", "option 4"],
  "options_hi": ["विकल्प 1", "विकल्प 2", "विकल्प 3", "विकल्प 4"],
  "answer": 1
}}
Rules:
- Replace {{number}} in the id with the question number printed on the page.
- "answer" is the 1-based index of the correct option; use 1 if the page does not show it.
- A question may be printed twice (English and Hindi) or split across columns; merge both \
into one object.
- Ignore headers, footers, page numbers and instructions that are not questions.
- If a language is missing, use an empty string or empty list for it.
- Return ONLY the JSON array. No markdown, no code fences, no commentary.
"""


def build_prompt(base_id: str, page_number: int) -> str:
    """
    Build the extraction prompt for one page.

    Args:
        base_id: Id seed like "q_uppsc_2024_gs".
        page_number: 1-based page number used in the id template.

    Returns:
        Prompt text.
    """
    exam, year = parse_base_id(base_id)
    return PROMPT_TEMPLATE.format(base_id=base_id, page=page_number, exam=exam, year=year)


def strip_code_fences(raw: str) -> str:
    """
    Remove markdown code-fence wrapping from a model reply.

    Example:
        >>> strip_code_fences('```json\\n[]\\n```')
        '[]'
    """
    text = raw.strip()
    if text.startswith("```"):
        text = _FENCE_OPEN_RE.sub("", text, count=1)
        text = _FENCE_CLOSE_RE.sub("", text, count=1)
    return text.strip()


def parse_model_reply(raw: str) -> List[Dict[str, Any]]:
    """
    Parse a model reply into question objects.

    Accepts a JSON array, or an object with a "questions" array.
    Non-object array elements are skipped.

    Raises:
        ValueError: If the reply is not JSON or has another shape.
    """
    data = json.loads(strip_code_fences(raw))

    if isinstance(data, dict) and isinstance(data.get("questions"), list):
        data = data["questions"]
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array, got {type(data).__name__}")

    return [item for item in data if isinstance(item, dict)]


def fallback_id(base_id: str) -> str:
    """Random id for model objects that come without one."""
    return f"{base_id}_{now_millis()}_{uuid.uuid4().hex[:5]}"


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _identifier(value: Any) -> str:
    # Models sometimes number questions instead of using the id template
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return _text(value)


def _level(value: Any) -> Level:
    if isinstance(value, str) and value.strip().lower() in {lv.value for lv in Level}:
        return Level(value.strip().lower())
    return Level.MEDIUM


def _options(value: Any) -> tuple:
    if not isinstance(value, list):
        return ()
    return tuple(str(v).strip() for v in value if v is not None and str(v).strip())


def _answer(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 1


def question_from_model(
    obj: Dict[str, Any],
    base_id: str,
    created_at: Optional[int] = None,
) -> Question:
    """
    Normalize one model-supplied object into a complete Question.

    Missing exam/year fall back to the base id tokens, a missing id to
    fallback_id() (a bare numeric id is kept as text). An unknown level
    becomes medium. Empty text and option fields receive placeholders.

    Args:
        obj: Parsed JSON object from the model.
        base_id: Id seed for defaults.
        created_at: Timestamp in ms; defaults to now.

    Returns:
        Placeholder-filled Question.
    """
    exam, year = parse_base_id(base_id)
    question = Question(
        id=_identifier(obj.get("id")) or fallback_id(base_id),
        exam=_text(obj.get("exam")) or exam,
        year=str(obj.get("year") or year),
        category=_text(obj.get("category")) or "General",
        level=_level(obj.get("level")),
        question_en=_text(obj.get("question_en")),
        question_hi=_text(obj.get("question_hi")),
        options_en=_options(obj.get("options_en")),
        options_hi=_options(obj.get("options_hi")),
        answer=_answer(obj.get("answer", 1)),
        created_at=created_at if created_at is not None else now_millis(),
    )
    return question.with_placeholders()


def extract_page_with_model(
    page: fitz.Page,
    page_number: int,
    client: ModelClient,
    base_id: str,
    config: Optional[ExtractionConfig] = None,
) -> List[Question]:
    """
    Extract questions from one page with the generative model.

    Args:
        page: PyMuPDF page object.
        page_number: 1-based page number.
        client: Model client.
        base_id: Id seed.
        config: Optional extraction configuration.

    Returns:
        Questions parsed from the page reply. An object that cannot be
        turned into a Question is logged and skipped; its siblings are
        kept.

    Raises:
        ModelRequestError: If the request fails.
        ValueError: If the reply cannot be parsed.
    """
    config = config or ExtractionConfig()

    image_png = render_page_png(page, config.render_scale, max_side=config.max_image_side)
    raw = client.generate(build_prompt(base_id, page_number), image_png)
    objects = parse_model_reply(raw)

    created_at = now_millis()
    questions: List[Question] = []
    for index, obj in enumerate(objects, start=1):
        try:
            questions.append(question_from_model(obj, base_id, created_at))
        except (TypeError, ValueError) as e:
            logger.warning(
                f"Page {page_number}: skipped malformed question object {index}: {e}",
                extra={"page_number": page_number, "object_index": index, "error": str(e)},
            )
    logger.debug(f"Page {page_number}: model returned {len(questions)} questions")
    return questions


def merge_questions(
    target: Dict[str, Question],
    incoming: List[Question],
    policy: CollisionPolicy = CollisionPolicy.OVERWRITE,
) -> List[str]:
    """
    Merge page results into the run's id-keyed mapping (in place).

    Args:
        target: Mapping of id -> Question accumulated so far.
        incoming: Questions from one page.
        policy: What to do when an id is already present.

    Returns:
        Ids that collided with an existing entry.
    """
    collisions: List[str] = []

    for question in incoming:
        qid = question.id
        if qid not in target:
            target[qid] = question
            continue

        collisions.append(qid)
        if policy is CollisionPolicy.OVERWRITE:
            logger.warning(f"Duplicate question id {qid}: later record replaces earlier one")
            target[qid] = question
        elif policy is CollisionPolicy.KEEP_FIRST:
            logger.warning(f"Duplicate question id {qid}: later record discarded")
        else:
            n = 2
            while f"{qid}_{n}" in target:
                n += 1
            new_id = f"{qid}_{n}"
            logger.warning(f"Duplicate question id {qid}: stored as {new_id}")
            target[new_id] = replace(question, id=new_id)

    return collisions
