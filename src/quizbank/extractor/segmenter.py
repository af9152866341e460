"""
Module: extractor.segmenter

Purpose:
    Heuristic question segmentation. Scans normalized document text
    line by line, classifies each line as a question start, an option
    start or a continuation, and accumulates bilingual question drafts
    keyed by question number.

Key Functions:
    - classify_line(): Line -> QuestionStart | OptionStart | Continuation
    - contains_devanagari(): Hindi detection (any-codepoint rule)
    - step(): One state transition for one line
    - finalize_question(): Commit the current question into the mapping
    - segment_questions(): Main entry point

Key Classes:
    - SegmenterState: Immutable accumulation state
    - QuestionDraft: Partially filled bilingual question

Dependencies:
    - re (std): Line patterns

Used By:
    - extractor.pipeline: Heuristic extraction path

Notes:
    The same question number may appear twice (once per language, not
    necessarily adjacent). Each language's question text and option list
    is fill-once: the first non-empty value wins.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Pattern, Tuple, Union

from .config import ContinuationPolicy

logger = logging.getLogger(__name__)

DEVANAGARI_RE = re.compile(r"[\u0900-\u097F]")


# ─────────────────────────────────────────────────────────────────────────────
# Line classification
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class QuestionStart:
    """Line opens question ``number``; ``text`` is the rest of the line."""
    number: int
    text: str


@dataclass(frozen=True)
class OptionStart:
    """Line opens option ``letter`` (lower-case); ``text`` is the rest."""
    letter: str
    text: str


@dataclass(frozen=True)
class Continuation:
    """Line matched no marker pattern."""
    text: str


LineClass = Union[QuestionStart, OptionStart, Continuation]


def _question(match: "re.Match[str]", rest: str) -> QuestionStart:
    return QuestionStart(number=int(match.group(1)), text=rest)


def _option(match: "re.Match[str]", rest: str) -> OptionStart:
    return OptionStart(letter=match.group(1).lower(), text=rest)


# Evaluated top to bottom, first match wins. Question markers outrank
# option markers so "1." is never read as an option.
LINE_RULES: Tuple[Tuple[Pattern[str], Callable[["re.Match[str]", str], LineClass]], ...] = (
    (re.compile(r"^(\d+)\.\s*"), _question),                     # "1. "
    (re.compile(r"^Q\.?\s*(\d+)[.)]?\s*"), _question),           # "Q.1", "Q 1.", "Q1)"
    (re.compile(r"^\[(\d+)\]\s*"), _question),                   # "[1] "
    (re.compile(r"^Question\s+(\d+)[.:]?\s*", re.I), _question),  # "Question 1:"
    (re.compile(r"^\(([a-d])\)\s*", re.I), _option),             # "(a) "
    (re.compile(r"^([a-d])\)\s*", re.I), _option),               # "a) "
    (re.compile(r"^([a-d])\.\s*", re.I), _option),               # "a. "
    (re.compile(r"^\[([a-d])\]\s*", re.I), _option),             # "[a] "
)


def classify_line(line: str) -> LineClass:
    """
    Classify one stripped line of text.

    Args:
        line: Non-blank line with surrounding whitespace removed.

    Returns:
        QuestionStart, OptionStart or Continuation. The marker is
        removed from the returned text.

    Example:
        >>> classify_line("Q.12) Which river...")
        QuestionStart(number=12, text='Which river...')
        >>> classify_line("(B) Ganga")
        OptionStart(letter='b', text='Ganga')
    """
    for pattern, build in LINE_RULES:
        match = pattern.match(line)
        if match:
            return build(match, line[match.end():].strip())
    return Continuation(text=line)


def contains_devanagari(text: str) -> bool:
    """True if any character of ``text`` is in the Devanagari block."""
    return DEVANAGARI_RE.search(text) is not None


# ─────────────────────────────────────────────────────────────────────────────
# Accumulation state
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class QuestionDraft:
    """
    Partially filled bilingual question produced by the segmenter.

    Attributes:
        number: Question number as printed in the document
        id: "<base_id>_<3-digit number>"
        question_en / question_hi: First question text seen per language
        options_en / options_hi: First option block seen per language
    """
    number: int
    id: str
    question_en: str = ""
    question_hi: str = ""
    options_en: Tuple[str, ...] = ()
    options_hi: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SegmenterState:
    """
    State of the line walk.

    Attributes:
        number: Question currently being read, None before the first one
        text: Accumulated question text
        options: Options captured so far for the current question
        is_hindi: Current question contains Devanagari text
    """
    number: Optional[int] = None
    text: str = ""
    options: Tuple[str, ...] = ()
    is_hindi: bool = False


QuestionMap = Dict[int, QuestionDraft]


def draft_id(base_id: str, number: int) -> str:
    """Question id for a heuristic draft, e.g. "q_x_2024_007"."""
    return f"{base_id}_{number:03d}"


def finalize_question(
    state: SegmenterState,
    questions: QuestionMap,
    base_id: str,
) -> QuestionMap:
    """
    Commit the current question into the mapping.

    Creates the draft for ``state.number`` if it is new, then fills the
    question text and option list of the state's language if they are
    still empty. Questions with neither text nor options are skipped.

    Args:
        state: Current segmenter state.
        questions: Mapping built so far (not modified).
        base_id: Id seed for new drafts.

    Returns:
        New mapping including the committed question.
    """
    if state.number is None or not (state.text or state.options):
        return questions

    draft = questions.get(state.number) or QuestionDraft(
        number=state.number,
        id=draft_id(base_id, state.number),
    )

    if state.is_hindi:
        draft = replace(
            draft,
            question_hi=draft.question_hi or state.text,
            options_hi=draft.options_hi or state.options,
        )
    else:
        draft = replace(
            draft,
            question_en=draft.question_en or state.text,
            options_en=draft.options_en or state.options,
        )

    return {**questions, state.number: draft}


def step(
    state: SegmenterState,
    line: str,
    questions: QuestionMap,
    base_id: str,
    policy: ContinuationPolicy = ContinuationPolicy.DROP,
) -> Tuple[SegmenterState, QuestionMap]:
    """
    Advance the segmenter by one line.

    Transitions:
        QuestionStart: finalize current question, start a new one
        OptionStart (inside a question): append option
        Continuation before options: extend question text
        Continuation after options: apply ``policy``
        Anything before the first question: ignored

    Args:
        state: Current state.
        line: Stripped, non-blank line.
        questions: Mapping built so far.
        base_id: Id seed for new drafts.
        policy: Handling of continuation lines after options.

    Returns:
        (new_state, new_mapping)
    """
    kind = classify_line(line)

    if isinstance(kind, QuestionStart):
        questions = finalize_question(state, questions, base_id)
        return SegmenterState(
            number=kind.number,
            text=kind.text,
            is_hindi=contains_devanagari(kind.text),
        ), questions

    if state.number is None:
        return state, questions

    if isinstance(kind, OptionStart):
        return replace(
            state,
            options=state.options + (kind.text,),
            is_hindi=state.is_hindi or (not state.text and contains_devanagari(kind.text)),
        ), questions

    if not state.options:
        text = f"{state.text} {kind.text}" if state.text else kind.text
        return replace(
            state,
            text=text,
            is_hindi=state.is_hindi or contains_devanagari(kind.text),
        ), questions

    if policy is ContinuationPolicy.APPEND_TO_LAST_OPTION:
        options = state.options[:-1] + (f"{state.options[-1]} {kind.text}".strip(),)
        return replace(state, options=options), questions

    logger.debug(f"Dropped line after options of question {state.number}: {line!r}")
    return state, questions


def split_lines(text: str) -> List[str]:
    """Split text into stripped, non-blank lines."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def segment_questions(
    text: str,
    base_id: str,
    policy: ContinuationPolicy = ContinuationPolicy.DROP,
) -> QuestionMap:
    """
    Segment normalized document text into question drafts.

    Args:
        text: Normalized text (see normalizer.join_pages).
        base_id: Id seed like "q_uppsc_2024_gs".
        policy: Handling of continuation lines after options.

    Returns:
        Mapping of question number -> QuestionDraft. Drafts are not
        placeholder-filled; that is the caller's job.

    Example:
        >>> drafts = segment_questions("1. What is X?\\n(a) A\\n(b) B", "q_t_2024")
        >>> drafts[1].id, drafts[1].options_en
        ('q_t_2024_001', ('A', 'B'))
    """
    state = SegmenterState()
    questions: QuestionMap = {}

    for line in split_lines(text):
        state, questions = step(state, line, questions, base_id, policy)

    questions = finalize_question(state, questions, base_id)
    logger.debug(f"Segmented {len(questions)} question numbers")
    return questions
