"""
Command-line interface for the question bank.

Usage:
    quizbank extract paper.pdf --base-id q_uppsc_2024_gs --output review.json
    quizbank extract paper.pdf --base-id q_uppsc_2024_gs --mode ai --model gemini-2.0-flash
    quizbank save review.json
    quizbank questions list --exam UPPSC
    quizbank questions delete q_uppsc_2024_gs_001
    quizbank exams add uppsc UPPSC --full-name "Uttar Pradesh Public Service Commission"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from quizbank import __version__
from quizbank.config import AppSettings, load_settings
from quizbank.core.models import Exam, Question
from quizbank.extractor import (
    AVAILABLE_MODELS,
    CollisionPolicy,
    ContinuationPolicy,
    ExtractionConfig,
    ExtractionError,
    ExtractionMode,
    PreconditionError,
    ProgressEvent,
    extract_questions,
)
from quizbank.logging_utils import configure_logging
from quizbank.store import QuestionStore, StoreError, save_questions

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_PRECONDITION = 2
EXIT_EMPTY = 3


def _print_progress(event: ProgressEvent) -> None:
    if event.message:
        print(event.message, file=sys.stderr)


def _write_questions(path: Path, questions: Dict[str, Question]) -> None:
    data = {qid: q.to_dict() for qid, q in questions.items()}
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def _read_questions(path: Path) -> List[Question]:
    """Read a review file: an id-keyed mapping or a list of records."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        records = list(data.values())
    elif isinstance(data, list):
        records = data
    else:
        raise ValueError(f"expected a mapping or list of records, got {type(data).__name__}")

    questions = []
    for index, record in enumerate(records, start=1):
        if not isinstance(record, dict):
            raise ValueError(f"record {index} is not an object")
        try:
            questions.append(Question.from_dict(record))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"record {index} is malformed: {e!r}") from e
    return questions


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────

def cmd_extract(args: argparse.Namespace, settings: AppSettings, store_factory) -> int:
    config = ExtractionConfig(
        continuation_policy=ContinuationPolicy(args.continuation),
        collision_policy=CollisionPolicy(args.collisions),
        request_timeout=args.timeout,
    )
    try:
        result = extract_questions(
            args.pdf,
            args.base_id,
            mode=args.mode,
            model_id=args.model or settings.model_id,
            api_key=args.api_key or settings.api_key,
            config=config,
            progress=None if args.quiet else _print_progress,
        )
    except PreconditionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_PRECONDITION
    except ExtractionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if args.show_text and result.raw_text:
        print(result.raw_text)
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    if result.is_empty:
        print("No questions extracted. Please check the PDF format.", file=sys.stderr)
        return EXIT_EMPTY

    output = args.output or Path(f"{args.base_id}.json")
    _write_questions(output, result.questions)
    print(f"Extracted {result.question_count} questions -> {output}")

    if args.save:
        return _save(store_factory(), list(result.questions.values()))
    return EXIT_OK


def _save(store: QuestionStore, questions: List[Question]) -> int:
    try:
        saved = save_questions(store, questions)
    except StoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    print(f"Successfully saved {saved} questions!")
    return EXIT_OK


def cmd_save(args: argparse.Namespace, settings: AppSettings, store_factory) -> int:
    try:
        questions = _read_questions(args.file)
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
        return EXIT_FAILURE
    return _save(store_factory(), questions)


def cmd_questions(args: argparse.Namespace, settings: AppSettings, store_factory) -> int:
    store = store_factory()
    try:
        if args.action == "delete":
            store.delete_question(args.id)
            print(f"Deleted {args.id}")
            return EXIT_OK

        questions = store.list_questions()
        if args.exam:
            questions = [q for q in questions if q.exam.upper() == args.exam.upper()]
        for q in sorted(questions, key=lambda q: q.id):
            print(f"{q.id}\t{q.exam}\t{q.year}\t{q.level.value}\t{q.question_en[:60]}")
        print(f"{len(questions)} questions", file=sys.stderr)
    except StoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


def cmd_exams(args: argparse.Namespace, settings: AppSettings, store_factory) -> int:
    store = store_factory()
    try:
        if args.action == "add":
            store.save_exam(Exam(
                id=args.id,
                name=args.name,
                full_name=args.full_name,
                description=args.description,
            ))
            print(f"Saved exam {args.id}")
        elif args.action == "delete":
            store.delete_exam(args.id)
            print(f"Deleted exam {args.id}")
        else:
            for exam in sorted(store.list_exams(), key=lambda e: e.id):
                print(f"{exam.id}\t{exam.name}\t{exam.full_name}")
    except StoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


# ─────────────────────────────────────────────────────────────────────────────
# Parser
# ─────────────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quizbank",
        description="Extract, review and store bilingual exam questions",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--settings", type=Path, help="Settings JSON file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("extract", help="Extract questions from a PDF")
    p.add_argument("pdf", type=Path)
    p.add_argument("--base-id", required=True, help="Id seed, e.g. q_uppsc_2024_gs")
    p.add_argument("--mode", choices=[m.value for m in ExtractionMode], default=ExtractionMode.HEURISTIC.value)
    p.add_argument("--model", choices=AVAILABLE_MODELS, help="Model for --mode ai")
    p.add_argument("--api-key", help="Model credential (default: GEMINI_API_KEY)")
    p.add_argument("--timeout", type=float, default=None, help="Model request timeout in seconds")
    p.add_argument("--output", type=Path, help="Review file (default: <base-id>.json)")
    p.add_argument("--save", action="store_true", help="Save to the store after extraction")
    p.add_argument("--show-text", action="store_true", help="Print the extracted raw text")
    p.add_argument("--quiet", action="store_true", help="No progress output")
    p.add_argument(
        "--continuation",
        choices=[c.value for c in ContinuationPolicy],
        default=ContinuationPolicy.DROP.value,
        help="Lines after options: drop them or append to the last option",
    )
    p.add_argument(
        "--collisions",
        choices=[c.value for c in CollisionPolicy],
        default=CollisionPolicy.OVERWRITE.value,
        help="Duplicate ids in AI mode",
    )
    p.set_defaults(func=cmd_extract)

    p = sub.add_parser("save", help="Save a reviewed question file to the store")
    p.add_argument("file", type=Path)
    p.set_defaults(func=cmd_save)

    p = sub.add_parser("questions", help="List or delete stored questions")
    qsub = p.add_subparsers(dest="action", required=True)
    q = qsub.add_parser("list")
    q.add_argument("--exam", help="Filter by exam token")
    q = qsub.add_parser("delete")
    q.add_argument("id")
    p.set_defaults(func=cmd_questions)

    p = sub.add_parser("exams", help="List, add or delete exams")
    esub = p.add_subparsers(dest="action", required=True)
    esub.add_parser("list")
    e = esub.add_parser("add")
    e.add_argument("id")
    e.add_argument("name")
    e.add_argument("--full-name", default="")
    e.add_argument("--description", default="")
    e = esub.add_parser("delete")
    e.add_argument("id")
    p.set_defaults(func=cmd_exams)

    return parser


def main(argv: Optional[Sequence[str]] = None, store: Optional[QuestionStore] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.settings)
    configure_logging("DEBUG" if args.verbose else settings.log_level, settings.log_file)

    def store_factory() -> QuestionStore:
        return store if store is not None else settings.create_store()

    return args.func(args, settings, store_factory)


if __name__ == "__main__":
    sys.exit(main())
