"""
Module: extractor.normalizer

Purpose:
    Converts a page's positioned text fragments into one reading-order
    text block, and joins page blocks into the document text that the
    segmenter scans line by line.

Key Functions:
    - sort_fragments(): Reading-order sort (top to bottom, left to right)
    - normalize_page(): Fragments -> text block with line breaks
    - join_pages(): Page blocks -> document text

Key Classes:
    - TextFragment: Immutable positioned run of text

Dependencies:
    - functools (std): cmp_to_key for the same-line comparator

Used By:
    - extractor.pdf: Produces TextFragment lists from PDF pages
    - extractor.pipeline: Heuristic extraction path
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, List, Sequence

DEFAULT_LINE_THRESHOLD = 5.0


@dataclass(frozen=True)
class TextFragment:
    """
    A run of text at a known position on a page.

    Coordinates are in PDF page space, which is bottom-up: a larger y
    is higher on the page and so earlier in reading order.

    Attributes:
        text: Fragment text as supplied by the document.
        x: Horizontal start of the fragment.
        y: Baseline y of the fragment (bottom-up).

    Example:
        >>> TextFragment("1. What is X?", x=56.0, y=770.0)
        TextFragment(text='1. What is X?', x=56.0, y=770.0)
    """
    text: str
    x: float
    y: float


def sort_fragments(
    fragments: Iterable[TextFragment],
    threshold: float = DEFAULT_LINE_THRESHOLD,
) -> List[TextFragment]:
    """
    Sort fragments into reading order.

    Two fragments whose baselines differ by less than ``threshold`` are
    on the same line and ordered by ascending x; otherwise the higher
    fragment (larger y) comes first.

    Args:
        fragments: Fragments in any order.
        threshold: Same-line tolerance in PDF points. Defaults to 5.0.

    Returns:
        New list in reading order.
    """
    def _compare(a: TextFragment, b: TextFragment) -> float:
        if abs(a.y - b.y) < threshold:
            return a.x - b.x
        return b.y - a.y

    return sorted(fragments, key=cmp_to_key(_compare))


def normalize_page(
    fragments: Sequence[TextFragment],
    threshold: float = DEFAULT_LINE_THRESHOLD,
) -> str:
    """
    Reflow a page's fragments into a single text block.

    Fragments are sorted with sort_fragments(). Walking them in order,
    a line break is inserted whenever the baseline moves by at least
    ``threshold`` from the previous fragment; fragments on the same line
    are joined with a single space.

    Args:
        fragments: Fragments of one page.
        threshold: Same-line tolerance in PDF points. Defaults to 5.0.

    Returns:
        Page text, lines separated by "\\n".

    Example:
        >>> normalize_page([
        ...     TextFragment("B", x=100, y=700),
        ...     TextFragment("A", x=10, y=702),
        ...     TextFragment("next", x=10, y=680),
        ... ])
        'A B\\nnext'
    """
    page_text = ""
    last_y = None

    for fragment in sort_fragments(fragments, threshold):
        if last_y is not None and abs(fragment.y - last_y) >= threshold:
            page_text += "\n"
        elif page_text and not page_text.endswith(" "):
            page_text += " "

        page_text += fragment.text
        last_y = fragment.y

    return page_text


def join_pages(page_texts: Iterable[str]) -> str:
    """Concatenate page blocks, each followed by a blank line."""
    return "".join(f"{text}\n\n" for text in page_texts)
