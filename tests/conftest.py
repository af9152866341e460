import pytest
import sys
from pathlib import Path

import fitz

# Add src to sys.path so we can import quizbank
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())


# Common test fixtures
@pytest.fixture
def base_id():
    """Return a test base id."""
    return "q_test_2024_gs"


@pytest.fixture
def make_pdf(tmp_path: Path):
    """
    Build a PDF whose pages contain the given lines.

    Each page is a list of strings written top to bottom, 20pt apart,
    starting at the left margin.
    """
    def _make(pages, name: str = "paper.pdf") -> Path:
        doc = fitz.open()
        for lines in pages:
            page = doc.new_page(width=595, height=842)
            y = 72
            for line in lines:
                page.insert_text((72, y), line, fontsize=11)
                y += 20
        path = tmp_path / name
        doc.save(path)
        doc.close()
        return path

    return _make


@pytest.fixture
def sample_pdf(make_pdf):
    """Two-page English paper with three questions."""
    return make_pdf([
        [
            "1. What is the capital of India?",
            "(a) Mumbai",
            "(b) New Delhi",
            "(c) Kolkata",
            "(d) Chennai",
            "2. Which river is the longest?",
            "(a) Ganga",
            "(b) Yamuna",
        ],
        [
            "Q3. Who wrote the national anthem?",
            "a) Tagore",
            "b) Bankim",
        ],
    ])
