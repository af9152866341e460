"""Top-level package for quizbank.

Provides subpackages:
- quizbank.core – Question/Exam models and record schemas
- quizbank.extractor – PDF question extraction (heuristic and AI-assisted)
- quizbank.store – record stores and batch save
- quizbank.cli – command-line interface
"""

def _get_version() -> str:
    """Get version from importlib.metadata (installed) or pyproject.toml (dev)."""
    try:
        from importlib.metadata import version as pkg_version
        return pkg_version("quizbank")
    except Exception:
        pass

    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        for line in pyproject.read_text().splitlines():
            if line.strip().startswith("version"):
                # Parse: version = "0.1.0"
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
