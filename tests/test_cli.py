"""
Tests for the quizbank command-line interface.
"""
import json
import logging

import pytest

from quizbank import __version__
from quizbank.cli import EXIT_EMPTY, EXIT_FAILURE, EXIT_OK, EXIT_PRECONDITION, main
from quizbank.core.models import Exam
from quizbank.store import JsonFileStore


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"store_path": str(tmp_path / "store.json")}), encoding="utf-8")
    return path


@pytest.fixture
def store(tmp_path):
    return JsonFileStore(tmp_path / "store.json")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "QUIZBANK_DATABASE_URL", "QUIZBANK_STORE_PATH"):
        monkeypatch.delenv(name, raising=False)
    yield
    logger = logging.getLogger("quizbank")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _run(settings_file, store, *argv):
    return main(["--settings", str(settings_file), *argv], store=store)


class TestExtract:
    """Tests for the extract command."""

    def test_extract_when_questions_found_then_review_file_written(
        self, sample_pdf, settings_file, store, tmp_path, capsys
    ):
        # Arrange
        output = tmp_path / "review.json"

        # Act
        code = _run(
            settings_file, store,
            "extract", str(sample_pdf), "--base-id", "q_test_2024_gs", "--output", str(output), "--quiet",
        )

        # Assert
        assert code == EXIT_OK
        data = json.loads(output.read_text(encoding="utf-8"))
        assert list(data) == ["q_test_2024_gs_001", "q_test_2024_gs_002", "q_test_2024_gs_003"]
        assert data["q_test_2024_gs_002"]["options_en"] == ["Ganga", "Yamuna"]
        assert "Extracted 3 questions" in capsys.readouterr().out
        assert store.list_questions() == []

    def test_extract_when_save_flag_then_questions_stored(
        self, sample_pdf, settings_file, store, tmp_path
    ):
        code = _run(
            settings_file, store,
            "extract", str(sample_pdf), "--base-id", "q_test_2024_gs",
            "--output", str(tmp_path / "review.json"), "--save", "--quiet",
        )

        assert code == EXIT_OK
        assert len(store.list_questions()) == 3

    def test_extract_when_no_questions_then_exit_empty(
        self, make_pdf, settings_file, store, tmp_path, capsys
    ):
        pdf = make_pdf([["Instructions to candidates"]])
        output = tmp_path / "review.json"

        code = _run(settings_file, store, "extract", str(pdf), "--base-id", "q_x_2024", "--output", str(output))

        assert code == EXIT_EMPTY
        assert not output.exists()
        assert "No questions extracted" in capsys.readouterr().err

    def test_extract_when_missing_pdf_then_exit_precondition(self, settings_file, store, tmp_path):
        code = _run(settings_file, store, "extract", str(tmp_path / "nope.pdf"), "--base-id", "q_x_2024")

        assert code == EXIT_PRECONDITION

    def test_extract_when_ai_without_key_then_exit_precondition(
        self, sample_pdf, settings_file, store, capsys
    ):
        code = _run(settings_file, store, "extract", str(sample_pdf), "--base-id", "q_x_2024", "--mode", "ai")

        assert code == EXIT_PRECONDITION
        assert "API key" in capsys.readouterr().err

    def test_extract_when_corrupt_pdf_then_exit_failure(self, settings_file, store, tmp_path):
        bad = tmp_path / "bad.pdf"
        bad.write_bytes(b"this is not a pdf at all")

        code = _run(settings_file, store, "extract", str(bad), "--base-id", "q_x_2024", "--quiet")

        assert code == EXIT_FAILURE


class TestStoreCommands:
    """Tests for save, questions and exams commands."""

    def test_save_when_review_file_then_questions_stored(
        self, sample_pdf, settings_file, store, tmp_path, capsys
    ):
        review = tmp_path / "review.json"
        _run(settings_file, store, "extract", str(sample_pdf), "--base-id", "q_t_2024", "--output", str(review), "--quiet")

        code = _run(settings_file, store, "save", str(review))

        assert code == EXIT_OK
        assert "Successfully saved 3 questions!" in capsys.readouterr().out

    def test_save_when_file_unreadable_then_exit_failure(self, settings_file, store, tmp_path):
        bad = tmp_path / "review.json"
        bad.write_text("not json", encoding="utf-8")

        assert _run(settings_file, store, "save", str(bad)) == EXIT_FAILURE

    @pytest.mark.parametrize("content", [
        '["oops"]',
        '{"q1": 42}',
        '[{"exam": "SSC"}]',
        '[{"id": "q1", "level": "legendary"}]',
        "17",
    ])
    def test_save_when_records_malformed_then_exit_failure(
        self, settings_file, store, tmp_path, capsys, content
    ):
        # Arrange
        review = tmp_path / "review.json"
        review.write_text(content, encoding="utf-8")

        # Act
        code = _run(settings_file, store, "save", str(review))

        # Assert
        assert code == EXIT_FAILURE
        assert "cannot read" in capsys.readouterr().err
        assert store.list_questions() == []

    def test_questions_list_when_stored_record_malformed_then_exit_failure(
        self, settings_file, store, capsys
    ):
        store.path.write_text(json.dumps({"questions": {"q1": {"exam": "SSC"}}, "Exams": {}}), encoding="utf-8")

        code = _run(settings_file, store, "questions", "list")

        assert code == EXIT_FAILURE
        assert "malformed" in capsys.readouterr().err

    def test_questions_list_when_exam_filter_then_only_matching(
        self, sample_pdf, settings_file, store, tmp_path, capsys
    ):
        _run(settings_file, store, "extract", str(sample_pdf), "--base-id", "q_ssc_2023",
             "--output", str(tmp_path / "r.json"), "--save", "--quiet")
        capsys.readouterr()

        code = _run(settings_file, store, "questions", "list", "--exam", "ssc")

        lines = capsys.readouterr().out.strip().splitlines()
        assert code == EXIT_OK
        assert len(lines) == 3
        assert lines[0].startswith("q_ssc_2023_001\tSSC\t2023")

    def test_questions_delete_when_present_then_removed(
        self, sample_pdf, settings_file, store, tmp_path
    ):
        _run(settings_file, store, "extract", str(sample_pdf), "--base-id", "q_ssc_2023",
             "--output", str(tmp_path / "r.json"), "--save", "--quiet")

        code = _run(settings_file, store, "questions", "delete", "q_ssc_2023_002")

        assert code == EXIT_OK
        assert store.get_question("q_ssc_2023_002") is None

    def test_exams_add_then_list(self, settings_file, store, capsys):
        code = _run(settings_file, store, "exams", "add", "uppsc", "UPPSC",
                    "--full-name", "UP Public Service Commission")
        capsys.readouterr()
        _run(settings_file, store, "exams", "list")

        assert code == EXIT_OK
        assert store.list_exams() == [
            Exam(id="uppsc", name="UPPSC", full_name="UP Public Service Commission"),
        ]
        assert "uppsc\tUPPSC\tUP Public Service Commission" in capsys.readouterr().out

    def test_exams_delete_when_present_then_removed(self, settings_file, store):
        store.save_exam(Exam(id="ssc", name="SSC"))

        assert _run(settings_file, store, "exams", "delete", "ssc") == EXIT_OK
        assert store.list_exams() == []


def test_main_when_version_then_prints_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out
