"""
Tests for store.json_store and the QuestionStore record layer.
"""
import json

import pytest

from quizbank.core.models import Exam, Question
from quizbank.store import JsonFileStore, StoreError


@pytest.fixture
def store(tmp_path):
    return JsonFileStore(tmp_path / "db" / "questions.json")


def _question(qid="q_ssc_2023_001", **kwargs):
    return Question(id=qid, exam="SSC", year="2023", **kwargs).with_placeholders()


class TestQuestions:
    """Question records."""

    def test_list_questions_when_file_missing_then_empty(self, store):
        assert store.list_questions() == []

    def test_save_question_when_valid_then_readable(self, store):
        # Arrange
        question = _question(question_en="Who wrote Godan?", options_en=("Premchand", "Tagore"))

        # Act
        store.save_question(question)

        # Assert
        assert store.get_question(question.id) == question
        assert store.list_questions() == [question]

    def test_save_question_when_saved_then_tree_layout_on_disk(self, store):
        store.save_question(_question())

        data = json.loads(store.path.read_text(encoding="utf-8"))

        assert set(data) == {"questions", "Exams"}
        assert data["questions"]["q_ssc_2023_001"]["exam"] == "SSC"

    def test_save_question_when_same_id_then_replaced(self, store):
        store.save_question(_question(question_en="old"))
        store.save_question(_question(question_en="new"))

        questions = store.list_questions()

        assert len(questions) == 1
        assert questions[0].question_en == "new"

    def test_save_question_when_hindi_text_then_stored_unescaped(self, store):
        store.save_question(_question(question_hi="भारत की राजधानी"))

        assert "भारत की राजधानी" in store.path.read_text(encoding="utf-8")

    def test_save_question_when_invalid_record_then_store_error(self, store):
        bad = Question(id="q_ssc_2023_001", exam="SSC", year=2023)

        with pytest.raises(StoreError, match="rejected"):
            store.save_question(bad)

        assert not store.path.exists()

    def test_delete_question_when_present_then_removed(self, store):
        store.save_question(_question("a"))
        store.save_question(_question("b"))

        store.delete_question("a")

        assert [q.id for q in store.list_questions()] == ["b"]

    def test_delete_question_when_absent_then_no_error(self, store):
        store.delete_question("missing")

    def test_get_question_when_absent_then_none(self, store):
        assert store.get_question("missing") is None


class TestExams:
    """Exam records."""

    def test_save_exam_when_valid_then_listed(self, store):
        exam = Exam(id="uppsc", name="UPPSC", full_name="UP Public Service Commission")

        store.save_exam(exam)

        assert store.list_exams() == [exam]

    def test_delete_exam_when_present_then_removed(self, store):
        store.save_exam(Exam(id="ssc", name="SSC"))

        store.delete_exam("ssc")

        assert store.list_exams() == []


def test_store_when_file_corrupted_then_store_error(tmp_path):
    path = tmp_path / "questions.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StoreError, match="Failed to read"):
        JsonFileStore(path).list_questions()


class TestMalformedRecords:
    """Stored records that cannot be turned into models."""

    @pytest.fixture
    def write_tree(self, store):
        def _write(tree):
            store.path.parent.mkdir(parents=True, exist_ok=True)
            store.path.write_text(json.dumps(tree), encoding="utf-8")
        return _write

    def test_list_questions_when_record_missing_id_then_store_error(self, store, write_tree):
        write_tree({"questions": {"q1": {"exam": "SSC"}}, "Exams": {}})

        with pytest.raises(StoreError, match="questions/q1"):
            store.list_questions()

    def test_list_questions_when_bad_level_then_store_error(self, store, write_tree):
        record = _question("q1").to_dict()
        record["level"] = "legendary"
        write_tree({"questions": {"q1": record}, "Exams": {}})

        with pytest.raises(StoreError, match="malformed"):
            store.list_questions()

    def test_get_question_when_record_not_object_then_store_error(self, store, write_tree):
        write_tree({"questions": {"q1": "oops"}, "Exams": {}})

        with pytest.raises(StoreError, match="not an object"):
            store.get_question("q1")

    def test_list_exams_when_record_missing_id_then_store_error(self, store, write_tree):
        write_tree({"questions": {}, "Exams": {"ssc": {"name": "SSC"}}})

        with pytest.raises(StoreError, match="Exams/ssc"):
            store.list_exams()
