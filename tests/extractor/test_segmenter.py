"""
Tests for extractor.segmenter.

Test Coverage:
- classify_line(): pattern priority and marker removal
- contains_devanagari(): any-codepoint rule
- step() / finalize_question(): state transitions
- segment_questions(): end-to-end segmentation, bilingual merge, fill-once
"""
import pytest

from quizbank.extractor.config import ContinuationPolicy
from quizbank.extractor.segmenter import (
    Continuation,
    OptionStart,
    QuestionDraft,
    QuestionStart,
    SegmenterState,
    classify_line,
    contains_devanagari,
    finalize_question,
    segment_questions,
    step,
)


class TestClassifyLine:
    """Tests for classify_line()."""

    @pytest.mark.parametrize("line,number,text", [
        ("1. What is X?", 1, "What is X?"),
        ("12.Which one", 12, "Which one"),
        ("Q.3 Text", 3, "Text"),
        ("Q 4. Text", 4, "Text"),
        ("Q5) Text", 5, "Text"),
        ("[6] Text", 6, "Text"),
        ("Question 7: Text", 7, "Text"),
        ("QUESTION 8. Text", 8, "Text"),
        ("9.", 9, ""),
    ])
    def test_classify_line_when_question_marker_then_question_start(self, line, number, text):
        assert classify_line(line) == QuestionStart(number=number, text=text)

    @pytest.mark.parametrize("line,letter,text", [
        ("(a) Mumbai", "a", "Mumbai"),
        ("(C) Kolkata", "c", "Kolkata"),
        ("b) Delhi", "b", "Delhi"),
        ("d. Chennai", "d", "Chennai"),
        ("[A] Agra", "a", "Agra"),
    ])
    def test_classify_line_when_option_marker_then_option_start(self, line, letter, text):
        assert classify_line(line) == OptionStart(letter=letter, text=text)

    @pytest.mark.parametrize("line", [
        "of the following?",
        "(e) not an option letter",
        "Quick question",
        "1 without dot",
    ])
    def test_classify_line_when_no_marker_then_continuation(self, line):
        assert classify_line(line) == Continuation(text=line)

    def test_classify_line_when_question_form_lowercase_q_then_continuation(self):
        """The short "Q" form is case-sensitive; "Question" is not."""
        assert isinstance(classify_line("q1 text"), Continuation)
        assert isinstance(classify_line("question 1 text"), QuestionStart)


class TestContainsDevanagari:
    """Tests for contains_devanagari()."""

    def test_contains_devanagari_when_hindi_then_true(self):
        assert contains_devanagari("भारत की राजधानी क्या है?")

    def test_contains_devanagari_when_ascii_then_false(self):
        assert not contains_devanagari("What is the capital of India?")

    def test_contains_devanagari_when_single_char_in_ascii_then_true(self):
        """Any codepoint in the block counts, not the majority."""
        assert contains_devanagari("Mostly English text with one क")

    def test_contains_devanagari_block_edges(self):
        assert contains_devanagari("\u0900")
        assert contains_devanagari("\u097f")
        assert not contains_devanagari("\u0980")


class TestStep:
    """Tests for step() and finalize_question()."""

    def test_step_when_before_first_question_then_ignored(self):
        state, questions = step(SegmenterState(), "General Studies Paper I", {}, "q_t_2024")

        assert state == SegmenterState()
        assert questions == {}

    def test_step_when_option_outside_question_then_ignored(self):
        state, _ = step(SegmenterState(), "(a) stray", {}, "q_t_2024")
        assert state.options == ()

    def test_step_when_continuation_before_options_then_text_extended(self):
        state = SegmenterState(number=1, text="Which of the")

        state, _ = step(state, "following is true?", {}, "q_t_2024")

        assert state.text == "Which of the following is true?"

    def test_step_when_hindi_continuation_then_marked_hindi(self):
        state = SegmenterState(number=1, text="1")

        state, _ = step(state, "निम्नलिखित में से", {}, "q_t_2024")

        assert state.is_hindi

    def test_step_when_continuation_after_options_and_drop_then_unchanged(self):
        state = SegmenterState(number=1, text="Q?", options=("A",))

        new_state, _ = step(state, "wrapped text", {}, "q_t_2024", ContinuationPolicy.DROP)

        assert new_state == state

    def test_step_when_continuation_after_options_and_append_then_joined(self):
        state = SegmenterState(number=1, text="Q?", options=("A", "first half"))

        new_state, _ = step(
            state, "second half", {}, "q_t_2024", ContinuationPolicy.APPEND_TO_LAST_OPTION
        )

        assert new_state.options == ("A", "first half second half")
        assert new_state.text == "Q?"

    def test_step_when_new_question_then_previous_finalized(self):
        state = SegmenterState(number=1, text="What is X?", options=("A", "B"))

        state, questions = step(state, "2. What is Y?", {}, "q_t_2024")

        assert state.number == 2
        assert state.options == ()
        assert questions[1].options_en == ("A", "B")

    def test_finalize_question_when_no_text_or_options_then_skipped(self):
        assert finalize_question(SegmenterState(number=3), {}, "q_t_2024") == {}

    def test_finalize_question_does_not_mutate_input(self):
        existing = {}
        finalize_question(SegmenterState(number=1, text="Q?"), existing, "q_t_2024")
        assert existing == {}

    def test_finalize_question_when_language_already_filled_then_kept(self):
        questions = {1: QuestionDraft(number=1, id="q_t_2024_001", question_en="First")}

        result = finalize_question(SegmenterState(number=1, text="Second"), questions, "q_t_2024")

        assert result[1].question_en == "First"


class TestSegmentQuestions:
    """Tests for segment_questions()."""

    def test_segment_questions_when_two_questions_then_ids_and_options(self):
        text = "1. What is X?\n(a) A\n(b) B\n(c) C\n(d) D\n2. What is Y?\n(a) P"

        result = segment_questions(text, "q_test_2024")

        assert set(result) == {1, 2}
        assert result[1].id == "q_test_2024_001"
        assert result[2].id == "q_test_2024_002"
        assert result[1].question_en == "What is X?"
        assert result[1].options_en == ("A", "B", "C", "D")
        assert result[2].question_en == "What is Y?"
        assert result[2].options_en == ("P",)

    def test_segment_questions_when_bilingual_then_merged_by_number(self):
        text = "\n".join([
            "1. What is the capital of India?",
            "(a) Mumbai",
            "(b) New Delhi",
            "2. Which river is the longest?",
            "(a) Ganga",
            "1. भारत की राजधानी क्या है?",
            "(a) मुंबई",
            "(b) नई दिल्ली",
        ])

        result = segment_questions(text, "q_test_2024")

        assert result[1].question_en == "What is the capital of India?"
        assert result[1].question_hi == "भारत की राजधानी क्या है?"
        assert result[1].options_en == ("Mumbai", "New Delhi")
        assert result[1].options_hi == ("मुंबई", "नई दिल्ली")
        assert result[2].question_hi == ""

    def test_segment_questions_when_number_repeats_in_same_language_then_first_wins(self):
        """Fill-once: a second English block for question 1 does not overwrite."""
        text = "1. What is X?\n(a) A\n1. What is X again?\n(a) Z"

        result = segment_questions(text, "q_test_2024")

        assert result[1].question_en == "What is X?"
        assert result[1].options_en == ("A",)

    def test_segment_questions_when_multiline_question_then_joined(self):
        text = "Q.1 Which of the\nfollowing is correct?\n(a) One\n(b) Two"

        result = segment_questions(text, "q_test_2024")

        assert result[1].question_en == "Which of the following is correct?"

    def test_segment_questions_when_lines_after_options_then_dropped_by_default(self):
        text = "1. What is X?\n(a) A\nstray footer text\n(b) B"

        result = segment_questions(text, "q_test_2024")

        assert result[1].question_en == "What is X?"
        assert result[1].options_en == ("A", "B")

    def test_segment_questions_when_blank_lines_and_padding_then_ignored(self):
        text = "\n\n   1.   What is X?   \n\n  (a) A  \n\n"

        result = segment_questions(text, "q_test_2024")

        assert result[1].question_en == "What is X?"
        assert result[1].options_en == ("A",)

    def test_segment_questions_when_no_markers_then_empty(self):
        assert segment_questions("Just a cover page\nwith instructions", "q_test_2024") == {}

    def test_segment_questions_when_hindi_options_only_then_hindi(self):
        text = "5.\n(a) मुंबई\n(b) दिल्ली"

        result = segment_questions(text, "q_test_2024")

        assert result[5].options_hi == ("मुंबई", "दिल्ली")
        assert result[5].options_en == ()

    def test_segment_questions_when_question_line_repeated_before_options_then_text_unchanged(self):
        text = "1. What is X?\n1. What is X, restated?\n(a) A\n(b) B"

        result = segment_questions(text, "q_test_2024")

        assert result[1].question_en == "What is X?"
        assert result[1].options_en == ("A", "B")

    def test_segment_questions_when_options_without_question_text_then_committed(self):
        """A bare number followed by options still yields a draft; the text is filled later."""
        text = "7.\n(a) Mercury\n(b) Venus\n8. Which planet is largest?\n(a) Jupiter"

        result = segment_questions(text, "q_test_2024")

        assert set(result) == {7, 8}
        assert result[7].question_en == ""
        assert result[7].options_en == ("Mercury", "Venus")
