import pytest

from vidpod.core.exceptions import InvalidQuestionConfig, InvalidQuestionType
from vidpod.services.question_grader import grade

from tests.conftest import question


class TestMultipleChoice:
    def test_correct_option(self):
        result = grade(question(1, "multiple_choice", "B", points=2), "B")
        assert result.is_correct is True
        assert result.earned_points == 2

    def test_wrong_option(self):
        result = grade(question(1, "multiple_choice", "B", points=2), "C")
        assert result.is_correct is False
        assert result.earned_points == 0

    def test_numeric_and_string_ids_match(self):
        assert grade(question(1, "multiple_choice", 3), "3").is_correct is True
        assert grade(question(1, "multiple_choice", "3"), 3).is_correct is True

    def test_list_answer_is_wrong(self):
        assert grade(question(1, "multiple_choice", "A"), ["A"]).is_correct is False


class TestMultipleSelect:
    def test_exact_set_earns_full_points(self):
        result = grade(question(1, "multiple_select", ["A", "C"], points=4), ["C", "A"])
        assert result.is_correct is True
        assert result.earned_points == 4

    def test_subset_earns_nothing(self):
        result = grade(question(1, "multiple_select", ["A", "C"], points=4), ["A"])
        assert result.is_correct is False
        assert result.earned_points == 0

    def test_superset_earns_nothing(self):
        result = grade(question(1, "multiple_select", ["A", "C"]), ["A", "B", "C"])
        assert result.is_correct is False


class TestTrueFalse:
    @pytest.mark.parametrize("answer", [True, "true", "True", "yes"])
    def test_true_answers(self, answer):
        assert grade(question(1, "true_false", True), answer).is_correct is True

    @pytest.mark.parametrize("answer", [False, "false", "no"])
    def test_false_answers_against_true_key(self, answer):
        assert grade(question(1, "true_false", True), answer).is_correct is False

    def test_unrecognised_string_is_wrong(self):
        assert grade(question(1, "true_false", False), "maybe").is_correct is False


class TestShortAnswer:
    def test_case_and_whitespace_ignored(self):
        result = grade(question(1, "short_answer", ["Paris"]), "  paris ")
        assert result.is_correct is True

    def test_case_sensitive(self):
        q = question(1, "short_answer", ["Paris"], case_sensitive=True)
        assert grade(q, "paris").is_correct is False
        assert grade(q, "Paris").is_correct is True

    def test_any_accepted_answer(self):
        q = question(1, "short_answer", ["colour", "color"])
        assert grade(q, "Color").is_correct is True

    def test_partial_credit_by_keywords(self):
        q = question(1, "short_answer", ["water cycle"], points=4, partial_credit=True)
        result = grade(q, "the cycle of rain")
        assert result.is_correct is False
        assert result.earned_points == 2

    def test_no_partial_credit_by_default(self):
        q = question(1, "short_answer", ["water cycle"], points=4)
        assert grade(q, "the cycle of rain").earned_points == 0


class TestFillBlank:
    def test_points_split_across_blanks(self):
        q = question(1, "fill_blank", ["red", ["blue", "navy"]], points=4)
        result = grade(q, ["Red", "green"])
        assert result.is_correct is False
        assert result.earned_points == 2

    def test_all_blanks_with_alternatives(self):
        q = question(1, "fill_blank", ["red", ["blue", "navy"]], points=4)
        result = grade(q, {"0": "red", "1": "Navy"})
        assert result.is_correct is True
        assert result.earned_points == 4


class TestMatching:
    def test_pairs_scored_independently(self):
        q = question(1, "matching", {"a": "1", "b": "2", "c": "3", "d": "4"}, points=4)
        result = grade(q, {"a": "1", "b": "2", "c": "4", "d": "3"})
        assert result.is_correct is False
        assert result.earned_points == 2

    def test_non_mapping_answer_earns_nothing(self):
        q = question(1, "matching", {"a": "1"}, points=2)
        assert grade(q, "a-1").earned_points == 0


class TestOrdering:
    def test_exact_sequence(self):
        q = question(1, "ordering", ["x", "y", "z"], points=3)
        assert grade(q, ["x", "y", "z"]).earned_points == 3
        assert grade(q, ["x", "z", "y"]).earned_points == 0


class TestEssay:
    def test_ungraded_essay_needs_review(self):
        result = grade(question(1, "essay", points=10), "My essay")
        assert result.needs_manual_review is True
        assert result.is_correct is None
        assert result.earned_points == 0

    def test_manual_score_is_used(self):
        result = grade(question(1, "essay", points=10), "My essay", manual_score=7)
        assert result.needs_manual_review is False
        assert result.earned_points == 7
        assert result.is_correct is False

    def test_manual_score_is_clamped(self):
        result = grade(question(1, "essay", points=10), "My essay", manual_score=15)
        assert result.earned_points == 10
        assert result.is_correct is True

    @pytest.mark.parametrize("answer", ["   ", "", None])
    def test_blank_essay_still_needs_review(self, answer):
        result = grade(question(1, "essay", points=10), answer)
        assert result.needs_manual_review is True
        assert result.is_correct is None
        assert result.earned_points == 0


class TestMissingAndInvalid:
    @pytest.mark.parametrize(
        "question_type,answer_key",
        [
            ("multiple_choice", "A"),
            ("multiple_select", ["A"]),
            ("true_false", True),
            ("short_answer", ["x"]),
            ("fill_blank", ["x"]),
            ("matching", {"a": "b"}),
            ("ordering", ["a", "b"]),
        ],
    )
    def test_unanswered_is_wrong(self, question_type, answer_key):
        result = grade(question(1, question_type, answer_key, points=3), None)
        assert result.is_correct is False
        assert result.earned_points == 0

    def test_unknown_type(self):
        with pytest.raises(InvalidQuestionType) as exc:
            grade(question(7, "hotspot", "A"), "A")
        assert exc.value.question_id == 7

    def test_missing_answer_key(self):
        with pytest.raises(InvalidQuestionConfig):
            grade(question(1, "multiple_choice", None), "A")

    def test_grading_is_deterministic(self):
        q = question(1, "matching", {"a": "1", "b": "2"}, points=5)
        answer = {"a": "1", "b": "3"}
        assert grade(q, answer) == grade(q, answer)


@pytest.mark.parametrize(
    "answer,expected",
    [(["A", "B"], False), (["A", "B", "C"], True), (["A", "B", "C", "D"], False)],
)
def test_multiple_select_exact_match(answer, expected):
    result = grade(question(1, "multiple_select", ["A", "B", "C"], points=3), answer)
    assert result.is_correct is expected
    assert result.earned_points == (3 if expected else 0)


@pytest.mark.parametrize("answer", ["paris", "PARIS", " Paris "])
def test_short_answer_ignores_case(answer):
    assert grade(question(1, "short_answer", ["Paris"]), answer).is_correct is True
    assert grade(question(1, "short_answer", ["Paris"], case_sensitive=True), answer).is_correct is (
        answer.strip() == "Paris"
    )
