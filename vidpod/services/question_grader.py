# vidpod/services/question_grader.py
"""Per-question auto-grading.

``grade`` scores one submitted answer against one question's answer key.
Every function here is pure; the same inputs always give the same result.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Callable, Dict, Optional

from vidpod.core.exceptions import InvalidQuestionType
from vidpod.schemas.grading import (
    EssayQuestion,
    FillBlankQuestion,
    GradeResult,
    MatchingQuestion,
    MultipleChoiceQuestion,
    MultipleSelectQuestion,
    OrderingQuestion,
    Question,
    QuestionRecord,
    ShortAnswerQuestion,
    TrueFalseQuestion,
)

_TRUE_STRINGS = {"true", "t", "yes"}
_FALSE_STRINGS = {"false", "f", "no"}


def _option(value: Any) -> str:
    # 1 and "1" name the same option
    return str(value).strip()


def _text(value: Any, case_sensitive: bool) -> str:
    text = str(value).strip()
    return text if case_sensitive else text.lower()


def _as_collection(value: Any) -> list:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return [value]
    return list(value)


def _all_or_nothing(question, is_correct: bool) -> GradeResult:
    return GradeResult(
        is_correct=is_correct,
        earned_points=float(question.points) if is_correct else 0.0,
    )


def _proportional(question, correct: int, total: int) -> GradeResult:
    return GradeResult(
        is_correct=correct == total,
        earned_points=question.points * correct / total,
    )


def _is_absent(answer: Any) -> bool:
    return answer is None


def grade_multiple_choice(question: MultipleChoiceQuestion, answer: Any) -> GradeResult:
    if isinstance(answer, (list, tuple, set, dict)):
        return _all_or_nothing(question, False)
    return _all_or_nothing(question, _option(answer) == _option(question.answer_key))


def grade_multiple_select(question: MultipleSelectQuestion, answer: Any) -> GradeResult:
    """Exact set match; a subset or superset of the key earns nothing."""
    submitted = {_option(a) for a in _as_collection(answer)}
    expected = {_option(a) for a in question.answer_key}
    return _all_or_nothing(question, submitted == expected)


def grade_true_false(question: TrueFalseQuestion, answer: Any) -> GradeResult:
    if isinstance(answer, str):
        lowered = answer.strip().lower()
        if lowered in _TRUE_STRINGS:
            answer = True
        elif lowered in _FALSE_STRINGS:
            answer = False
    if not isinstance(answer, bool):
        return _all_or_nothing(question, False)
    return _all_or_nothing(question, answer == question.answer_key)


def grade_short_answer(question: ShortAnswerQuestion, answer: Any) -> GradeResult:
    """Trimmed comparison against every accepted answer.

    Comparison ignores case unless the question is case sensitive. With
    ``partial_credit`` a wrong answer still earns the share of keywords of
    the first accepted answer that it contains.
    """
    if not isinstance(answer, str):
        return _all_or_nothing(question, False)

    submitted = _text(answer, question.case_sensitive)
    for accepted in question.answer_key:
        if submitted == _text(accepted, question.case_sensitive):
            return _all_or_nothing(question, True)

    if question.partial_credit and submitted:
        keywords = _text(question.answer_key[0], question.case_sensitive).split()
        matched = [k for k in keywords if k in submitted]
        if keywords and matched:
            return GradeResult(
                is_correct=False,
                earned_points=question.points * len(matched) / len(keywords),
            )

    return _all_or_nothing(question, False)


def grade_fill_blank(question: FillBlankQuestion, answer: Any) -> GradeResult:
    """Each blank scored like a short answer; points are split evenly across blanks."""
    if isinstance(answer, Mapping):
        submitted = [answer.get(str(i), answer.get(i)) for i in range(len(question.answer_key))]
    else:
        submitted = _as_collection(answer)

    correct = 0
    for index, accepted in enumerate(question.answer_key):
        given = submitted[index] if index < len(submitted) else None
        if given is None:
            continue
        given = _text(given, question.case_sensitive)
        options = accepted if isinstance(accepted, list) else [accepted]
        if any(given == _text(option, question.case_sensitive) for option in options):
            correct += 1

    return _proportional(question, correct, len(question.answer_key))


def grade_matching(question: MatchingQuestion, answer: Any) -> GradeResult:
    """Each left/right pair scored independently; points are split evenly across pairs."""
    if not isinstance(answer, Mapping):
        return _proportional(question, 0, len(question.answer_key))

    given = {_option(left): right for left, right in answer.items()}
    correct = 0
    for left, right in question.answer_key.items():
        chosen = given.get(_option(left))
        if chosen is not None and _option(chosen) == _option(right):
            correct += 1
    return _proportional(question, correct, len(question.answer_key))


def grade_ordering(question: OrderingQuestion, answer: Any) -> GradeResult:
    submitted = [_option(a) for a in _as_collection(answer)]
    expected = [_option(a) for a in question.answer_key]
    return _all_or_nothing(question, submitted == expected)


def grade_essay(
    question: EssayQuestion, answer: Any, manual_score: Optional[float] = None
) -> GradeResult:
    if manual_score is not None:
        earned = min(max(float(manual_score), 0.0), float(question.points))
        return GradeResult(
            is_correct=earned >= question.points,
            earned_points=earned,
            needs_manual_review=False,
        )
    # Blank essays wait for a grader too
    return GradeResult(is_correct=None, earned_points=0.0, needs_manual_review=True)


_GRADERS: Dict[str, Callable[[Any, Any], GradeResult]] = {
    "multiple_choice": grade_multiple_choice,
    "multiple_select": grade_multiple_select,
    "true_false": grade_true_false,
    "short_answer": grade_short_answer,
    "fill_blank": grade_fill_blank,
    "matching": grade_matching,
    "ordering": grade_ordering,
}


def grade(
    question: Question,
    submitted_answer: Any = None,
    manual_score: Optional[float] = None,
) -> GradeResult:
    """
    Score one submitted answer against one question.

    Args:
        question: A typed question variant, or a stored QuestionRecord which is
            converted first.
        submitted_answer: The student's answer; None means unanswered.
        manual_score: Score a human grader awarded (essays only).

    Returns:
        GradeResult with correctness, earned points and whether the answer
        still waits for manual review.

    Raises:
        InvalidQuestionType: the question type has no grader.
        InvalidQuestionConfig: a stored record carries an unusable answer key.
    """
    if isinstance(question, QuestionRecord):
        question = question.to_question()

    question_type = getattr(question, "question_type", None)
    if question_type == "essay":
        return grade_essay(question, submitted_answer, manual_score)

    grader = _GRADERS.get(question_type)
    if grader is None:
        raise InvalidQuestionType(question_type, getattr(question, "id", None))

    if _is_absent(submitted_answer):
        return GradeResult(is_correct=False, earned_points=0.0)

    return grader(question, submitted_answer)
