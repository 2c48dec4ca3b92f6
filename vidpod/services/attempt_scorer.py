# vidpod/services/attempt_scorer.py
import logging
from typing import Any, List, Mapping, Optional

from vidpod.core.exceptions import InvalidQuestion
from vidpod.schemas.grading import (
    AttemptRecord,
    AttemptScore,
    QuestionResponse,
    QuestionResult,
    QuizConfig,
)
from vidpod.services.question_grader import grade

logger = logging.getLogger(__name__)


def _lookup(mapping: Optional[Mapping], question_id: Any) -> Any:
    """Find a question's entry whether the mapping is keyed by int or str ids."""
    if not mapping:
        return None
    if question_id in mapping:
        return mapping[question_id]
    return mapping.get(str(question_id))


def _as_response(value: Any) -> QuestionResponse:
    if value is None:
        return QuestionResponse()
    if isinstance(value, QuestionResponse):
        return value
    if isinstance(value, Mapping) and ("answer" in value or "time_spent" in value):
        return QuestionResponse.model_validate(value)
    # Bare answer without the response envelope
    return QuestionResponse(answer=value)


def calculate_percentage(earned_points: float, total_points: float) -> float:
    if total_points <= 0:
        return 0.0
    percentage = round(100 * earned_points / total_points, 2)
    return min(max(percentage, 0.0), 100.0)


def score_attempt(
    quiz: QuizConfig,
    responses: Optional[Mapping[Any, Any]] = None,
    manual_scores: Optional[Mapping[Any, float]] = None,
) -> AttemptScore:
    """
    Grade every question of a quiz and total the attempt.

    Ungraded essays are left out of ``total_points`` so the interim
    percentage only reflects what has been graded. A question that cannot be
    graded (unknown type, broken answer key) is reported with its error and
    contributes nothing; the rest of the attempt is still scored.
    """
    earned_points = 0.0
    total_points = 0.0
    correct_count = 0
    pending_review_count = 0
    per_question: List[QuestionResult] = []

    questions = sorted(quiz.questions, key=lambda q: q.sort_order)
    for record in questions:
        response = _as_response(_lookup(responses, record.id))
        manual_score = _lookup(manual_scores, record.id)

        try:
            result = grade(record, response.answer, manual_score)
        except InvalidQuestion as e:
            logger.warning(f"Skipping question {record.id} of quiz {quiz.id}: {e.message}")
            per_question.append(
                QuestionResult(
                    question_id=record.id,
                    question_type=record.question_type,
                    answer=response.answer,
                    is_correct=None,
                    earned_points=0.0,
                    points_possible=record.points,
                    counted=False,
                    time_spent=response.time_spent,
                    error=e.message,
                )
            )
            continue

        if result.needs_manual_review:
            pending_review_count += 1
        else:
            total_points += record.points
            earned_points += result.earned_points
            if result.is_correct:
                correct_count += 1

        per_question.append(
            QuestionResult(
                question_id=record.id,
                question_type=record.question_type,
                answer=response.answer,
                is_correct=result.is_correct,
                earned_points=round(result.earned_points, 2),
                points_possible=record.points,
                needs_manual_review=result.needs_manual_review,
                counted=not result.needs_manual_review,
                time_spent=response.time_spent,
            )
        )

    earned_points = round(earned_points, 2)
    percentage_score = calculate_percentage(earned_points, total_points)

    return AttemptScore(
        earned_points=earned_points,
        total_points=total_points,
        percentage_score=percentage_score,
        passed=total_points > 0 and percentage_score >= quiz.passing_score_percent,
        correct_count=correct_count,
        pending_review_count=pending_review_count,
        per_question=per_question,
    )


def rescore_attempt(quiz: QuizConfig, attempt: AttemptRecord) -> AttemptScore:
    """Score a stored attempt again, folding in any manual grades recorded since."""
    return score_attempt(quiz, attempt.responses, attempt.manual_scores)
