# vidpod/services/attempt_history.py
"""Turn a student's attempt history on one quiz into the score that counts."""

from typing import Sequence

from vidpod.core.exceptions import AttemptLimitExceeded, NoAttemptsError
from vidpod.schemas.grading import (
    AttemptRecord,
    AttemptSummary,
    CountedAttempt,
    QuizConfig,
)


def _non_practice(attempts: Sequence[AttemptRecord]) -> list:
    return [a for a in attempts if not a.is_practice]


def _gradable(attempts: Sequence[AttemptRecord]) -> list:
    return [a for a in attempts if not a.is_practice and a.is_completed]


def attempts_remaining(quiz: QuizConfig, attempts: Sequence[AttemptRecord]) -> int:
    return max(quiz.attempts_allowed - len(_non_practice(attempts)), 0)


def ensure_can_attempt(
    quiz: QuizConfig, attempts: Sequence[AttemptRecord], is_practice: bool = False
) -> None:
    """Raise AttemptLimitExceeded when a new graded attempt would exceed the quiz limit.

    Practice attempts are never limited and never use up the allowance.
    """
    if is_practice:
        return
    used = len(_non_practice(attempts))
    if used >= quiz.attempts_allowed:
        raise AttemptLimitExceeded(quiz.attempts_allowed, used)


def next_attempt_number(attempts: Sequence[AttemptRecord]) -> int:
    return max((a.attempt_number for a in attempts), default=0) + 1


def counted_attempt(quiz: QuizConfig, attempts: Sequence[AttemptRecord]) -> CountedAttempt:
    """
    Apply the quiz grading method to the student's attempts.

    Practice and unfinished attempts are ignored. ``best`` breaks ties on the
    earliest attempt number; ``average`` has no single backing attempt.
    Practice attempts share the numbering, so ``first`` is the lowest
    numbered counted attempt, which is not always attempt #1.

    Raises:
        NoAttemptsError: no attempt counts yet (the quiz is unattempted).
    """
    counted = sorted(_gradable(attempts), key=lambda a: a.attempt_number)
    if not counted:
        raise NoAttemptsError(quiz.id)

    method = quiz.grading_method
    if method == "average":
        average = round(sum(a.percentage_score for a in counted) / len(counted), 2)
        return CountedAttempt(
            grading_method=method,
            percentage_score=average,
            passed=average >= quiz.passing_score_percent,
            counted_attempts=len(counted),
        )

    if method == "best":
        # max() keeps the first maximum, i.e. the earliest attempt
        chosen = max(counted, key=lambda a: a.percentage_score)
    elif method == "latest":
        chosen = counted[-1]
    else:
        chosen = counted[0]

    return CountedAttempt(
        grading_method=method,
        percentage_score=chosen.percentage_score,
        passed=chosen.percentage_score >= quiz.passing_score_percent,
        is_completed=chosen.is_completed,
        attempt_id=chosen.id,
        attempt_number=chosen.attempt_number,
        counted_attempts=len(counted),
    )


def summarize_attempts(quiz: QuizConfig, attempts: Sequence[AttemptRecord]) -> AttemptSummary:
    gradable = sorted(_gradable(attempts), key=lambda a: a.attempt_number)
    scores = [a.percentage_score for a in gradable]
    submitted = [a.submitted_at for a in attempts if a.submitted_at is not None]

    return AttemptSummary(
        quiz_id=quiz.id,
        total_attempts=len(attempts),
        practice_attempts=len(attempts) - len(_non_practice(attempts)),
        counted_attempts=len(gradable),
        attempts_allowed=quiz.attempts_allowed,
        attempts_remaining=attempts_remaining(quiz, attempts),
        best_score=max(scores) if scores else None,
        average_score=round(sum(scores) / len(scores), 2) if scores else None,
        latest_score=scores[-1] if scores else None,
        last_attempt_at=max(submitted) if submitted else None,
        counted=counted_attempt(quiz, gradable) if gradable else None,
    )
