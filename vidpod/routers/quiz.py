# vidpod/routers/quiz.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vidpod.core.config import settings
from vidpod.core.database import get_db
from vidpod.core.exceptions import NoAttemptsError
from vidpod.models.quiz_attempt import QuizAttempt
from vidpod.schemas.grading import AttemptSummary
from vidpod.schemas.quiz import (
    ManualGradeRequest,
    QuizAttemptCreate,
    QuizAttemptDetailResponse,
    QuizAttemptListResponse,
    QuizResultResponse,
)
from vidpod.services.quiz_attempt import QuizAttemptService

router = APIRouter(
    prefix="/quizzes",
    tags=["Quizzes"],
    responses={404: {"description": "Not found"}},
)


def _attempt_detail(attempt: QuizAttempt) -> QuizAttemptDetailResponse:
    """Attempt response, with the per-question breakdown only when the quiz shows answers"""
    response = QuizAttemptDetailResponse.model_validate(attempt)
    if not attempt.quiz.show_correct_answers:
        response.grading_details = None
    return response


# ==================== Attempt Endpoints ====================


@router.post(
    "/{quiz_id}/attempts",
    response_model=QuizAttemptDetailResponse,
    status_code=201,
)
def submit_quiz_attempt(
    quiz_id: int,
    attempt_in: QuizAttemptCreate,
    db: Session = Depends(get_db),
):
    """
    Submit a quiz attempt.
    Grades every question, stores the attempt and refreshes the student's
    lesson progress. Essays stay pending until a teacher grades them.
    """
    service = QuizAttemptService(db)
    attempt = service.submit_attempt(quiz_id, attempt_in)
    return _attempt_detail(attempt)


@router.get("/{quiz_id}/attempts", response_model=QuizAttemptListResponse)
def list_quiz_attempts(
    quiz_id: int,
    student_id: int = Query(..., ge=1),
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    """
    Get a student's attempts on a quiz, newest first.
    Practice attempts are included and flagged.
    """
    service = QuizAttemptService(db)
    attempts, pagination = service.list_attempts(quiz_id, student_id, page, size)
    return {"attempts": attempts, **pagination}


@router.get("/{quiz_id}/attempts/{attempt_id}", response_model=QuizAttemptDetailResponse)
def get_quiz_attempt(
    quiz_id: int,
    attempt_id: int,
    db: Session = Depends(get_db),
):
    service = QuizAttemptService(db)
    return _attempt_detail(service.get_attempt(quiz_id, attempt_id))


@router.get(
    "/{quiz_id}/students/{student_id}/result",
    response_model=QuizResultResponse,
)
def get_quiz_result(
    quiz_id: int,
    student_id: int,
    db: Session = Depends(get_db),
):
    """
    Get the score that counts for a student, following the quiz grading
    method (best, latest, average or first).
    """
    service = QuizAttemptService(db)
    try:
        counted = service.get_counted_result(quiz_id, student_id)
    except NoAttemptsError:
        return QuizResultResponse(
            quiz_id=quiz_id, student_id=student_id, status="not_attempted"
        )
    return QuizResultResponse(
        quiz_id=quiz_id, student_id=student_id, status="attempted", counted=counted
    )


@router.get("/{quiz_id}/students/{student_id}/stats", response_model=AttemptSummary)
def get_quiz_stats(
    quiz_id: int,
    student_id: int,
    db: Session = Depends(get_db),
):
    """
    Get statistics for a student's quiz attempts.
    Includes attempts used and remaining, best, average and latest score.
    """
    service = QuizAttemptService(db)
    return service.get_attempt_stats(quiz_id, student_id)


# ==================== Manual Grading Endpoints ====================


@router.put(
    "/{quiz_id}/attempts/{attempt_id}/questions/{question_id}/grade",
    response_model=QuizAttemptDetailResponse,
)
def grade_essay_question(
    quiz_id: int,
    attempt_id: int,
    question_id: int,
    grade_in: ManualGradeRequest,
    db: Session = Depends(get_db),
):
    """
    Grade an essay answer.
    The attempt is rescored and the student's lesson progress refreshed.
    """
    service = QuizAttemptService(db)
    attempt = service.grade_essay(quiz_id, attempt_id, question_id, grade_in)
    return _attempt_detail(attempt)
