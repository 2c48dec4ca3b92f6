# vidpod/services/quiz_attempt.py
import logging
import math
from datetime import datetime, timezone
from typing import List, Tuple

from fastapi import HTTPException, status
from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vidpod.core.config import settings
from vidpod.core.decorator import DBException, db_exception
from vidpod.core.exceptions import InvalidManualGrade
from vidpod.models.quiz import Quiz
from vidpod.models.quiz_attempt import QuizAttempt
from vidpod.schemas.grading import (
    AttemptRecord,
    AttemptScore,
    AttemptSummary,
    CountedAttempt,
    QuizConfig,
)
from vidpod.schemas.quiz import ManualGradeRequest, QuizAttemptCreate
from vidpod.services.attempt_history import (
    counted_attempt,
    ensure_can_attempt,
    next_attempt_number,
    summarize_attempts,
)
from vidpod.services.attempt_scorer import rescore_attempt, score_attempt
from vidpod.services.progress import ProgressService

logger = logging.getLogger(__name__)


class QuizAttemptService:
    def __init__(self, db: Session):
        self.db = db

    def _get_quiz(self, quiz_id: int) -> Quiz:
        quiz = self.db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Quiz not found",
            )
        return quiz

    def _student_attempts(self, quiz_id: int, student_id: int) -> List[QuizAttempt]:
        return (
            self.db.query(QuizAttempt)
            .filter(
                and_(
                    QuizAttempt.quiz_id == quiz_id,
                    QuizAttempt.student_id == student_id,
                )
            )
            .order_by(QuizAttempt.attempt_number)
            .all()
        )

    def _history(self, quiz_id: int, student_id: int) -> List[AttemptRecord]:
        return [
            AttemptRecord.model_validate(a)
            for a in self._student_attempts(quiz_id, student_id)
        ]

    @staticmethod
    def _apply_score(attempt: QuizAttempt, score: AttemptScore) -> None:
        attempt.earned_points = score.earned_points
        attempt.total_points = score.total_points
        attempt.percentage_score = score.percentage_score
        attempt.passed = score.passed
        attempt.correct_count = score.correct_count
        attempt.pending_review_count = score.pending_review_count
        attempt.grading_details = [
            r.model_dump(mode="json") for r in score.per_question
        ]

    def _refresh_progress(self, student_id: int, lesson_id: int) -> None:
        try:
            ProgressService(self.db).refresh_lesson_progress(student_id, lesson_id)
        except DBException as e:
            logger.warning(
                f"Could not refresh progress of student {student_id} "
                f"on lesson {lesson_id}: {e.message}"
            )

    @db_exception
    def submit_attempt(self, quiz_id: int, attempt_in: QuizAttemptCreate) -> QuizAttempt:
        """
        Grade and store a student's attempt.

        The attempt number is taken from the student's history. Two
        submissions racing for the same number collide on the unique
        constraint; the loser re-reads the history and tries again.
        """
        quiz = self._get_quiz(quiz_id)
        config = QuizConfig.model_validate(quiz)

        responses = {
            key: response.model_dump() for key, response in attempt_in.responses.items()
        }
        score = score_attempt(config, attempt_in.responses)

        for _ in range(settings.attempt_submit_retries):
            history = self._history(quiz_id, attempt_in.student_id)
            ensure_can_attempt(config, history, is_practice=attempt_in.is_practice)

            now = datetime.now(timezone.utc)
            attempt = QuizAttempt(
                quiz_id=quiz_id,
                student_id=attempt_in.student_id,
                attempt_number=next_attempt_number(history),
                responses=responses,
                manual_scores={},
                is_practice=attempt_in.is_practice,
                is_completed=True,
                time_taken=attempt_in.time_taken,
                started_at=attempt_in.started_at,
                submitted_at=now,
                graded_at=now if score.pending_review_count == 0 else None,
            )
            self._apply_score(attempt, score)

            self.db.add(attempt)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.info(
                    f"Attempt number collision for student {attempt_in.student_id} "
                    f"on quiz {quiz_id}, retrying"
                )
                continue

            self.db.refresh(attempt)
            logger.info(
                f"Quiz {quiz_id} attempt #{attempt.attempt_number} by student "
                f"{attempt.student_id}: {attempt.percentage_score}% "
                f"({'passed' if attempt.passed else 'not passed'})"
            )
            if not attempt.is_practice:
                self._refresh_progress(attempt.student_id, quiz.lesson_id)
            return attempt

        raise DBException("Could not record attempt, please submit again", 409)

    def list_attempts(
        self,
        quiz_id: int,
        student_id: int,
        page: int = 1,
        size: int = 20,
    ) -> Tuple[List[QuizAttempt], dict]:
        """Get a student's attempts on a quiz, latest first"""
        self._get_quiz(quiz_id)

        query = self.db.query(QuizAttempt).filter(
            and_(
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.student_id == student_id,
            )
        )

        total = query.count()

        offset = (page - 1) * size
        attempts = (
            query.order_by(QuizAttempt.attempt_number.desc())
            .offset(offset)
            .limit(size)
            .all()
        )

        total_pages = math.ceil(total / size) if size > 0 else 0
        pagination = {
            "total": total,
            "page": page,
            "size": size,
            "total_pages": total_pages,
        }

        return attempts, pagination

    def get_attempt(self, quiz_id: int, attempt_id: int) -> QuizAttempt:
        attempt = (
            self.db.query(QuizAttempt)
            .filter(
                and_(
                    QuizAttempt.id == attempt_id,
                    QuizAttempt.quiz_id == quiz_id,
                )
            )
            .first()
        )

        if not attempt:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Attempt not found",
            )

        return attempt

    def get_counted_result(self, quiz_id: int, student_id: int) -> CountedAttempt:
        """The score that counts under the quiz grading method (NoAttemptsError if none)"""
        quiz = self._get_quiz(quiz_id)
        return counted_attempt(
            QuizConfig.model_validate(quiz), self._history(quiz_id, student_id)
        )

    def get_attempt_stats(self, quiz_id: int, student_id: int) -> AttemptSummary:
        quiz = self._get_quiz(quiz_id)
        return summarize_attempts(
            QuizConfig.model_validate(quiz), self._history(quiz_id, student_id)
        )

    @db_exception
    def grade_essay(
        self,
        quiz_id: int,
        attempt_id: int,
        question_id: int,
        grade_in: ManualGradeRequest,
    ) -> QuizAttempt:
        """Record a teacher's essay score and rescore the attempt with it"""
        quiz = self._get_quiz(quiz_id)
        attempt = self.get_attempt(quiz_id, attempt_id)

        question = next((q for q in quiz.questions if q.id == question_id), None)
        if question is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Question not found",
            )
        if question.question_type != "essay":
            raise InvalidManualGrade("Only essay questions can be graded manually")
        if grade_in.score > question.points:
            raise InvalidManualGrade(
                f"Score {grade_in.score} exceeds the {question.points} points of the question"
            )

        # Reassign so the JSON column is flagged as changed
        attempt.manual_scores = {
            **(attempt.manual_scores or {}),
            str(question_id): grade_in.score,
        }

        score = rescore_attempt(
            QuizConfig.model_validate(quiz), AttemptRecord.model_validate(attempt)
        )
        self._apply_score(attempt, score)
        attempt.graded_by = grade_in.graded_by
        if score.pending_review_count == 0:
            attempt.graded_at = datetime.now(timezone.utc)

        self.db.commit()
        self.db.refresh(attempt)

        logger.info(
            f"Essay {question_id} of attempt {attempt_id} graded {grade_in.score}/"
            f"{question.points}; attempt now {attempt.percentage_score}%"
        )
        if not attempt.is_practice:
            self._refresh_progress(attempt.student_id, quiz.lesson_id)
        return attempt
