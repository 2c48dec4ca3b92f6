import pytest
from fastapi import HTTPException

from vidpod.core.config import settings
from vidpod.core.decorator import DBException
from vidpod.core.exceptions import AttemptLimitExceeded, InvalidManualGrade, NoAttemptsError
from vidpod.models import StudentProgress
from vidpod.schemas.quiz import ManualGradeRequest, QuizAttemptCreate
from vidpod.services import quiz_attempt as quiz_attempt_module
from vidpod.services.quiz_attempt import QuizAttemptService

STUDENT = 5


def answers(quiz, *values):
    return {str(q.id): {"answer": v} for q, v in zip(quiz.questions, values)}


@pytest.fixture
def lesson(factory):
    return factory.lesson(factory.course(), "Recording basics")


@pytest.fixture
def quiz(factory, lesson):
    return factory.quiz(
        lesson,
        [("multiple_choice", "A", 1), ("true_false", True, 1)],
        attempts_allowed=2,
    )


def submit(db, quiz, *values, is_practice=False):
    service = QuizAttemptService(db)
    return service.submit_attempt(
        quiz.id,
        QuizAttemptCreate(
            student_id=STUDENT,
            responses=answers(quiz, *values),
            is_practice=is_practice,
            time_taken=120,
        ),
    )


def test_submit_attempt_is_scored_and_numbered(db, quiz):
    first = submit(db, quiz, "A", False)
    second = submit(db, quiz, "A", "true")

    assert first.attempt_number == 1
    assert first.percentage_score == 50
    assert first.passed is False
    assert len(first.grading_details) == 2
    assert second.attempt_number == 2
    assert second.percentage_score == 100
    assert second.passed is True


def test_attempt_limit_counts_graded_attempts_only(db, quiz):
    submit(db, quiz, "A", True)
    submit(db, quiz, "B", True, is_practice=True)
    submit(db, quiz, "B", False)

    with pytest.raises(AttemptLimitExceeded):
        submit(db, quiz, "A", True)

    practice = submit(db, quiz, "A", True, is_practice=True)
    assert practice.attempt_number == 4


def test_empty_quiz_records_zero_attempt(db, factory, lesson):
    empty = factory.quiz(lesson, [])

    attempt = submit(db, empty)
    assert attempt.attempt_number == 1
    assert attempt.total_points == 0
    assert attempt.percentage_score == 0
    assert attempt.passed is False
    assert attempt.grading_details == []


def test_attempt_number_collision_is_retried(db, quiz, monkeypatch):
    submit(db, quiz, "A", True)

    real_next_number = quiz_attempt_module.next_attempt_number
    calls = []

    def stale_then_fresh(history):
        calls.append(len(history))
        # The first read hands out a number another submission already took
        return 1 if len(calls) == 1 else real_next_number(history)

    monkeypatch.setattr(quiz_attempt_module, "next_attempt_number", stale_then_fresh)

    second = submit(db, quiz, "B", True)
    assert second.attempt_number == 2
    assert len(calls) == 2


def test_attempt_number_collision_gives_up_with_conflict(db, quiz, monkeypatch):
    submit(db, quiz, "A", True)

    calls = []

    def always_taken(history):
        calls.append(len(history))
        return 1

    monkeypatch.setattr(quiz_attempt_module, "next_attempt_number", always_taken)
    monkeypatch.setattr(settings, "attempt_submit_retries", 2)

    with pytest.raises(DBException) as exc:
        submit(db, quiz, "B", True)
    assert exc.value.status_code == 409
    assert len(calls) == 2
    assert QuizAttemptService(db).get_attempt_stats(quiz.id, STUDENT).total_attempts == 1


def test_unknown_quiz(db):
    with pytest.raises(HTTPException) as exc:
        QuizAttemptService(db).get_attempt_stats(999, STUDENT)
    assert exc.value.status_code == 404


def test_counted_result_follows_grading_method(db, quiz):
    service = QuizAttemptService(db)
    with pytest.raises(NoAttemptsError):
        service.get_counted_result(quiz.id, STUDENT)

    submit(db, quiz, "A", True)
    submit(db, quiz, "B", False)

    counted = service.get_counted_result(quiz.id, STUDENT)
    assert counted.grading_method == "best"
    assert counted.percentage_score == 100
    assert counted.attempt_number == 1


def test_list_attempts_newest_first(db, quiz):
    submit(db, quiz, "A", True)
    submit(db, quiz, "B", True)

    attempts, pagination = QuizAttemptService(db).list_attempts(quiz.id, STUDENT, page=1, size=1)
    assert [a.attempt_number for a in attempts] == [2]
    assert pagination == {"total": 2, "page": 1, "size": 1, "total_pages": 2}


def test_stats(db, quiz):
    submit(db, quiz, "A", False)
    submit(db, quiz, "A", True)

    stats = QuizAttemptService(db).get_attempt_stats(quiz.id, STUDENT)
    assert stats.counted_attempts == 2
    assert stats.attempts_remaining == 0
    assert stats.best_score == 100
    assert stats.average_score == 75


def test_submission_refreshes_lesson_progress(db, factory, lesson, quiz):
    submit(db, quiz, "B", False)

    progress = db.query(StudentProgress).filter_by(student_id=STUDENT, lesson_id=lesson.id).one()
    assert progress.completion_percentage == 100
    assert progress.status == "completed"
    assert progress.grade == 0


def test_practice_submission_leaves_progress_alone(db, lesson, quiz):
    submit(db, quiz, "A", True, is_practice=True)
    assert db.query(StudentProgress).count() == 0


class TestEssayGrading:
    @pytest.fixture
    def essay_quiz(self, factory, lesson):
        return factory.quiz(lesson, [("multiple_choice", "A", 10), ("essay", None, 20)])

    def test_grade_essay_rescores_attempt(self, db, essay_quiz):
        attempt = submit(db, essay_quiz, "A", "Microphones pick up sound by...")
        assert attempt.percentage_score == 100
        assert attempt.pending_review_count == 1
        assert attempt.graded_at is None

        essay = essay_quiz.questions[1]
        graded = QuizAttemptService(db).grade_essay(
            essay_quiz.id, attempt.id, essay.id, ManualGradeRequest(score=15, graded_by=2)
        )
        assert graded.earned_points == 25
        assert graded.total_points == 30
        assert graded.percentage_score == 83.33
        assert graded.pending_review_count == 0
        assert graded.graded_by == 2
        assert graded.graded_at is not None
        assert graded.manual_scores == {str(essay.id): 15}

    def test_score_above_question_points(self, db, essay_quiz):
        attempt = submit(db, essay_quiz, "A", "Essay")
        with pytest.raises(InvalidManualGrade):
            QuizAttemptService(db).grade_essay(
                essay_quiz.id,
                attempt.id,
                essay_quiz.questions[1].id,
                ManualGradeRequest(score=25),
            )

    def test_only_essays_are_graded_manually(self, db, essay_quiz):
        attempt = submit(db, essay_quiz, "A", "Essay")
        with pytest.raises(InvalidManualGrade):
            QuizAttemptService(db).grade_essay(
                essay_quiz.id,
                attempt.id,
                essay_quiz.questions[0].id,
                ManualGradeRequest(score=5),
            )
