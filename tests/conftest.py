import os

# In-memory SQLite shared through a StaticPool; must be set before vidpod is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("DEBUG", "false")

import pytest
from fastapi.testclient import TestClient

from vidpod.core.database import Base, SessionLocal, engine, get_db
from vidpod.models import (
    Course,
    Lesson,
    LessonMaterial,
    Quiz,
    QuizQuestion,
    Worksheet,
    WorksheetSubmission,
)
from vidpod.schemas.grading import AttemptRecord, QuestionRecord, QuizConfig


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    from main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ==================== Engine builders ====================


def question(id, question_type, answer_key=None, points=1, **extra):
    return QuestionRecord(
        id=id, question_type=question_type, answer_key=answer_key, points=points, **extra
    )


def quiz_config(questions=(), **overrides):
    data = {
        "id": 1,
        "attempts_allowed": 3,
        "grading_method": "best",
        "passing_score_percent": 70,
        "questions": list(questions),
    }
    data.update(overrides)
    return QuizConfig(**data)


def attempt(number, score, is_practice=False, is_completed=True, id=None):
    return AttemptRecord(
        id=id if id is not None else number,
        attempt_number=number,
        percentage_score=score,
        passed=score >= 70,
        is_practice=is_practice,
        is_completed=is_completed,
    )


# ==================== Database builders ====================


class Factory:
    """Creates course content rows in the test session."""

    def __init__(self, session):
        self.db = session
        self._lesson_number = 0

    def course(self, title="Podcasting 101"):
        course = Course(title=title, teacher_id=1, is_published=True)
        self.db.add(course)
        self.db.commit()
        return course

    def lesson(self, course, title="Lesson", requires=None, is_published=True):
        self._lesson_number += 1
        lesson = Lesson(
            course_id=course.id,
            title=title,
            week_number=1,
            lesson_number=self._lesson_number,
            is_published=is_published,
            requires_completion_of=requires.id if requires is not None else None,
        )
        self.db.add(lesson)
        self.db.commit()
        return lesson

    def material(self, lesson, material_type="reading", is_required=True, title="Material"):
        material = LessonMaterial(
            lesson_id=lesson.id,
            title=title,
            material_type=material_type,
            is_required=is_required,
        )
        self.db.add(material)
        self.db.commit()
        return material

    def quiz(self, lesson, questions, is_required=True, **settings):
        """questions: iterable of (question_type, answer_key, points)"""
        material = self.material(lesson, "quiz", is_required=is_required, title="Quiz")
        quiz = Quiz(
            lesson_material_id=material.id,
            lesson_id=lesson.id,
            title="Quiz",
            attempts_allowed=settings.get("attempts_allowed", 3),
            grading_method=settings.get("grading_method", "best"),
            passing_score_percent=settings.get("passing_score_percent", 70),
            show_correct_answers=settings.get("show_correct_answers", True),
            is_published=True,
        )
        self.db.add(quiz)
        self.db.flush()
        for order, (question_type, answer_key, points) in enumerate(questions):
            self.db.add(
                QuizQuestion(
                    quiz_id=quiz.id,
                    question_text=f"Question {order + 1}",
                    question_type=question_type,
                    answer_key=answer_key,
                    points=points,
                    sort_order=order,
                )
            )
        self.db.commit()
        self.db.refresh(quiz)
        return quiz

    def worksheet(self, lesson, is_required=True):
        material = self.material(lesson, "worksheet", is_required=is_required, title="Sheet")
        worksheet = Worksheet(
            lesson_material_id=material.id, lesson_id=lesson.id, title="Sheet"
        )
        self.db.add(worksheet)
        self.db.commit()
        return worksheet

    def submission(self, worksheet, student_id, status="submitted"):
        submission = WorksheetSubmission(
            worksheet_id=worksheet.id, student_id=student_id, status=status
        )
        self.db.add(submission)
        self.db.commit()
        return submission


@pytest.fixture
def factory(db):
    return Factory(db)
