# vidpod/models/relations.py

from sqlalchemy.orm import relationship

# Import all relevant models
from .course import Course
from .lesson import Lesson
from .lesson_material import LessonMaterial
from .quiz import Quiz
from .quiz_attempt import QuizAttempt
from .quiz_question import QuizQuestion
from .student_progress import StudentProgress
from .worksheet import Worksheet
from .worksheet_submission import WorksheetSubmission


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # --- Course Structure ---

    # 1. Course to Lessons (One-to-Many)
    Course.lessons = relationship(
        "Lesson",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="[Lesson.week_number, Lesson.lesson_number]",
    )
    Lesson.course = relationship("Course", back_populates="lessons")

    # 2. Lesson to its prerequisite lesson (Many-to-One, self reference)
    Lesson.prerequisite = relationship(
        "Lesson",
        remote_side=[Lesson.id],
        foreign_keys=[Lesson.requires_completion_of],
    )

    # 3. Lesson to Materials (One-to-Many)
    Lesson.materials = relationship(
        "LessonMaterial",
        back_populates="lesson",
        cascade="all, delete-orphan",
        order_by="LessonMaterial.sort_order",
    )
    LessonMaterial.lesson = relationship("Lesson", back_populates="materials")

    # --- Quizzes ---

    # 4. Material to Quiz (One-to-One)
    LessonMaterial.quiz = relationship(
        "Quiz", back_populates="material", uselist=False
    )
    Quiz.material = relationship("LessonMaterial", back_populates="quiz")

    # 5. Quiz to Questions (One-to-Many), in grading order
    Quiz.questions = relationship(
        "QuizQuestion",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="[QuizQuestion.sort_order, QuizQuestion.id]",
    )
    QuizQuestion.quiz = relationship("Quiz", back_populates="questions")

    # 6. Quiz to Attempts (One-to-Many)
    Quiz.attempts = relationship(
        "QuizAttempt",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="QuizAttempt.attempt_number",
    )
    QuizAttempt.quiz = relationship("Quiz", back_populates="attempts")

    # --- Worksheets ---

    # 7. Material to Worksheet (One-to-One)
    LessonMaterial.worksheet = relationship(
        "Worksheet", back_populates="material", uselist=False
    )
    Worksheet.material = relationship("LessonMaterial", back_populates="worksheet")

    # 8. Worksheet to Submissions (One-to-Many)
    Worksheet.submissions = relationship(
        "WorksheetSubmission",
        back_populates="worksheet",
        cascade="all, delete-orphan",
    )
    WorksheetSubmission.worksheet = relationship(
        "Worksheet", back_populates="submissions"
    )

    # --- Progress ---

    # 9. Lesson to Student Progress (One-to-Many)
    Lesson.progress_records = relationship(
        "StudentProgress",
        back_populates="lesson",
        cascade="all, delete-orphan",
    )
    StudentProgress.lesson = relationship("Lesson", back_populates="progress_records")
