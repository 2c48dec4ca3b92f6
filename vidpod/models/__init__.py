"""
Models package initialization
Import all models and setup relationships
"""

from .course import Course
from .lesson import Lesson
from .lesson_material import LessonMaterial
from .quiz import Quiz
from .quiz_attempt import QuizAttempt
from .quiz_question import QuizQuestion

# Import and setup relationships
from .relations import setup_relationships
from .student_progress import StudentProgress
from .worksheet import Worksheet
from .worksheet_submission import WorksheetSubmission

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "Course",
    "Lesson",
    "LessonMaterial",
    "Quiz",
    "QuizAttempt",
    "QuizQuestion",
    "StudentProgress",
    "Worksheet",
    "WorksheetSubmission",
]
