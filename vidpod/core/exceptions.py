"""
Grading and progress error taxonomy.

Every error carries a human readable ``message`` and the HTTP ``status_code``
the API layer answers with, the same way ``DBException`` does.
"""

from typing import Any, Optional


class GradingException(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class InvalidQuestion(GradingException):
    """A stored question cannot be graded (data-integrity problem)."""

    status_code = 422

    def __init__(self, message: str, question_id: Any = None):
        self.question_id = question_id
        super().__init__(message)


class InvalidQuestionType(InvalidQuestion):
    def __init__(self, question_type: Any, question_id: Any = None):
        self.question_type = question_type
        super().__init__(f"Unknown question type: {question_type!r}", question_id)


class InvalidQuestionConfig(InvalidQuestion):
    pass


class AttemptLimitExceeded(GradingException):
    status_code = 400

    def __init__(self, attempts_allowed: int, attempts_used: int):
        self.attempts_allowed = attempts_allowed
        self.attempts_used = attempts_used
        super().__init__(
            f"No attempts remaining: maximum attempts ({attempts_allowed}) reached for this quiz"
        )


class NoAttemptsError(GradingException):
    """No counted attempt exists yet. Means "not attempted", not a failure."""

    status_code = 404

    def __init__(self, quiz_id: Any = None):
        self.quiz_id = quiz_id
        super().__init__("Quiz has not been attempted yet")


class InvalidManualGrade(GradingException):
    status_code = 400


class InvalidProgressStatus(GradingException):
    status_code = 400
