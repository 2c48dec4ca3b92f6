# vidpod/models/quiz_attempt.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from vidpod.core.database import Base, JSONType


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    quiz_id = Column(
        Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id = Column(Integer, nullable=False, index=True)
    attempt_number = Column(Integer, nullable=False, default=1)

    # Attempt data
    responses = Column(
        JSONType, nullable=False, default=dict
    )  # {"<question_id>": {"answer": ..., "time_spent": 12}, ...}
    manual_scores = Column(
        JSONType, nullable=False, default=dict
    )  # {"<question_id>": 15.0} for manually graded essays
    grading_details = Column(JSONType, nullable=True)  # per-question breakdown

    # Computed score
    earned_points = Column(Numeric(8, 2, asdecimal=False), default=0, nullable=False)
    total_points = Column(Numeric(8, 2, asdecimal=False), default=0, nullable=False)
    percentage_score = Column(
        Numeric(5, 2, asdecimal=False), default=0, nullable=False
    )  # e.g. 85.50 for 85.5%
    passed = Column(Boolean, default=False, nullable=False)
    correct_count = Column(Integer, default=0, nullable=False)
    pending_review_count = Column(Integer, default=0, nullable=False)

    is_practice = Column(Boolean, default=False, nullable=False)
    is_completed = Column(Boolean, default=True, nullable=False)

    # Time tracking
    time_taken = Column(Integer, nullable=True)  # seconds
    started_at = Column(DateTime(timezone=True), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    graded_at = Column(DateTime(timezone=True), nullable=True)
    graded_by = Column(Integer, nullable=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "quiz_id", "student_id", "attempt_number", name="uq_quiz_student_attempt"
        ),
    )

    def __repr__(self):
        return (
            f"<QuizAttempt(id={self.id}, student_id={self.student_id}, "
            f"attempt={self.attempt_number}, score={self.percentage_score})>"
        )
