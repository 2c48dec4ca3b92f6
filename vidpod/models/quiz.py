# vidpod/models/quiz.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from vidpod.core.config import settings
from vidpod.core.database import Base


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    lesson_material_id = Column(
        Integer, ForeignKey("lesson_materials.id", ondelete="CASCADE"), nullable=True, index=True
    )
    lesson_id = Column(
        Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Quiz settings
    time_limit_minutes = Column(Integer, nullable=True)  # null = untimed
    attempts_allowed = Column(
        Integer, default=settings.default_attempts_allowed, nullable=False
    )
    grading_method = Column(
        String(20), default=settings.default_grading_method, nullable=False
    )  # best, latest, average, first
    passing_score_percent = Column(
        Integer, default=settings.default_passing_score, nullable=False
    )
    show_correct_answers = Column(Boolean, default=True, nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<Quiz(id={self.id}, lesson_id={self.lesson_id}, method='{self.grading_method}')>"
