# vidpod/models/quiz_question.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from vidpod.core.database import Base, JSONType


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    quiz_id = Column(
        Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True
    )

    question_text = Column(Text, nullable=False)

    # multiple_choice, multiple_select, true_false, short_answer,
    # essay, matching, fill_blank, ordering
    question_type = Column(String(30), nullable=False)
    points = Column(Integer, default=1, nullable=False)

    # Shape depends on question_type; null for essays
    answer_key = Column(JSONType, nullable=True)
    # Options shown to the student (never the key)
    answer_options = Column(JSONType, nullable=True)

    case_sensitive = Column(Boolean, default=False, nullable=False)
    partial_credit = Column(Boolean, default=False, nullable=False)

    sort_order = Column(Integer, default=0, nullable=False)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<QuizQuestion(id={self.id}, quiz_id={self.quiz_id}, type='{self.question_type}')>"
