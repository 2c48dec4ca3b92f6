# vidpod/models/student_progress.py
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from vidpod.core.database import Base


class StudentProgress(Base):
    """
    Per (student, lesson) progress record.
    Status is one of: not_started, in_progress, completed, locked, passed, failed, skipped.
    """

    __tablename__ = "student_progress"

    id = Column(Integer, primary_key=True, index=True)

    # Student and Lesson relationship
    student_id = Column(Integer, nullable=False, index=True)
    lesson_id = Column(
        Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )

    status = Column(String(20), default="not_started", nullable=False)
    completion_percentage = Column(
        Numeric(5, 2, asdecimal=False), default=0, nullable=False
    )
    grade = Column(Numeric(5, 2, asdecimal=False), nullable=True)

    # Manual unlock (teacher override of the prerequisite)
    unlocked_at = Column(DateTime(timezone=True), nullable=True)
    unlock_reason = Column(Text, nullable=True)
    unlocked_by = Column(Integer, nullable=True)

    teacher_notes = Column(Text, nullable=True)

    # Timestamps
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    last_accessed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("student_id", "lesson_id", name="uq_student_lesson_progress"),
    )

    def __repr__(self):
        return f"<StudentProgress(student_id={self.student_id}, lesson_id={self.lesson_id}, status='{self.status}')>"
