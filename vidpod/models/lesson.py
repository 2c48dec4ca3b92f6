# vidpod/models/lesson.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from vidpod.core.database import Base


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Position in the course calendar
    week_number = Column(Integer, default=1, nullable=False)
    lesson_number = Column(Integer, default=1, nullable=False)

    is_published = Column(Boolean, default=False, nullable=False)

    # Prerequisite lesson (null = always available)
    requires_completion_of = Column(
        Integer, ForeignKey("lessons.id", ondelete="SET NULL"), nullable=True
    )

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

    __table_args__ = (
        UniqueConstraint("course_id", "week_number", "lesson_number"),
    )

    def __repr__(self):
        return f"<Lesson(id={self.id}, course_id={self.course_id}, title='{self.title}')>"
