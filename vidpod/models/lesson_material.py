# vidpod/models/lesson_material.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from vidpod.core.database import Base


class LessonMaterial(Base):
    __tablename__ = "lesson_materials"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    lesson_id = Column(
        Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Material Type: vocabulary, quiz, worksheet, video, audio, reading, assignment, resource
    material_type = Column(String(20), nullable=False, index=True)

    url = Column(Text, nullable=True)
    points_possible = Column(Integer, default=0, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    # Required materials drive the lesson completion percentage
    is_required = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<LessonMaterial(id={self.id}, type='{self.material_type}', lesson_id={self.lesson_id})>"
