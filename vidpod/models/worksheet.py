# vidpod/models/worksheet.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from vidpod.core.database import Base, JSONType


class Worksheet(Base):
    __tablename__ = "worksheets"

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
    form_fields = Column(JSONType, nullable=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<Worksheet(id={self.id}, lesson_id={self.lesson_id})>"
