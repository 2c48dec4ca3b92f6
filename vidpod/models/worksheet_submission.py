# vidpod/models/worksheet_submission.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.sql import func

from vidpod.core.database import Base, JSONType


class WorksheetSubmission(Base):
    __tablename__ = "worksheet_submissions"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    worksheet_id = Column(
        Integer, ForeignKey("worksheets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id = Column(Integer, nullable=False, index=True)

    responses = Column(JSONType, nullable=True)
    status = Column(String(20), default="draft", nullable=False)  # draft, submitted, graded

    grade = Column(Numeric(5, 2, asdecimal=False), nullable=True)
    feedback = Column(Text, nullable=True)

    submitted_at = Column(DateTime(timezone=True), nullable=True)
    graded_at = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<WorksheetSubmission(id={self.id}, student_id={self.student_id}, status='{self.status}')>"
