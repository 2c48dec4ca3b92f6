# vidpod/schemas/quiz.py
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from vidpod.schemas.grading import CountedAttempt, QuestionResponse, QuestionResult

# ==================== Quiz Attempt Schemas ====================


class QuizAttemptCreate(BaseModel):
    """Schema for submitting a quiz attempt"""

    student_id: int = Field(..., ge=1)
    responses: Dict[str, QuestionResponse] = Field(
        default_factory=dict,
        description='Answers keyed by question id: {"12": {"answer": "B", "time_spent": 20}}',
    )
    is_practice: bool = Field(default=False, description="Practice attempts never count")
    time_taken: Optional[int] = Field(None, ge=0, description="Time taken in seconds")
    started_at: Optional[datetime] = None


class QuizAttemptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_id: int
    student_id: int
    attempt_number: int
    earned_points: float
    total_points: float
    percentage_score: float
    passed: bool
    correct_count: int
    pending_review_count: int
    is_practice: bool
    is_completed: bool
    time_taken: Optional[int] = None
    started_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None


class QuizAttemptDetailResponse(QuizAttemptResponse):
    """Attempt with the per-question breakdown (only when the quiz shows answers)"""

    grading_details: Optional[List[QuestionResult]] = None


class QuizAttemptListResponse(BaseModel):
    attempts: List[QuizAttemptResponse]
    total: int
    page: int
    size: int
    total_pages: int


class QuizResultResponse(BaseModel):
    """The score that counts for a student on a quiz"""

    quiz_id: int
    student_id: int
    status: Literal["attempted", "not_attempted"]
    counted: Optional[CountedAttempt] = None


class ManualGradeRequest(BaseModel):
    score: float = Field(..., ge=0, description="Points awarded for the essay")
    graded_by: Optional[int] = Field(None, description="Teacher recording the grade")
