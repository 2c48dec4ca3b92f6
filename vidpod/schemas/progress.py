# vidpod/schemas/progress.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from vidpod.schemas.grading import CountedAttempt, QuizConfig

LessonStatus = Literal[
    "not_started", "in_progress", "completed", "locked", "passed", "failed", "skipped"
]
CourseStatus = Literal["not_started", "in_progress", "completed"]
GateReason = Literal[
    "no_prerequisite", "prerequisite_met", "manual_override", "prerequisite_incomplete"
]

LESSON_STATUSES = (
    "not_started",
    "in_progress",
    "completed",
    "locked",
    "passed",
    "failed",
    "skipped",
)

# ==================== Engine Inputs ====================


class CourseInfo(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    title: Optional[str] = None


class LessonInfo(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    course_id: Optional[int] = None
    title: Optional[str] = None
    is_published: bool = True
    requires_completion_of: Optional[int] = None


class MaterialInfo(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    lesson_id: Optional[int] = None
    material_type: str
    is_required: bool = False
    quiz: Optional[QuizConfig] = None


class WorksheetSubmissionInfo(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: Optional[int] = None
    status: str = "draft"
    grade: Optional[float] = None


# ==================== Engine Outputs ====================


class MaterialCompletion(BaseModel):
    model_config = ConfigDict(frozen=True)

    material_id: int
    material_type: str
    is_complete: bool
    counted: Optional[CountedAttempt] = None


class LessonCompletion(BaseModel):
    model_config = ConfigDict(frozen=True)

    lesson_id: int
    student_id: int
    completion_percentage: float = Field(..., ge=0, le=100)
    required_materials: int
    completed_materials: int
    materials: List[MaterialCompletion] = Field(default_factory=list)


class GateDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    unlocked: bool
    reason: GateReason
    prerequisite_lesson_id: Optional[int] = None
    prerequisite_completion: Optional[float] = None
    threshold: Optional[float] = None


class CourseProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    course_id: int
    student_id: int
    total_lessons: int
    completed_lessons: int
    overall_progress_percent: float = Field(..., ge=0, le=100)
    average_grade: float
    status: CourseStatus


class CourseCohortSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    course_id: int
    total_students: int
    students_completed: int
    students_in_progress: int
    students_not_started: int
    average_progress: float
    average_grade: float


# ==================== API Schemas ====================


class LessonProgressResponse(BaseModel):
    lesson_id: int
    course_id: int
    student_id: int
    status: LessonStatus
    completion_percentage: float
    grade: Optional[float] = None
    is_unlocked: bool
    unlock_reason: Optional[str] = None
    gate: GateDecision
    completion: LessonCompletion
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    unlocked_at: Optional[datetime] = None


class CourseProgressResponse(CourseProgress):
    lessons: List[LessonProgressResponse] = Field(default_factory=list)


class LessonUnlockRequest(BaseModel):
    unlocked_by: Optional[int] = Field(None, description="Teacher granting the unlock")
    unlock_reason: Optional[str] = Field(None, max_length=500)


class LessonStatusUpdate(BaseModel):
    status: str = Field(..., description="One of the lesson progress statuses")
    teacher_notes: Optional[str] = None
