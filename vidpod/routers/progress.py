# vidpod/routers/progress.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vidpod.core.database import get_db
from vidpod.schemas.progress import (
    CourseCohortSummary,
    CourseProgressResponse,
    LessonProgressResponse,
    LessonStatusUpdate,
    LessonUnlockRequest,
)
from vidpod.services.progress import ProgressService

router = APIRouter(
    prefix="/progress",
    tags=["Progress"],
    responses={404: {"description": "Not found"}},
)


# ==================== Lesson Progress ====================


@router.get(
    "/students/{student_id}/lessons/{lesson_id}",
    response_model=LessonProgressResponse,
)
def get_lesson_progress(
    student_id: int,
    lesson_id: int,
    db: Session = Depends(get_db),
):
    """
    Get a student's progress on a lesson.
    Completion and the prerequisite gate are recomputed; nothing is stored.
    """
    service = ProgressService(db)
    return service.get_lesson_progress(student_id, lesson_id)


@router.post(
    "/students/{student_id}/lessons/{lesson_id}",
    response_model=LessonProgressResponse,
)
def open_lesson(
    student_id: int,
    lesson_id: int,
    db: Session = Depends(get_db),
):
    """
    Record that a student opened a lesson and store the refreshed progress.
    Locked lessons are reported as locked and no progress is recorded.
    """
    service = ProgressService(db)
    return service.refresh_lesson_progress(student_id, lesson_id)


@router.put(
    "/students/{student_id}/lessons/{lesson_id}/unlock",
    response_model=LessonProgressResponse,
)
def unlock_lesson(
    student_id: int,
    lesson_id: int,
    unlock_in: LessonUnlockRequest,
    db: Session = Depends(get_db),
):
    """
    Unlock a lesson for a student regardless of its prerequisite.
    Teacher action.
    """
    service = ProgressService(db)
    return service.unlock_lesson(student_id, lesson_id, unlock_in)


@router.put(
    "/students/{student_id}/lessons/{lesson_id}/status",
    response_model=LessonProgressResponse,
)
def update_lesson_status(
    student_id: int,
    lesson_id: int,
    update_in: LessonStatusUpdate,
    db: Session = Depends(get_db),
):
    """
    Set a lesson status by hand (passed, failed, skipped...).
    Teacher action.
    """
    service = ProgressService(db)
    return service.update_lesson_status(student_id, lesson_id, update_in)


# ==================== Course Progress ====================


@router.get(
    "/students/{student_id}/courses/{course_id}",
    response_model=CourseProgressResponse,
)
def get_course_progress(
    student_id: int,
    course_id: int,
    db: Session = Depends(get_db),
):
    service = ProgressService(db)
    return service.get_course_progress(student_id, course_id)


@router.get("/courses/{course_id}/analytics", response_model=CourseCohortSummary)
def get_course_analytics(
    course_id: int,
    db: Session = Depends(get_db),
):
    """
    Class overview of a course: students completed, in progress and not
    started, with average progress and grade.
    """
    service = ProgressService(db)
    return service.get_course_analytics(course_id)
