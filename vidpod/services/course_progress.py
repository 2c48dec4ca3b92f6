# vidpod/services/course_progress.py
from typing import Mapping, Optional, Sequence

from vidpod.schemas.progress import (
    CourseCohortSummary,
    CourseInfo,
    CourseProgress,
    LessonInfo,
)

COMPLETED_STATUSES = {"completed", "passed"}


def classify_course_status(overall_progress_percent: float) -> str:
    if overall_progress_percent >= 100:
        return "completed"
    if overall_progress_percent > 0:
        return "in_progress"
    return "not_started"


def _is_lesson_complete(completion: Optional[float], status: Optional[str]) -> bool:
    if status == "locked":
        return False
    return (completion or 0) >= 100 or status in COMPLETED_STATUSES


def aggregate_course_progress(
    student_id: int,
    course: CourseInfo,
    lessons: Sequence[LessonInfo],
    per_lesson_completion: Mapping[int, float],
    per_lesson_grade: Mapping[int, Optional[float]],
    per_lesson_status: Optional[Mapping[int, str]] = None,
) -> CourseProgress:
    """
    Roll lesson results up into one course progress record.

    Only published lessons count. A lesson is completed when its completion
    reaches 100% or its status is completed/passed, unless it is locked.
    """
    per_lesson_status = per_lesson_status or {}
    published = [l for l in lessons if l.is_published]

    completed_lessons = sum(
        1
        for l in published
        if _is_lesson_complete(per_lesson_completion.get(l.id), per_lesson_status.get(l.id))
    )
    total_lessons = len(published)
    overall = round(100 * completed_lessons / total_lessons, 2) if total_lessons else 0.0

    grades = [per_lesson_grade[l.id] for l in published if per_lesson_grade.get(l.id) is not None]
    average_grade = round(sum(grades) / len(grades), 2) if grades else 0.0

    return CourseProgress(
        course_id=course.id,
        student_id=student_id,
        total_lessons=total_lessons,
        completed_lessons=completed_lessons,
        overall_progress_percent=overall,
        average_grade=average_grade,
        status=classify_course_status(overall),
    )


def summarize_course_cohort(
    course_id: int, progresses: Sequence[CourseProgress]
) -> CourseCohortSummary:
    """Class-level view of a course: how far its students got on average."""
    total = len(progresses)
    graded = [p.average_grade for p in progresses if p.average_grade > 0]

    return CourseCohortSummary(
        course_id=course_id,
        total_students=total,
        students_completed=sum(1 for p in progresses if p.status == "completed"),
        students_in_progress=sum(1 for p in progresses if p.status == "in_progress"),
        students_not_started=sum(1 for p in progresses if p.status == "not_started"),
        average_progress=(
            round(sum(p.overall_progress_percent for p in progresses) / total, 2)
            if total
            else 0.0
        ),
        average_grade=round(sum(graded) / len(graded), 2) if graded else 0.0,
    )
