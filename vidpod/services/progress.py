# vidpod/services/progress.py
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import and_
from sqlalchemy.orm import Session

from vidpod.core.config import settings
from vidpod.core.decorator import db_exception
from vidpod.core.exceptions import InvalidProgressStatus
from vidpod.models.course import Course
from vidpod.models.lesson import Lesson
from vidpod.models.quiz_attempt import QuizAttempt
from vidpod.models.student_progress import StudentProgress
from vidpod.models.worksheet_submission import WorksheetSubmission
from vidpod.schemas.grading import AttemptRecord
from vidpod.schemas.progress import (
    LESSON_STATUSES,
    CourseCohortSummary,
    CourseInfo,
    CourseProgressResponse,
    GateDecision,
    LessonInfo,
    LessonProgressResponse,
    LessonStatusUpdate,
    LessonUnlockRequest,
    MaterialInfo,
    WorksheetSubmissionInfo,
)
from vidpod.services.course_progress import (
    aggregate_course_progress,
    summarize_course_cohort,
)
from vidpod.services.lesson_completion import (
    calculate_lesson_completion,
    calculate_lesson_grade,
    derive_lesson_status,
)
from vidpod.services.prerequisite_gate import evaluate_gate, find_prerequisite_cycle

logger = logging.getLogger(__name__)

MaterialInputs = Tuple[
    List[MaterialInfo],
    Dict[int, List[AttemptRecord]],
    Dict[int, List[WorksheetSubmissionInfo]],
]


class ProgressService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== Lookups ====================

    def _get_lesson(self, lesson_id: int) -> Lesson:
        lesson = self.db.query(Lesson).filter(Lesson.id == lesson_id).first()
        if not lesson:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Lesson not found",
            )
        return lesson

    def _get_course(self, course_id: int) -> Course:
        course = self.db.query(Course).filter(Course.id == course_id).first()
        if not course:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Course not found",
            )
        return course

    def _get_progress(self, student_id: int, lesson_id: int) -> Optional[StudentProgress]:
        return (
            self.db.query(StudentProgress)
            .filter(
                and_(
                    StudentProgress.student_id == student_id,
                    StudentProgress.lesson_id == lesson_id,
                )
            )
            .first()
        )

    def _material_inputs(self, student_id: int, lesson: Lesson) -> MaterialInputs:
        """Snapshot a lesson's materials with the student's attempts and submissions."""
        materials = []
        attempts_by_material = {}
        submissions_by_material = {}

        for material in lesson.materials:
            materials.append(MaterialInfo.model_validate(material))

            if material.quiz is not None:
                attempts = (
                    self.db.query(QuizAttempt)
                    .filter(
                        and_(
                            QuizAttempt.quiz_id == material.quiz.id,
                            QuizAttempt.student_id == student_id,
                        )
                    )
                    .order_by(QuizAttempt.attempt_number)
                    .all()
                )
                attempts_by_material[material.id] = [
                    AttemptRecord.model_validate(a) for a in attempts
                ]

            if material.worksheet is not None:
                submissions = (
                    self.db.query(WorksheetSubmission)
                    .filter(
                        and_(
                            WorksheetSubmission.worksheet_id == material.worksheet.id,
                            WorksheetSubmission.student_id == student_id,
                        )
                    )
                    .all()
                )
                submissions_by_material[material.id] = [
                    WorksheetSubmissionInfo.model_validate(s) for s in submissions
                ]

        return materials, attempts_by_material, submissions_by_material

    # ==================== Evaluation ====================

    def lesson_completion_percentage(self, student_id: int, lesson: Lesson) -> float:
        materials, attempts, submissions = self._material_inputs(student_id, lesson)
        progress = self._get_progress(student_id, lesson.id)
        return calculate_lesson_completion(
            student_id,
            LessonInfo.model_validate(lesson),
            materials,
            attempts,
            submissions,
            progress_exists=progress is not None,
        ).completion_percentage

    def evaluate_access(
        self,
        student_id: int,
        lesson: Lesson,
        progress: Optional[StudentProgress] = None,
    ) -> GateDecision:
        """Decide whether the lesson is open, recomputing the prerequisite's completion."""
        prerequisite_completion = None
        if lesson.requires_completion_of is not None:
            prerequisite = (
                self.db.query(Lesson)
                .filter(Lesson.id == lesson.requires_completion_of)
                .first()
            )
            if prerequisite is not None:
                prerequisite_completion = self.lesson_completion_percentage(
                    student_id, prerequisite
                )

        return evaluate_gate(
            student_id,
            LessonInfo.model_validate(lesson),
            prerequisite_completion,
            manually_unlocked=progress is not None and progress.unlocked_at is not None,
            threshold=settings.prerequisite_completion_threshold,
        )

    def _evaluate_lesson(
        self,
        student_id: int,
        lesson: Lesson,
        progress: Optional[StudentProgress],
    ) -> LessonProgressResponse:
        materials, attempts, submissions = self._material_inputs(student_id, lesson)
        completion = calculate_lesson_completion(
            student_id,
            LessonInfo.model_validate(lesson),
            materials,
            attempts,
            submissions,
            progress_exists=progress is not None,
        )
        gate = self.evaluate_access(student_id, lesson, progress)
        lesson_status = derive_lesson_status(
            completion.completion_percentage,
            gate.unlocked,
            progress.status if progress is not None else None,
        )

        return LessonProgressResponse(
            lesson_id=lesson.id,
            course_id=lesson.course_id,
            student_id=student_id,
            status=lesson_status,
            completion_percentage=completion.completion_percentage,
            grade=calculate_lesson_grade(materials, attempts),
            is_unlocked=gate.unlocked,
            unlock_reason=progress.unlock_reason if progress is not None else None,
            gate=gate,
            completion=completion,
            started_at=progress.started_at if progress is not None else None,
            completed_at=progress.completed_at if progress is not None else None,
            unlocked_at=progress.unlocked_at if progress is not None else None,
        )

    def get_lesson_progress(self, student_id: int, lesson_id: int) -> LessonProgressResponse:
        """Read-only view of a student's progress on a lesson."""
        lesson = self._get_lesson(lesson_id)
        return self._evaluate_lesson(
            student_id, lesson, self._get_progress(student_id, lesson_id)
        )

    @db_exception
    def refresh_lesson_progress(
        self, student_id: int, lesson_id: int
    ) -> LessonProgressResponse:
        """
        Recompute a lesson's progress and store it.

        Records the student's access: an unlocked lesson gets its progress
        record created on first visit. Locked lessons are evaluated but no
        record is created for them.
        """
        lesson = self._get_lesson(lesson_id)
        progress = self._get_progress(student_id, lesson_id)
        now = datetime.now(timezone.utc)

        if progress is None:
            gate = self.evaluate_access(student_id, lesson)
            if not gate.unlocked:
                logger.info(
                    f"Lesson {lesson_id} is locked for student {student_id} ({gate.reason})"
                )
                return self._evaluate_lesson(student_id, lesson, None)

            progress = StudentProgress(
                student_id=student_id,
                lesson_id=lesson.id,
                course_id=lesson.course_id,
                status="in_progress",
                completion_percentage=0,
                started_at=now,
            )
            self.db.add(progress)
            self.db.flush()

        result = self._evaluate_lesson(student_id, lesson, progress)

        progress.status = result.status
        progress.completion_percentage = result.completion_percentage
        progress.grade = result.grade
        progress.last_accessed_at = now
        if progress.started_at is None:
            progress.started_at = now
        if result.status in ("completed", "passed") and progress.completed_at is None:
            progress.completed_at = now

        self.db.commit()
        self.db.refresh(progress)

        logger.info(
            f"Progress for student {student_id} on lesson {lesson_id}: "
            f"{result.completion_percentage}% ({result.status})"
        )
        return result.model_copy(
            update={"started_at": progress.started_at, "completed_at": progress.completed_at}
        )

    def get_course_progress(self, student_id: int, course_id: int) -> CourseProgressResponse:
        course = self._get_course(course_id)
        lessons = list(course.lessons)

        lesson_infos = [LessonInfo.model_validate(l) for l in lessons]
        cycle = find_prerequisite_cycle(lesson_infos)
        if cycle:
            logger.warning(f"Course {course_id} has a prerequisite cycle between lessons {cycle}")

        lesson_results = [
            self._evaluate_lesson(student_id, lesson, self._get_progress(student_id, lesson.id))
            for lesson in lessons
        ]

        summary = aggregate_course_progress(
            student_id,
            CourseInfo.model_validate(course),
            lesson_infos,
            {r.lesson_id: r.completion_percentage for r in lesson_results},
            {r.lesson_id: r.grade for r in lesson_results},
            {r.lesson_id: r.status for r in lesson_results},
        )

        published = {l.id for l in lesson_infos if l.is_published}
        return CourseProgressResponse(
            **summary.model_dump(),
            lessons=[r for r in lesson_results if r.lesson_id in published],
        )

    def get_course_analytics(self, course_id: int) -> CourseCohortSummary:
        self._get_course(course_id)
        student_ids = [
            row.student_id
            for row in self.db.query(StudentProgress.student_id)
            .filter(StudentProgress.course_id == course_id)
            .distinct()
            .order_by(StudentProgress.student_id)
            .all()
        ]

        progresses = []
        for student_id in student_ids:
            course_progress = self.get_course_progress(student_id, course_id)
            progresses.append(course_progress)

        return summarize_course_cohort(course_id, progresses)

    # ==================== Teacher Actions ====================

    def _get_or_create_progress(self, student_id: int, lesson: Lesson) -> StudentProgress:
        progress = self._get_progress(student_id, lesson.id)
        if progress is None:
            progress = StudentProgress(
                student_id=student_id,
                lesson_id=lesson.id,
                course_id=lesson.course_id,
                status="not_started",
                completion_percentage=0,
            )
            self.db.add(progress)
        return progress

    @db_exception
    def unlock_lesson(
        self, student_id: int, lesson_id: int, unlock_in: LessonUnlockRequest
    ) -> LessonProgressResponse:
        """Open a lesson for a student regardless of its prerequisite."""
        lesson = self._get_lesson(lesson_id)
        progress = self._get_or_create_progress(student_id, lesson)

        progress.unlocked_at = datetime.now(timezone.utc)
        progress.unlock_reason = unlock_in.unlock_reason or "Manually unlocked by teacher"
        progress.unlocked_by = unlock_in.unlocked_by
        if progress.status == "locked":
            progress.status = "not_started"

        self.db.commit()
        logger.info(
            f"Lesson {lesson_id} unlocked for student {student_id} by {unlock_in.unlocked_by}"
        )
        return self.refresh_lesson_progress(student_id, lesson_id)

    @db_exception
    def update_lesson_status(
        self, student_id: int, lesson_id: int, update_in: LessonStatusUpdate
    ) -> LessonProgressResponse:
        if update_in.status not in LESSON_STATUSES or update_in.status == "locked":
            allowed = ", ".join(s for s in LESSON_STATUSES if s != "locked")
            raise InvalidProgressStatus(f"Invalid status. Must be one of: {allowed}")

        lesson = self._get_lesson(lesson_id)
        progress = self._get_or_create_progress(student_id, lesson)

        progress.status = update_in.status
        if update_in.teacher_notes is not None:
            progress.teacher_notes = update_in.teacher_notes
        if update_in.status in ("completed", "passed"):
            progress.completed_at = progress.completed_at or datetime.now(timezone.utc)

        self.db.commit()
        self.db.refresh(progress)
        return self._evaluate_lesson(student_id, lesson, progress)
