# vidpod/services/lesson_completion.py
"""Lesson completion, lesson grade and lesson status.

Completion is measured over the lesson's required materials:

* quiz       - complete once a counted attempt exists (pass or fail)
* worksheet  - complete once a submission has status ``submitted``
* reading    - always complete, reading is not tracked
* any other required type cannot be completed automatically

A lesson without required materials is complete as soon as the student has
a progress record for it.
"""

from typing import Mapping, Optional, Sequence

from vidpod.core.exceptions import NoAttemptsError
from vidpod.schemas.grading import AttemptRecord
from vidpod.schemas.progress import (
    LessonCompletion,
    LessonInfo,
    MaterialCompletion,
    MaterialInfo,
    WorksheetSubmissionInfo,
)
from vidpod.services.attempt_history import counted_attempt

ALWAYS_COMPLETE_MATERIALS = {"reading"}
STICKY_STATUSES = {"completed", "passed", "failed", "skipped"}


def _material_completion(
    material: MaterialInfo,
    attempts: Sequence[AttemptRecord],
    submissions: Sequence[WorksheetSubmissionInfo],
) -> MaterialCompletion:
    if material.material_type in ALWAYS_COMPLETE_MATERIALS:
        return MaterialCompletion(
            material_id=material.id, material_type=material.material_type, is_complete=True
        )

    if material.material_type == "quiz":
        if material.quiz is None:
            return MaterialCompletion(
                material_id=material.id, material_type="quiz", is_complete=False
            )
        try:
            counted = counted_attempt(material.quiz, attempts)
        except NoAttemptsError:
            return MaterialCompletion(
                material_id=material.id, material_type="quiz", is_complete=False
            )
        return MaterialCompletion(
            material_id=material.id,
            material_type="quiz",
            is_complete=counted.is_completed,
            counted=counted,
        )

    if material.material_type == "worksheet":
        return MaterialCompletion(
            material_id=material.id,
            material_type="worksheet",
            is_complete=any(s.status == "submitted" for s in submissions),
        )

    return MaterialCompletion(
        material_id=material.id, material_type=material.material_type, is_complete=False
    )


def calculate_lesson_completion(
    student_id: int,
    lesson: LessonInfo,
    required_materials: Sequence[MaterialInfo],
    attempts_by_material: Optional[Mapping[int, Sequence[AttemptRecord]]] = None,
    worksheet_submissions_by_material: Optional[
        Mapping[int, Sequence[WorksheetSubmissionInfo]]
    ] = None,
    progress_exists: bool = False,
) -> LessonCompletion:
    """
    Compute a student's completion percentage for one lesson.

    ``required_materials`` may contain optional materials too; only those
    flagged ``is_required`` for this lesson are counted.
    """
    attempts_by_material = attempts_by_material or {}
    worksheet_submissions_by_material = worksheet_submissions_by_material or {}

    required = [
        m
        for m in required_materials
        if m.is_required and (m.lesson_id is None or m.lesson_id == lesson.id)
    ]

    if not required:
        return LessonCompletion(
            lesson_id=lesson.id,
            student_id=student_id,
            completion_percentage=100.0 if progress_exists else 0.0,
            required_materials=0,
            completed_materials=0,
        )

    materials = [
        _material_completion(
            material,
            attempts_by_material.get(material.id, ()),
            worksheet_submissions_by_material.get(material.id, ()),
        )
        for material in required
    ]
    completed = sum(1 for m in materials if m.is_complete)

    return LessonCompletion(
        lesson_id=lesson.id,
        student_id=student_id,
        completion_percentage=min(round(100 * completed / len(required), 2), 100.0),
        required_materials=len(required),
        completed_materials=completed,
        materials=materials,
    )


def calculate_lesson_grade(
    materials: Sequence[MaterialInfo],
    attempts_by_material: Optional[Mapping[int, Sequence[AttemptRecord]]] = None,
) -> Optional[float]:
    """Mean counted quiz score over the lesson's quizzes; None while nothing is graded."""
    attempts_by_material = attempts_by_material or {}
    scores = []
    for material in materials:
        if material.material_type != "quiz" or material.quiz is None:
            continue
        try:
            counted = counted_attempt(material.quiz, attempts_by_material.get(material.id, ()))
        except NoAttemptsError:
            continue
        scores.append(counted.percentage_score)

    if not scores:
        return None
    return round(sum(scores) / len(scores), 2)


def derive_lesson_status(
    completion_percentage: float,
    is_unlocked: bool,
    stored_status: Optional[str] = None,
) -> str:
    if not is_unlocked:
        return "locked"
    if stored_status in STICKY_STATUSES:
        return stored_status
    if completion_percentage >= 100:
        return "completed"
    if completion_percentage > 0 or stored_status == "in_progress":
        return "in_progress"
    return "not_started"
