# vidpod/services/prerequisite_gate.py
"""Lesson unlocking.

A lesson with a prerequisite opens once the student's completion of the
prerequisite reaches the threshold (70% unless configured otherwise). The
check is meant to run on every access with a freshly computed completion, so
a late essay grade unlocks the next lesson without any stored state.
"""

import logging
from typing import Dict, List, Optional, Sequence

from vidpod.schemas.progress import GateDecision, LessonInfo

logger = logging.getLogger(__name__)

PREREQUISITE_COMPLETION_THRESHOLD = 70.0


def evaluate_gate(
    student_id: int,
    lesson: LessonInfo,
    prerequisite_completion_percent: Optional[float],
    manually_unlocked: bool = False,
    threshold: float = PREREQUISITE_COMPLETION_THRESHOLD,
) -> GateDecision:
    prerequisite_id = lesson.requires_completion_of
    if prerequisite_id is None:
        return GateDecision(unlocked=True, reason="no_prerequisite")

    completion = prerequisite_completion_percent or 0.0
    if completion >= threshold:
        reason = "prerequisite_met"
        unlocked = True
    elif manually_unlocked:
        reason = "manual_override"
        unlocked = True
    else:
        reason = "prerequisite_incomplete"
        unlocked = False

    return GateDecision(
        unlocked=unlocked,
        reason=reason,
        prerequisite_lesson_id=prerequisite_id,
        prerequisite_completion=completion,
        threshold=threshold,
    )


def is_unlocked(
    student_id: int,
    lesson: LessonInfo,
    prerequisite_completion_percent: Optional[float],
    manually_unlocked: bool = False,
    threshold: float = PREREQUISITE_COMPLETION_THRESHOLD,
) -> bool:
    return evaluate_gate(
        student_id,
        lesson,
        prerequisite_completion_percent,
        manually_unlocked=manually_unlocked,
        threshold=threshold,
    ).unlocked


def find_prerequisite_cycle(lessons: Sequence[LessonInfo]) -> Optional[List[int]]:
    """
    Return the lesson ids forming a prerequisite cycle, or None.

    Each lesson has at most one prerequisite, so following the chain from
    every lesson with a visited set is enough. Prerequisites outside the
    given lessons end the chain.
    """
    requires: Dict[int, Optional[int]] = {l.id: l.requires_completion_of for l in lessons}
    finished = set()

    for start in requires:
        path: List[int] = []
        on_path = set()
        current: Optional[int] = start
        while current is not None and current in requires and current not in finished:
            if current in on_path:
                cycle = path[path.index(current):]
                logger.warning(f"Prerequisite cycle detected: {cycle}")
                return cycle
            path.append(current)
            on_path.add(current)
            current = requires[current]
        finished.update(path)

    return None
