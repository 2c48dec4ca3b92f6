from vidpod.schemas.progress import LessonInfo
from vidpod.services.prerequisite_gate import (
    evaluate_gate,
    find_prerequisite_cycle,
    is_unlocked,
)

FIRST = LessonInfo(id=1, course_id=1)
SECOND = LessonInfo(id=2, course_id=1, requires_completion_of=1)


def test_lesson_without_prerequisite_is_open():
    decision = evaluate_gate(7, FIRST, None)
    assert decision.unlocked is True
    assert decision.reason == "no_prerequisite"


def test_threshold_is_inclusive():
    assert is_unlocked(7, SECOND, 65) is False
    assert is_unlocked(7, SECOND, 70) is True
    assert is_unlocked(7, SECOND, 100) is True


def test_unknown_prerequisite_completion_keeps_lesson_locked():
    decision = evaluate_gate(7, SECOND, None)
    assert decision.unlocked is False
    assert decision.reason == "prerequisite_incomplete"
    assert decision.prerequisite_lesson_id == 1
    assert decision.prerequisite_completion == 0


def test_manual_unlock_overrides_gate():
    decision = evaluate_gate(7, SECOND, 10, manually_unlocked=True)
    assert decision.unlocked is True
    assert decision.reason == "manual_override"


def test_custom_threshold():
    assert is_unlocked(7, SECOND, 55, threshold=50) is True
    assert evaluate_gate(7, SECOND, 55, threshold=80).threshold == 80


def test_linear_chain_has_no_cycle():
    lessons = [FIRST, SECOND, LessonInfo(id=3, requires_completion_of=2)]
    assert find_prerequisite_cycle(lessons) is None


def test_cycle_is_reported():
    lessons = [
        LessonInfo(id=1, requires_completion_of=3),
        LessonInfo(id=2, requires_completion_of=1),
        LessonInfo(id=3, requires_completion_of=2),
        LessonInfo(id=4, requires_completion_of=1),
    ]
    assert sorted(find_prerequisite_cycle(lessons)) == [1, 2, 3]


def test_self_prerequisite_is_a_cycle():
    assert find_prerequisite_cycle([LessonInfo(id=5, requires_completion_of=5)]) == [5]
