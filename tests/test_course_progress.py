from vidpod.schemas.progress import CourseInfo, LessonInfo
from vidpod.services.course_progress import (
    aggregate_course_progress,
    classify_course_status,
    summarize_course_cohort,
)

COURSE = CourseInfo(id=1, title="Podcasting 101")
LESSONS = [LessonInfo(id=i, course_id=1) for i in range(1, 5)]


def test_half_the_lessons_completed():
    progress = aggregate_course_progress(
        3,
        COURSE,
        LESSONS,
        {1: 100, 2: 100, 3: 50, 4: 0},
        {1: 80, 2: 90, 3: None, 4: None},
    )
    assert progress.total_lessons == 4
    assert progress.completed_lessons == 2
    assert progress.overall_progress_percent == 50
    assert progress.average_grade == 85
    assert progress.status == "in_progress"


def test_aggregation_is_idempotent():
    args = (3, COURSE, LESSONS, {1: 100, 2: 30}, {1: 72.5})
    assert aggregate_course_progress(*args) == aggregate_course_progress(*args)


def test_unpublished_lessons_are_not_counted():
    lessons = LESSONS[:2] + [LessonInfo(id=9, course_id=1, is_published=False)]
    progress = aggregate_course_progress(3, COURSE, lessons, {1: 100, 2: 100, 9: 0}, {})
    assert progress.total_lessons == 2
    assert progress.status == "completed"


def test_teacher_statuses_count_as_completed_unless_locked():
    progress = aggregate_course_progress(
        3,
        COURSE,
        LESSONS,
        {1: 0, 2: 100, 3: 0, 4: 0},
        {},
        {1: "passed", 2: "locked", 3: "completed", 4: "failed"},
    )
    assert progress.completed_lessons == 2


def test_empty_course():
    progress = aggregate_course_progress(3, COURSE, [], {}, {})
    assert progress.overall_progress_percent == 0
    assert progress.average_grade == 0
    assert progress.status == "not_started"


def test_classify_course_status():
    assert classify_course_status(0) == "not_started"
    assert classify_course_status(0.5) == "in_progress"
    assert classify_course_status(100) == "completed"


def test_cohort_summary():
    progresses = [
        aggregate_course_progress(1, COURSE, LESSONS, {i: 100 for i in range(1, 5)}, {1: 90}),
        aggregate_course_progress(2, COURSE, LESSONS, {1: 100}, {1: 70}),
        aggregate_course_progress(3, COURSE, LESSONS, {}, {}),
    ]
    summary = summarize_course_cohort(1, progresses)
    assert summary.total_students == 3
    assert summary.students_completed == 1
    assert summary.students_in_progress == 1
    assert summary.students_not_started == 1
    assert summary.average_progress == 41.67
    assert summary.average_grade == 80
