"""
Read-only availability queries. Every function takes the full lesson roster so
collision checks always run against ground truth, and none of them mutates its input.
"""
import datetime
import logging
from typing import List, Optional, Sequence, Union
from schemas import Teacher, Student, Lesson, Level, SubscriptionStatus, validate_clock_time, validate_duration
from constraints import (
    SLOT_STEP_MINUTES,
    fits_working_hours,
    has_student_conflict,
    has_teacher_conflict,
    working_hour_for_day,
)
from time_utils import add_minutes, clock_value, day_of_week, parse_date

logger = logging.getLogger(__name__)

DateLike = Union[str, datetime.date]

def available_teachers_for_slot(
    lesson_date: DateLike,
    start_time: str,
    duration: int,
    teachers: Sequence[Teacher],
    lessons: Sequence[Lesson],
    student_level: Optional[Level] = None
) -> List[Teacher]:
    """
    Teachers who work the whole slot and have no overlapping lesson that day.
    When student_level is given, only teachers teaching that level are candidates.
    Output keeps the input roster order.
    """
    slot_date = parse_date(lesson_date)
    validate_clock_time(start_time)
    validate_duration(duration)
    candidates = [t for t in teachers if student_level in t.levels] if student_level else list(teachers)

    available = [
        t for t in candidates
        if fits_working_hours(t, slot_date, start_time, duration)[0]
        and not has_teacher_conflict(t.id, slot_date, start_time, duration, lessons)
    ]
    logger.debug(f"{len(available)}/{len(teachers)} teachers free on {slot_date} at {start_time} ({duration}m)")
    return available

def available_students_for_slot(
    lesson_date: DateLike,
    start_time: str,
    duration: int,
    students: Sequence[Student],
    lessons: Sequence[Lesson]
) -> List[Student]:
    """
    Students with an Active subscription and no overlapping lesson that day.
    Date window and balance are not checked here; level compatibility is the caller's concern.
    """
    slot_date = parse_date(lesson_date)
    validate_clock_time(start_time)
    validate_duration(duration)

    available = [
        s for s in students
        if s.current_subscription is not None
        and s.current_subscription.status == SubscriptionStatus.ACTIVE
        and not has_student_conflict(s.id, slot_date, start_time, duration, lessons)
    ]
    logger.debug(f"{len(available)}/{len(students)} students free on {slot_date} at {start_time} ({duration}m)")
    return available

def teacher_slots(teacher: Teacher, lesson_date: DateLike, lessons: Sequence[Lesson], duration: int) -> List[str]:
    """
    Every start time on the teacher's block for that day, stepping SLOT_STEP_MINUTES
    from the block start, where a lesson of `duration` fits and collides with nothing.
    """
    slot_date = parse_date(lesson_date)
    validate_duration(duration)
    block = working_hour_for_day(teacher, day_of_week(slot_date))
    if block is None:
        return []

    slots: List[str] = []
    block_end = clock_value(block.end_hour)
    current = block.start_hour
    while clock_value(current) < block_end:
        lesson_end = add_minutes(current, duration)
        # A lesson crossing midnight has wrapped; it cannot fit the block either way.
        if clock_value(lesson_end) > block_end or clock_value(lesson_end) < clock_value(current):
            break
        if not has_teacher_conflict(teacher.id, slot_date, current, duration, lessons):
            slots.append(current)
        next_slot = add_minutes(current, SLOT_STEP_MINUTES)
        if clock_value(next_slot) < clock_value(current):
            break
        current = next_slot
    return slots
