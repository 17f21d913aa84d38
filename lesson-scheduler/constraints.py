import datetime
from typing import Iterable, List, Optional, Tuple
from schemas import Lesson, LessonStatus, Teacher, WorkingHour, DayOfWeek
from time_utils import (
    add_minutes, clock_value, day_of_week, do_intervals_overlap, is_time_in_range
)

# --- Constants for Business Rules ---
SLOT_STEP_MINUTES = 20
MIN_WORKING_BLOCK_HOURS = 5

# --- Hard Constraint Checking ---

def working_hour_for_day(teacher: Teacher, day: DayOfWeek) -> Optional[WorkingHour]:
    """
    Returns the teacher's block for the given day. Only the first block
    matching the day name is ever considered.
    """
    return next((wh for wh in teacher.working_hours if wh.day_of_week == day), None)

def fits_working_hours(teacher: Teacher, lesson_date: datetime.date, start_time: str, duration: int) -> Tuple[bool, Optional[str]]:
    """
    Returns (True, None) if the slot lies inside the teacher's block for that day,
    (False, "Reason") otherwise.
    """
    block = working_hour_for_day(teacher, day_of_week(lesson_date))
    if block is None:
        return (False, "No Working Hours")
    if not is_time_in_range(start_time, block.start_hour, block.end_hour):
        return (False, "Outside Working Hours")
    end_value = clock_value(add_minutes(start_time, duration))
    if end_value > clock_value(block.end_hour) or end_value < clock_value(start_time):
        return (False, "Ends After Working Hours")
    return (True, None)

def _is_blocking(lesson: Lesson, lesson_date: datetime.date, start_time: str, duration: int) -> bool:
    return (lesson.date == lesson_date and
            lesson.status != LessonStatus.CANCELLED and
            do_intervals_overlap(start_time, duration, lesson.start_time, lesson.duration))

def has_teacher_conflict(teacher_id: str, lesson_date: datetime.date, start_time: str, duration: int, lessons: Iterable[Lesson]) -> bool:
    return any(l.teacher_id == teacher_id and _is_blocking(l, lesson_date, start_time, duration) for l in lessons)

def has_student_conflict(student_id: str, lesson_date: datetime.date, start_time: str, duration: int, lessons: Iterable[Lesson]) -> bool:
    return any(l.student_id == student_id and _is_blocking(l, lesson_date, start_time, duration) for l in lessons)

# --- Edit-Time Rule Checking ---

def validate_working_hours(teacher: Teacher) -> Tuple[bool, List[str]]:
    """
    Checks the operator rule for working-hour blocks: each block must end after it
    starts and span at least MIN_WORKING_BLOCK_HOURS whole hours (hour digits only).
    The availability checks above never call this.
    """
    problems: List[str] = []
    for wh in teacher.working_hours:
        label = f"{wh.day_of_week.value} {wh.start_hour}-{wh.end_hour}"
        if clock_value(wh.end_hour) <= clock_value(wh.start_hour):
            problems.append(f"{label}: block must end after it starts.")
            continue
        start_hour = int(wh.start_hour.split(':')[0])
        end_hour = int(wh.end_hour.split(':')[0])
        if end_hour - start_hour < MIN_WORKING_BLOCK_HOURS:
            problems.append(f"{label}: block must be at least {MIN_WORKING_BLOCK_HOURS} hours long.")
    return (not problems, problems)
