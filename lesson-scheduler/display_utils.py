import pandas as pd
from typing import Dict, List, Sequence
from schemas import Lesson, Teacher, Student
from time_utils import add_minutes

def format_lessons_table(lessons: Sequence[Lesson], teachers: Sequence[Teacher], students: Sequence[Student]) -> pd.DataFrame:
    """
    Flattens lessons into one row each, with teacher and student names resolved.
    Dangling ids show as 'Unknown'.
    """
    teacher_names: Dict[str, str] = {t.id: t.full_name for t in teachers}
    student_names: Dict[str, str] = {s.id: s.full_name for s in students}

    records = [
        {
            "date": l.date.isoformat(),
            "time": f"{l.start_time} - {add_minutes(l.start_time, l.duration)}",
            "teacher": teacher_names.get(l.teacher_id, "Unknown"),
            "student": student_names.get(l.student_id, "Unknown"),
            "level": l.level.value,
            "duration": l.duration,
            "status": l.status.value,
        }
        for l in lessons
    ]
    columns = ["date", "time", "teacher", "student", "level", "duration", "status"]
    if not records:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(records, columns=columns).sort_values(["date", "time"]).reset_index(drop=True)

def format_schedule_text(lessons: Sequence[Lesson], teachers: Sequence[Teacher]) -> str:
    """One line per lesson: 'YYYY-MM-DD HH:MM - Teacher Name (40m)'."""
    teacher_names: Dict[str, str] = {t.id: t.full_name for t in teachers}
    lines: List[str] = [
        f"{l.date.isoformat()} {l.start_time} - {teacher_names.get(l.teacher_id, 'Unknown')} ({l.duration}m)"
        for l in lessons
    ]
    return "\n".join(lines)
