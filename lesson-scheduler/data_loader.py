import logging
import pandas as pd
from pathlib import Path
from typing import Any, Dict, List, Optional
from schemas import (
    RosterData, Teacher, WorkingHour, Student, Subscription, Lesson,
    Level, PACKAGE_AMOUNTS, SubscriptionPackage
)
from constraints import validate_working_hours

logger = logging.getLogger(__name__)

REQUIRED_SHEETS = ['Teachers', 'WorkingHours', 'Students', 'Subscriptions', 'Lessons']

def _parse_comma_separated_field(value: Any) -> List[str]:
    """
    Safely parses a string that may contain comma-separated values into a list of strings.
    Handles empty, NaN, or non-string values gracefully.
    """
    if pd.isna(value):
        return []
    s_value = str(value)
    if not s_value.strip():
        return []
    items = [item.strip() for item in s_value.split(',')]
    return [item for item in items if item]

def _optional_str(value: Any) -> Optional[str]:
    if pd.isna(value):
        return None
    s_value = str(value).strip()
    return s_value or None

def _parse_clock(value: Any) -> str:
    """Excel hands times back as datetime.time or as text; both become 'HH:MM'."""
    if hasattr(value, 'strftime'):
        return value.strftime('%H:%M')
    s_value = str(value).strip()
    hours, _, minutes = s_value.partition(':')
    if hours.isdigit() and len(hours) == 1:
        s_value = f"0{hours}:{minutes[:2]}"
    return s_value[:5]

def _parse_int(value: Any) -> int:
    if pd.isna(value):
        return 0
    return int(float(value))

def _parse_date(value: Any):
    return pd.Timestamp(value).date()

def _parse_flag(value: Any) -> bool:
    if pd.isna(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'yes', '1', 'y')
    return bool(value)

def _parse_working_hours(df: pd.DataFrame) -> Dict[str, List[WorkingHour]]:
    """Groups the WorkingHours sheet by teacher, keeping sheet order within each teacher."""
    blocks: Dict[str, List[WorkingHour]] = {}
    for _, row in df.iterrows():
        block = WorkingHour(
            day_of_week=str(row['day_of_week']).strip(),
            start_hour=_parse_clock(row['start_hour']),
            end_hour=_parse_clock(row['end_hour'])
        )
        blocks.setdefault(str(row['teacher_id']), []).append(block)
    return blocks

def _parse_teachers(df: pd.DataFrame, working_hours: Dict[str, List[WorkingHour]]) -> List[Teacher]:
    """
    Parses the teachers DataFrame, handling the comma-separated 'levels' column.
    Blocks that break the operator's working-hour rule are kept but reported.
    """
    teachers: List[Teacher] = []
    for _, row in df.iterrows():
        levels: List[Level] = []
        for single_level in _parse_comma_separated_field(row['levels']):
            try:
                levels.append(Level(single_level))
            except ValueError:
                logger.warning(f"Skipping invalid level '{single_level}' for teacher '{row['id']}'.")
        teacher = Teacher(
            id=str(row['id']),
            full_name=row['full_name'],
            email=_optional_str(row.get('email')) or "",
            phone=_optional_str(row.get('phone')) or "",
            levels=levels,
            working_hours=working_hours.get(str(row['id']), [])
        )
        is_valid, problems = validate_working_hours(teacher)
        if not is_valid:
            for problem in problems:
                logger.warning(f"Teacher '{teacher.id}' working hours: {problem}")
        teachers.append(teacher)
    return teachers

def _parse_subscriptions(df: pd.DataFrame) -> Dict[str, Dict[str, Any]]:
    """
    Parses the subscriptions DataFrame into, per student, the current subscription
    (the row flagged 'current') and the archived history.
    """
    by_student: Dict[str, Dict[str, Any]] = {}
    for _, row in df.iterrows():
        package = SubscriptionPackage(str(row['package_type']).strip())
        subscription = Subscription(
            id=str(row['id']),
            package_type=package,
            initial_balance=PACKAGE_AMOUNTS[package],
            gift_lessons=_parse_int(row['gift_lessons']),
            lessons_used=_parse_int(row['lessons_used']),
            status=str(row['status']).strip(),
            start_date=_parse_date(row['start_date']),
            end_date=_parse_date(row['end_date'])
        )
        entry = by_student.setdefault(str(row['student_id']), {'current': None, 'history': []})
        if _parse_flag(row['current']):
            if entry['current'] is not None:
                entry['history'].append(entry['current'])
            entry['current'] = subscription
        else:
            entry['history'].append(subscription)
    return by_student

def _parse_students(df: pd.DataFrame, subscriptions: Dict[str, Dict[str, Any]]) -> List[Student]:
    """Parses the students DataFrame and attaches each student's subscriptions."""
    students: List[Student] = []
    for _, row in df.iterrows():
        ledger = subscriptions.get(str(row['id']), {'current': None, 'history': []})
        student = Student(
            id=str(row['id']),
            full_name=row['full_name'],
            email=_optional_str(row.get('email')) or "",
            phone=_optional_str(row.get('phone')) or "",
            phone2=_optional_str(row.get('phone2')),
            id_number=_optional_str(row.get('id_number')) or "",
            level=str(row['level']).strip(),
            preferred_teacher_id=_optional_str(row.get('preferred_teacher_id')),
            current_subscription=ledger['current'],
            subscription_history=ledger['history']
        )
        students.append(student)
    return students

def _parse_lessons(df: pd.DataFrame) -> List[Lesson]:
    """Parses the lessons DataFrame into a list of Lesson objects."""
    lessons: List[Lesson] = []
    for _, row in df.iterrows():
        lesson = Lesson(
            id=str(row['id']),
            student_id=str(row['student_id']),
            teacher_id=str(row['teacher_id']),
            date=_parse_date(row['date']),
            start_time=_parse_clock(row['start_time']),
            duration=_parse_int(row['duration']),
            status=str(row['status']).strip(),
            level=str(row['level']).strip()
        )
        lessons.append(lesson)
    return lessons

def load_roster_from_excel(file_path: Any) -> RosterData:
    """
    Main public function to read the whole roster from an Excel file,
    parse and validate it, and return a single RosterData object.
    """
    try:
        if isinstance(file_path, (str, Path)):
            file_path = Path(file_path).expanduser()
            if not file_path.exists():
                raise FileNotFoundError(f'Fatal Error: provided file path {file_path} does not exist.')

        # Read as text so identifiers and phone numbers keep their leading zeros.
        sheets = pd.read_excel(file_path, sheet_name=None, dtype=str)

        for required_sheet in REQUIRED_SHEETS:
            if required_sheet not in sheets:
                raise ValueError(f"Required sheet '{required_sheet}' not found in the Excel file.")

        working_hours = _parse_working_hours(sheets['WorkingHours'])
        teachers = _parse_teachers(sheets['Teachers'], working_hours)
        subscriptions = _parse_subscriptions(sheets['Subscriptions'])
        students = _parse_students(sheets['Students'], subscriptions)
        lessons = _parse_lessons(sheets['Lessons'])

        logger.info(f"Loaded roster: {len(teachers)} teachers, {len(students)} students, {len(lessons)} lessons")
        return RosterData(teachers=teachers, students=students, lessons=lessons)

    except Exception as e:
        raise ValueError(f"Failed to load or parse the roster data. Reason: {e}")
