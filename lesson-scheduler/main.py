#!/usr/bin/env python3
"""
Lesson Scheduler command-line front end.

Loads the roster workbook and answers availability questions about it.

Usage:
    python main.py [--roster Roster.xlsx] teachers --date 2024-01-01 --time 10:00 --duration 20 [--level Basic]
    python main.py students --date 2024-01-01 --time 10:00 --duration 40
    python main.py slots --teacher t1 --date 2024-01-01 --duration 20
    python main.py schedule --student s1 [--weeks 4]
"""

import sys
import argparse
import logging
from typing import List, Optional

import pandas as pd

from schemas import Level
from data_loader import load_roster_from_excel
from availability import available_teachers_for_slot, available_students_for_slot, teacher_slots
from booking_service import BookingService, UPCOMING_WEEKS
from display_utils import format_lessons_table, format_schedule_text
from logger import setup_logger
from settings import Settings
from store import RosterStore

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Query lesson availability from a roster workbook",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("--roster", help="Path to the roster workbook (default: LESSON_SCHEDULER_ROSTER)")
    parser.add_argument("--log-level", help="Override LESSON_SCHEDULER_LOG_LEVEL")

    subparsers = parser.add_subparsers(dest="command", required=True)

    teachers = subparsers.add_parser("teachers", help="Teachers free for a slot")
    teachers.add_argument("--date", required=True, help="Lesson date, YYYY-MM-DD")
    teachers.add_argument("--time", required=True, help="Start time, HH:MM")
    teachers.add_argument("--duration", type=int, choices=[20, 40], default=20)
    teachers.add_argument("--level", choices=[level.value for level in Level])

    students = subparsers.add_parser("students", help="Students free for a slot")
    students.add_argument("--date", required=True, help="Lesson date, YYYY-MM-DD")
    students.add_argument("--time", required=True, help="Start time, HH:MM")
    students.add_argument("--duration", type=int, choices=[20, 40], default=20)

    slots = subparsers.add_parser("slots", help="Free start times for one teacher on one day")
    slots.add_argument("--teacher", required=True, help="Teacher id")
    slots.add_argument("--date", required=True, help="Lesson date, YYYY-MM-DD")
    slots.add_argument("--duration", type=int, choices=[20, 40], default=20)

    schedule = subparsers.add_parser("schedule", help="A student's upcoming lessons")
    schedule.add_argument("--student", required=True, help="Student id")
    schedule.add_argument("--weeks", type=int, default=UPCOMING_WEEKS)

    return parser.parse_args(argv)


def run(args: argparse.Namespace, store: RosterStore) -> int:
    if args.command == "teachers":
        level = Level(args.level) if args.level else None
        found = available_teachers_for_slot(args.date, args.time, args.duration, store.teachers, store.lessons, level)
        for teacher in found:
            print(f"{teacher.id}\t{teacher.full_name}\t{', '.join(l.value for l in teacher.levels)}")
        if not found:
            print("No teachers available for this slot/level.")

    elif args.command == "students":
        found = available_students_for_slot(args.date, args.time, args.duration, store.students, store.lessons)
        for student in found:
            sub = student.current_subscription
            print(f"{student.id}\t{student.full_name}\t{student.level.value}\t{sub.remaining} left")
        if not found:
            print("No students available for this slot.")

    elif args.command == "slots":
        teacher = store.get_teacher(args.teacher)
        if teacher is None:
            logger.error(f"Teacher '{args.teacher}' not found")
            return 1
        free = teacher_slots(teacher, args.date, store.lessons, args.duration)
        print(" ".join(free) if free else "No free slots.")

    elif args.command == "schedule":
        if store.get_student(args.student) is None:
            logger.error(f"Student '{args.student}' not found")
            return 1
        service = BookingService(store)
        upcoming = service.upcoming_lessons(args.student, weeks=args.weeks)
        if not upcoming:
            print("No upcoming lessons.")
        else:
            with pd.option_context("display.width", 120):
                print(format_lessons_table(upcoming, store.teachers, store.students).to_string(index=False))
            print()
            print(format_schedule_text(upcoming, store.teachers))

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    settings = Settings()

    try:
        settings.validate()
    except ValueError as e:
        print(e, file=sys.stderr)
        return 2

    level = getattr(logging, args.log_level.upper(), logging.INFO) if args.log_level else settings.log_level_value
    setup_logger("", level=level, log_file=settings.log_file)

    try:
        roster = load_roster_from_excel(args.roster or settings.roster_path)
        return run(args, RosterStore(roster))
    except ValueError as e:
        logger.error(str(e))
        return 1


if __name__ == '__main__':
    sys.exit(main())
