"""
Tests for loading a roster workbook.
"""

import datetime
import logging

import pandas as pd
import pytest

from schemas import Level, LessonStatus, SubscriptionStatus, DayOfWeek
from data_loader import load_roster_from_excel


def write_workbook(path, sheets):
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, frame in sheets.items():
            frame.to_excel(writer, sheet_name=name, index=False)


@pytest.fixture
def roster_sheets():
    return {
        "Teachers": pd.DataFrame([
            {"id": "t1", "full_name": "Sarah Connor", "email": "sarah@linguasched.com", "phone": "0501234567", "levels": "Basic, Advanced"},
            {"id": "t2", "full_name": "David Miller", "email": "david@linguasched.com", "phone": "", "levels": "Business"},
        ]),
        "WorkingHours": pd.DataFrame([
            {"teacher_id": "t1", "day_of_week": "Monday", "start_hour": "9:00", "end_hour": "17:00"},
            {"teacher_id": "t2", "day_of_week": "Tuesday", "start_hour": "12:00", "end_hour": "20:00"},
            {"teacher_id": "t2", "day_of_week": "Friday", "start_hour": "08:00", "end_hour": "12:00"},
        ]),
        "Students": pd.DataFrame([
            {"id": "s1", "full_name": "Alice Smith", "email": "alice@test.com", "phone": "0521112222",
             "phone2": None, "id_number": "012345678", "level": "Basic", "preferred_teacher_id": "t1"},
            {"id": "s2", "full_name": "Bob Jones", "email": "bob@test.com", "phone": "",
             "phone2": None, "id_number": "", "level": "Business", "preferred_teacher_id": None},
        ]),
        "Subscriptions": pd.DataFrame([
            {"id": "sub_old", "student_id": "s1", "package_type": "Gold", "gift_lessons": 0, "lessons_used": 25,
             "status": "Non-Active", "start_date": datetime.date(2023, 11, 1), "end_date": datetime.date(2023, 12, 1), "current": False},
            {"id": "sub1", "student_id": "s1", "package_type": "Gold", "gift_lessons": 2, "lessons_used": 5,
             "status": "Active", "start_date": datetime.date(2023, 12, 15), "end_date": datetime.date(2024, 1, 31), "current": True},
        ]),
        "Lessons": pd.DataFrame([
            {"id": "l1", "student_id": "s1", "teacher_id": "t1", "date": datetime.date(2024, 1, 1),
             "start_time": "10:00", "duration": 40, "status": "Scheduled", "level": "Basic"},
        ]),
    }


class TestLoadRoster:
    """Test cases for load_roster_from_excel."""

    def test_loads_every_sheet(self, tmp_path, roster_sheets):
        path = tmp_path / "Roster.xlsx"
        write_workbook(path, roster_sheets)

        roster = load_roster_from_excel(str(path))

        assert [t.id for t in roster.teachers] == ["t1", "t2"]
        assert roster.teachers[0].levels == [Level.BASIC, Level.ADVANCED]
        assert roster.teachers[0].phone == "0501234567"
        assert roster.teachers[0].working_hours[0].start_hour == "09:00"
        assert roster.teachers[0].working_hours[0].day_of_week == DayOfWeek.MONDAY
        assert [wh.day_of_week for wh in roster.teachers[1].working_hours] == [DayOfWeek.TUESDAY, DayOfWeek.FRIDAY]

    def test_subscriptions_are_split_into_current_and_history(self, tmp_path, roster_sheets):
        path = tmp_path / "Roster.xlsx"
        write_workbook(path, roster_sheets)

        alice, bob = load_roster_from_excel(path).students

        assert alice.current_subscription.id == "sub1"
        assert alice.current_subscription.remaining == 22
        assert alice.current_subscription.start_date == datetime.date(2023, 12, 15)
        assert [s.id for s in alice.subscription_history] == ["sub_old"]
        assert alice.subscription_history[0].status == SubscriptionStatus.NON_ACTIVE
        assert alice.id_number == "012345678"
        assert alice.preferred_teacher_id == "t1"
        assert bob.current_subscription is None
        assert bob.preferred_teacher_id is None

    def test_lessons(self, tmp_path, roster_sheets):
        path = tmp_path / "Roster.xlsx"
        write_workbook(path, roster_sheets)

        (lesson,) = load_roster_from_excel(path).lessons

        assert lesson.date == datetime.date(2024, 1, 1)
        assert lesson.duration == 40
        assert lesson.status == LessonStatus.SCHEDULED

    def test_short_block_is_kept_but_reported(self, tmp_path, roster_sheets, caplog):
        path = tmp_path / "Roster.xlsx"
        write_workbook(path, roster_sheets)

        with caplog.at_level(logging.WARNING, logger="data_loader"):
            roster = load_roster_from_excel(path)

        assert len(roster.teachers[1].working_hours) == 2
        assert any("at least 5 hours" in message for message in caplog.messages)

    def test_missing_sheet(self, tmp_path, roster_sheets):
        del roster_sheets["Lessons"]
        path = tmp_path / "Roster.xlsx"
        write_workbook(path, roster_sheets)

        with pytest.raises(ValueError, match="Required sheet 'Lessons'"):
            load_roster_from_excel(path)

    def test_invalid_lesson_duration(self, tmp_path, roster_sheets):
        roster_sheets["Lessons"].loc[0, "duration"] = 30
        path = tmp_path / "Roster.xlsx"
        write_workbook(path, roster_sheets)

        with pytest.raises(ValueError, match="Failed to load or parse the roster data"):
            load_roster_from_excel(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            load_roster_from_excel(tmp_path / "nope.xlsx")
