"""
Shared fixtures: a small roster and a controllable clock.

2024-01-01 is a Monday.
"""

import datetime

import pytest

from schemas import (
    Teacher, WorkingHour, Student, Subscription, Level,
    SubscriptionPackage, SubscriptionStatus, RosterData
)
from store import RosterStore
from booking_service import BookingService


class FixedClock:
    """Callable clock whose time tests can move."""

    def __init__(self, now: datetime.datetime):
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now


def make_subscription(**overrides) -> Subscription:
    values = dict(
        id="sub_default",
        package_type=SubscriptionPackage.GOLD,
        initial_balance=25,
        gift_lessons=2,
        lessons_used=5,
        status=SubscriptionStatus.ACTIVE,
        start_date=datetime.date(2023, 12, 15),
        end_date=datetime.date(2024, 1, 31),
    )
    values.update(overrides)
    return Subscription(**values)


@pytest.fixture
def clock():
    return FixedClock(datetime.datetime(2024, 1, 1, 8, 0))


@pytest.fixture
def sarah():
    """Works Monday and Wednesday 09:00-17:00."""
    return Teacher(
        id="t1",
        full_name="Sarah Connor",
        email="sarah@linguasched.com",
        levels=[Level.BASIC, Level.ADVANCED],
        working_hours=[
            WorkingHour(day_of_week="Monday", start_hour="09:00", end_hour="17:00"),
            WorkingHour(day_of_week="Wednesday", start_hour="09:00", end_hour="17:00"),
        ],
    )


@pytest.fixture
def david():
    """Works Monday and Tuesday 12:00-20:00."""
    return Teacher(
        id="t2",
        full_name="David Miller",
        email="david@linguasched.com",
        levels=[Level.BUSINESS, Level.BASIC],
        working_hours=[
            WorkingHour(day_of_week="Monday", start_hour="12:00", end_hour="20:00"),
            WorkingHour(day_of_week="Tuesday", start_hour="12:00", end_hour="20:00"),
        ],
    )


@pytest.fixture
def alice():
    """Gold package, 2 gift lessons, 5 used: 22 units left."""
    return Student(
        id="s1",
        full_name="Alice Smith",
        email="alice@test.com",
        level=Level.BASIC,
        preferred_teacher_id="t1",
        current_subscription=make_subscription(id="sub_alice"),
    )


@pytest.fixture
def bob():
    """Premium package with a single unit left."""
    return Student(
        id="s2",
        full_name="Bob Jones",
        email="bob@test.com",
        level=Level.BUSINESS,
        current_subscription=make_subscription(
            id="sub_bob",
            package_type=SubscriptionPackage.PREMIUM,
            initial_balance=120,
            gift_lessons=0,
            lessons_used=119,
        ),
    )


@pytest.fixture
def carol():
    """No subscription at all."""
    return Student(id="s3", full_name="Carol White", level=Level.KIDS)


@pytest.fixture
def dana():
    return Student(
        id="s4",
        full_name="Dana Brown",
        level=Level.ADVANCED,
        current_subscription=make_subscription(
            id="sub_dana",
            package_type=SubscriptionPackage.TOPAZ,
            initial_balance=60,
            gift_lessons=0,
            lessons_used=0,
        ),
    )


@pytest.fixture
def store(sarah, david, alice, bob, carol, dana):
    return RosterStore(RosterData(teachers=[sarah, david], students=[alice, bob, carol, dana]))


@pytest.fixture
def service(store, clock):
    return BookingService(store, clock=clock)
