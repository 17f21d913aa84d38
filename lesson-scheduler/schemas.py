from pydantic import BaseModel, Field, field_validator
from enum import Enum
from typing import Dict, List, Optional
import datetime
import re

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
ALLOWED_DURATIONS = (20, 40)

# Using Python's standard Enum for controlled vocabularies
class Level(str, Enum):
    """Enumeration for the proficiency level of a student or lesson."""
    KIDS = "Kids"
    YOUNG = "Young"
    BASIC = "Basic"
    ADVANCED = "Advanced"
    BUSINESS = "Business"

class DayOfWeek(str, Enum):
    """Enumeration for the days of the week, Sunday first."""
    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"

class SubscriptionPackage(str, Enum):
    """Enumeration for the purchasable lesson packages."""
    GOLD = "Gold"
    TOPAZ = "Topaz"
    PREMIUM = "Premium"

class SubscriptionStatus(str, Enum):
    """Enumeration for the operator-controlled subscription status."""
    ACTIVE = "Active"
    NON_ACTIVE = "Non-Active"

class LessonStatus(str, Enum):
    """Enumeration for the lifecycle state of a lesson."""
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

class FailureReason(str, Enum):
    """Enumeration for every reason a query or command can be refused."""
    NO_SUBSCRIPTION = "NoSubscription"
    INACTIVE_SUBSCRIPTION = "InactiveSubscription"
    EXPIRED = "Expired"
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    STUDENT_DOUBLE_BOOKED = "StudentDoubleBooked"
    TEACHER_UNAVAILABLE = "TeacherUnavailable"
    NOT_FOUND = "NotFound"
    INVALID_INPUT = "InvalidInput"
    INVALID_TRANSITION = "InvalidTransition"

PACKAGE_AMOUNTS: Dict[SubscriptionPackage, int] = {
    SubscriptionPackage.GOLD: 25,
    SubscriptionPackage.TOPAZ: 60,
    SubscriptionPackage.PREMIUM: 120,
}

def validate_clock_time(value: str) -> str:
    """Returns the value unchanged if it is a zero-padded 24-hour "HH:MM" string."""
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValueError(f"Invalid time '{value}': expected HH:MM (24-hour).")
    return value

def validate_duration(value: int) -> int:
    if value not in ALLOWED_DURATIONS:
        raise ValueError(f"Invalid duration {value}: lessons last 20 or 40 minutes.")
    return value

# --- Base Models Reflecting the Roster ---

class WorkingHour(BaseModel):
    """A recurring weekly availability window for a teacher."""
    day_of_week: DayOfWeek = Field(description="The day this block applies to (e.g., 'Monday').")
    start_hour: str = Field(description="The start of the block, 'HH:MM'.")
    end_hour: str = Field(description="The end of the block, 'HH:MM'.")

    check_times = field_validator('start_hour', 'end_hour')(validate_clock_time)

class Teacher(BaseModel):
    """Represents a single teacher, the levels they teach and their weekly hours."""
    id: str = Field(description="Primary key. Unique identifier for the teacher.")
    full_name: str = Field(description="The full name of the teacher.")
    email: str = Field("", description="Contact e-mail address.")
    phone: str = Field("", description="Contact phone number.")
    levels: List[Level] = Field(default_factory=list, description="The levels this teacher is qualified to teach.")
    working_hours: List[WorkingHour] = Field(default_factory=list, description="Weekly availability blocks, first match per day wins.")

class Subscription(BaseModel):
    """A student's lesson package. The remaining balance is always derived, never stored."""
    id: str = Field(description="Primary key. Unique identifier for the subscription.")
    package_type: SubscriptionPackage = Field(description="The purchased package.")
    initial_balance: int = Field(description="Base package amount in lesson units.")
    gift_lessons: int = Field(0, description="Bonus lesson units granted by the operator.")
    lessons_used: int = Field(0, description="Lesson units consumed so far.")
    status: SubscriptionStatus = Field(SubscriptionStatus.ACTIVE, description="Set manually by an operator.")
    start_date: datetime.date = Field(description="First valid day, inclusive.")
    end_date: datetime.date = Field(description="Last valid day, inclusive.")

    @property
    def total(self) -> int:
        return self.initial_balance + self.gift_lessons

    @property
    def remaining(self) -> int:
        return self.total - self.lessons_used

class Student(BaseModel):
    """Represents a single student with their level and current subscription."""
    id: str = Field(description="Primary key. Unique identifier for the student.")
    full_name: str = Field(description="The full name of the student.")
    email: str = Field("", description="Contact e-mail address.")
    phone: str = Field("", description="Contact phone number.")
    phone2: Optional[str] = Field(None, description="Optional second phone number.")
    id_number: str = Field("", description="National or internal identification number.")
    level: Level = Field(description="The student's current proficiency level.")
    preferred_teacher_id: Optional[str] = Field(None, description="Weak reference to a Teacher. Unresolved means no preference.")
    current_subscription: Optional[Subscription] = Field(None, description="The active ledger, if any.")
    subscription_history: List[Subscription] = Field(default_factory=list, description="Archived subscriptions.")

class Lesson(BaseModel):
    """Represents a single booked lesson between one student and one teacher."""
    id: str = Field(description="Primary key. Unique identifier for the lesson.")
    student_id: str = Field(description="Weak reference to the Student.")
    teacher_id: str = Field(description="Weak reference to the Teacher.")
    date: datetime.date = Field(description="The calendar date of the lesson.")
    start_time: str = Field(description="The start of the lesson, 'HH:MM'.")
    duration: int = Field(description="Length in minutes, 20 or 40.")
    status: LessonStatus = Field(LessonStatus.SCHEDULED)
    level: Level = Field(description="The level the lesson was booked under.")

    check_start = field_validator('start_time')(validate_clock_time)
    check_duration = field_validator('duration')(validate_duration)

# --- A container model to hold all the loaded data ---

class RosterData(BaseModel):
    """A top-level model to hold all the parsed and validated data."""
    teachers: List[Teacher] = Field(default_factory=list)
    students: List[Student] = Field(default_factory=list)
    lessons: List[Lesson] = Field(default_factory=list)

# --- Models for the Engine's Verdicts ---

class ValidationResult(BaseModel):
    """The outcome of a subscription check. Holds the first failing reason only."""
    ok: bool
    reason: Optional[FailureReason] = None
    message: str = ""
    remaining: Optional[int] = Field(None, description="Balance left, reported with InsufficientBalance.")

    @classmethod
    def success(cls) -> 'ValidationResult':
        return cls(ok=True, message="Subscription valid.")

    @classmethod
    def failure(cls, reason: FailureReason, message: str, remaining: Optional[int] = None) -> 'ValidationResult':
        return cls(ok=False, reason=reason, message=message, remaining=remaining)

class BookingResult(BaseModel):
    """The outcome of a booking command."""
    ok: bool
    lesson: Optional[Lesson] = None
    reason: Optional[FailureReason] = None
    message: str = ""
    remaining: Optional[int] = None

class CancellationResult(BaseModel):
    """The outcome of a cancellation command."""
    ok: bool
    lesson: Optional[Lesson] = None
    refunded: bool = False
    hours_until_lesson: Optional[float] = None
    reason: Optional[FailureReason] = None
    message: str = ""
