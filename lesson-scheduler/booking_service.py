import datetime
import logging
import uuid
from typing import Callable, List, Optional, Union
from schemas import (
    BookingResult, CancellationResult, FailureReason, Lesson, LessonStatus, Level,
    Student, SubscriptionPackage, SubscriptionStatus, ValidationResult,
    validate_clock_time, validate_duration
)
from constraints import fits_working_hours, has_student_conflict, has_teacher_conflict
from ledger import (
    apply_booking_cost, apply_cancellation_refund, new_subscription,
    replace_subscription, validate_booking
)
from store import RosterStore
from time_utils import add_minutes, lesson_datetime, parse_date

logger = logging.getLogger(__name__)

REFUND_NOTICE_HOURS = 24
UPCOMING_WEEKS = 4

Clock = Callable[[], datetime.datetime]

class BookingService:
    """
    The only writer of lesson and subscription state. Each command runs its
    checks and its writes under the store lock, so it applies completely or not at all.
    """

    def __init__(self, store: RosterStore, clock: Clock = datetime.datetime.now):
        """
        The clock returns the current naive local time; tests pass a fixed one.
        """
        self.store = store
        self.clock = clock

    # --- Queries ---

    def check_subscription(self, student_id: str, duration: int) -> ValidationResult:
        """validate_booking against today's date, resolving the student id first."""
        student = self.store.get_student(student_id)
        if student is None:
            return ValidationResult.failure(FailureReason.NOT_FOUND, f"Student '{student_id}' not found.")
        return validate_booking(student, duration, self.clock().date())

    def upcoming_lessons(self, student_id: str, weeks: int = UPCOMING_WEEKS) -> List[Lesson]:
        """The student's Scheduled lessons from today through the next `weeks` weeks."""
        today = self.clock().date()
        horizon = today + datetime.timedelta(weeks=weeks)
        upcoming = [
            l for l in self.store.lessons
            if l.student_id == student_id
            and l.status == LessonStatus.SCHEDULED
            and today <= l.date <= horizon
        ]
        return sorted(upcoming, key=lambda l: (l.date, l.start_time))

    # --- Commands ---

    def create_booking(
        self,
        student_id: str,
        teacher_id: str,
        lesson_date: Union[str, datetime.date],
        start_time: str,
        duration: int,
        level: Optional[Level] = None
    ) -> BookingResult:
        """
        Books a lesson after checking input, both ids, the student's subscription,
        and both parties' calendars. On success the lesson is Scheduled and its cost
        is charged to the student's current subscription.
        """
        try:
            slot_date = parse_date(lesson_date)
            validate_clock_time(start_time)
            validate_duration(duration)
        except ValueError as e:
            return self._refuse(FailureReason.INVALID_INPUT, str(e))

        with self.store.lock:
            student = self.store.get_student(student_id)
            if student is None:
                return self._refuse(FailureReason.NOT_FOUND, f"Student '{student_id}' not found.")
            teacher = self.store.get_teacher(teacher_id)
            if teacher is None:
                return self._refuse(FailureReason.NOT_FOUND, f"Teacher '{teacher_id}' not found.")

            verdict = validate_booking(student, duration, self.clock().date())
            if not verdict.ok:
                return self._refuse(verdict.reason, verdict.message, remaining=verdict.remaining)

            lessons = self.store.lessons
            if has_student_conflict(student.id, slot_date, start_time, duration, lessons):
                return self._refuse(FailureReason.STUDENT_DOUBLE_BOOKED, "The student already has a lesson at this time.")

            fits, why = fits_working_hours(teacher, slot_date, start_time, duration)
            if not fits:
                return self._refuse(FailureReason.TEACHER_UNAVAILABLE, f"Teacher unavailable: {why}.")
            if has_teacher_conflict(teacher.id, slot_date, start_time, duration, lessons):
                return self._refuse(FailureReason.TEACHER_UNAVAILABLE, "Teacher unavailable: Lesson Conflict.")

            lesson = Lesson(
                id=uuid.uuid4().hex,
                student_id=student.id,
                teacher_id=teacher.id,
                date=slot_date,
                start_time=start_time,
                duration=duration,
                status=LessonStatus.SCHEDULED,
                level=level or student.level
            )
            charged = apply_booking_cost(student.current_subscription, duration)
            self.store.save_lesson(lesson)
            self.store.save_student(student.model_copy(update={'current_subscription': charged}))

        logger.info(
            f"Booked lesson {lesson.id}: student {student.id} with teacher {teacher.id} "
            f"on {slot_date} {start_time}-{add_minutes(start_time, duration)} ({charged.remaining} units left)"
        )
        return BookingResult(ok=True, lesson=lesson, message="Lesson booked.", remaining=charged.remaining)

    def cancel_lesson(self, lesson_id: str) -> CancellationResult:
        """
        Cancels a Scheduled lesson. The cost is credited back only when the lesson
        starts more than REFUND_NOTICE_HOURS from now.
        """
        with self.store.lock:
            lesson = self.store.get_lesson(lesson_id)
            if lesson is None:
                logger.warning(f"Cancellation refused: lesson {lesson_id} not found")
                return CancellationResult(ok=False, reason=FailureReason.NOT_FOUND, message=f"Lesson '{lesson_id}' not found.")
            if lesson.status != LessonStatus.SCHEDULED:
                logger.warning(f"Cancellation refused: lesson {lesson_id} is already {lesson.status.value}")
                return CancellationResult(
                    ok=False, lesson=lesson, reason=FailureReason.INVALID_TRANSITION,
                    message=f"Lesson is already {lesson.status.value}."
                )

            delta = lesson_datetime(lesson.date, lesson.start_time) - self.clock()
            hours_until = delta.total_seconds() / 3600
            is_refundable = hours_until > REFUND_NOTICE_HOURS

            cancelled = lesson.model_copy(update={'status': LessonStatus.CANCELLED})
            self.store.save_lesson(cancelled)

            refunded = False
            if is_refundable:
                student = self.store.get_student(lesson.student_id)
                if student is not None and student.current_subscription is not None:
                    credited = apply_cancellation_refund(student.current_subscription, lesson.duration)
                    self.store.save_student(student.model_copy(update={'current_subscription': credited}))
                    refunded = True
                else:
                    logger.warning(f"No subscription to refund for student {lesson.student_id} (lesson {lesson_id})")

        logger.info(f"Cancelled lesson {lesson_id} {hours_until:.1f}h ahead (refunded={refunded})")
        message = "Lesson cancelled and refunded." if refunded else "Lesson cancelled without refund."
        return CancellationResult(
            ok=True, lesson=cancelled, refunded=refunded, hours_until_lesson=hours_until, message=message
        )

    def complete_past_lessons(self) -> List[Lesson]:
        """
        Marks every Scheduled lesson whose end time has passed as Completed and
        returns the lessons it changed.
        """
        now = self.clock()
        completed: List[Lesson] = []
        with self.store.lock:
            for lesson in self.store.lessons:
                if lesson.status != LessonStatus.SCHEDULED:
                    continue
                ends_at = lesson_datetime(lesson.date, lesson.start_time) + datetime.timedelta(minutes=lesson.duration)
                if ends_at <= now:
                    done = lesson.model_copy(update={'status': LessonStatus.COMPLETED})
                    self.store.save_lesson(done)
                    completed.append(done)
        if completed:
            logger.info(f"Marked {len(completed)} lesson(s) as completed")
        return completed

    # --- Operator Actions ---

    def start_subscription(
        self,
        student_id: str,
        package: SubscriptionPackage,
        gift_lessons: int = 0,
        start_date: Optional[datetime.date] = None
    ) -> Optional[Student]:
        """Gives the student a fresh subscription, archiving the current one. None if the student is unknown."""
        with self.store.lock:
            student = self.store.get_student(student_id)
            if student is None:
                logger.warning(f"Cannot start subscription: student {student_id} not found")
                return None
            subscription = new_subscription(package, start_date or self.clock().date(), gift_lessons)
            updated = replace_subscription(student, subscription)
            self.store.save_student(updated)
        logger.info(f"Started {package.value} subscription {subscription.id} for student {student_id}")
        return updated

    def set_subscription_status(self, student_id: str, status: SubscriptionStatus) -> Optional[Student]:
        with self.store.lock:
            student = self.store.get_student(student_id)
            if student is None or student.current_subscription is None:
                logger.warning(f"Cannot set subscription status: student {student_id} has no subscription")
                return None
            sub = student.current_subscription.model_copy(update={'status': status})
            updated = student.model_copy(update={'current_subscription': sub})
            self.store.save_student(updated)
        logger.info(f"Subscription {sub.id} for student {student_id} is now {status.value}")
        return updated

    def _refuse(self, reason: FailureReason, message: str, remaining: Optional[int] = None) -> BookingResult:
        logger.warning(f"Booking refused ({reason.value}): {message}")
        return BookingResult(ok=False, reason=reason, message=message, remaining=remaining)
