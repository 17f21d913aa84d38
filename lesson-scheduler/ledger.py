"""
Subscription ledger: balance checks and the two balance mutations.

The mutation helpers return an updated copy and never re-validate; the booking
service decides when they may be applied.
"""
import datetime
import logging
import uuid
from typing import Dict, Optional, Union

import pandas as pd

from schemas import (
    Student, Subscription, SubscriptionPackage, SubscriptionStatus,
    ValidationResult, FailureReason, PACKAGE_AMOUNTS, validate_duration
)

logger = logging.getLogger(__name__)

# Fixed pricing table: lesson minutes -> lesson units.
LESSON_COST: Dict[int, int] = {20: 1, 40: 2}
SUBSCRIPTION_LENGTH_MONTHS = 1

def lesson_cost(duration: int) -> int:
    return LESSON_COST[validate_duration(duration)]

def validate_booking(student: Student, duration: int, now_date: Union[datetime.date, datetime.datetime]) -> ValidationResult:
    """
    Checks, in order: subscription exists, is Active, covers now_date, and has
    enough balance for the lesson. Returns the first failure only.
    """
    if isinstance(now_date, datetime.datetime):
        now_date = now_date.date()
    try:
        cost = lesson_cost(duration)
    except ValueError as e:
        return ValidationResult.failure(FailureReason.INVALID_INPUT, str(e))

    sub = student.current_subscription
    if sub is None:
        return ValidationResult.failure(FailureReason.NO_SUBSCRIPTION, "No active subscription.")
    if sub.status != SubscriptionStatus.ACTIVE:
        return ValidationResult.failure(FailureReason.INACTIVE_SUBSCRIPTION, "Subscription inactive.")
    if not (sub.start_date <= now_date <= sub.end_date):
        return ValidationResult.failure(FailureReason.EXPIRED, "Subscription expired.")
    if sub.remaining < cost:
        return ValidationResult.failure(
            FailureReason.INSUFFICIENT_BALANCE,
            f"Insufficient balance ({sub.remaining} left).",
            remaining=sub.remaining
        )
    return ValidationResult.success()

def apply_booking_cost(subscription: Subscription, duration: int) -> Subscription:
    return subscription.model_copy(update={'lessons_used': subscription.lessons_used + lesson_cost(duration)})

def apply_cancellation_refund(subscription: Subscription, duration: int) -> Subscription:
    """Credits the lesson back, never taking lessons_used below zero."""
    refunded = max(0, subscription.lessons_used - lesson_cost(duration))
    return subscription.model_copy(update={'lessons_used': refunded})

# --- Operator Actions ---

def new_subscription(
    package: SubscriptionPackage,
    start_date: datetime.date,
    gift_lessons: int = 0,
    subscription_id: Optional[str] = None
) -> Subscription:
    """Creates an Active subscription valid for one calendar month from start_date."""
    end_date = (pd.Timestamp(start_date) + pd.DateOffset(months=SUBSCRIPTION_LENGTH_MONTHS)).date()
    return Subscription(
        id=subscription_id or uuid.uuid4().hex,
        package_type=package,
        initial_balance=PACKAGE_AMOUNTS[package],
        gift_lessons=gift_lessons,
        lessons_used=0,
        status=SubscriptionStatus.ACTIVE,
        start_date=start_date,
        end_date=end_date
    )

def replace_subscription(student: Student, subscription: Subscription) -> Student:
    """Archives the student's current subscription, if any, and installs the new one."""
    history = list(student.subscription_history)
    if student.current_subscription is not None:
        history.append(student.current_subscription)
        logger.info(f"Archived subscription {student.current_subscription.id} for student {student.id}")
    return student.model_copy(update={'current_subscription': subscription, 'subscription_history': history})
