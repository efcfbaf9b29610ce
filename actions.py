"""
actions.py
Student actions from the dashboard: manual check-in, paying a pending
payment, event registration. Each returns replacement records; nothing is
modified in place.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from uuid import uuid4

from models import CheckIn, CheckInType, Event, Payment, PaymentMethod, PaymentState, Student
from utils import as_date

logger = logging.getLogger(__name__)

CHECK_IN_POINTS = {
    CheckInType.TRAINING: 10,
    CheckInType.EVENT: 15,
    CheckInType.EXAM: 20,
}


class PaymentError(ValueError):
    """Payment cannot be paid (already settled)."""


class EventFullError(ValueError):
    """Event has no places left."""


def record_check_in(
    student: Student,
    now: datetime | date,
    type: CheckInType | str = CheckInType.TRAINING,
    check_in_id: str | None = None,
) -> tuple[CheckIn, Student]:
    """
    New check-in dated `now` plus the student with the check-in's points
    added. Training is worth 10 points, events 15, exams 20.
    """
    kind = CheckInType(type)
    points = CHECK_IN_POINTS[kind]
    check_in = CheckIn(
        id=check_in_id or f"checkin-{uuid4().hex[:8]}",
        student_id=student.id,
        date=as_date(now),
        points=points,
        type=kind,
    )
    logger.info("Check-in %s for %s (+%d points)", check_in.id, student.id, points)
    return check_in, student.add_points(points)


def pay(payment: Payment, method: PaymentMethod | str, now: datetime | date) -> Payment:
    # A failed payment may be retried; a paid one may not
    if payment.status is PaymentState.PAID:
        raise PaymentError(f"Payment {payment.id} is already paid.")
    paid = replace(
        payment,
        method=PaymentMethod(method),
        status=PaymentState.PAID,
        paid_date=as_date(now),
    )
    logger.info("Payment %s paid via %s", paid.id, paid.method.value)
    return paid


def register_for_event(event: Event) -> Event:
    if event.is_registered:
        return event
    if event.is_full:
        raise EventFullError(f"Event {event.id} is full ({event.max_participants} places).")
    return replace(event, is_registered=True, current_participants=event.current_participants + 1)


def cancel_registration(event: Event) -> Event:
    if not event.is_registered:
        return event
    return replace(event, is_registered=False, current_participants=event.current_participants - 1)
