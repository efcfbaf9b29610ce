"""
metrics.py
Derived dashboard figures: period buckets, revenue, overdue, rankings, progress.

Every function here is pure: inputs are never modified and "now" is always
passed in explicitly.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Sequence

from models import CheckIn, Level, Payment, PaymentState, PaymentStatus, Student
from repository import GymRepository
from utils import as_date

SUNDAY = 6  # date.weekday() numbering

# Points window per level; `next` names the level reached at `max`
LEVEL_THRESHOLDS = {
    Level.BEGINNER: {"min": 0, "max": 500, "next": "intermediate"},
    Level.INTERMEDIATE: {"min": 500, "max": 1000, "next": "advanced"},
    Level.ADVANCED: {"min": 1000, "max": 2000, "next": "expert"},
}

# Higher is worse
STATUS_SEVERITY = {
    PaymentStatus.ACTIVE: 0,
    PaymentStatus.OVERDUE: 1,
    PaymentStatus.SUSPENDED: 2,
}


# ---------- Period bucketing ----------

def week_start(now: datetime | date, first_weekday: int = SUNDAY) -> date:
    today = as_date(now)
    return today - timedelta(days=(today.weekday() - first_weekday) % 7)


def in_week(value: datetime | date, now: datetime | date, first_weekday: int = SUNDAY) -> bool:
    start = week_start(now, first_weekday)
    return start <= as_date(value) < start + timedelta(days=7)


def in_month(value: datetime | date, now: datetime | date) -> bool:
    d, today = as_date(value), as_date(now)
    return (d.year, d.month) == (today.year, today.month)


def in_year(value: datetime | date, now: datetime | date) -> bool:
    return as_date(value).year == as_date(now).year


def bucket_counts(dates: Iterable[datetime | date], now: datetime | date, first_weekday: int = SUNDAY) -> dict:
    """
    Count records in each bucket. Buckets overlap: a date in this week is
    usually also in this month and year.
    """
    counts = {"week": 0, "month": 0, "year": 0}
    for d in dates:
        counts["week"] += in_week(d, now, first_weekday)
        counts["month"] += in_month(d, now)
        counts["year"] += in_year(d, now)
    return counts


def check_ins_in_week(check_ins: Iterable[CheckIn], now, first_weekday: int = SUNDAY) -> list[CheckIn]:
    return [c for c in check_ins if in_week(c.date, now, first_weekday)]


def check_ins_in_month(check_ins: Iterable[CheckIn], now) -> list[CheckIn]:
    return [c for c in check_ins if in_month(c.date, now)]


def check_ins_in_year(check_ins: Iterable[CheckIn], now) -> list[CheckIn]:
    return [c for c in check_ins if in_year(c.date, now)]


# ---------- Revenue ----------

def _sum_amounts(payments: Iterable[Payment]) -> Decimal:
    return sum((p.amount for p in payments), Decimal("0"))


def total_revenue(payments: Iterable[Payment]) -> Decimal:
    return _sum_amounts(p for p in payments if p.status is PaymentState.PAID)


def pending_revenue(payments: Iterable[Payment]) -> Decimal:
    return _sum_amounts(p for p in payments if p.status is PaymentState.PENDING)


def month_revenue(payments: Iterable[Payment], now) -> Decimal:
    return _sum_amounts(
        p for p in payments
        if p.status is PaymentState.PAID and in_month(p.paid_date or p.due_date, now)
    )


def average_ticket(payments: Iterable[Payment], students: Sequence[Student]) -> Decimal:
    if not students:
        return Decimal("0")
    return total_revenue(payments) / len(students)


# ---------- Overdue / status ----------

def is_overdue(payment: Payment, now) -> bool:
    return payment.status is PaymentState.PENDING and payment.due_date < as_date(now)


def payment_label(payment: Payment, now) -> str:
    """
    Display status: paid / failed / overdue / pending. Overdue is never
    stored, it is read off the due date.
    """
    if payment.status is PaymentState.PENDING:
        return "overdue" if is_overdue(payment, now) else "pending"
    return payment.status.value


def overdue_payments(payments: Iterable[Payment], now) -> list[Payment]:
    return [p for p in payments if is_overdue(p, now)]


def students_by_status(students: Iterable[Student], status: PaymentStatus | str) -> list[Student]:
    status = PaymentStatus(status)
    return [s for s in students if s.payment_status is status]


def status_counts(students: Iterable[Student]) -> dict:
    counts = Counter(s.payment_status for s in students)
    return {status.value: counts.get(status, 0) for status in PaymentStatus}


def worst_payment_status(students: Iterable[Student]) -> PaymentStatus | None:
    statuses = [s.payment_status for s in students]
    if not statuses:
        return None
    return max(statuses, key=STATUS_SEVERITY.__getitem__)


def search_students(students: Iterable[Student], text: str = "", status: PaymentStatus | str | None = None) -> list[Student]:
    needle = text.strip().lower()
    wanted = PaymentStatus(status) if status else None
    out = []
    for s in students:
        if needle and needle not in s.name.lower() and needle not in s.email.lower():
            continue
        if wanted is not None and s.payment_status is not wanted:
            continue
        out.append(s)
    return out


# ---------- Rankings ----------

def leaderboard(students: Iterable[Student], top_n: int | None = None) -> list[Student]:
    # Equal points fall back to id so the order never depends on input order
    if top_n is not None and top_n < 0:
        raise ValueError(f"top_n must be >= 0, got {top_n}")
    ranked = sorted(students, key=lambda s: (-s.points, s.id))
    return ranked if top_n is None else ranked[:top_n]


def attendance_ranking(students: Iterable[Student], check_ins: Iterable[CheckIn]) -> list[tuple[Student, int]]:
    counts = Counter(c.student_id for c in check_ins)
    ranked = sorted(students, key=lambda s: (-counts.get(s.id, 0), s.id))
    return [(s, counts.get(s.id, 0)) for s in ranked]


def level_distribution(students: Iterable[Student]) -> dict:
    counts = Counter(s.level for s in students)
    return {level.value: counts.get(level, 0) for level in Level}


def fight_style_distribution(students: Iterable[Student]) -> dict:
    return dict(Counter(s.fight_style for s in students).most_common())


# ---------- Progress ----------

def _clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


def level_progress(points: int, level: Level | str) -> float | None:
    """
    Percent of the way through the current level's points window, clamped to
    [0, 100]. Returns None for a level with no threshold entry.
    """
    try:
        window = LEVEL_THRESHOLDS[Level(level)]
    except ValueError:
        return None
    span = window["max"] - window["min"]
    return _clamp_percent((points - window["min"]) / span * 100)


def next_level(level: Level | str) -> str | None:
    try:
        return LEVEL_THRESHOLDS[Level(level)]["next"]
    except ValueError:
        return None


def goal_progress(current: float, target: float) -> float:
    if target <= 0:
        return 0.0
    return _clamp_percent(current / target * 100)


def total_points(check_ins: Iterable[CheckIn]) -> int:
    return sum(c.points for c in check_ins)


def average_points_per_session(check_ins: Sequence[CheckIn]) -> float:
    if not check_ins:
        return 0.0
    return total_points(check_ins) / len(check_ins)


def monthly_goals(check_ins: Iterable[CheckIn], now, session_goal: int = 12, points_goal: int = 200) -> dict:
    month = check_ins_in_month(check_ins, now)
    points = total_points(month)
    return {
        "sessions": len(month),
        "sessions_goal": session_goal,
        "sessions_progress": goal_progress(len(month), session_goal),
        "points": points,
        "points_goal": points_goal,
        "points_progress": goal_progress(points, points_goal),
    }


# ---------- Attendance ----------

def average_attendance(check_ins: Iterable[CheckIn], students: Sequence[Student], now) -> float:
    if not students:
        return 0.0
    return len(check_ins_in_month(check_ins, now)) / len(students)


def todays_check_ins(check_ins: Iterable[CheckIn], now) -> list[CheckIn]:
    today = as_date(now)
    return [c for c in check_ins if c.date == today]


def recent_check_ins(check_ins: Iterable[CheckIn], limit: int = 10) -> list[CheckIn]:
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    return sorted(check_ins, key=lambda c: (c.date, c.id), reverse=True)[:limit]


# ---------- Dashboard bundles ----------

@dataclass(frozen=True)
class TrainerSummary:
    student_count: int
    status_counts: dict
    total_revenue: Decimal
    pending_revenue: Decimal
    month_revenue: Decimal
    average_ticket: Decimal
    average_attendance: float
    todays_check_ins: int
    leaderboard: list
    attendance_ranking: list
    overdue_payments: list
    level_distribution: dict
    fight_styles: dict


@dataclass(frozen=True)
class StudentSummary:
    student: Student
    total_points: int
    level_progress: float | None
    next_level: str | None
    check_in_buckets: dict
    check_in_count: int
    average_points_per_session: float
    goals: dict
    recent_check_ins: list
    pending_payments: list
    paid_payments: list


def trainer_summary(
    repo: GymRepository,
    trainer_id: str,
    now,
    leaderboard_size: int = 10,
) -> TrainerSummary:
    students = repo.students_for_trainer(trainer_id)
    payments = repo.payments_for_trainer(trainer_id)
    check_ins = repo.check_ins_for_trainer(trainer_id)
    return TrainerSummary(
        student_count=len(students),
        status_counts=status_counts(students),
        total_revenue=total_revenue(payments),
        pending_revenue=pending_revenue(payments),
        month_revenue=month_revenue(payments, now),
        average_ticket=average_ticket(payments, students),
        average_attendance=average_attendance(check_ins, students, now),
        todays_check_ins=len(todays_check_ins(check_ins, now)),
        leaderboard=leaderboard(students, leaderboard_size),
        attendance_ranking=attendance_ranking(students, check_ins),
        overdue_payments=overdue_payments(payments, now),
        level_distribution=level_distribution(students),
        fight_styles=fight_style_distribution(students),
    )


def student_summary(
    repo: GymRepository,
    student_id: str,
    now,
    first_weekday: int = SUNDAY,
    session_goal: int = 12,
    points_goal: int = 200,
) -> StudentSummary | None:
    student = repo.find_student_by_id(student_id)
    if student is None:
        return None
    check_ins = repo.check_ins_for_student(student_id)
    payments = repo.payments_for_student(student_id)
    return StudentSummary(
        student=student,
        total_points=total_points(check_ins),
        level_progress=level_progress(student.points, student.level),
        next_level=next_level(student.level),
        check_in_buckets=bucket_counts((c.date for c in check_ins), now, first_weekday),
        check_in_count=len(check_ins),
        average_points_per_session=average_points_per_session(check_ins),
        goals=monthly_goals(check_ins, now, session_goal, points_goal),
        recent_check_ins=recent_check_ins(check_ins),
        pending_payments=[p for p in payments if p.status is PaymentState.PENDING],
        paid_payments=[p for p in payments if p.status is PaymentState.PAID],
    )
