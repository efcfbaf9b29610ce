"""
models.py
Domain records (frozen dataclasses), enums and the session record format.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Union

# Bump when the stored session record changes shape
SESSION_SCHEMA_VERSION = 1


class SessionFormatError(ValueError):
    """Stored session record cannot be turned back into a user."""


class Role(str, Enum):
    STUDENT = "student"
    TRAINER = "trainer"


class PaymentStatus(str, Enum):
    ACTIVE = "active"
    OVERDUE = "overdue"
    SUSPENDED = "suspended"


class Level(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class PaymentMethod(str, Enum):
    PIX = "pix"
    CREDIT_CARD = "credit_card"
    BOLETO = "boleto"


class PaymentState(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class CheckInType(str, Enum):
    TRAINING = "training"
    EVENT = "event"
    EXAM = "exam"


@dataclass(frozen=True)
class Plan:
    id: str
    name: str
    price: Decimal
    duration_days: int
    description: str

    def __post_init__(self):
        if self.price < 0:
            raise ValueError(f"Plan {self.id}: price must be >= 0.")
        if self.duration_days <= 0:
            raise ValueError(f"Plan {self.id}: duration must be positive.")


@dataclass(frozen=True)
class Student:
    id: str
    name: str
    email: str
    phone: str
    created_at: datetime
    plan: Plan
    payment_status: PaymentStatus
    due_date: date
    points: int
    level: Level
    fight_style: str
    weight: float
    category: str
    trainer_id: str
    photo: str | None = None

    kind = Role.STUDENT

    def __post_init__(self):
        if self.points < 0:
            raise ValueError(f"Student {self.id}: points must be >= 0.")
        if self.weight <= 0:
            raise ValueError(f"Student {self.id}: weight must be positive.")
        # Coerce plain strings coming from forms / stored records
        object.__setattr__(self, "payment_status", PaymentStatus(self.payment_status))
        object.__setattr__(self, "level", Level(self.level))

    def with_points(self, points: int) -> Student:
        return replace(self, points=points)

    def add_points(self, points: int) -> Student:
        return replace(self, points=self.points + points)

    def with_payment_status(self, status: PaymentStatus | str) -> Student:
        return replace(self, payment_status=PaymentStatus(status))

    def with_level(self, level: Level | str) -> Student:
        return replace(self, level=Level(level))


@dataclass(frozen=True)
class Trainer:
    id: str
    name: str
    email: str
    phone: str
    created_at: datetime
    gym_name: str
    specialties: tuple[str, ...] = ()
    students: tuple[str, ...] = ()  # student ids, mirrors Student.trainer_id
    photo: str | None = None

    kind = Role.TRAINER

    def __post_init__(self):
        object.__setattr__(self, "specialties", tuple(self.specialties))
        object.__setattr__(self, "students", tuple(self.students))


UserAccount = Union[Student, Trainer]


@dataclass(frozen=True)
class Payment:
    id: str
    student_id: str
    amount: Decimal
    method: PaymentMethod
    status: PaymentState
    due_date: date
    plan_id: str
    paid_date: date | None = None

    def __post_init__(self):
        object.__setattr__(self, "method", PaymentMethod(self.method))
        object.__setattr__(self, "status", PaymentState(self.status))
        if self.amount < 0:
            raise ValueError(f"Payment {self.id}: amount must be >= 0.")
        if (self.paid_date is not None) != (self.status is PaymentState.PAID):
            raise ValueError(f"Payment {self.id}: paid_date is set only for paid payments.")

    def mark_paid(self, paid_date: date) -> Payment:
        return replace(self, status=PaymentState.PAID, paid_date=paid_date)

    def mark_failed(self) -> Payment:
        return replace(self, status=PaymentState.FAILED, paid_date=None)


@dataclass(frozen=True)
class CheckIn:
    id: str
    student_id: str
    date: date
    points: int
    type: CheckInType = CheckInType.TRAINING

    def __post_init__(self):
        object.__setattr__(self, "type", CheckInType(self.type))
        if self.points < 0:
            raise ValueError(f"CheckIn {self.id}: points must be >= 0.")


@dataclass(frozen=True)
class Gym:
    id: str
    name: str
    address: str
    phone: str
    email: str
    trainer_id: str


@dataclass(frozen=True)
class Event:
    """Academy event (tournament, seminar, ...). Registration is per screen session."""

    id: str
    title: str
    type: str  # tournament / seminar / graduation / training
    date: date
    location: str
    current_participants: int
    price: Decimal = Decimal("0")
    max_participants: int | None = None
    is_registered: bool = False

    def __post_init__(self):
        if self.current_participants < 0:
            raise ValueError(f"Event {self.id}: participants must be >= 0.")
        if self.max_participants is not None and self.current_participants > self.max_participants:
            raise ValueError(f"Event {self.id}: more participants than places.")

    @property
    def is_full(self) -> bool:
        return self.max_participants is not None and self.current_participants >= self.max_participants


# ---------- Session record ----------

def _plan_to_dict(plan: Plan) -> dict:
    d = asdict(plan)
    d["price"] = str(plan.price)
    return d


def user_to_dict(user: UserAccount) -> dict:
    """
    Serializable dict for the session store, tagged with `type`.
    """
    common = {
        "schema_version": SESSION_SCHEMA_VERSION,
        "type": user.kind.value,
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "photo": user.photo,
        "created_at": user.created_at.isoformat(),
    }
    if isinstance(user, Student):
        common.update(
            plan=_plan_to_dict(user.plan),
            payment_status=user.payment_status.value,
            due_date=user.due_date.isoformat(),
            points=user.points,
            level=user.level.value,
            fight_style=user.fight_style,
            weight=user.weight,
            category=user.category,
            trainer_id=user.trainer_id,
        )
    elif isinstance(user, Trainer):
        common.update(
            gym_name=user.gym_name,
            specialties=list(user.specialties),
            students=list(user.students),
        )
    else:
        raise TypeError(f"Not a user account: {user!r}")
    return common


def user_from_dict(data: dict) -> UserAccount:
    if not isinstance(data, dict):
        raise SessionFormatError("Session record must be an object.")
    version = data.get("schema_version")
    if version != SESSION_SCHEMA_VERSION:
        raise SessionFormatError(f"Unsupported session schema version: {version!r}")

    try:
        common = dict(
            id=data["id"],
            name=data["name"],
            email=data["email"],
            phone=data["phone"],
            photo=data.get("photo"),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
        kind = data["type"]
        if kind == Role.STUDENT.value:
            plan = data["plan"]
            return Student(
                plan=Plan(
                    id=plan["id"],
                    name=plan["name"],
                    price=Decimal(plan["price"]),
                    duration_days=int(plan["duration_days"]),
                    description=plan["description"],
                ),
                payment_status=PaymentStatus(data["payment_status"]),
                due_date=date.fromisoformat(data["due_date"]),
                points=int(data["points"]),
                level=Level(data["level"]),
                fight_style=data["fight_style"],
                weight=float(data["weight"]),
                category=data["category"],
                trainer_id=data["trainer_id"],
                **common,
            )
        if kind == Role.TRAINER.value:
            return Trainer(
                gym_name=data["gym_name"],
                specialties=tuple(data.get("specialties", ())),
                students=tuple(data.get("students", ())),
                **common,
            )
    except (KeyError, TypeError, ValueError, ArithmeticError) as e:
        raise SessionFormatError(f"Malformed session record: {e}") from e
    raise SessionFormatError(f"Unknown user type: {kind!r}")


def dump_user(user: UserAccount) -> bytes:
    return json.dumps(user_to_dict(user)).encode("utf-8")


def load_user(raw: bytes) -> UserAccount:
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SessionFormatError(f"Session record is not valid JSON: {e}") from e
    return user_from_dict(data)