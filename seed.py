"""
seed.py
Literal seed dataset (Central Fight Academy) loaded at startup.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from models import CheckIn, Event, Gym, Payment, Plan, Student, Trainer
from repository import GymRepository

# Every seeded account starts with this password (stored as a bcrypt hash in db.py)
DEFAULT_PASSWORD = "123456"

PLANS = (
    Plan("1", "Plano Básico", Decimal("120.00"), 30, "2x por semana - Muay Thai ou Jiu-Jitsu"),
    Plan("2", "Plano Premium", Decimal("180.00"), 30, "Ilimitado - Todas as modalidades"),
    Plan("3", "Plano VIP", Decimal("250.00"), 30, "Ilimitado + Personal Training"),
)

TRAINER = Trainer(
    id="trainer1",
    name="Carlos Silva",
    email="carlos@centralfight.com",
    phone="(11) 99999-9999",
    photo="https://via.placeholder.com/150",
    created_at=datetime(2023, 1, 1),
    gym_name="Central Fight Academy",
    specialties=("Muay Thai", "Jiu-Jitsu", "MMA"),
    students=("student1", "student2", "student3", "student4"),
)

STUDENTS = (
    Student(
        id="student1",
        name="João Santos",
        email="joao@email.com",
        phone="(11) 98888-8888",
        photo="https://via.placeholder.com/150",
        created_at=datetime(2023, 6, 1),
        plan=PLANS[1],
        payment_status="active",
        due_date=date(2024, 2, 15),
        points=850,
        level="intermediate",
        fight_style="Muay Thai",
        weight=75,
        category="Meio-Médio",
        trainer_id="trainer1",
    ),
    Student(
        id="student2",
        name="Maria Oliveira",
        email="maria@email.com",
        phone="(11) 97777-7777",
        photo="https://via.placeholder.com/150",
        created_at=datetime(2023, 8, 15),
        plan=PLANS[0],
        payment_status="active",
        due_date=date(2024, 2, 20),
        points=620,
        level="beginner",
        fight_style="Jiu-Jitsu",
        weight=60,
        category="Leve",
        trainer_id="trainer1",
    ),
    Student(
        id="student3",
        name="Pedro Costa",
        email="pedro@email.com",
        phone="(11) 96666-6666",
        photo="https://via.placeholder.com/150",
        created_at=datetime(2023, 3, 10),
        plan=PLANS[2],
        payment_status="overdue",
        due_date=date(2024, 1, 10),
        points=1200,
        level="advanced",
        fight_style="MMA",
        weight=85,
        category="Médio",
        trainer_id="trainer1",
    ),
    Student(
        id="student4",
        name="Ana Silva",
        email="ana@email.com",
        phone="(11) 95555-5555",
        photo="https://via.placeholder.com/150",
        created_at=datetime(2023, 9, 1),
        plan=PLANS[1],
        payment_status="active",
        due_date=date(2024, 2, 25),
        points=450,
        level="beginner",
        fight_style="Muay Thai",
        weight=55,
        category="Mosca",
        trainer_id="trainer1",
    ),
)

PAYMENTS = (
    Payment("pay1", "student1", Decimal("180.00"), "pix", "paid", date(2024, 1, 15), "2", paid_date=date(2024, 1, 14)),
    Payment("pay2", "student2", Decimal("120.00"), "credit_card", "paid", date(2024, 1, 20), "1", paid_date=date(2024, 1, 18)),
    Payment("pay3", "student3", Decimal("250.00"), "boleto", "pending", date(2024, 1, 10), "3"),
    Payment("pay4", "student4", Decimal("180.00"), "pix", "paid", date(2024, 1, 25), "2", paid_date=date(2024, 1, 23)),
)

CHECK_INS = (
    CheckIn("checkin1", "student1", date(2024, 1, 20), 10, "training"),
    CheckIn("checkin2", "student1", date(2024, 1, 18), 10, "training"),
    CheckIn("checkin3", "student2", date(2024, 1, 19), 10, "training"),
    CheckIn("checkin4", "student3", date(2024, 1, 17), 15, "event"),
    CheckIn("checkin5", "student4", date(2024, 1, 21), 10, "training"),
)

GYM = Gym(
    id="gym1",
    name="Central Fight Academy",
    address="Rua das Lutas, 123 - São Paulo, SP",
    phone="(11) 3333-3333",
    email="contato@centralfight.com",
    trainer_id="trainer1",
)


# Event registrations are local to the events screen, not part of the repository
EVENTS = (
    Event("1", "Campeonato Interno de Muay Thai", "tournament", date(2024, 2, 15),
          "Academia Central Fight - Tatame Principal", 18, Decimal("0"), max_participants=32),
    Event("2", "Seminário de Jiu-Jitsu com Faixa Preta", "seminar", date(2024, 2, 8),
          "Academia Central Fight - Sala 2", 15, Decimal("80"), max_participants=20, is_registered=True),
    Event("3", "Exame de Graduação - Muay Thai", "graduation", date(2024, 1, 25),
          "Academia Central Fight - Tatame Principal", 12, Decimal("50"), max_participants=15),
    Event("5", "Workshop de Defesa Pessoal", "seminar", date(2024, 3, 10),
          "Academia Central Fight - Sala 1", 8, Decimal("40"), max_participants=30),
)


def build_repository() -> GymRepository:
    return GymRepository(
        plans=PLANS,
        trainer=TRAINER,
        students=STUDENTS,
        payments=PAYMENTS,
        check_ins=CHECK_INS,
        gym=GYM,
    )
