"""
repository.py
In-memory Domain Repository: seeded collections + read-only lookups.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from models import CheckIn, Gym, Payment, Plan, Student, Trainer


class RepositoryError(ValueError):
    """Seed data breaks a cross-entity invariant."""


def _check_unique(kind: str, ids: Iterable[str]) -> None:
    dupes = sorted(i for i, n in Counter(ids).items() if n > 1)
    if dupes:
        raise RepositoryError(f"Duplicate {kind} ids: {', '.join(dupes)}")


class GymRepository:
    """
    Holds the seeded entities. Collections are tuples and never change after
    construction; every accessor returns a fresh list (possibly empty).
    """

    def __init__(
        self,
        plans: Iterable[Plan],
        trainer: Trainer,
        students: Iterable[Student],
        payments: Iterable[Payment],
        check_ins: Iterable[CheckIn],
        gym: Gym,
    ):
        self.plans = tuple(plans)
        self.trainer = trainer
        self.students = tuple(students)
        self.payments = tuple(payments)
        self.check_ins = tuple(check_ins)
        self.gym = gym
        self._validate()

    def _validate(self) -> None:
        _check_unique("plan", (p.id for p in self.plans))
        _check_unique("student", (s.id for s in self.students))
        _check_unique("payment", (p.id for p in self.payments))
        _check_unique("check-in", (c.id for c in self.check_ins))

        # Trainer.students and Student.trainer_id must describe the same set
        listed = set(self.trainer.students)
        assigned = {s.id for s in self.students if s.trainer_id == self.trainer.id}
        if listed != assigned:
            missing = sorted(listed - assigned)
            extra = sorted(assigned - listed)
            raise RepositoryError(
                f"Trainer {self.trainer.id} roster mismatch: "
                f"listed without student record {missing}, assigned but not listed {extra}"
            )

        if self.gym.trainer_id != self.trainer.id:
            raise RepositoryError(f"Gym {self.gym.id} points to unknown trainer {self.gym.trainer_id}")

    # ---------- lookups ----------

    def find_student_by_id(self, student_id: str) -> Student | None:
        return next((s for s in self.students if s.id == student_id), None)

    def find_student_by_email(self, email: str) -> Student | None:
        return next((s for s in self.students if s.email == email), None)

    def find_trainer_by_id(self, trainer_id: str) -> Trainer | None:
        return self.trainer if trainer_id == self.trainer.id else None

    def find_plan_by_id(self, plan_id: str) -> Plan | None:
        return next((p for p in self.plans if p.id == plan_id), None)

    def payments_for_student(self, student_id: str) -> list[Payment]:
        return [p for p in self.payments if p.student_id == student_id]

    def check_ins_for_student(self, student_id: str) -> list[CheckIn]:
        return [c for c in self.check_ins if c.student_id == student_id]

    def students_for_trainer(self, trainer_id: str) -> list[Student]:
        return [s for s in self.students if s.trainer_id == trainer_id]

    def payments_for_trainer(self, trainer_id: str) -> list[Payment]:
        ids = {s.id for s in self.students_for_trainer(trainer_id)}
        return [p for p in self.payments if p.student_id in ids]

    def check_ins_for_trainer(self, trainer_id: str) -> list[CheckIn]:
        ids = {s.id for s in self.students_for_trainer(trainer_id)}
        return [c for c in self.check_ins if c.student_id in ids]

    # ---------- replacement ----------

    def with_records(
        self,
        students: Iterable[Student] = (),
        payments: Iterable[Payment] = (),
        check_ins: Iterable[CheckIn] = (),
    ) -> GymRepository:
        """
        New repository where the given students/payments replace the records
        with the same id and the given check-ins are appended. This one is
        left untouched.
        """
        new_students = {s.id: s for s in students}
        new_payments = {p.id: p for p in payments}
        for kind, ids, known in (
            ("student", new_students, {s.id for s in self.students}),
            ("payment", new_payments, {p.id for p in self.payments}),
        ):
            unknown = sorted(set(ids) - known)
            if unknown:
                raise RepositoryError(f"Cannot replace unknown {kind} ids: {', '.join(unknown)}")

        return GymRepository(
            plans=self.plans,
            trainer=self.trainer,
            students=[new_students.get(s.id, s) for s in self.students],
            payments=[new_payments.get(p.id, p) for p in self.payments],
            check_ins=self.check_ins + tuple(check_ins),
            gym=self.gym,
        )
