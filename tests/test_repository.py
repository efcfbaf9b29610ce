from dataclasses import replace

import pytest

import seed
from repository import GymRepository, RepositoryError

pytestmark = pytest.mark.unit


def test_seed_sizes(repo):
    assert len(repo.plans) == 3
    assert len(repo.students) == 4
    assert len(repo.payments) == 4
    assert len(repo.check_ins) == 5
    assert repo.gym.trainer_id == repo.trainer.id


def test_every_student_resolves_by_id_and_by_trainer(repo):
    for student in repo.students:
        assert repo.find_student_by_id(student.id) == student
        assert student in repo.students_for_trainer(student.trainer_id)


def test_trainer_roster_matches_student_back_references(repo):
    trainer = repo.trainer
    for student_id in trainer.students:
        student = repo.find_student_by_id(student_id)
        assert student is not None
        assert student.trainer_id == trainer.id
    for student in repo.students_for_trainer(trainer.id):
        assert student.id in trainer.students


def test_missing_entities_are_none_or_empty(repo):
    assert repo.find_student_by_id("nobody") is None
    assert repo.find_trainer_by_id("trainer2") is None
    assert repo.find_plan_by_id("99") is None
    assert repo.payments_for_student("nobody") == []
    assert repo.check_ins_for_student("nobody") == []
    assert repo.students_for_trainer("trainer2") == []
    assert repo.payments_for_trainer("trainer2") == []


def test_lookups(repo):
    assert repo.find_trainer_by_id("trainer1") is repo.trainer
    assert repo.find_plan_by_id("2").name == "Plano Premium"
    assert repo.find_student_by_email("maria@email.com").id == "student2"
    assert [p.id for p in repo.payments_for_student("student3")] == ["pay3"]
    assert {c.id for c in repo.check_ins_for_student("student1")} == {"checkin1", "checkin2"}
    assert len(repo.payments_for_trainer("trainer1")) == 4
    assert len(repo.check_ins_for_trainer("trainer1")) == 5


def test_accessors_do_not_expose_internal_storage(repo):
    repo.students_for_trainer("trainer1").clear()
    assert len(repo.students_for_trainer("trainer1")) == 4


def _build(**overrides):
    kwargs = dict(
        plans=seed.PLANS,
        trainer=seed.TRAINER,
        students=seed.STUDENTS,
        payments=seed.PAYMENTS,
        check_ins=seed.CHECK_INS,
        gym=seed.GYM,
    )
    kwargs.update(overrides)
    return GymRepository(**kwargs)


def test_roster_listing_unknown_student_is_rejected():
    trainer = replace(seed.TRAINER, students=seed.TRAINER.students + ("ghost",))
    with pytest.raises(RepositoryError, match="ghost"):
        _build(trainer=trainer)


def test_student_missing_from_roster_is_rejected():
    trainer = replace(seed.TRAINER, students=seed.TRAINER.students[:-1])
    with pytest.raises(RepositoryError, match="student4"):
        _build(trainer=trainer)


def test_duplicate_ids_are_rejected():
    with pytest.raises(RepositoryError, match="pay1"):
        _build(payments=seed.PAYMENTS + (seed.PAYMENTS[0],))


def test_with_records_replaces_and_appends(repo):
    student = repo.find_student_by_id("student2").add_points(10)
    payment = repo.payments[2].mark_paid(seed.PAYMENTS[2].due_date)
    check_in = replace(seed.CHECK_INS[0], id="checkin6", student_id="student2")

    updated = repo.with_records(students=[student], payments=[payment], check_ins=[check_in])

    assert updated.find_student_by_id("student2").points == 630
    assert [s.id for s in updated.students] == [s.id for s in repo.students]
    assert updated.payments[2].status.value == "paid"
    assert updated.check_ins[-1] == check_in
    # original untouched
    assert repo.find_student_by_id("student2").points == 620
    assert len(repo.check_ins) == 5


def test_with_records_rejects_unknown_ids(repo):
    ghost = replace(repo.students[0], id="ghost")
    with pytest.raises(RepositoryError, match="ghost"):
        repo.with_records(students=[ghost])


def test_with_records_rejects_duplicate_check_in(repo):
    with pytest.raises(RepositoryError, match="checkin1"):
        repo.with_records(check_ins=[seed.CHECK_INS[0]])
