import sqlite3
from dataclasses import replace

import pytest

import auth
import seed
from models import dump_user, load_user
from repository import GymRepository

pytestmark = pytest.mark.integration


def test_hash_and_verify_password():
    hashed = auth.hash_password("s3cret", rounds=4)
    assert hashed != "s3cret"
    assert auth.verify_password("s3cret", hashed)
    assert not auth.verify_password("wrong", hashed)


def test_verify_password_with_garbage_hash():
    assert not auth.verify_password("123456", "not-a-bcrypt-hash")


def test_long_passwords_are_truncated_to_72_bytes():
    hashed = auth.hash_password("a" * 80, rounds=4)
    assert auth.verify_password("a" * 72 + "zzz", hashed)


def test_new_gateway_starts_unauthenticated(gateway):
    assert gateway.session.state is auth.AuthState.UNAUTHENTICATED
    assert gateway.session.user is None


async def test_trainer_login(gateway, repo, settings):
    assert await gateway.login("carlos@centralfight.com", "123456", "trainer")
    assert gateway.session.is_authenticated
    assert gateway.session.user == repo.trainer
    stored = gateway.store.get(settings.session_key)
    assert load_user(stored) == repo.trainer


async def test_trainer_login_wrong_password(gateway, settings):
    assert await gateway.login("carlos@centralfight.com", "wrong", "trainer") is False
    assert gateway.session.state is auth.AuthState.UNAUTHENTICATED
    assert gateway.store.get(settings.session_key) is None


async def test_student_login(gateway, repo):
    assert await gateway.login("joao@email.com", "123456", "student")
    assert gateway.session.user == repo.find_student_by_id("student1")


async def test_unknown_student(gateway):
    assert await gateway.login("nonexistent@email.com", "123456", "student") is False
    assert gateway.session.user is None


@pytest.mark.parametrize(
    "email, role",
    [
        ("carlos@centralfight.com", "student"),
        ("joao@email.com", "trainer"),
        ("joao@email.com", "admin"),
    ],
)
async def test_role_must_match_account(gateway, email, role):
    assert await gateway.login(email, "123456", role) is False


async def test_failed_login_keeps_existing_session(gateway, repo):
    assert await gateway.login("joao@email.com", "123456", "student")
    assert await gateway.login("joao@email.com", "nope", "student") is False
    assert gateway.session.user == repo.find_student_by_id("student1")


async def test_repeated_login_is_idempotent(gateway, settings):
    assert await gateway.login("maria@email.com", "123456", "student")
    first = gateway.store.get(settings.session_key)
    assert await gateway.login("maria@email.com", "123456", "student")
    assert gateway.store.get(settings.session_key) == first


async def test_logout_clears_session_and_store(gateway, settings):
    await gateway.login("joao@email.com", "123456", "student")
    await gateway.logout()
    assert gateway.session.state is auth.AuthState.UNAUTHENTICATED
    assert gateway.session.user is None
    assert gateway.store.get(settings.session_key) is None


async def test_restore_trusts_stored_record(repo, settings):
    first = auth.init_auth(repo, settings, "123456")
    await first.login("pedro@email.com", "123456", "student")

    # a later process start: new gateway, same database
    second = auth.init_auth(repo, settings, "ignored-after-first-run")
    user = await second.restore()
    assert user == repo.find_student_by_id("student3")
    assert second.session.is_authenticated


async def test_restore_without_record(gateway):
    assert await gateway.restore() is None
    assert not gateway.session.is_authenticated


async def test_restore_ignores_unreadable_record(gateway, settings, caplog):
    gateway.store.set(settings.session_key, b"{broken")
    assert await gateway.restore() is None
    assert not gateway.session.is_authenticated
    assert "unreadable stored session" in caplog.text


async def test_restore_survives_storage_failure(gateway, monkeypatch, caplog):
    def fail(key):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(gateway.store, "get", fail)
    assert await gateway.restore() is None
    assert "Error loading stored user" in caplog.text


async def test_login_succeeds_when_session_cannot_be_saved(gateway, monkeypatch, caplog):
    def fail(key, value):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(gateway.store, "set", fail)
    assert await gateway.login("ana@email.com", "123456", "student")
    assert gateway.session.is_authenticated
    assert "Error persisting session" in caplog.text


async def test_logout_succeeds_when_store_fails(gateway, monkeypatch, caplog):
    await gateway.login("ana@email.com", "123456", "student")

    def fail(key):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(gateway.store, "remove", fail)
    await gateway.logout()
    assert gateway.session.state is auth.AuthState.UNAUTHENTICATED
    assert "Logout error" in caplog.text


async def test_change_password(gateway):
    await gateway.login("joao@email.com", "123456", "student")
    await gateway.change_password("new-password")
    await gateway.logout()

    assert await gateway.login("joao@email.com", "123456", "student") is False
    assert await gateway.login("joao@email.com", "new-password", "student")


async def test_change_password_requires_login(gateway):
    with pytest.raises(RuntimeError):
        await gateway.change_password("whatever")


def test_session_store_round_trip(gateway, repo):
    store = gateway.store
    store.set("user", dump_user(repo.trainer))
    store.set("user", b"second")
    assert store.get("user") == b"second"
    store.remove("user")
    assert store.get("user") is None
    store.remove("user")


async def test_login_restores_state_when_credential_check_raises(gateway, monkeypatch):
    def fail(db_file, email, role):
        raise RuntimeError("bcrypt backend missing")

    monkeypatch.setattr(auth.db, "get_password_hash", fail)
    with pytest.raises(RuntimeError):
        await gateway.login("joao@email.com", "123456", "student")
    assert gateway.session.state is auth.AuthState.UNAUTHENTICATED
    assert not gateway.session.is_loading


async def test_login_error_keeps_previous_session(gateway, repo, monkeypatch):
    await gateway.login("carlos@centralfight.com", "123456", "trainer")

    def fail(db_file, email, role):
        raise RuntimeError("bcrypt backend missing")

    monkeypatch.setattr(auth.db, "get_password_hash", fail)
    with pytest.raises(RuntimeError):
        await gateway.login("joao@email.com", "123456", "student")
    assert gateway.session.state is auth.AuthState.AUTHENTICATED
    assert gateway.session.user == repo.trainer


def _repo_with_new_student(repo):
    bia = replace(repo.find_student_by_id("student4"), id="student5", name="Beatriz Lima", email="bia@email.com")
    trainer = replace(repo.trainer, students=repo.trainer.students + ("student5",))
    return GymRepository(repo.plans, trainer, repo.students + (bia,), repo.payments, repo.check_ins, repo.gym)


async def test_student_added_after_first_run_can_log_in(repo, settings):
    auth.init_auth(repo, settings, seed.DEFAULT_PASSWORD)

    gateway = auth.init_auth(_repo_with_new_student(repo), settings, seed.DEFAULT_PASSWORD)
    assert await gateway.login("bia@email.com", "123456", "student")
    assert gateway.session.user.id == "student5"


async def test_reinit_keeps_changed_passwords(repo, settings):
    gateway = auth.init_auth(repo, settings, seed.DEFAULT_PASSWORD)
    await gateway.login("joao@email.com", "123456", "student")
    await gateway.change_password("new-password")

    gateway = auth.init_auth(_repo_with_new_student(repo), settings, seed.DEFAULT_PASSWORD)
    assert await gateway.login("joao@email.com", "123456", "student") is False
    assert await gateway.login("joao@email.com", "new-password", "student")
