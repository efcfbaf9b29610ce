"""
auth.py
Authentication utilities (bcrypt hashing, verify) and the login/session gateway.

The gateway owns one Session object; build it once at startup and hand it to
whatever needs the current user.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from enum import Enum

import bcrypt

import db
from config import Settings
from models import Role, SessionFormatError, UserAccount, dump_user, load_user
from repository import GymRepository

logger = logging.getLogger(__name__)


def _to_bcrypt_secret(password: str) -> bytes:
    """
    bcrypt only uses the first 72 BYTES of the password.
    We truncate to 72 bytes to avoid ValueError and to make behavior explicit.
    """
    pw = password.encode("utf-8")
    if len(pw) > 72:
        pw = pw[:72]
    return pw


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Returns a bcrypt hash as a UTF-8 string (stored in SQLite).
    """
    secret = _to_bcrypt_secret(password)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(secret, salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    secret = _to_bcrypt_secret(password)
    stored = password_hash.encode("utf-8")
    try:
        return bcrypt.checkpw(secret, stored)
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.error("Unreadable password hash in credentials table")
        return False


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class Session:
    """Current user + auth state. Only AuthGateway moves it between states."""

    def __init__(self):
        self.state = AuthState.UNAUTHENTICATED
        self.user: UserAccount | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.state is AuthState.AUTHENTICATING

    def _set(self, state: AuthState, user: UserAccount | None = None) -> None:
        self.state = state
        self.user = user

    def __repr__(self):
        who = self.user.id if self.user else None
        return f"<Session {self.state.value} user={who}>"


class AuthGateway:
    def __init__(self, repository: GymRepository, store: db.SessionStore, settings: Settings):
        self.repository = repository
        self.store = store
        self.settings = settings
        self.session = Session()

    def _find_account(self, email: str, role: Role) -> UserAccount | None:
        if role is Role.TRAINER:
            trainer = self.repository.trainer
            return trainer if trainer.email == email else None
        return self.repository.find_student_by_email(email)

    async def restore(self) -> UserAccount | None:
        """
        Load the stored session record, if any. The record is trusted as-is;
        credentials are not checked again.
        """
        try:
            raw = await asyncio.to_thread(self.store.get, self.settings.session_key)
        except sqlite3.Error:
            logger.exception("Error loading stored user")
            return None
        if raw is None:
            return None
        try:
            user = load_user(raw)
        except SessionFormatError:
            logger.exception("Ignoring unreadable stored session")
            return None
        self.session._set(AuthState.AUTHENTICATED, user)
        logger.info("Restored session for %s %s", user.kind.value, user.id)
        return user

    async def _check_password(self, email: str, role: Role, password: str) -> bool:
        try:
            stored = await asyncio.to_thread(db.get_password_hash, self.settings.db_file, email, role.value)
        except sqlite3.Error:
            logger.exception("Error reading credentials")
            return False
        if stored is None:
            return False
        return await asyncio.to_thread(verify_password, password, stored)

    async def login(self, email: str, password: str, role: Role | str) -> bool:
        """
        True and an authenticated session when the email exists for that role
        and the password matches. Any other outcome is False; the caller can't
        tell an unknown email from a wrong password.
        """
        try:
            role = Role(role)
        except ValueError:
            logger.info("Login rejected: unknown role %r", role)
            return False

        previous = (self.session.state, self.session.user)
        self.session._set(AuthState.AUTHENTICATING)
        logger.info("Login attempt for %s (%s)", email, role.value)

        account = None
        try:
            found = self._find_account(email, role)
            if found is not None and await self._check_password(email, role, password):
                account = found
        finally:
            if account is None:
                self.session._set(*previous)
        if account is None:
            logger.info("Login failed for %s (%s)", email, role.value)
            return False

        self.session._set(AuthState.AUTHENTICATED, account)
        try:
            await asyncio.to_thread(self.store.set, self.settings.session_key, dump_user(account))
        except sqlite3.Error:
            logger.exception("Error persisting session for %s", account.id)
        logger.info("Login succeeded for %s %s", account.kind.value, account.id)
        return True

    async def logout(self) -> None:
        user = self.session.user
        self.session._set(AuthState.UNAUTHENTICATED)
        try:
            await asyncio.to_thread(self.store.remove, self.settings.session_key)
        except sqlite3.Error:
            logger.exception("Logout error")
        if user is not None:
            logger.info("Logged out %s %s", user.kind.value, user.id)

    async def change_password(self, new_password: str) -> None:
        user = self.session.user
        if user is None:
            raise RuntimeError("No user logged in.")
        new_hash = await asyncio.to_thread(hash_password, new_password, self.settings.bcrypt_rounds)
        await asyncio.to_thread(db.set_password_hash, self.settings.db_file, user.email, user.kind.value, new_hash)
        logger.info("Password changed for %s %s", user.kind.value, user.id)


def seeded_accounts(repository: GymRepository) -> list[tuple[str, str]]:
    accounts = [(repository.trainer.email, Role.TRAINER.value)]
    accounts.extend((s.email, Role.STUDENT.value) for s in repository.students)
    return accounts


def init_auth(repository: GymRepository, settings: Settings, default_password: str) -> AuthGateway:
    """
    Create tables and seed a default credential for every account that has
    none yet, then build the gateway.
    """
    default_hash = hash_password(default_password, settings.bcrypt_rounds)
    db.init_db(settings.db_file, default_hash, seeded_accounts(repository))
    return AuthGateway(repository, db.SessionStore(settings.db_file), settings)
