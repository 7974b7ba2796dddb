"""Session store: opaque tokens that resolve to a user identity.

A session id is the bearer token clients send in the ``session_id`` header.
Sessions expire after ``SESSION_TTL_HOURS`` (24 by default); expired sessions
of a user are purged whenever that user logs in again.
"""

import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import Unauthorized
from marketplace.user.events import SessionStarted
from marketplace.user.user import User

logger = structlog.get_logger(__name__)


def session_ttl() -> timedelta:
    return timedelta(hours=int(os.getenv("SESSION_TTL_HOURS", "24")))


def _as_utc(value: datetime) -> datetime:
    # SQL providers hand back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=UTC)


@dataclass(frozen=True)
class UserIdentity:
    """The resolved caller of a request, passed explicitly into every operation."""

    user_id: str
    session_id: str


@marketplace.aggregate
class Session:
    user_id = Identifier(required=True)
    expires_at = DateTime(required=True)

    @classmethod
    def start(cls, user_id, now=None):
        now = now or datetime.now(UTC)
        session = cls(user_id=str(user_id), expires_at=now + session_ttl())
        session.raise_(
            SessionStarted(
                session_id=str(session.id),
                user_id=str(user_id),
                expires_at=session.expires_at,
            )
        )
        return session

    def is_expired(self, now=None) -> bool:
        now = now or datetime.now(UTC)
        return _as_utc(self.expires_at) <= now


@marketplace.repository(part_of=Session)
class SessionRepository:
    def for_user(self, user_id) -> list:
        return self._dao.query.filter(user_id=str(user_id)).all().items

    def purge_expired(self, user_id) -> int:
        now = datetime.now(UTC)
        expired = [s for s in self.for_user(user_id) if s.is_expired(now)]
        for session in expired:
            self._dao.delete(session)
        return len(expired)


def resolve(token) -> UserIdentity | None:
    """Resolve an opaque session token into the identity it belongs to."""
    if not token:
        return None

    try:
        session = current_domain.repository_for(Session).get(str(token))
    except ObjectNotFoundError:
        return None

    if session.is_expired():
        return None

    return UserIdentity(user_id=str(session.user_id), session_id=str(session.id))


@marketplace.command(part_of="Session")
class LogIn:
    username = String(required=True, max_length=50)
    password = String(required=True, max_length=128)


@marketplace.command(part_of="Session")
class LogOut:
    session_id = Identifier(required=True)


@marketplace.command_handler(part_of=Session)
class SessionHandler:
    @handle(LogIn)
    def log_in(self, command):
        user = current_domain.repository_for(User).find_by_username(command.username)
        if user is None or not user.check_password(command.password):
            logger.info("Rejected login", username=command.username)
            raise Unauthorized("Invalid username or password")

        repo = current_domain.repository_for(Session)
        purged = repo.purge_expired(user.id)

        session = Session.start(user.id)
        repo.add(session)

        logger.info("User logged in", user_id=str(user.id), purged_sessions=purged)
        return str(session.id)

    @handle(LogOut)
    def log_out(self, command):
        repo = current_domain.repository_for(Session)
        try:
            session = repo.get(command.session_id)
        except ObjectNotFoundError:
            raise Unauthorized("Session does not exist") from None

        repo._dao.delete(session)
