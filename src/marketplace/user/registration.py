"""Account sign-up: command and handler.

Signing up also opens the first session, so the caller is logged in straight
away and receives both the new user id and a session token.
"""

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import Conflict
from marketplace.user.session import Session
from marketplace.user.user import User

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="User")
class SignUp:
    username = String(required=True, max_length=50)
    email = String(required=True, max_length=254)
    password = String(required=True, max_length=128)


@marketplace.command_handler(part_of=User)
class SignUpHandler:
    @handle(SignUp)
    def sign_up(self, command):
        repo = current_domain.repository_for(User)
        if repo.find_by_username(command.username) or repo.find_by_email(command.email):
            raise Conflict("Username or email already registered")

        user = User.sign_up(
            username=command.username,
            email=command.email,
            password=command.password,
        )
        repo.add(user)

        session = Session.start(user.id)
        current_domain.repository_for(Session).add(session)

        logger.info("User signed up", user_id=str(user.id), username=user.username)
        return {"user_id": str(user.id), "session_id": str(session.id)}
