"""Request-scoped dependencies shared by the marketplace routers."""

from fastapi import Header

from marketplace.errors import Unauthorized
from marketplace.user.session import UserIdentity, resolve
from marketplace.utils.logging import bind_identity


async def current_identity(
    session_id: str | None = Header(default=None, convert_underscores=False),
) -> UserIdentity:
    """Resolve the ``session_id`` header into the calling user."""
    identity = resolve(session_id)
    if identity is None:
        raise Unauthorized("Missing or expired session")

    bind_identity(identity)
    return identity
