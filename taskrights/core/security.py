import jwt

from taskrights.config import get_settings
from taskrights.core.actor import Actor
from taskrights.core.exceptions import AuthenticationError, InvalidRightError
from taskrights.core.resources import project
from taskrights.database.models.enums import ActorKind

settings = get_settings()


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def _as_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid identifier in token") from None


class ActorProvider:
    """Turns token claims into an Actor with a team-membership snapshot."""

    def __init__(self, store):
        self.store = store

    async def actor_from_token(self, token: str) -> Actor:
        try:
            claims = decode_token(token)
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired") from None
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token") from None

        return await self.actor_from_claims(claims)

    async def actor_from_claims(self, claims: dict) -> Actor:
        subject = claims.get("sub")
        if subject is None:
            raise AuthenticationError("Invalid token payload")

        kind = claims.get("type", ActorKind.USER.value)

        if kind == ActorKind.USER.value:
            user_id = _as_id(subject)
            return Actor.user(user_id, await self.store.teams_of(user_id))

        if kind == ActorKind.LINK_SHARE.value:
            project_id = claims.get("project_id")
            if project_id is None:
                raise AuthenticationError("Link share token has no project")
            try:
                return Actor.link_share(
                    _as_id(subject),
                    project(_as_id(project_id)),
                    claims.get("right"),
                )
            except InvalidRightError:
                raise AuthenticationError("Link share token has an invalid right") from None

        raise AuthenticationError(f"Unknown token type: {kind}")
