from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Optional

from taskrights.core.resources import ResourceRef
from taskrights.core.rights import Right, validate_right
from taskrights.database.models.enums import ActorKind


@dataclass(frozen=True)
class Actor:
    """Identity on whose behalf an operation is attempted.

    ``team_ids`` is a snapshot taken when the actor is built; membership
    changes made afterwards are not observed by evaluations using it.
    A link-share actor carries one fixed right on one target resource and
    never takes part in ownership or team grants.
    """

    id: Any
    kind: ActorKind = ActorKind.USER
    team_ids: FrozenSet[Any] = field(default_factory=frozenset)
    share_target: Optional[ResourceRef] = None
    share_right: Optional[Right] = None

    @classmethod
    def user(cls, user_id, team_ids: Iterable = ()) -> "Actor":
        return cls(id=user_id, kind=ActorKind.USER, team_ids=frozenset(team_ids))

    @classmethod
    def link_share(cls, share_id, target: ResourceRef, right) -> "Actor":
        return cls(
            id=share_id,
            kind=ActorKind.LINK_SHARE,
            share_target=target,
            share_right=validate_right(right),
        )

    @property
    def is_link_share(self) -> bool:
        return self.kind == ActorKind.LINK_SHARE
