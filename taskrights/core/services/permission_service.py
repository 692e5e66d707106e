"""
Permission Evaluator
Decides whether an actor holds a wanted right on a resource
"""

import logging
from typing import Optional

from taskrights.core.actor import Actor
from taskrights.core.resources import ResourceRef
from taskrights.core.rights import Right, satisfies, validate_right
from taskrights.core.services.grant_store import GrantStore
from taskrights.core.services.hierarchy import HierarchyResolver

logger = logging.getLogger(__name__)


class PermissionEvaluator:
    """Combines ownership, user grants, team grants and parent delegation.

    Evaluation is read-only. Store errors propagate unchanged; they are never
    turned into an allow or a deny here.
    """

    def __init__(self, store: GrantStore, resolver: Optional[HierarchyResolver] = None):
        self.store = store
        self.resolver = resolver or HierarchyResolver(store)

    async def evaluate(self, actor: Actor, resource: ResourceRef, wanted) -> bool:
        wanted = validate_right(wanted)
        current = resource

        while True:
            # raises ResourceNotFoundError, nothing is granted on a missing object
            await self.store.load_resource(current)

            if actor.is_link_share:
                allowed = (
                    current == actor.share_target
                    and satisfies(actor.share_right, wanted)
                )
                logger.debug(
                    f"Link share {actor.id} {'granted' if allowed else 'denied'} "
                    f"{wanted.name} on {current}"
                )
                return allowed

            if await self.store.is_owner(current, actor.id):
                logger.debug(f"Owner {actor.id} granted {wanted.name} on {current}")
                return True

            best = await self._granted_right(actor, current)
            if satisfies(best, wanted):
                logger.debug(
                    f"User {actor.id} granted {wanted.name} on {current} via {best.name} grant"
                )
                return True

            parent = await self.resolver.parent_of(current)
            if parent is None:
                logger.debug(f"User {actor.id} denied {wanted.name} on {resource}")
                return False

            current = parent

    async def effective_right(self, actor: Actor, resource: ResourceRef) -> Right:
        """Highest right *actor* holds on *resource*, NONE when nothing applies.

        ``evaluate(actor, resource, r)`` is true exactly when this is at least ``r``.
        """
        if actor.is_link_share:
            await self.store.load_resource(resource)
            return actor.share_right if resource == actor.share_target else Right.NONE

        best = Right.NONE
        current = resource
        while current is not None:
            await self.store.load_resource(current)
            if await self.store.is_owner(current, actor.id):
                return Right.ADMIN
            best = max(best, await self._granted_right(actor, current))
            current = await self.resolver.parent_of(current)
        return best

    async def _granted_right(self, actor: Actor, resource: ResourceRef) -> Right:
        best = Right.NONE

        user_right = await self.store.grant_for_user(resource, actor.id)
        if user_right is not None:
            best = user_right

        # team grants are additive by maximum
        for team_id in sorted(actor.team_ids, key=str):
            team_right = await self.store.grant_for_team(resource, team_id)
            if team_right is not None and team_right > best:
                best = team_right

        return best
