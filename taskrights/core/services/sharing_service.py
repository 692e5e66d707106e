import logging
from dataclasses import dataclass
from typing import List, Optional

from taskrights.config import get_settings
from taskrights.core.actor import Actor
from taskrights.core.resources import ResourceRef
from taskrights.core.rights import Right, validate_right
from taskrights.core.services.capability_gate import CapabilityGate
from taskrights.core.services.grant_store import Grant, GrantStore
from taskrights.database.models.enums import GranteeKind, ResourceType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShareListing:
    """One page of shares plus the number of matches across all pages."""

    items: List[Grant]
    total: int
    max_right: Right


class SharingService:
    """Sharing a resource with users and teams.

    Granting and revoking need admin on the shared resource, listing needs read.
    """

    def __init__(self, store: GrantStore, gate: CapabilityGate, page_size: Optional[int] = None):
        self.store = store
        self.gate = gate
        self.page_size = page_size or get_settings().MAX_ITEMS_PER_PAGE

    @staticmethod
    def _sharer(actor: Actor):
        # a link share acts anonymously and owns nothing it creates
        return None if actor.is_link_share else actor.id

    async def share_with_user(self, actor: Actor, resource: ResourceRef, user_id, right) -> Grant:
        right = validate_right(right)
        await self.gate.require_create(actor, ResourceType.PROJECT_USER, resource)
        grant = await self.store.grant_to_user(resource, user_id, right, shared_by=self._sharer(actor))
        logger.info(f"{actor.id} shared {resource} with user {user_id} ({right.name})")
        return grant

    async def share_with_team(self, actor: Actor, resource: ResourceRef, team_id, right) -> Grant:
        right = validate_right(right)
        await self.gate.require_create(actor, ResourceType.PROJECT_TEAM, resource)
        grant = await self.store.grant_to_team(resource, team_id, right, shared_by=self._sharer(actor))
        logger.info(f"{actor.id} shared {resource} with team {team_id} ({right.name})")
        return grant

    async def unshare_user(self, actor: Actor, resource: ResourceRef, user_id) -> None:
        await self.gate.require_admin(actor, resource)
        await self.store.revoke_from_user(resource, user_id)

    async def unshare_team(self, actor: Actor, resource: ResourceRef, team_id) -> None:
        await self.gate.require_admin(actor, resource)
        await self.store.revoke_from_team(resource, team_id)

    async def list_user_shares(
        self, actor: Actor, resource: ResourceRef, search: str = "", page: int = 1
    ) -> ShareListing:
        return await self._list(actor, resource, GranteeKind.USER, search, page)

    async def list_team_shares(
        self, actor: Actor, resource: ResourceRef, search: str = "", page: int = 1
    ) -> ShareListing:
        return await self._list(actor, resource, GranteeKind.TEAM, search, page)

    async def _list(
        self,
        actor: Actor,
        resource: ResourceRef,
        kind: GranteeKind,
        search: str,
        page: int,
    ) -> ShareListing:
        await self.gate.require_read(actor, resource)

        grants = await self.store.grants_for_resource(resource, kind)

        needle = (search or "").lower()
        if needle:
            grants = [g for g in grants if needle in (g.grantee_name or "").lower()]

        start = (max(page, 1) - 1) * self.page_size
        return ShareListing(
            items=grants[start:start + self.page_size],
            total=len(grants),
            max_right=await self.gate.evaluator.effective_right(actor, resource),
        )
