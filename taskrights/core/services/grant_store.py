"""
Grant Store
Lookup and mutation of direct grants, plus the resource loader the evaluator walks
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from taskrights.core.exceptions import (
    GranteeNotFoundError,
    GrantNotFoundError,
    ResourceNotFoundError,
)
from taskrights.core.resources import ResourceInfo, ResourceRef
from taskrights.core.rights import Right, validate_right
from taskrights.database.models.enums import GranteeKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Grant:
    grantee_kind: GranteeKind
    grantee_id: Any
    resource: ResourceRef
    right: Right
    grantee_name: Optional[str] = None
    # user who created the share; kept when the grant is updated
    shared_by: Any = None


class GrantStore(ABC):
    """Backing store for grants, ownership and resource lookups.

    Grant mutation is an upsert keyed by (grantee kind, grantee id, resource);
    ``shared_by`` is recorded when the grant is first created and owns the
    share relation from then on. Revoking a missing grant raises
    GrantNotFoundError. Implementations raise
    BackingStoreError when the underlying storage fails and never retry.
    """

    @abstractmethod
    async def load_resource(self, resource: ResourceRef) -> ResourceInfo:
        """Return owner and parent of *resource* or raise ResourceNotFoundError."""

    async def is_owner(self, resource: ResourceRef, actor_id) -> bool:
        info = await self.load_resource(resource)
        return info.owner_id == actor_id

    @abstractmethod
    async def teams_of(self, user_id) -> FrozenSet[Any]:
        """Ids of the teams *user_id* belongs to."""

    @abstractmethod
    async def grant_to_user(self, resource: ResourceRef, user_id, right, shared_by=None) -> Grant:
        ...

    @abstractmethod
    async def grant_to_team(self, resource: ResourceRef, team_id, right, shared_by=None) -> Grant:
        ...

    @abstractmethod
    async def revoke_from_user(self, resource: ResourceRef, user_id) -> None:
        ...

    @abstractmethod
    async def revoke_from_team(self, resource: ResourceRef, team_id) -> None:
        ...

    @abstractmethod
    async def grant_for_user(self, resource: ResourceRef, user_id) -> Optional[Right]:
        ...

    @abstractmethod
    async def grant_for_team(self, resource: ResourceRef, team_id) -> Optional[Right]:
        ...

    @abstractmethod
    async def grants_for_resource(
        self,
        resource: ResourceRef,
        grantee_kind: Optional[GranteeKind] = None,
    ) -> List[Grant]:
        """All grants on *resource* in insertion order."""


class MemoryGrantStore(GrantStore):
    """In-process reference store.

    Users, teams and resources are registered up front; a resource's parent
    must already be registered, so chains are acyclic by construction.
    """

    def __init__(self):
        self._users: Dict[Any, Optional[str]] = {}
        self._teams: Dict[Any, Optional[str]] = {}
        self._members: Dict[Any, set] = {}
        self._resources: Dict[ResourceRef, ResourceInfo] = {}
        self._grants: Dict[tuple, Grant] = {}
        self._lock = asyncio.Lock()

    def add_user(self, user_id, name: Optional[str] = None) -> None:
        self._users[user_id] = name

    def add_team(self, team_id, name: Optional[str] = None, members: Iterable = ()) -> None:
        self._teams[team_id] = name
        self._members.setdefault(team_id, set())
        for user_id in members:
            self.add_member(team_id, user_id)

    def add_member(self, team_id, user_id) -> None:
        if team_id not in self._teams:
            raise GranteeNotFoundError(GranteeKind.TEAM.value, team_id)
        if user_id not in self._users:
            raise GranteeNotFoundError(GranteeKind.USER.value, user_id)
        self._members[team_id].add(user_id)

    def remove_member(self, team_id, user_id) -> None:
        self._members.get(team_id, set()).discard(user_id)

    def add_resource(
        self,
        resource: ResourceRef,
        owner_id,
        parent: Optional[ResourceRef] = None,
    ) -> ResourceInfo:
        if parent is not None and parent not in self._resources:
            raise ResourceNotFoundError(parent.type.value, parent.id)
        info = ResourceInfo(ref=resource, owner_id=owner_id, parent=parent)
        self._resources[resource] = info
        return info

    def remove_resource(self, resource: ResourceRef) -> None:
        self._resources.pop(resource, None)
        for key in [k for k in self._grants if k[2] == resource]:
            del self._grants[key]

    async def load_resource(self, resource: ResourceRef) -> ResourceInfo:
        try:
            return self._resources[resource]
        except KeyError:
            raise ResourceNotFoundError(resource.type.value, resource.id) from None

    async def teams_of(self, user_id) -> FrozenSet[Any]:
        return frozenset(
            team_id for team_id, members in self._members.items()
            if user_id in members
        )

    async def grant_to_user(self, resource: ResourceRef, user_id, right, shared_by=None) -> Grant:
        return await self._grant(GranteeKind.USER, user_id, resource, right, shared_by)

    async def grant_to_team(self, resource: ResourceRef, team_id, right, shared_by=None) -> Grant:
        return await self._grant(GranteeKind.TEAM, team_id, resource, right, shared_by)

    async def revoke_from_user(self, resource: ResourceRef, user_id) -> None:
        await self._revoke(GranteeKind.USER, user_id, resource)

    async def revoke_from_team(self, resource: ResourceRef, team_id) -> None:
        await self._revoke(GranteeKind.TEAM, team_id, resource)

    async def grant_for_user(self, resource: ResourceRef, user_id) -> Optional[Right]:
        grant = self._grants.get((GranteeKind.USER, user_id, resource))
        return grant.right if grant else None

    async def grant_for_team(self, resource: ResourceRef, team_id) -> Optional[Right]:
        grant = self._grants.get((GranteeKind.TEAM, team_id, resource))
        return grant.right if grant else None

    async def grants_for_resource(
        self,
        resource: ResourceRef,
        grantee_kind: Optional[GranteeKind] = None,
    ) -> List[Grant]:
        return [
            grant for grant in self._grants.values()
            if grant.resource == resource
            and (grantee_kind is None or grant.grantee_kind == grantee_kind)
        ]

    def _directory(self, kind: GranteeKind) -> Dict[Any, Optional[str]]:
        return self._users if kind == GranteeKind.USER else self._teams

    async def _grant(
        self, kind: GranteeKind, grantee_id, resource: ResourceRef, right, shared_by=None
    ) -> Grant:
        right = validate_right(right)

        async with self._lock:
            directory = self._directory(kind)
            if grantee_id not in directory:
                raise GranteeNotFoundError(kind.value, grantee_id)
            if resource not in self._resources:
                raise ResourceNotFoundError(resource.type.value, resource.id)

            key = (kind, grantee_id, resource)
            existing = self._grants.get(key)
            if existing is not None:
                shared_by = existing.shared_by

            # assigning to an existing key keeps its insertion position
            grant = Grant(kind, grantee_id, resource, right, directory[grantee_id], shared_by)
            self._grants[key] = grant

        logger.info(f"Granted {right.name} on {resource} to {kind.value} {grantee_id}")
        return grant

    async def _revoke(self, kind: GranteeKind, grantee_id, resource: ResourceRef) -> None:
        async with self._lock:
            try:
                del self._grants[(kind, grantee_id, resource)]
            except KeyError:
                raise GrantNotFoundError(
                    kind.value, grantee_id, resource.type.value, resource.id
                ) from None

        logger.info(f"Revoked access to {resource} from {kind.value} {grantee_id}")
