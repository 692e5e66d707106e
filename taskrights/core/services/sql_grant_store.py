"""
SQL Grant Store
Grant store over the relational tables, one AsyncSession per request
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskrights.core.exceptions import (
    BackingStoreError,
    GranteeNotFoundError,
    GrantNotFoundError,
    ResourceNotFoundError,
)
from taskrights.core.resources import ResourceInfo, ResourceRef, project
from taskrights.core.rights import Right, validate_right
from taskrights.core.services.grant_store import Grant, GrantStore
from taskrights.database.models.enums import GranteeKind, ResourceType
from taskrights.database.models.resource import Bucket, Project, SavedFilter, Task
from taskrights.database.models.sharing import Grant as GrantRow
from taskrights.database.models.user import Team, TeamMember, User

logger = logging.getLogger(__name__)


# resource type -> (model, owner column, parent project column)
_RESOURCE_MODELS = {
    ResourceType.PROJECT: (Project, "owner_id", None),
    ResourceType.BUCKET: (Bucket, "created_by_id", "project_id"),
    ResourceType.TASK: (Task, "created_by_id", "project_id"),
    ResourceType.SAVED_FILTER: (SavedFilter, "owner_id", None),
}

# share relations are grant rows on a project
_RELATION_KINDS = {
    ResourceType.PROJECT_USER: GranteeKind.USER,
    ResourceType.PROJECT_TEAM: GranteeKind.TEAM,
}


class SQLGrantStore(GrantStore):

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _store_errors(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"Grant store failed to {action}: {e}")
            raise BackingStoreError(f"Grant store failed to {action}", e) from e

    async def load_resource(self, resource: ResourceRef) -> ResourceInfo:
        async with self._store_errors(f"load {resource}"):
            if resource.type in _RELATION_KINDS:
                return await self._load_relation(resource)

            model, owner_column, parent_column = _RESOURCE_MODELS[resource.type]
            row = await self.session.get(model, resource.id)
            if row is None:
                raise ResourceNotFoundError(resource.type.value, resource.id)

            parent = None
            if parent_column is not None:
                parent = project(getattr(row, parent_column))
            return ResourceInfo(resource, getattr(row, owner_column), parent)

    async def _load_relation(self, resource: ResourceRef) -> ResourceInfo:
        row = await self.session.get(GrantRow, resource.id)
        if (
            row is None
            or row.grantee_kind != _RELATION_KINDS[resource.type]
            or row.resource_type != ResourceType.PROJECT
        ):
            raise ResourceNotFoundError(resource.type.value, resource.id)
        return ResourceInfo(resource, row.shared_by_id, project(row.resource_id))

    async def teams_of(self, user_id) -> FrozenSet[Any]:
        async with self._store_errors(f"load teams of user {user_id}"):
            team_ids = await self.session.scalars(
                select(TeamMember.team_id).where(TeamMember.user_id == user_id)
            )
            return frozenset(team_ids)

    async def grant_to_user(self, resource: ResourceRef, user_id, right, shared_by=None) -> Grant:
        return await self._grant(GranteeKind.USER, user_id, resource, right, shared_by)

    async def grant_to_team(self, resource: ResourceRef, team_id, right, shared_by=None) -> Grant:
        return await self._grant(GranteeKind.TEAM, team_id, resource, right, shared_by)

    async def revoke_from_user(self, resource: ResourceRef, user_id) -> None:
        await self._revoke(GranteeKind.USER, user_id, resource)

    async def revoke_from_team(self, resource: ResourceRef, team_id) -> None:
        await self._revoke(GranteeKind.TEAM, team_id, resource)

    async def grant_for_user(self, resource: ResourceRef, user_id) -> Optional[Right]:
        return await self._granted(GranteeKind.USER, user_id, resource)

    async def grant_for_team(self, resource: ResourceRef, team_id) -> Optional[Right]:
        return await self._granted(GranteeKind.TEAM, team_id, resource)

    async def grants_for_resource(
        self,
        resource: ResourceRef,
        grantee_kind: Optional[GranteeKind] = None,
    ) -> List[Grant]:
        async with self._store_errors(f"list grants on {resource}"):
            query = select(GrantRow).where(
                GrantRow.resource_type == resource.type,
                GrantRow.resource_id == resource.id,
            )
            if grantee_kind is not None:
                query = query.where(GrantRow.grantee_kind == grantee_kind)

            rows = list(await self.session.scalars(query.order_by(GrantRow.id)))
            names = await self._grantee_names(rows)

        return [
            Grant(
                grantee_kind=row.grantee_kind,
                grantee_id=row.grantee_id,
                resource=resource,
                right=validate_right(row.right),
                grantee_name=names.get((row.grantee_kind, row.grantee_id)),
                shared_by=row.shared_by_id,
            )
            for row in rows
        ]

    async def _grantee_names(self, rows) -> Dict[tuple, str]:
        names = {}
        for kind, model, column in (
            (GranteeKind.USER, User, User.username),
            (GranteeKind.TEAM, Team, Team.name),
        ):
            ids = {row.grantee_id for row in rows if row.grantee_kind == kind}
            if not ids:
                continue
            result = await self.session.execute(
                select(model.id, column).where(model.id.in_(ids))
            )
            for grantee_id, name in result.all():
                names[(kind, grantee_id)] = name
        return names

    def _row_query(self, kind: GranteeKind, grantee_id, resource: ResourceRef):
        return select(GrantRow).where(
            GrantRow.grantee_kind == kind,
            GrantRow.grantee_id == grantee_id,
            GrantRow.resource_type == resource.type,
            GrantRow.resource_id == resource.id,
        )

    async def _granted(self, kind: GranteeKind, grantee_id, resource: ResourceRef) -> Optional[Right]:
        async with self._store_errors(f"look up {kind.value} grant on {resource}"):
            row = await self.session.scalar(self._row_query(kind, grantee_id, resource))
        if row is None:
            return None
        # a stored value outside the enumerated set is rejected, never clamped
        return validate_right(row.right)

    async def _touch(self, resource: ResourceRef) -> None:
        # share changes count as a change to the shared project
        if resource.type == ResourceType.PROJECT:
            await self.session.execute(
                update(Project)
                .where(Project.id == resource.id)
                .values(updated_at=datetime.utcnow())
            )

    async def _grant(
        self, kind: GranteeKind, grantee_id, resource: ResourceRef, right, shared_by=None
    ) -> Grant:
        right = validate_right(right)

        async with self._store_errors(f"grant {kind.value} {grantee_id} access to {resource}"):
            model = User if kind == GranteeKind.USER else Team
            grantee = await self.session.get(model, grantee_id)
            if grantee is None:
                raise GranteeNotFoundError(kind.value, grantee_id)
            name = grantee.username if kind == GranteeKind.USER else grantee.name

            await self.load_resource(resource)

            row = await self.session.scalar(self._row_query(kind, grantee_id, resource))
            if row is not None:
                row.right = int(right)
                shared_by = row.shared_by_id
            else:
                self.session.add(GrantRow(
                    grantee_kind=kind,
                    grantee_id=grantee_id,
                    resource_type=resource.type,
                    resource_id=resource.id,
                    right=int(right),
                    shared_by_id=shared_by,
                ))
            await self._touch(resource)

            try:
                await self.session.commit()
            except IntegrityError:
                # a concurrent insert for the same key won; update that row
                await self.session.rollback()
                row = await self.session.scalar(self._row_query(kind, grantee_id, resource))
                if row is None:
                    raise BackingStoreError(
                        f"Grant for {kind.value} {grantee_id} on {resource} "
                        f"vanished while resolving a conflicting insert"
                    )
                row.right = int(right)
                shared_by = row.shared_by_id
                await self._touch(resource)
                await self.session.commit()
        logger.info(f"Granted {right.name} on {resource} to {kind.value} {grantee_id}")
        return Grant(kind, grantee_id, resource, right, name, shared_by)

    async def _revoke(self, kind: GranteeKind, grantee_id, resource: ResourceRef) -> None:
        async with self._store_errors(f"revoke {kind.value} {grantee_id} from {resource}"):
            row = await self.session.scalar(self._row_query(kind, grantee_id, resource))
            if row is None:
                raise GrantNotFoundError(kind.value, grantee_id, resource.type.value, resource.id)

            await self.session.delete(row)
            await self._touch(resource)
            await self.session.commit()

        logger.info(f"Revoked access to {resource} from {kind.value} {grantee_id}")
