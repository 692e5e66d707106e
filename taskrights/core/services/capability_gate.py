"""
Capability Gate
Create/read/update/delete checks for every resource type, mapped onto the evaluator
"""

from dataclasses import dataclass
from typing import Dict, Optional

from taskrights.core.actor import Actor
from taskrights.core.exceptions import AccessDeniedError
from taskrights.core.resources import ResourceRef
from taskrights.core.rights import Right
from taskrights.core.services.permission_service import PermissionEvaluator
from taskrights.database.models.enums import ResourceType


@dataclass(frozen=True)
class GatePolicy:
    create: Right = Right.READ_WRITE
    read: Right = Right.READ
    update: Right = Right.READ_WRITE
    delete: Right = Right.READ_WRITE


_SHARE_POLICY = GatePolicy(create=Right.ADMIN, update=Right.ADMIN, delete=Right.ADMIN)

# project and filter deletion needs admin
POLICIES: Dict[ResourceType, GatePolicy] = {
    ResourceType.PROJECT: GatePolicy(delete=Right.ADMIN),
    ResourceType.BUCKET: GatePolicy(),
    ResourceType.TASK: GatePolicy(),
    ResourceType.SAVED_FILTER: GatePolicy(delete=Right.ADMIN),
    ResourceType.PROJECT_USER: _SHARE_POLICY,
    ResourceType.PROJECT_TEAM: _SHARE_POLICY,
}


class CapabilityGate:

    def __init__(
        self,
        evaluator: PermissionEvaluator,
        policies: Optional[Dict[ResourceType, GatePolicy]] = None,
    ):
        self.evaluator = evaluator
        self.policies = POLICIES if policies is None else policies

    def policy(self, resource_type: ResourceType) -> GatePolicy:
        return self.policies.get(resource_type, GatePolicy())

    async def can_create(
        self,
        actor: Actor,
        resource_type: ResourceType,
        parent: Optional[ResourceRef] = None,
    ) -> bool:
        """Check against the parent, since the new resource does not exist yet.

        Top-level types have no parent: any registered user may create them,
        a link share may not.
        """
        expected = self.evaluator.resolver.parent_type(resource_type)

        if expected is None:
            if parent is not None:
                raise ValueError(f"{resource_type.value} is top level, got parent {parent}")
            return not actor.is_link_share

        if parent is None or parent.type != expected:
            raise ValueError(f"{resource_type.value} must be created inside a {expected.value}")

        return await self.evaluator.evaluate(actor, parent, self.policy(resource_type).create)

    async def can_read(self, actor: Actor, resource: ResourceRef) -> bool:
        return await self.evaluator.evaluate(actor, resource, self.policy(resource.type).read)

    async def can_update(self, actor: Actor, resource: ResourceRef) -> bool:
        return await self.evaluator.evaluate(actor, resource, self.policy(resource.type).update)

    async def can_delete(self, actor: Actor, resource: ResourceRef) -> bool:
        return await self.evaluator.evaluate(actor, resource, self.policy(resource.type).delete)

    async def can_admin(self, actor: Actor, resource: ResourceRef) -> bool:
        return await self.evaluator.evaluate(actor, resource, Right.ADMIN)

    async def require_create(
        self,
        actor: Actor,
        resource_type: ResourceType,
        parent: Optional[ResourceRef] = None,
    ) -> None:
        if not await self.can_create(actor, resource_type, parent):
            raise AccessDeniedError(
                message=f"Access denied: cannot create {resource_type.value}",
                details={"action": "create", "parent": str(parent) if parent else None},
            )

    async def require_read(self, actor: Actor, resource: ResourceRef) -> None:
        self._require(await self.can_read(actor, resource), "read", resource)

    async def require_update(self, actor: Actor, resource: ResourceRef) -> None:
        self._require(await self.can_update(actor, resource), "update", resource)

    async def require_delete(self, actor: Actor, resource: ResourceRef) -> None:
        self._require(await self.can_delete(actor, resource), "delete", resource)

    async def require_admin(self, actor: Actor, resource: ResourceRef) -> None:
        self._require(await self.can_admin(actor, resource), "admin", resource)

    @staticmethod
    def _require(allowed: bool, action: str, resource: ResourceRef) -> None:
        if not allowed:
            raise AccessDeniedError(
                message=f"Access denied: cannot {action} {resource}",
                details={"action": action, "resource": str(resource)},
            )
