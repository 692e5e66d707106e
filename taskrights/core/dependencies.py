from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from taskrights.core.actor import Actor
from taskrights.core.security import ActorProvider
from taskrights.core.services.capability_gate import CapabilityGate
from taskrights.core.services.grant_store import GrantStore
from taskrights.core.services.permission_service import PermissionEvaluator
from taskrights.core.services.sharing_service import SharingService
from taskrights.core.services.sql_grant_store import SQLGrantStore
from taskrights.database.database import get_db

security = HTTPBearer()


async def get_store(db: AsyncSession = Depends(get_db)) -> GrantStore:
    return SQLGrantStore(db)


async def get_current_actor(
    authorization: HTTPAuthorizationCredentials = Depends(security),
    store: GrantStore = Depends(get_store)
) -> Actor:
    return await ActorProvider(store).actor_from_token(authorization.credentials)


async def get_gate(store: GrantStore = Depends(get_store)) -> CapabilityGate:
    return CapabilityGate(PermissionEvaluator(store))


async def get_sharing_service(
    store: GrantStore = Depends(get_store),
    gate: CapabilityGate = Depends(get_gate)
) -> SharingService:
    return SharingService(store, gate)
