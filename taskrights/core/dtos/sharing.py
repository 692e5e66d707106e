from pydantic import BaseModel
from typing import Optional

from taskrights.core.services.grant_store import Grant
from taskrights.core.services.sharing_service import ShareListing
from taskrights.database.models.enums import GranteeKind


# right stays a plain int here so the rights engine rejects bad values itself
class UserShareCreate(BaseModel):
    user_id: int
    right: int = 0


class TeamShareCreate(BaseModel):
    team_id: int
    right: int = 0


class ShareResponse(BaseModel):
    grantee_kind: GranteeKind
    grantee_id: int
    name: Optional[str] = None
    right: int
    shared_by: Optional[int] = None

    @classmethod
    def from_grant(cls, grant: Grant) -> "ShareResponse":
        return cls(
            grantee_kind=grant.grantee_kind,
            grantee_id=grant.grantee_id,
            name=grant.grantee_name,
            right=int(grant.right),
            shared_by=grant.shared_by,
        )


class ShareListResponse(BaseModel):
    # total counts every match, items holds the requested page
    total: int
    max_right: int
    items: list[ShareResponse]

    @classmethod
    def from_listing(cls, listing: ShareListing) -> "ShareListResponse":
        return cls(
            total=listing.total,
            max_right=int(listing.max_right),
            items=[ShareResponse.from_grant(g) for g in listing.items],
        )
