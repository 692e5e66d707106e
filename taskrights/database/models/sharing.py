from datetime import datetime
from sqlalchemy import (
    Integer, DateTime, ForeignKey,
    Enum as SQLEnum, Index, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column

from taskrights.database.database import Base
from taskrights.database.models.enums import GranteeKind, ResourceType


class Grant(Base):
    __tablename__ = "grants"

    id: Mapped[int] = mapped_column(primary_key=True)

    grantee_kind: Mapped[GranteeKind] = mapped_column(SQLEnum(GranteeKind))
    grantee_id: Mapped[int] = mapped_column(Integer)

    resource_type: Mapped[ResourceType] = mapped_column(SQLEnum(ResourceType))
    resource_id: Mapped[int] = mapped_column(Integer)

    # 0 = read only, 1 = read & write, 2 = admin; validated on every read
    right: Mapped[int] = mapped_column(Integer, default=0)

    shared_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    __table_args__ = (
        UniqueConstraint(
            'grantee_kind', 'grantee_id', 'resource_type', 'resource_id',
            name='uq_grant_grantee_resource'
        ),
        Index('idx_grant_resource', 'resource_type', 'resource_id'),
    )
