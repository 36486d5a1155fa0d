"""
Module: quote_kernel.models.activity
Responsibility: ORM persistence for activity-feed entries produced by status
    changes.

Architecture position: Kernel > Models.  May import from db/base.py and
    domain value objects (for DTO conversion only).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quote_kernel.db.base import Base
from quote_kernel.domain.history import ActivityRecord


class ActivityModel(Base):
    """Persistent activity-feed entry."""

    __tablename__ = "activities"

    __table_args__ = (
        Index("ix_activities_quote_id", "quote_id"),
        Index("ix_activities_created_at", "created_at"),
        Index("ix_activities_type", "type"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    quote_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("quotes.id", ondelete="SET NULL"), nullable=True,
    )
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    user_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSON, nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<Activity {self.id} type={self.type} quote={self.quote_id}>"

    @classmethod
    def from_dto(cls, dto: ActivityRecord) -> ActivityModel:
        return cls(
            id=dto.activity_id,
            type=dto.activity_type.value,
            quote_id=dto.quote_id,
            user_id=dto.user_id,
            user_name=dto.user_name,
            description=dto.description,
            metadata_=dict(dto.metadata),
            created_at=dto.created_at,
        )
