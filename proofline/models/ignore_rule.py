"""
SQLAlchemy model for ignore_rules table.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from proofline.database import Base, DB_SCHEMA


class IgnoreRule(Base):
    """
    A user's standing instruction to suppress every issue matching (token, type).

    Attributes:
        id: Unique identifier (UUID4)
        user_id: Owner, taken from the caller's access token
        token: Flagged text exactly as the provider reported it
        type: Issue category (e.g. 'spelling', 'grammar')
        created_at: Record creation timestamp (UTC)
    """

    __tablename__ = "ignore_rules"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )

    # Users live in the external identity service, so no foreign key here
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False
    )

    token: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )

    type: Mapped[str] = mapped_column(
        String(50),
        nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        UniqueConstraint("user_id", "token", "type", name="uq_ignore_rules_user_token_type"),
        Index("ix_ignore_rules_user_id", "user_id"),
        {"schema": DB_SCHEMA},
    )

    def __repr__(self) -> str:
        return f"<IgnoreRule(id={self.id}, token={self.token!r}, type={self.type!r})>"
