"""
roles/models.py

Defines SQLAlchemy models for the roles module:
- UserSession: Explicit session context holding the active role
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from kycgate.database.base import Base
from kycgate.database.enums import Role


# ------------------------------------------------------
# UserSession Model
# ------------------------------------------------------
class UserSession(Base):
    """
    A user's session and the role it is currently acting as.
    `current_role` is only ever written by the role authorizer.
    """

    __tablename__ = "user_sessions"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, comment="Session identifier from the access token"
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, comment="Session owner")
    current_role: Mapped[Role | None] = mapped_column(
        Enum(Role), nullable=True, comment="Role the session is acting as"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        comment="Timestamp when the session was first seen",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        comment="Timestamp of the last role switch",
    )
