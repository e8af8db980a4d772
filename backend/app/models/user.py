"""
Accounting Notes Backend: User SQLAlchemy Model
===============================================

What:  ORM model for the `users` table. In practice it holds the single
       admin account that unlocks edit mode.

Security Note:
    `hash` is a bcrypt hash. UserResponse has no field for it, so it never
    leaves the service layer.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    username: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)

    hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Stored as plain text so the column survives adding roles
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
        server_default=text("'USER'"),
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
