from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from school_records.core.database import Base


class PrincipalRole(str, Enum):
    FACULTY = "faculty"
    STUDENT = "student"


class Principal(Base):
    """
    A registered faculty member or student who can log in.

    id and email are each unique across the whole table; the database
    enforces it, so two racing registrations cannot both be stored.
    password_hash is bcrypt; the plaintext is never stored.
    """
    __tablename__ = "principals"

    __table_args__ = (
        UniqueConstraint("email", name="uq_principals_email"),
    )

    id:            Mapped[str]             = mapped_column(String(64), primary_key=True)
    role:          Mapped[str]             = mapped_column(String(20), nullable=False, index=True)
    name:          Mapped[str]             = mapped_column(String(150), nullable=False)
    email:         Mapped[str]             = mapped_column(String(255), nullable=False, index=True)
    designation:   Mapped[str | None]      = mapped_column(String(120), nullable=True)
    password_hash: Mapped[str]             = mapped_column(Text, nullable=False)
    created_at:    Mapped[datetime]        = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Principal id={self.id!r} role={self.role} email={self.email!r}>"
