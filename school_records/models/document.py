from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from school_records.core.database import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    """
    One record document (student / teacher / staff) with its revision token.

    Every update must present the current ``rev``; the store bumps it on
    each successful write so lost updates are detected.
    """
    __tablename__ = "documents"

    collection: Mapped[str]      = mapped_column(String(40), primary_key=True)
    id:         Mapped[str]      = mapped_column(String(64), primary_key=True)
    rev:        Mapped[str]      = mapped_column(String(64), nullable=False)
    body:       Mapped[dict]     = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, onupdate=_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Document {self.collection}/{self.id} rev={self.rev}>"
