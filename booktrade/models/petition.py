"""Petition model: a user's interest in acquiring a book by ISBN."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booktrade.database import Base


class Petition(Base):
    """One row per (user, isbn); re-submitting overwrites the level."""

    __tablename__ = "petitions"
    __table_args__ = (
        UniqueConstraint("user_id", "isbn", name="uq_petitions_user_id_isbn"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    isbn: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    # Ordinal index into the client's interest-level list
    level: Mapped[int] = mapped_column(nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="petitions")

    def __repr__(self) -> str:
        return f"<Petition(user_id={self.user_id}, isbn='{self.isbn}', level={self.level})>"
