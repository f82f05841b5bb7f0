"""Book photo model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booktrade.database import Base


class BookImage(Base):
    """A stored photo of a book. The bytes live in the blob store under `locator`."""

    __tablename__ = "book_images"

    id: Mapped[int] = mapped_column(primary_key=True)
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id"), nullable=False, index=True)
    locator: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    book: Mapped["Book"] = relationship("Book", back_populates="images")

    def __repr__(self) -> str:
        return f"<BookImage(id={self.id}, book_id={self.book_id}, primary={self.is_primary})>"
