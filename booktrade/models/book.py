"""Book listing model."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booktrade.database import Base


class Book(Base):
    """A used textbook offered by its owner."""

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    # Book details
    isbn: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    course: Mapped[str] = mapped_column(String(100), nullable=True)
    editorial: Mapped[str] = mapped_column(String(255), nullable=True)
    edition_year: Mapped[int] = mapped_column(nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    detail: Mapped[str] = mapped_column(Text, nullable=True)

    # Activation: the code is cleared once redeemed
    activation_code: Mapped[str] = mapped_column(String(40), nullable=True, unique=True)
    activated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="books")
    images: Mapped[list["BookImage"]] = relationship(
        "BookImage",
        back_populates="book",
        cascade="all, delete-orphan",
        order_by="BookImage.id",
    )

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, isbn='{self.isbn}', activated={self.activated})>"
