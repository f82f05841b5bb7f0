"""Relational persistence for books, their images and petitions.

Each write verb commits on its own; callers that need multi-step consistency
compensate explicitly (see ``services.listings``).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from booktrade.models import Book, BookImage, Petition, User

BOOK_FIELDS = ("isbn", "title", "course", "editorial", "edition_year", "price", "detail")


@dataclass(frozen=True)
class Requester:
    """A user with a petition on an ISBN."""

    user_id: int
    name: str
    email: str
    active: bool


class ListingRepository:
    """Narrow query interface over a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # -- books -------------------------------------------------------------

    def insert_book(self, owner_id: int, fields: dict[str, Any], activation_code: str) -> Book:
        book = Book(
            owner_id=owner_id,
            activation_code=activation_code,
            activated=False,
            available=True,
            **{k: fields.get(k) for k in BOOK_FIELDS},
        )
        self.db.add(book)
        self.db.commit()
        return book

    def update_book(self, book: Book, fields: dict[str, Any], partial: bool = True) -> Book:
        """Apply ``fields``; with ``partial`` the None entries are left alone."""
        for key in BOOK_FIELDS:
            value = fields.get(key)
            if value is not None or not partial:
                setattr(book, key, value)
        self.db.commit()
        return book

    def snapshot_book(self, book: Book) -> dict[str, Any]:
        return {key: getattr(book, key) for key in BOOK_FIELDS}

    def get_book(self, book_id: int) -> Optional[Book]:
        return self.db.query(Book).filter(Book.id == book_id).first()

    def get_book_by_code(self, code: str) -> Optional[Book]:
        if not code:
            return None
        return self.db.query(Book).filter(Book.activation_code == code).first()

    def books_of_user(self, user_id: int) -> list[Book]:
        return (
            self.db.query(Book)
            .filter(Book.owner_id == user_id)
            .order_by(Book.created_at.desc(), Book.id.desc())
            .all()
        )

    def mark_activated(self, book: Book) -> Book:
        book.activated = True
        book.activation_code = None
        self.db.commit()
        return book

    def delete_book(self, book: Book) -> None:
        self.db.delete(book)
        self.db.commit()

    def search_books(
        self,
        level: Optional[str] = None,
        isbn: Optional[str] = None,
        title: Optional[str] = None,
        course: Optional[str] = None,
        editorial: Optional[str] = None,
        max_price: Optional[Decimal] = None,
        limit: int = 100,
    ) -> list[Book]:
        """Activated, available books matching every given filter."""
        query = (
            self.db.query(Book)
            .filter(Book.activated == True)
            .filter(Book.available == True)
        )
        if level:
            query = query.filter(Book.course.ilike(f"%{level}%"))
        if isbn:
            query = query.filter(Book.isbn == isbn)
        if title:
            query = query.filter(Book.title.ilike(f"%{title}%"))
        if course:
            query = query.filter(Book.course.ilike(f"%{course}%"))
        if editorial:
            query = query.filter(Book.editorial.ilike(f"%{editorial}%"))
        if max_price is not None:
            query = query.filter(Book.price <= max_price)
        return query.order_by(Book.created_at.desc(), Book.id.desc()).limit(limit).all()

    # -- images ------------------------------------------------------------

    def insert_image(self, book_id: int, locator: str) -> BookImage:
        image = BookImage(book_id=book_id, locator=locator, is_primary=False)
        self.db.add(image)
        self.db.commit()
        return image

    def get_image(self, image_id: int) -> Optional[BookImage]:
        return self.db.query(BookImage).filter(BookImage.id == image_id).first()

    def get_image_by_locator(self, book_id: int, locator: str) -> Optional[BookImage]:
        return (
            self.db.query(BookImage)
            .filter(BookImage.book_id == book_id)
            .filter(BookImage.locator == locator)
            .first()
        )

    def images_of_book(self, book_id: int) -> list[BookImage]:
        """Images in insertion order."""
        return (
            self.db.query(BookImage)
            .filter(BookImage.book_id == book_id)
            .order_by(BookImage.id.asc())
            .all()
        )

    def count_images(self, book_id: int) -> int:
        return (
            self.db.query(func.count(BookImage.id))
            .filter(BookImage.book_id == book_id)
            .scalar()
        )

    def mark_image_primary(self, image: BookImage) -> BookImage:
        """Make ``image`` the only primary image of its book."""
        (
            self.db.query(BookImage)
            .filter(BookImage.book_id == image.book_id)
            .filter(BookImage.id != image.id)
            .update({"is_primary": False}, synchronize_session="fetch")
        )
        image.is_primary = True
        self.db.commit()
        return image

    def ensure_primary(self, book_id: int) -> Optional[BookImage]:
        """Promote the oldest image when the book has images but no primary."""
        images = self.images_of_book(book_id)
        if not images or any(img.is_primary for img in images):
            return None
        return self.mark_image_primary(images[0])

    def delete_image(self, image: BookImage) -> None:
        self.db.delete(image)
        self.db.commit()

    # -- users -------------------------------------------------------------

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    # -- petitions ---------------------------------------------------------

    def upsert_petition(self, user_id: int, isbn: str, level: int) -> Petition:
        existing = (
            self.db.query(Petition)
            .filter(Petition.user_id == user_id)
            .filter(Petition.isbn == isbn)
            .first()
        )
        if existing:
            existing.level = level
            existing.active = True
            self.db.commit()
            return existing

        petition = Petition(user_id=user_id, isbn=isbn, level=level, active=True)
        self.db.add(petition)
        self.db.commit()
        return petition

    def petitions_of_user(self, user_id: int) -> list[Petition]:
        return (
            self.db.query(Petition)
            .filter(Petition.user_id == user_id)
            .order_by(Petition.id.asc())
            .all()
        )

    def petitions_for_isbn(self, isbn: str) -> list[Petition]:
        return (
            self.db.query(Petition)
            .filter(Petition.isbn == isbn)
            .order_by(Petition.id.asc())
            .all()
        )

    def requesters_for_isbn(self, isbn: str) -> list[Requester]:
        """Users with a petition on ``isbn``, active or not."""
        rows = (
            self.db.query(Petition, User)
            .join(User, User.id == Petition.user_id)
            .filter(Petition.isbn == isbn)
            .order_by(Petition.id.asc())
            .all()
        )
        return [
            Requester(
                user_id=user.id,
                name=user.name,
                email=user.email,
                active=petition.active,
            )
            for petition, user in rows
        ]

    def rollback(self) -> None:
        self.db.rollback()
