"""Shared test helpers."""
import asyncio
from decimal import Decimal

from booktrade.models import Book, BookImage, Petition

BOOK_FIELDS = {
    "isbn": "978-1",
    "title": "Matemáticas 1º ESO",
    "course": "1º ESO",
    "editorial": "Anaya",
    "edition_year": 2019,
    "price": Decimal("12.50"),
    "detail": "Some pencil notes",
}


def run(coro):
    """Drive one service coroutine to completion."""
    return asyncio.run(coro)


def stored_images(db, book_id):
    return db.query(BookImage).filter(BookImage.book_id == book_id).order_by(BookImage.id).all()


def add_petition(db, user, isbn, level=1, active=True):
    petition = Petition(user_id=user.id, isbn=isbn, level=level, active=active)
    db.add(petition)
    db.commit()
    return petition


def book_count(db):
    return db.query(Book).count()
