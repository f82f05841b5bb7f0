"""Database models."""

from booktrade.models.user import User
from booktrade.models.book import Book
from booktrade.models.book_image import BookImage
from booktrade.models.petition import Petition

__all__ = [
    "User",
    "Book",
    "BookImage",
    "Petition",
]
