"""Public read views of listings."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from booktrade.errors import NotFound
from booktrade.models import Book, BookImage
from booktrade.repository import ListingRepository
from booktrade.storage import BlobStore


class ListingViewProjector:
    """Builds the JSON-ready dicts served by the read endpoints."""

    def __init__(self, repo: ListingRepository, blobs: BlobStore):
        self.repo = repo
        self.blobs = blobs

    def get(self, listing_id: int) -> dict[str, Any]:
        """Listing detail with seller info and photo URLs.

        Photos keep repository (insertion) order; ``image_refs`` carries the
        locator clients must echo back when replacing a photo.
        """
        book = self.repo.get_book(listing_id)
        if book is None:
            raise NotFound("Book not found")

        images = self.repo.images_of_book(book.id)
        seller = self.repo.get_user(book.owner_id)

        data = self._fields(book)
        data.update(
            {
                "id_seller": book.owner_id,
                "seller_name": seller.name if seller else None,
                "location": seller.location if seller else None,
                "images": [self.blobs.public_url(image.locator) for image in images],
                "image_refs": [self._image_ref(image) for image in images],
            }
        )
        return data

    def list_for_owner(self, owner_id: int) -> list[dict[str, Any]]:
        """All listings of a user, whatever their state."""
        return [self.summary(book) for book in self.repo.books_of_user(owner_id)]

    def search_by_level(self, level: str) -> list[dict[str, Any]]:
        return [self.summary(book) for book in self.repo.search_books(level=level)]

    def search(
        self,
        isbn: Optional[str] = None,
        title: Optional[str] = None,
        course: Optional[str] = None,
        editorial: Optional[str] = None,
        max_price: Optional[Decimal] = None,
    ) -> list[dict[str, Any]]:
        books = self.repo.search_books(
            isbn=isbn,
            title=title,
            course=course,
            editorial=editorial,
            max_price=max_price,
        )
        return [self.summary(book) for book in books]

    def summary(self, book: Book) -> dict[str, Any]:
        data = self._fields(book)
        primary = next((image for image in book.images if image.is_primary), None)
        data["image"] = self.blobs.public_url(primary.locator) if primary else None
        return data

    def _fields(self, book: Book) -> dict[str, Any]:
        return {
            "id": book.id,
            "isbn": book.isbn,
            "title": book.title,
            "course": book.course,
            "editorial": book.editorial,
            "editionYear": book.edition_year,
            "price": float(book.price) if book.price is not None else None,
            "detail": book.detail,
            "activated": book.activated,
            "available": book.available,
        }

    def _image_ref(self, image: BookImage) -> dict[str, Any]:
        return {
            "id": image.id,
            "locator": image.locator,
            "url": self.blobs.public_url(image.locator),
            "is_primary": image.is_primary,
        }
