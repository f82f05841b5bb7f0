"""Book listing lifecycle: create, activate, update, image changes, delete.

Database rows and photo blobs live in different stores with no shared
transaction. Multi-step writes therefore run as a small saga: when step k
fails, whatever steps 0..k-1 of the same call wrote is removed again
(best-effort) before the error is reported.
"""

from __future__ import annotations

import functools
import logging
import secrets
import string
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from booktrade.errors import (
    BookTradeError,
    DatabaseError,
    Forbidden,
    InvalidCode,
    NotAvailable,
    NotFound,
    StorageError,
    ValidationError,
)
from booktrade.models import Book, BookImage
from booktrade.repository import ListingRepository
from booktrade.services.notifier import ActivationNotifier
from booktrade.storage import BlobStore

logger = logging.getLogger(__name__)

ACTIVATION_CODE_LENGTH = 40
UPDATE_SLOTS = 3

_CODE_ALPHABET = string.ascii_letters + string.digits


def generate_activation_code(length: int = ACTIVATION_CODE_LENGTH) -> str:
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class ImageSlot:
    """One of the three photo slots of an update request."""

    changed: bool = False
    # Locator of the photo this slot replaces, if any
    old_locator: Optional[str] = None


def normalize_slots(change_set: Sequence[ImageSlot] | None) -> list[ImageSlot]:
    slots = list(change_set or [])
    if len(slots) > UPDATE_SLOTS:
        raise ValidationError(f"At most {UPDATE_SLOTS} image slots can be changed")
    return slots + [ImageSlot()] * (UPDATE_SLOTS - len(slots))


def database_boundary(func):
    """Map persistence failures of an operation to ``DatabaseError``."""

    @functools.wraps(func)
    async def wrapper(self: "ListingManager", *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"{func.__name__} failed: {e}")
            raise DatabaseError("Database error") from e

    return wrapper


class ListingManager:
    """Orchestrates a listing and its photo set across the database and blob store."""

    def __init__(
        self,
        repo: ListingRepository,
        blobs: BlobStore,
        notifier: ActivationNotifier,
        max_images: int = 3,
    ):
        self.repo = repo
        self.blobs = blobs
        self.notifier = notifier
        self.max_images = max_images

    # -- create / activate ---------------------------------------------------

    @database_boundary
    async def create(self, owner_id: int, fields: dict[str, Any], blobs: Sequence[bytes]) -> int:
        """Insert a new, unactivated listing with up to ``max_images`` photos.

        The first photo becomes primary. Photos past the cap are dropped.
        """
        batch = list(blobs)[: self.max_images]
        if len(blobs) > len(batch):
            logger.info(f"Dropping {len(blobs) - len(batch)} extra image(s) on upload")

        book = self.repo.insert_book(owner_id, fields, generate_activation_code())

        written: list[str] = []
        try:
            for i, data in enumerate(batch):
                locator = await self.blobs.save(data)
                written.append(locator)
                image = self.repo.insert_image(book.id, locator)
                if i == 0:
                    self.repo.mark_image_primary(image)
        except (BookTradeError, SQLAlchemyError):
            logger.error(f"Upload of book {book.id} failed after {len(written)} image(s); rolling back")
            await self._discard(book.id, written)
            self._discard_book(book)
            raise

        logger.info(f"Book {book.id} uploaded by user {owner_id} with {len(batch)} image(s)")

        try:
            self.notifier.request_activation(book)
        except Exception as e:
            logger.warning(f"Activation request for book {book.id} not sent: {e}")

        return book.id

    @database_boundary
    async def activate(self, code: str) -> Book:
        """Redeem an activation code. A code works exactly once."""
        book = self.repo.get_book_by_code(code)
        if book is None or book.activated:
            raise InvalidCode("The activation code is not valid")

        self.repo.mark_activated(book)
        logger.info(f"Book {book.id} activated")

        # The state change above is authoritative; mail problems only get logged
        try:
            owner = self.repo.get_user(book.owner_id)
            requesters = self.repo.requesters_for_isbn(book.isbn)
            self.notifier.notify_activated(owner, book, requesters)
        except Exception as e:
            self.repo.rollback()
            logger.warning(f"Activation notices for book {book.id} failed: {e}")

        return book

    # -- mutations -----------------------------------------------------------

    @database_boundary
    async def update(
        self,
        listing_id: int,
        caller_id: int,
        fields: dict[str, Any],
        change_set: Sequence[ImageSlot] | None = None,
        blobs: Sequence[bytes] = (),
    ) -> Book:
        """Apply field changes and swap photos slot by slot.

        New blob i goes to the i-th *changed* slot in ascending slot order,
        whatever the slot numbers are.
        """
        book = self._mutable_book(listing_id, caller_id)
        slots = normalize_slots(change_set)
        changed = [i for i, slot in enumerate(slots) if slot.changed]

        if len(blobs) < len(changed):
            raise ValidationError(
                f"{len(changed)} image slot(s) marked as changed but {len(blobs)} image(s) sent"
            )

        retiring: dict[int, BookImage] = {}
        for i in changed:
            locator = slots[i].old_locator
            if not locator:
                continue
            image = self.repo.get_image_by_locator(book.id, locator)
            if image is None:
                raise NotFound(f"Image {locator} does not belong to this book", status_code=400)
            if any(other.id == image.id for other in retiring.values()):
                raise ValidationError(f"Image {locator} is replaced twice")
            retiring[i] = image

        total = self.repo.count_images(book.id) - len(retiring) + len(changed)
        if total > self.max_images:
            raise ValidationError(f"A book can have at most {self.max_images} images")

        previous = self.repo.snapshot_book(book)
        self.repo.update_book(book, fields)

        # Phase 1: write every new photo; undo this call's writes on failure
        added: dict[int, BookImage] = {}
        written: list[str] = []
        try:
            for slot, data in zip(changed, blobs):
                locator = await self.blobs.save(data)
                written.append(locator)
                added[slot] = self.repo.insert_image(book.id, locator)
        except (BookTradeError, SQLAlchemyError):
            logger.error(f"Image update of book {book.id} failed; discarding {len(written)} new image(s)")
            await self._discard(book.id, written)
            self._restore_fields(book, previous)
            raise

        # Phase 2: retire replaced photos; a replaced primary hands over to its slot.
        # Every old row goes even when a blob removal fails.
        orphaned: list[str] = []
        for slot, old in retiring.items():
            was_primary = old.is_primary
            locator = old.locator
            try:
                await self._remove_image(old, promote=False)
            except StorageError as e:
                orphaned.append(locator)
                logger.warning(f"Orphaned blob {locator} of book {book.id}: {e.message}")
            if was_primary:
                self.repo.mark_image_primary(added[slot])
        self.repo.ensure_primary(book.id)

        if orphaned:
            raise StorageError(f"{len(orphaned)} replaced image(s) could not be removed")

        logger.info(f"Book {book.id} updated ({len(changed)} image slot(s) changed)")
        return book

    @database_boundary
    async def add_image(self, listing_id: int, caller_id: int, blob: bytes) -> BookImage:
        book = self._mutable_book(listing_id, caller_id)
        if self.repo.count_images(book.id) >= self.max_images:
            raise ValidationError(f"A book can have at most {self.max_images} images")

        locator = await self.blobs.save(blob)
        try:
            image = self.repo.insert_image(book.id, locator)
        except SQLAlchemyError:
            await self._discard(book.id, [locator])
            raise
        self.repo.ensure_primary(book.id)
        logger.info(f"Image {image.id} added to book {book.id}")
        return image

    @database_boundary
    async def delete_image(self, image_id: int, caller_id: int) -> None:
        image = self.repo.get_image(image_id)
        if image is None:
            raise NotFound("Image not found", status_code=400)
        self._mutable_book(image.book_id, caller_id)
        await self._remove_image(image)
        logger.info(f"Image {image_id} deleted")

    @database_boundary
    async def delete(self, listing_id: int, caller_id: int) -> None:
        """Delete a listing together with all of its photos.

        Availability is not checked. Rows go first; blob removal is best-effort.
        """
        book = self.repo.get_book(listing_id)
        if book is None:
            raise NotFound("Book not found", status_code=400)
        if book.owner_id != caller_id:
            raise Forbidden("Operation not allowed")

        locators = [image.locator for image in self.repo.images_of_book(book.id)]
        self.repo.delete_book(book)

        for locator in locators:
            try:
                await self.blobs.delete(locator)
            except BookTradeError as e:
                logger.warning(f"Orphaned blob {locator} of deleted book {listing_id}: {e.message}")

        logger.info(f"Book {listing_id} deleted with {len(locators)} image(s)")

    # -- helpers -------------------------------------------------------------

    def _mutable_book(self, listing_id: int, caller_id: int) -> Book:
        book = self.repo.get_book(listing_id)
        if book is None:
            raise NotFound("Book not found", status_code=400)
        if book.owner_id != caller_id:
            raise Forbidden("User not authorized")
        if not book.available:
            raise NotAvailable("Operation not allowed")
        return book

    async def _remove_image(self, image: BookImage, promote: bool = True) -> None:
        """Delete the row, then the blob. A blob failure is reported after the row is gone."""
        book_id = image.book_id
        locator = image.locator
        was_primary = image.is_primary

        self.repo.delete_image(image)
        if promote and was_primary:
            self.repo.ensure_primary(book_id)
        await self.blobs.delete(locator)

    async def _discard(self, book_id: int, locators: list[str]) -> None:
        """Compensation: drop rows and blobs written by a failed call."""
        self.repo.rollback()
        for locator in locators:
            try:
                image = self.repo.get_image_by_locator(book_id, locator)
                if image is not None:
                    self.repo.delete_image(image)
            except SQLAlchemyError as e:
                self.repo.rollback()
                logger.warning(f"Compensation left image row {locator}: {e}")
            try:
                await self.blobs.delete(locator)
            except BookTradeError as e:
                logger.warning(f"Compensation left blob {locator}: {e.message}")

    def _restore_fields(self, book: Book, previous: dict[str, Any]) -> None:
        try:
            self.repo.update_book(book, previous, partial=False)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.warning(f"Compensation could not restore fields of book {book.id}: {e}")

    def _discard_book(self, book: Book) -> None:
        try:
            self.repo.delete_book(book)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.warning(f"Compensation left book row {book.id}: {e}")
