"""Book listing routes: upload, activation, updates, photos, search, petitions."""

from decimal import Decimal
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from booktrade.auth import get_current_user
from booktrade.dependencies import (
    get_blob_store,
    get_listing_manager,
    get_petition_register,
    get_projector,
)
from booktrade.errors import ValidationError
from booktrade.schemas import BookFields, BookUpdate, PetitionRequest
from booktrade.services import (
    ImageSlot,
    ListingManager,
    ListingViewProjector,
    PetitionRegister,
)
from booktrade.storage import BlobStore

router = APIRouter()

CHANGED = "changed"


def _parse(model: type[BaseModel], data: dict[str, Any]) -> BaseModel:
    """Build ``model`` from form values, treating blank strings as absent."""
    values = {k: v for k, v in data.items() if v is not None and v != ""}
    try:
        return model(**values)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ValidationError(f"{field}: {first['msg']}") from e


def book_fields_form(
    isbn: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    course: Optional[str] = Form(None),
    editorial: Optional[str] = Form(None),
    editionYear: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    detail: Optional[str] = Form(None),
) -> BookFields:
    return _parse(
        BookFields,
        {
            "isbn": isbn,
            "title": title,
            "course": course,
            "editorial": editorial,
            "edition_year": editionYear,
            "price": price,
            "detail": detail,
        },
    )


def book_update_form(
    isbn: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    course: Optional[str] = Form(None),
    editorial: Optional[str] = Form(None),
    editionYear: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    detail: Optional[str] = Form(None),
) -> BookUpdate:
    return _parse(
        BookUpdate,
        {
            "isbn": isbn,
            "title": title,
            "course": course,
            "editorial": editorial,
            "edition_year": editionYear,
            "price": price,
            "detail": detail,
        },
    )


def image_slots_form(
    image0: Optional[str] = Form(None),
    image1: Optional[str] = Form(None),
    image2: Optional[str] = Form(None),
    oldImage0: Optional[str] = Form(None),
    oldImage1: Optional[str] = Form(None),
    oldImage2: Optional[str] = Form(None),
) -> list[ImageSlot]:
    """The three photo slots of an update; ``oldImageN`` carries a locator."""
    return [
        ImageSlot(changed=marker == CHANGED, old_locator=old or None)
        for marker, old in ((image0, oldImage0), (image1, oldImage1), (image2, oldImage2))
    ]


async def _read_blobs(files: Optional[list[UploadFile]]) -> list[bytes]:
    # One file or many arrive the same way; empty parts are skipped
    return [await f.read() for f in files or [] if f.filename]


@router.post("/upload/book")
async def upload_book(
    fields: BookFields = Depends(book_fields_form),
    images: Optional[list[UploadFile]] = File(None),
    user: dict = Depends(get_current_user),
    manager: ListingManager = Depends(get_listing_manager),
):
    """Create an unactivated listing with up to three photos."""
    blobs = await _read_blobs(images)
    book_id = await manager.create(user["id"], fields.model_dump(), blobs)
    return {"id": book_id, "message": "Book uploaded"}


@router.get("/upload/activate/{code}")
async def activate_book(code: str, manager: ListingManager = Depends(get_listing_manager)):
    """Redeem the activation code mailed to the administrator."""
    book = await manager.activate(code)
    return {"id": book.id, "message": "Book activated"}


@router.put("/update-book/{book_id}")
async def update_book(
    book_id: int,
    fields: BookUpdate = Depends(book_update_form),
    slots: list[ImageSlot] = Depends(image_slots_form),
    images: Optional[list[UploadFile]] = File(None),
    user: dict = Depends(get_current_user),
    manager: ListingManager = Depends(get_listing_manager),
):
    """Update listing fields and replace photos slot by slot."""
    blobs = await _read_blobs(images)
    await manager.update(book_id, user["id"], fields.model_dump(), slots, blobs)
    return {"id": book_id, "message": "Book updated"}


@router.post("/update-book/images/add/{book_id}")
async def add_book_image(
    book_id: int,
    image: UploadFile = File(...),
    user: dict = Depends(get_current_user),
    manager: ListingManager = Depends(get_listing_manager),
    blobs: BlobStore = Depends(get_blob_store),
):
    """Append one photo to a listing."""
    data = await image.read()
    added = await manager.add_image(book_id, user["id"], data)
    return {
        "message": "Image added",
        "image": {
            "id": added.id,
            "locator": added.locator,
            "url": blobs.public_url(added.locator),
            "is_primary": added.is_primary,
        },
    }


@router.delete("/update-book/images/delete/{image_id}")
async def delete_book_image(
    image_id: int,
    user: dict = Depends(get_current_user),
    manager: ListingManager = Depends(get_listing_manager),
):
    await manager.delete_image(image_id, user["id"])
    return {"message": "Image deleted"}


@router.put("/user/books/delete/{book_id}")
async def delete_book(
    book_id: int,
    user: dict = Depends(get_current_user),
    manager: ListingManager = Depends(get_listing_manager),
):
    """Delete a listing and all of its photos."""
    await manager.delete(book_id, user["id"])
    return {"message": "Book deleted"}


@router.get("/books/info/{book_id}")
async def get_book_info(book_id: int, projector: ListingViewProjector = Depends(get_projector)):
    """Public listing detail with seller info and photo URLs."""
    return projector.get(book_id)


@router.get("/books")
async def search_books(
    isbn: Optional[str] = None,
    title: Optional[str] = None,
    course: Optional[str] = None,
    editorial: Optional[str] = None,
    max_price: Optional[Decimal] = None,
    projector: ListingViewProjector = Depends(get_projector),
):
    """Search published listings by any combination of filters."""
    books = projector.search(
        isbn=isbn,
        title=title,
        course=course,
        editorial=editorial,
        max_price=max_price,
    )
    return {"count": len(books), "books": books}


@router.get("/search/{level}")
async def search_by_level(level: str, projector: ListingViewProjector = Depends(get_projector)):
    """Published listings for an education level (home page)."""
    books = projector.search_by_level(level)
    return {"count": len(books), "books": books}


@router.get("/user/books")
async def get_user_books(
    user: dict = Depends(get_current_user),
    projector: ListingViewProjector = Depends(get_projector),
):
    books = projector.list_for_owner(user["id"])
    return {"count": len(books), "books": books}


@router.get("/user/requests")
async def get_user_requests(
    user: dict = Depends(get_current_user),
    petitions: PetitionRegister = Depends(get_petition_register),
):
    requests = petitions.for_user(user["id"])
    return {"count": len(requests), "requests": requests}


@router.post("/user/requests/new")
async def set_user_request(
    payload: PetitionRequest,
    user: dict = Depends(get_current_user),
    petitions: PetitionRegister = Depends(get_petition_register),
):
    """Create or change the caller's petition for an ISBN."""
    petition = petitions.set(user["id"], payload.isbn, payload.level)
    return {"message": "Request saved", "request": PetitionRegister.as_dict(petition)}
