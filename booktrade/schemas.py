"""Request payloads."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BookFields(BaseModel):
    """Listing fields of an upload."""

    isbn: str = Field(min_length=1, max_length=20)
    title: str = Field(min_length=1, max_length=255)
    course: Optional[str] = Field(default=None, max_length=100)
    editorial: Optional[str] = Field(default=None, max_length=255)
    edition_year: Optional[int] = Field(default=None, ge=1000, le=9999)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    detail: Optional[str] = None


class BookUpdate(BaseModel):
    """Listing fields of an update; omitted fields keep their value."""

    isbn: Optional[str] = Field(default=None, min_length=1, max_length=20)
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    course: Optional[str] = Field(default=None, max_length=100)
    editorial: Optional[str] = Field(default=None, max_length=255)
    edition_year: Optional[int] = Field(default=None, ge=1000, le=9999)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    detail: Optional[str] = None


class PetitionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    isbn: str = Field(min_length=1, max_length=20)
    # Index into the client's list of interest levels
    level: int = Field(alias="petIndex")
