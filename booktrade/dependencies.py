"""FastAPI dependency providers for the service layer."""

from fastapi import Depends
from sqlalchemy.orm import Session

from booktrade.config import Settings, get_settings
from booktrade.database import get_db
from booktrade.repository import ListingRepository
from booktrade.services import (
    ActivationNotifier,
    ListingManager,
    ListingViewProjector,
    PetitionRegister,
)
from booktrade.storage import BlobStore


def get_repository(db: Session = Depends(get_db)) -> ListingRepository:
    return ListingRepository(db)


def get_blob_store(settings: Settings = Depends(get_settings)) -> BlobStore:
    return BlobStore(settings)


def get_notifier(settings: Settings = Depends(get_settings)) -> ActivationNotifier:
    return ActivationNotifier(settings)


def get_listing_manager(
    repo: ListingRepository = Depends(get_repository),
    blobs: BlobStore = Depends(get_blob_store),
    notifier: ActivationNotifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> ListingManager:
    return ListingManager(repo, blobs, notifier, max_images=settings.max_images_per_listing)


def get_projector(
    repo: ListingRepository = Depends(get_repository),
    blobs: BlobStore = Depends(get_blob_store),
) -> ListingViewProjector:
    return ListingViewProjector(repo, blobs)


def get_petition_register(repo: ListingRepository = Depends(get_repository)) -> PetitionRegister:
    return PetitionRegister(repo)
