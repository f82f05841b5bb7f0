"""Listing services."""

from booktrade.services.listings import ImageSlot, ListingManager
from booktrade.services.notifier import ActivationNotifier
from booktrade.services.petitions import PetitionRegister
from booktrade.services.views import ListingViewProjector

__all__ = [
    "ActivationNotifier",
    "ImageSlot",
    "ListingManager",
    "ListingViewProjector",
    "PetitionRegister",
]
