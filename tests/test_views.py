"""
Tests for the listing read views.
"""
from decimal import Decimal

import pytest

from booktrade.errors import NotFound
from booktrade.services import ListingViewProjector
from tests.helpers import run, stored_images


@pytest.fixture
def projector(repo, blob_store):
    return ListingViewProjector(repo, blob_store)


def publish(manager, book):
    run(manager.activate(book.activation_code))
    return book


def test_view_has_seller_and_images(db, projector, blob_store, owner, make_book):
    book = make_book(owner.id, images=[b"A", b"B"])
    images = stored_images(db, book.id)

    view = projector.get(book.id)

    assert view["id"] == book.id
    assert view["isbn"] == "978-1"
    assert view["editionYear"] == 2019
    assert view["price"] == 12.5
    assert view["id_seller"] == owner.id
    assert view["seller_name"] == "Ana"
    assert view["location"] == "Valencia"
    assert view["available"] is True
    assert view["images"] == [blob_store.public_url(img.locator) for img in images]
    assert [ref["locator"] for ref in view["image_refs"]] == [img.locator for img in images]
    assert [ref["id"] for ref in view["image_refs"]] == [img.id for img in images]


def test_view_of_missing_listing(projector):
    with pytest.raises(NotFound) as exc_info:
        projector.get(404)
    assert exc_info.value.status_code == 404


def test_view_keeps_insertion_order(db, manager, projector, owner, make_book):
    book = make_book(owner.id, images=[b"A"])
    added = run(manager.add_image(book.id, owner.id, b"B"))

    view = projector.get(book.id)

    assert view["image_refs"][-1]["id"] == added.id
    assert view["image_refs"][0]["is_primary"] is True


def test_search_by_level_only_lists_published_books(db, manager, projector, owner, make_book):
    published = publish(manager, make_book(owner.id, course="2º Bachillerato"))
    make_book(owner.id, course="2º Bachillerato")  # never activated
    sold = publish(manager, make_book(owner.id, course="1º Bachillerato"))
    sold.available = False
    db.commit()
    publish(manager, make_book(owner.id, course="3º ESO"))

    results = projector.search_by_level("bachillerato")

    assert [book["id"] for book in results] == [published.id]


def test_search_filters(db, manager, projector, owner, make_book):
    cheap = publish(manager, make_book(owner.id, isbn="111", title="Física", price=Decimal("5")))
    publish(manager, make_book(owner.id, isbn="222", title="Física avanzada", price=Decimal("30")))

    assert [b["id"] for b in projector.search(isbn="111")] == [cheap.id]
    assert len(projector.search(title="física")) == 2
    assert [b["id"] for b in projector.search(title="física", max_price=Decimal("10"))] == [cheap.id]
    assert projector.search(editorial="Santillana") == []


def test_summary_points_at_primary_image(db, projector, blob_store, owner, make_book):
    book = make_book(owner.id, images=[b"A", b"B"])
    primary = stored_images(db, book.id)[0]

    summary = projector.summary(book)

    assert summary["image"] == blob_store.public_url(primary.locator)


def test_list_for_owner_includes_unpublished(projector, owner, other_user, make_book):
    mine = make_book(owner.id)
    make_book(other_user.id)

    assert [b["id"] for b in projector.list_for_owner(owner.id)] == [mine.id]
    assert projector.list_for_owner(owner.id)[0]["activated"] is False
