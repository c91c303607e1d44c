"""Unit tests for CatalogDjangoRepository."""

from __future__ import annotations

import pytest

from modules.catalog.repositories import CatalogDjangoRepository
from modules.catalog.uri import UriComposer

pytestmark = pytest.mark.unit


@pytest.fixture()
def repository():
    return CatalogDjangoRepository(UriComposer("http://catalog.test"))


class TestListSnapshots:
    def test_returns_snapshots_with_composed_picture_uri(self, repository, mug):
        (snapshot,) = repository.list_snapshots([mug.pk])
        assert snapshot.id == mug.pk
        assert snapshot.name == "Mug"
        assert snapshot.picture_uri == "http://catalog.test/images/products/2.png"

    def test_unknown_ids_are_omitted(self, repository, mug):
        snapshots = repository.list_snapshots([mug.pk, 999_999])
        assert [s.id for s in snapshots] == [mug.pk]

    def test_soft_deleted_items_are_omitted(self, repository, mug, sweatshirt):
        sweatshirt.delete()
        snapshots = repository.list_snapshots([mug.pk, sweatshirt.pk])
        assert [s.id for s in snapshots] == [mug.pk]


class TestGetById:
    def test_returns_snapshot(self, repository, mug):
        assert repository.get_by_id(mug.pk).name == "Mug"

    def test_returns_none_for_missing(self, repository):
        assert repository.get_by_id(424242) is None
