"""Django ORM implementation of the catalog repository.

Database errors are not caught here: the Service Layer translates them
into its own dependency failure.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import structlog

from modules.catalog.dtos import CatalogSnapshotDTO
from modules.catalog.models import CatalogItem
from modules.catalog.repositories.interfaces import ICatalogRepository
from modules.catalog.uri import UriComposer

logger = structlog.get_logger(__name__)


class CatalogDjangoRepository(ICatalogRepository):
    """Concrete catalog repository backed by Django ORM."""

    def __init__(self, uri_composer: UriComposer) -> None:
        self._uri_composer = uri_composer

    def get_by_id(self, id: int) -> Optional[CatalogSnapshotDTO]:
        item = CatalogItem.objects.alive().filter(pk=id).first()
        if item is None:
            return None
        return self._snapshot(item)

    def list_snapshots(self, ids: Iterable[int]) -> List[CatalogSnapshotDTO]:
        wanted = set(ids)
        items = CatalogItem.objects.alive().filter(pk__in=wanted)
        snapshots = [self._snapshot(item) for item in items]
        logger.debug(
            "catalog.snapshots_resolved",
            requested=len(wanted),
            resolved=len(snapshots),
        )
        return snapshots

    def _snapshot(self, item: CatalogItem) -> CatalogSnapshotDTO:
        return CatalogSnapshotDTO.from_entity(
            item, self._uri_composer.compose_pic_uri(item.picture_uri)
        )
