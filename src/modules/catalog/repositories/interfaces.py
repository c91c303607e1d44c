"""Catalog repository interface (Catalog Snapshot Resolver)."""

from __future__ import annotations

from abc import abstractmethod
from typing import Iterable, List

from modules.catalog.dtos import CatalogSnapshotDTO
from modules.core.repositories.interfaces import IReadRepository


class ICatalogRepository(IReadRepository[int, CatalogSnapshotDTO]):
    @abstractmethod
    def list_snapshots(self, ids: Iterable[int]) -> List[CatalogSnapshotDTO]:
        """Return snapshots for the requested item ids.

        May return fewer entries than requested (unknown or deleted items);
        callers are responsible for detecting the gap.
        """
