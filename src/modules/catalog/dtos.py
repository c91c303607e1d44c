"""Catalog DTOs.

``CatalogSnapshotDTO`` is a frozen copy of an item's display attributes at
order-build time.  Orders embed the values, never a reference to the live
catalog row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.catalog.models import CatalogItem


class CatalogSnapshotDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    picture_uri: str

    @classmethod
    def from_entity(cls, item: CatalogItem, picture_uri: str) -> CatalogSnapshotDTO:
        return cls(id=item.pk, name=item.name, picture_uri=picture_uri)
