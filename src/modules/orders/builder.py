"""Order Builder: basket + catalog snapshots → Order aggregate.

Pure transformation, no I/O.  The basket's recorded unit price is
authoritative; the catalog only contributes frozen display attributes.
"""

from __future__ import annotations

from typing import Dict, Iterable

from modules.baskets.dtos import BasketDTO
from modules.catalog.dtos import CatalogSnapshotDTO
from modules.orders.dtos import (
    AddressDTO,
    CatalogItemOrderedDTO,
    OrderDTO,
    OrderItemDTO,
)
from modules.orders.exceptions import EmptyBasketError, OrderIntegrityError


def build_order(
    basket: BasketDTO,
    snapshots: Iterable[CatalogSnapshotDTO],
    shipping_address: AddressDTO,
) -> OrderDTO:
    """Materialize an immutable order from a basket.

    Raises:
        EmptyBasketError: the basket has no items.
        OrderIntegrityError: a basket item has no snapshot, or more than one.
    """
    if basket.is_empty:
        raise EmptyBasketError(f"Basket {basket.id} has no items.")

    by_id: Dict[int, CatalogSnapshotDTO] = {}
    duplicated: set[int] = set()
    for snapshot in snapshots:
        if snapshot.id in by_id:
            duplicated.add(snapshot.id)
        by_id[snapshot.id] = snapshot

    missing = sorted(basket.catalog_item_ids - by_id.keys())
    if missing:
        raise OrderIntegrityError(
            "Basket references a catalog item with no matching snapshot: "
            f"{missing}.",
            missing_item_ids=missing,
        )
    ambiguous = sorted(duplicated & basket.catalog_item_ids)
    if ambiguous:
        raise OrderIntegrityError(
            f"Catalog returned more than one snapshot for items {ambiguous}."
        )

    items = tuple(
        OrderItemDTO(
            item_ordered=_freeze(by_id[basket_item.catalog_item_id]),
            unit_price=basket_item.unit_price,
            units=basket_item.quantity,
        )
        for basket_item in basket.items
    )
    return OrderDTO(
        buyer_id=basket.buyer_id,
        ship_to_address=shipping_address,
        order_items=items,
    )


def _freeze(snapshot: CatalogSnapshotDTO) -> CatalogItemOrderedDTO:
    return CatalogItemOrderedDTO(
        catalog_item_id=snapshot.id,
        product_name=snapshot.name,
        picture_uri=snapshot.picture_uri,
    )
