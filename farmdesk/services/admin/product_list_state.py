# farmdesk/services/admin/product_list_state.py
"""
Per-view product list state, changed only through explicit actions.

Mutations patch the list in place instead of waiting for a refetch, so the
derived views (pending(), by_id()) stay consistent with what the admin just
did even when the server is slow to reflect it.
"""

from typing import FrozenSet, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from farmdesk.models.product_models import APPROVED, PENDING, Product


class ProductsLoaded(BaseModel):
    model_config = ConfigDict(frozen=True)

    products: Tuple[Product, ...]


class StatusChanged(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    status: str
    reason: str = ""


class PurchaseRecorded(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    approved: bool = False


class ProductHidden(BaseModel):
    """A product the admin already acted on elsewhere; keep it out even if the server still lists it."""
    model_config = ConfigDict(frozen=True)

    product_id: str


Action = Union[ProductsLoaded, StatusChanged, PurchaseRecorded, ProductHidden]


class ProductListState(BaseModel):
    model_config = ConfigDict(frozen=True)

    products: Tuple[Product, ...] = ()
    hidden: FrozenSet[str] = frozenset()
    purchased: FrozenSet[str] = frozenset()

    def by_id(self, product_id: str) -> Optional[Product]:
        for p in self.products:
            if p.id == product_id:
                return p
        return None

    def visible(self) -> List[Product]:
        return [p for p in self.products if p.id not in self.hidden]

    def pending(self) -> List[Product]:
        """Raw paddy still waiting for a decision."""
        return [p for p in self.visible() if p.status == PENDING and not p.isProcessedRice]


def _with_status(products: Tuple[Product, ...], product_id: str, status: str, reason: str) -> Tuple[Product, ...]:
    out = []
    for p in products:
        if p.id == product_id:
            p = p.model_copy(update={"status": status, "statusReason": reason or p.statusReason})
        out.append(p)
    return tuple(out)


def reduce(state: ProductListState, action: Action) -> ProductListState:
    if isinstance(action, ProductsLoaded):
        # a fresh load replaces the list but keeps what this view already suppressed
        return state.model_copy(update={"products": tuple(action.products)})

    if isinstance(action, StatusChanged):
        return state.model_copy(
            update={"products": _with_status(state.products, action.product_id, action.status, action.reason)}
        )

    if isinstance(action, PurchaseRecorded):
        products = state.products
        if action.approved:
            products = _with_status(products, action.product_id, APPROVED, "")
        return state.model_copy(
            update={"products": products, "purchased": state.purchased | {action.product_id}}
        )

    if isinstance(action, ProductHidden):
        return state.model_copy(update={"hidden": state.hidden | {action.product_id}})

    raise TypeError(f"Unknown product list action: {type(action).__name__}")
