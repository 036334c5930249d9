# farmdesk/services/admin/pending_products_service.py
from __future__ import annotations

import logging
from typing import Any, Dict, MutableMapping, Optional

from farmdesk.models.product_models import PENDING, REJECTED
from farmdesk.services.admin.product_list_state import (
    ProductHidden,
    ProductListState,
    ProductsLoaded,
    StatusChanged,
    reduce,
)
from farmdesk.services.product_service import ProductService, cache_buster

logger = logging.getLogger(__name__)

# read-once signal from the purchase flow back to the pending list
APPROVED_PRODUCT_KEY = "approvedProductId"
SOURCE_PENDING_PRODUCTS = "pending-products"
REJECT_REASON = "Product rejected by admin"


class PendingProductsService:
    """
    Pending paddy review.

    Approving does not touch the product's status here: it only hands the
    product over to the purchase form, which approves and buys in one go.
    """

    def __init__(self, products: ProductService, storage: MutableMapping[str, Any]):
        self.products = products
        self.storage = storage

    # -------------------------------------------------
    # LIST
    # -------------------------------------------------
    def load(self, *changes: StatusChanged) -> ProductListState:
        """
        Fetch the pending list. `changes` are status updates this console
        already made, applied over the fetched list in case the server has
        not caught up yet.
        """
        ts = cache_buster()
        products = self.products.get_products(status=PENDING, showAll=True, isProcessedRice=False, _t=ts)

        if not products:
            # some backend builds ignore isProcessedRice; ask broadly and filter here
            logger.info("No pending paddy with isProcessedRice=false, retrying with broader query")
            broader = self.products.get_products(status=PENDING, showAll=True, _t=ts + 1)
            products = [p for p in broader if p.status == PENDING and p.isProcessedRice is not True]

        state = reduce(ProductListState(), ProductsLoaded(products=tuple(products)))

        approved_id = self.storage.pop(APPROVED_PRODUCT_KEY, None)
        if approved_id:
            logger.info("Hiding product %s approved in the purchase flow", approved_id)
            state = reduce(state, ProductHidden(product_id=approved_id))

        for change in changes:
            state = reduce(state, change)

        return state

    # -------------------------------------------------
    # ACTIONS
    # -------------------------------------------------
    def start_approval(self, product_id: str, farmer_id: Optional[str]) -> Dict[str, str]:
        """Remember the product and return the query for the purchase form."""
        self.storage[APPROVED_PRODUCT_KEY] = product_id
        return {
            "productId": product_id,
            "farmerId": farmer_id or "",
            "from": SOURCE_PENDING_PRODUCTS,
        }

    def reject(self, product_id: str, reason: str = REJECT_REASON) -> StatusChanged:
        """Reject on the server and return the change for the next `load`."""
        reason = reason or REJECT_REASON
        self.products.update_product_status(product_id, REJECTED, reason)
        logger.info("Rejected product %s", product_id)
        return StatusChanged(product_id=product_id, status=REJECTED, reason=reason)
