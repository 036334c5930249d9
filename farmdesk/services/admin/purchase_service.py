# farmdesk/services/admin/purchase_service.py
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional, Set, Tuple

from pydantic import BaseModel

from farmdesk.errors import DuplicateSubmissionError, FarmApiError, FormValidationError, PurchaseSubmissionError
from farmdesk.models.inventory_models import (
    PurchaseForm,
    PurchaseRequest,
    format_rupees,
    suggested_selling_price,
    validate_purchase_form,
)
from farmdesk.models.product_models import APPROVED, Product
from farmdesk.services.inventory_service import InventoryService
from farmdesk.services.product_service import ProductService

logger = logging.getLogger(__name__)

APPROVE_REASON = "Product approved and purchased for inventory"
PURCHASE_FAILED = "Failed to record purchase. Please try again."


class PurchaseOutcome(BaseModel):
    product_id: str
    approved: bool
    total: float
    message: str

    @property
    def total_display(self) -> str:
        return format_rupees(self.total)


def _message(err: BaseException) -> str:
    if isinstance(err, FarmApiError):
        return err.message
    return str(err) or PURCHASE_FAILED


class PurchaseWorkflow:
    """
    Inventory purchase from a farmer, optionally closing an approval.

    From the approval flow the purchase and the status update go out side by
    side and both have to succeed. Nothing is rolled back when only one does;
    the raised PurchaseSubmissionError says which side went through.
    """

    # products with a submission in flight, shared across requests
    _in_flight: Set[str] = set()
    _in_flight_lock = threading.Lock()

    def __init__(self, inventory: InventoryService, products: ProductService):
        self.inventory = inventory
        self.products = products

    # -------------------------------------------------
    # FORM
    # -------------------------------------------------
    def prefill(self, product_id: str = "", farmer_id: str = "") -> Tuple[PurchaseForm, Optional[Product]]:
        form = PurchaseForm(productId=product_id, farmerId=farmer_id)
        if not product_id:
            return form, None

        try:
            product = self.products.get_product_by_id(product_id)
        except FarmApiError as e:
            logger.warning("Could not prefill purchase form for %s: %s", product_id, e.message)
            return form, None

        base_price = product.farmerPrice or product.price
        form = form.model_copy(
            update={
                "farmerId": farmer_id or product.farmer_id or "",
                "quantityPurchased": product.stockQuantity or product.availableQuantity or None,
                "purchasePrice": base_price or None,
                "sellingPrice": suggested_selling_price(base_price),
            }
        )
        return form, product

    @staticmethod
    def validate(form: PurchaseForm) -> PurchaseRequest:
        errors = validate_purchase_form(form)
        if errors:
            raise FormValidationError(errors)
        return PurchaseRequest.from_form(form)

    # -------------------------------------------------
    # SUBMIT
    # -------------------------------------------------
    def submit(self, form: PurchaseForm, approval_product_id: Optional[str] = None, product_name: str = "Product") -> PurchaseOutcome:
        request = self.validate(form)
        key = approval_product_id or request.productId

        with self._in_flight_lock:
            if key in self._in_flight:
                raise DuplicateSubmissionError(f"A purchase for {key} is already being submitted")
            self._in_flight.add(key)

        try:
            if approval_product_id:
                self._purchase_and_approve(request, approval_product_id)
                message = f"{product_name} approved and added to inventory successfully!"
            else:
                self._purchase_only(request)
                message = "Inventory purchase recorded successfully!"
        finally:
            with self._in_flight_lock:
                self._in_flight.discard(key)

        return PurchaseOutcome(
            product_id=request.productId,
            approved=bool(approval_product_id),
            total=request.purchasePrice * request.quantityPurchased,
            message=message,
        )

    def _purchase_only(self, request: PurchaseRequest) -> None:
        try:
            self.inventory.purchase_from_farmer(request)
        except FarmApiError as e:
            raise PurchaseSubmissionError(e.message or PURCHASE_FAILED, purchase_ok=False, status_ok=False, cause=e) from e

    def _purchase_and_approve(self, request: PurchaseRequest, product_id: str) -> None:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="purchase") as pool:
            purchase_f = pool.submit(self.inventory.purchase_from_farmer, request)
            status_f = pool.submit(self.products.update_product_status, product_id, APPROVED, APPROVE_REASON)
            wait([purchase_f, status_f])

        purchase_err = purchase_f.exception()
        status_err = status_f.exception()
        if purchase_err is None and status_err is None:
            return

        cause = purchase_err or status_err
        message = _message(cause)
        if purchase_err is None:
            message = f"{message} The purchase was recorded but the product is still pending."
        elif status_err is None:
            message = f"{message} The product was approved but no inventory was recorded."

        logger.error(
            "Purchase submission for %s failed (purchase_ok=%s status_ok=%s): %s",
            product_id,
            purchase_err is None,
            status_err is None,
            cause,
        )
        raise PurchaseSubmissionError(
            message,
            purchase_ok=purchase_err is None,
            status_ok=status_err is None,
            cause=cause,
        ) from cause
