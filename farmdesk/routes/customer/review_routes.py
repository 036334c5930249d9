# farmdesk/routes/customer/review_routes.py

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for
from pydantic import ValidationError

from farmdesk.errors import FarmApiError, SessionExpiredError
from farmdesk.models.review_models import ReviewCreate
from farmdesk.routes.guards import require_roles
from farmdesk.services.context import review_service

logger = logging.getLogger(__name__)

reviews_bp = Blueprint(
    "customer_reviews_bp",
    __name__,
    url_prefix="/products/<product_id>/reviews",
)


@reviews_bp.get("/")
def product_reviews(product_id: str):
    ok, resp = require_roles()
    if not ok:
        return resp

    reviews = []
    try:
        reviews = review_service().get_product_reviews(product_id)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error fetching reviews for %s: %s", product_id, e.message)
        flash(e.message, "error")

    return render_template("customer/reviews.html", product_id=product_id, reviews=reviews, errors={})


@reviews_bp.post("/")
def write_review(product_id: str):
    ok, resp = require_roles("customer")
    if not ok:
        return resp

    try:
        review = ReviewCreate(
            product=product_id,
            rating=request.form.get("rating") or 0,
            comment=(request.form.get("comment") or "").strip(),
            title=request.form.get("title") or None,
        )
    except ValidationError:
        flash("Please give a rating between 1 and 5 and a comment", "error")
        return redirect(url_for("customer_reviews_bp.product_reviews", product_id=product_id))

    try:
        review_service().create_review(review)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error submitting review for %s: %s", product_id, e.message)
        flash(e.message, "error")
    else:
        flash("Review submitted successfully", "success")

    return redirect(url_for("customer_reviews_bp.product_reviews", product_id=product_id))
