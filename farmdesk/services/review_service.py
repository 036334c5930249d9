# farmdesk/services/review_service.py
from __future__ import annotations

from typing import Any, Dict, List

from farmdesk.models.review_models import Review, ReviewCreate
from farmdesk.services.api_client import ApiClient


def _reviews(data: Dict[str, Any]) -> List[Review]:
    return [Review.model_validate(r) for r in (data.get("reviews") or data.get("data") or [])]


class ReviewService:
    def __init__(self, api: ApiClient):
        self.api = api

    def get_product_reviews(self, product_id: str, **params: Any) -> List[Review]:
        data = self.api.get(f"/reviews/product/{product_id}", params=params or None, default_error="Failed to fetch reviews")
        return _reviews(data)

    def create_review(self, review: ReviewCreate) -> Review:
        data = self.api.post("/reviews", json=review.model_dump(exclude_none=True), default_error="Failed to submit review")
        return Review.model_validate(data.get("review") or data.get("data") or {})

    def update_review(self, review_id: str, changes: Dict[str, Any]) -> Review:
        data = self.api.put(f"/reviews/{review_id}", json=changes, default_error="Failed to update review")
        return Review.model_validate(data.get("review") or data.get("data") or {})

    def delete_review(self, review_id: str) -> None:
        self.api.delete(f"/reviews/{review_id}", default_error="Failed to delete review")

    def mark_review_as_helpful(self, review_id: str) -> Dict[str, Any]:
        return self.api.put(f"/reviews/{review_id}/helpful", default_error="Failed to mark review as helpful")

    def get_user_reviews(self) -> List[Review]:
        data = self.api.get("/reviews/user", default_error="Failed to fetch your reviews")
        return _reviews(data)
