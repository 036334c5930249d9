# farmdesk/models/review_models.py

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Review(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    product: Any = None
    user: Any = None
    rating: int = 0
    comment: str = ""
    helpful: int = 0

    @property
    def author_name(self) -> str:
        if isinstance(self.user, dict):
            return self.user.get("name") or "Anonymous"
        return "Anonymous"


class ReviewCreate(BaseModel):
    """Body of POST /reviews."""

    product: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1)
    title: Optional[str] = None
