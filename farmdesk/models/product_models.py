# farmdesk/models/product_models.py

from typing import Any, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

ProductStatus = Literal["pending", "approved", "rejected"]


def _ref_id(value: Any) -> Optional[str]:
    """Populated refs come back as objects, unpopulated ones as bare ids."""
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        ref = value.get("_id") or value.get("id")
        return str(ref) if ref else None
    return str(value)


class FarmerRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None


class PaddyConversion(BaseModel):
    rate: float
    processingCost: float = 0


class Product(BaseModel):
    """Product as the marketplace API returns it. Server-owned; never trusted as current."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    name: str = ""
    description: str = ""
    category: Optional[str] = None
    riceType: Optional[str] = None

    farmerPrice: float = 0
    price: float = 0
    availableQuantity: float = 0
    stockQuantity: float = 0
    unit: str = "kg"

    status: str = Field(default=PENDING)
    statusReason: Optional[str] = None

    isProcessedRice: bool = False
    paddySource: Optional[str] = None
    paddyToRiceConversion: Optional[PaddyConversion] = None

    farmer: Union[FarmerRef, str, None] = None
    images: List[str] = Field(default_factory=list)
    organicCertified: bool = False
    harvestedDate: Optional[str] = None

    @field_validator("paddySource", mode="before")
    @classmethod
    def _paddy_source_id(cls, v):
        return _ref_id(v)

    @field_validator("images", mode="before")
    @classmethod
    def _images_list(cls, v):
        return v or []

    @property
    def farmer_id(self) -> Optional[str]:
        if isinstance(self.farmer, FarmerRef):
            return self.farmer.id
        return self.farmer or None

    @property
    def farmer_name(self) -> str:
        if isinstance(self.farmer, FarmerRef) and self.farmer.name:
            return self.farmer.name
        return "Unknown"


class ProductCreate(BaseModel):
    """Body of POST /products."""

    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=10)
    category: Optional[str] = None
    riceType: Optional[str] = None
    price: float = Field(..., gt=0)
    farmerPrice: Optional[float] = None
    availableQuantity: float = Field(..., gt=0)
    stockQuantity: Optional[float] = None
    unit: str = "kg"
    organicCertified: bool = False
    images: List[str] = Field(default_factory=list)

    @field_validator("name", "description", mode="before")
    @classmethod
    def _strip(cls, v):
        return (v or "").strip()


class ProcessedRiceCreate(ProductCreate):
    """POST /products body for rice milled from an approved paddy."""

    isProcessedRice: Literal[True] = True
    paddySource: str = Field(..., min_length=1)
    paddyToRiceConversion: PaddyConversion
    farmer: Optional[str] = None
    harvestedDate: Optional[str] = None


class StatusUpdate(BaseModel):
    """Body of PUT /products/:id/status."""

    status: ProductStatus
    reason: str = ""
