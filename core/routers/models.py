"""Request/response models for the cart endpoints."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.errors import ERROR_PRODUCT_ID_REQUIRED


# ==================== CART MODELS ====================

class CartItemIn(BaseModel):
    """One line of a replace-all cart write."""
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId")
    quantity: int = Field(..., gt=0)
    name: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = None

    @field_validator("product_id")
    @classmethod
    def _clean_product_id(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError(ERROR_PRODUCT_ID_REQUIRED)
        return v


class ReplaceCartRequest(BaseModel):
    items: List[CartItemIn] = Field(default_factory=list)


class CartItemOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId")
    name: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None
    quantity: int


class CartRecordOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    items: List[CartItemOut] = Field(default_factory=list)
    updated_at: Optional[str] = Field(None, alias="updatedAt")
