"""
Coupon model (storefront wire format).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.features.offers.models import DiscountType


class Coupon(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(None, alias="_id")
    code: str
    description: str = ""
    discount_type: DiscountType = Field(alias="discountType")
    discount_value: float = Field(alias="discountValue", ge=0)
    min_purchase: float = Field(0.0, alias="minPurchase")
    max_discount: Optional[float] = Field(None, alias="maxDiscount")
    start_date: Optional[datetime] = Field(None, alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")
    usage_limit: Optional[int] = Field(None, alias="usageLimit")
    used_count: int = Field(0, alias="usedCount")
    is_active: bool = Field(True, alias="isActive")

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        return value.strip().upper()
