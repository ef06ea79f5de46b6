"""
Offer models.

Wire format follows the storefront API (Mongo-style `_id`, camelCase
fields, `"fixed"` for flat discounts).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OfferScope(str, Enum):
    PRODUCT = "product"
    CATEGORY = "category"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FLAT = "fixed"


class DiscountSource(str, Enum):
    NONE = "none"
    PRODUCT = "product"
    CATEGORY = "category"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _ref_id(value: Any) -> Optional[str]:
    # Scope refs arrive either as a bare id or as a populated document
    if isinstance(value, dict):
        value = value.get("_id") or value.get("id")
    return str(value) if value is not None else None


class Offer(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(None, alias="_id")
    scope: OfferScope
    scope_id: str
    name: str = ""
    description: str = ""
    discount_type: DiscountType = Field(alias="discountType")
    discount_value: float = Field(alias="discountValue")
    start_date: Optional[datetime] = Field(None, alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")
    is_active: bool = Field(True, alias="isActive")

    @model_validator(mode="after")
    def _check_discount_value(self) -> "Offer":
        if self.discount_value < 0:
            raise ValueError("discountValue cannot be negative")
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("percentage discount cannot exceed 100")
        return self

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], scope: Optional[OfferScope] = None) -> "Offer":
        """
        Build an offer from an API payload.

        The scope is inferred from the `product` / `category` reference when
        not given explicitly.

        Raises:
            pydantic.ValidationError: If the payload is malformed
        """
        data = dict(payload)
        if scope is None:
            scope = OfferScope.PRODUCT if data.get("product") is not None else OfferScope.CATEGORY
        data["scope"] = scope
        data["scope_id"] = _ref_id(data.get(scope.value)) or ""
        return cls.model_validate(data)

    def is_currently_active(self, now: Optional[datetime] = None) -> bool:
        now = _as_utc(now or datetime.now(timezone.utc))
        if not self.is_active:
            return False
        if self.start_date is not None and _as_utc(self.start_date) > now:
            return False
        if self.end_date is not None and _as_utc(self.end_date) < now:
            return False
        return True


class ResolvedDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: float = 0.0
    source: DiscountSource = DiscountSource.NONE


class ResolvedOffers(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_offer: Optional[Offer] = None
    category_offer: Optional[Offer] = None
