"""Pydantic request/response schemas for the Shopping API.

These are external contracts, kept separate from the internal commands.
Amounts are integers in the smallest currency subunit.
"""

from datetime import datetime

from pydantic import BaseModel, Field, StrictInt


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: StrictInt = 1

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "quantity": 2,
                }
            ]
        }
    }


class SetQuantityRequest(BaseModel):
    quantity: StrictInt


class ApplyPromotionRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)


class MergeCartsRequest(BaseModel):
    account_id: str = Field(min_length=1)
    session_token: str = Field(min_length=1)


class PurgeExpiredRequest(BaseModel):
    as_of: datetime | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OwnerSchema(BaseModel):
    kind: str
    id: str


class LineItemResponse(BaseModel):
    product_id: str
    display_name: str
    quantity: int
    unit_price: int
    thumbnail: str = ""
    category: str | None = None
    line_total: int


class CartResponse(BaseModel):
    owner: OwnerSchema
    items: list[LineItemResponse]
    total_item_count: int
    total_price: int
    applied_promotion_code: str | None = None
    expires_at: datetime | None = None


class DiscountLineResponse(BaseModel):
    kind: str
    amount: int
    description: str
    product_id: str | None = None
    code: str | None = None


class PromotionOutcomeResponse(BaseModel):
    code: str
    applied: bool
    failure: str | None = None
    message: str = ""


class PriceBreakdownResponse(BaseModel):
    subtotal: int
    total_item_count: int
    discount_lines: list[DiscountLineResponse]
    discount_total: int
    net_amount: int
    tax: int
    shipping: int
    shipping_waived: bool
    total: int
    promotion: PromotionOutcomeResponse | None = None


class PricedCartResponse(BaseModel):
    cart: CartResponse
    breakdown: PriceBreakdownResponse


class MergeCartsResponse(BaseModel):
    cart: CartResponse | None = None
    merged: list[str] = Field(default_factory=list)
    added: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)


class PurgeExpiredResponse(BaseModel):
    purged_count: int


class StatusResponse(BaseModel):
    status: str = "ok"
