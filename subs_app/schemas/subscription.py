from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class SubscriptionBase(BaseModel):
    service_name: str = Field(..., min_length=1, examples=["Netflix"])
    # Minor currency units (cents).
    price: StrictInt = Field(..., ge=0, examples=[1299])
    user_id: str = Field(..., min_length=1, examples=["987e6543-e21b-12d3-a456-426614174999"])
    start_date: str = Field(..., description="MM-YYYY", examples=["01-2024"])
    end_date: Optional[str] = Field(default=None, description="MM-YYYY, omitted while active", examples=["12-2024"])


class SubscriptionCreate(SubscriptionBase):
    """Request body for creating or replacing a subscription."""

    model_config = ConfigDict(extra="ignore")


class Subscription(SubscriptionBase):
    id: str = Field(..., examples=["123e4567-e89b-12d3-a456-426614174000"])


class SubscriptionSummaryFilter(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from", description="MM-YYYY", examples=["01-2024"])
    to: str = Field(..., description="MM-YYYY", examples=["12-2024"])
    user_id: Optional[str] = None
    service_name: Optional[str] = None


class SubscriptionTotal(BaseModel):
    total: int
