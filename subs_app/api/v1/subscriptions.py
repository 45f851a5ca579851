"""
Subscription API Routes
CRUD over subscriptions and the cost summary for a month range
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from subs_app.api.dependencies import get_subscription_repository, get_summary_aggregator
from subs_app.core.exceptions import NotFoundError, StoreError, ValidationError
from subs_app.schemas.subscription import (
    Subscription,
    SubscriptionCreate,
    SubscriptionSummaryFilter,
    SubscriptionTotal,
)
from subs_app.services.subscription_store import SubscriptionRepository
from subs_app.services.summary import SummaryAggregator

router = APIRouter()


@router.post("", response_model=Subscription, response_model_exclude_none=True)
async def create_subscription(
    payload: SubscriptionCreate,
    repo: SubscriptionRepository = Depends(get_subscription_repository),
) -> Subscription:
    """Create a new subscription for a user."""
    try:
        return await repo.create(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not create subscription",
        )


@router.get("", response_model=List[Subscription], response_model_exclude_none=True)
async def list_subscriptions(
    user_id: Optional[str] = Query(None, description="Owner of the subscriptions"),
    repo: SubscriptionRepository = Depends(get_subscription_repository),
) -> List[Subscription]:
    """Return all subscriptions for the specified user."""
    if not user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="user_id required")
    try:
        return await repo.list_by_user(user_id)
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not fetch subscriptions",
        )


# Declared before "/{subscription_id}" so "summary" is not captured as an id.
@router.get("/summary", response_model=SubscriptionTotal)
async def summarize_subscriptions(
    from_: str = Query(..., alias="from", description="Start month, MM-YYYY"),
    to: str = Query(..., description="End month, MM-YYYY"),
    user_id: Optional[str] = Query(None),
    service_name: Optional[str] = Query(None, description="Case-insensitive substring"),
    aggregator: SummaryAggregator = Depends(get_summary_aggregator),
) -> SubscriptionTotal:
    """
    Total cost of subscriptions active at any point in the inclusive month
    range, optionally filtered by user and service name.
    """
    filters = SubscriptionSummaryFilter(from_=from_, to=to, user_id=user_id, service_name=service_name)
    try:
        total = await aggregator.sum_prices(filters)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not calculate total",
        )
    return SubscriptionTotal(total=total)


@router.get("/{subscription_id}", response_model=Subscription, response_model_exclude_none=True)
async def get_subscription(
    subscription_id: str,
    repo: SubscriptionRepository = Depends(get_subscription_repository),
) -> Subscription:
    try:
        return await repo.get(subscription_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not fetch subscription",
        )


@router.put("/{subscription_id}", response_model=Subscription, response_model_exclude_none=True)
async def update_subscription(
    subscription_id: str,
    payload: SubscriptionCreate,
    repo: SubscriptionRepository = Depends(get_subscription_repository),
) -> Subscription:
    """Replace every mutable field of an existing subscription."""
    subscription = Subscription(id=subscription_id, **payload.model_dump())
    try:
        return await repo.update(subscription)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")
    except StoreError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Update failed")


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subscription(
    subscription_id: str,
    repo: SubscriptionRepository = Depends(get_subscription_repository),
) -> Response:
    try:
        await repo.delete(subscription_id)
    except StoreError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Delete failed")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
