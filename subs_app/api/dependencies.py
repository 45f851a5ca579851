"""Shared API dependencies."""
from fastapi import Depends
from sqlalchemy.orm import Session

from subs_app.database import get_db
from subs_app.services.subscription_store import SqlSubscriptionRepository, SubscriptionRepository
from subs_app.services.summary import SummaryAggregator


def get_subscription_repository(db: Session = Depends(get_db)) -> SubscriptionRepository:
    return SqlSubscriptionRepository(db)


def get_summary_aggregator(db: Session = Depends(get_db)) -> SummaryAggregator:
    return SummaryAggregator(db)


__all__ = ["get_db", "get_subscription_repository", "get_summary_aggregator"]
