from __future__ import annotations

import logging
from datetime import date
from typing import List, NamedTuple, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from subs_app.core.exceptions import StoreError
from subs_app.core.months import parse_month
from subs_app.models import Subscription
from subs_app.schemas.subscription import SubscriptionSummaryFilter

logger = logging.getLogger(__name__)


class NamedCondition(NamedTuple):
    name: str
    clause: ColumnElement


def summary_conditions(
    start: date,
    end: date,
    user_id: Optional[str] = None,
    service_name: Optional[str] = None,
) -> List[NamedCondition]:
    """Conditions selecting subscriptions active at any point in [start, end]."""
    conditions = [
        NamedCondition("starts_before_range_end", Subscription.start_date <= end),
        NamedCondition(
            "ends_after_range_start",
            or_(Subscription.end_date.is_(None), Subscription.end_date >= start),
        ),
    ]
    if user_id is not None:
        conditions.append(NamedCondition("user", Subscription.user_id == user_id))
    if service_name is not None:
        conditions.append(
            NamedCondition("service_name", Subscription.service_name.icontains(service_name, autoescape=True))
        )
    return conditions


class SummaryAggregator:
    def __init__(self, db: Session):
        self.db = db

    async def sum_prices(self, filters: SubscriptionSummaryFilter) -> int:
        start = parse_month(filters.from_)
        end = parse_month(filters.to)
        conditions = summary_conditions(start, end, filters.user_id, filters.service_name)
        query = select(func.coalesce(func.sum(Subscription.price), 0)).where(
            *(condition.clause for condition in conditions)
        )
        try:
            total = self.db.execute(query).scalar_one()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Could not calculate subscription total")
            raise StoreError("Could not calculate total") from exc
        logger.debug(
            "Summed subscriptions with %s: %s",
            ", ".join(condition.name for condition in conditions),
            total,
        )
        return int(total or 0)
