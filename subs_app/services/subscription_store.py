"""
Subscription persistence.

``SubscriptionRepository`` is the contract the API layer depends on;
``SqlSubscriptionRepository`` implements it on top of a SQLAlchemy session.
Dates cross this boundary as "MM-YYYY" text and are stored as calendar
months.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, NoReturn

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from subs_app.core.exceptions import NotFoundError, StoreError
from subs_app.core.months import format_month, parse_month, parse_optional_month
from subs_app.models import Subscription as SubscriptionRow
from subs_app.models import new_subscription_id
from subs_app.schemas.subscription import Subscription, SubscriptionCreate

logger = logging.getLogger(__name__)


class SubscriptionRepository(ABC):
    """
    Repository interface for subscription records.
    """

    @abstractmethod
    async def create(self, data: SubscriptionCreate) -> Subscription:
        """
        Persist a new subscription.

        Args:
            data: Subscription fields without an id

        Returns:
            Stored Subscription with its generated id

        Raises:
            ValidationError: start_date or end_date is not MM-YYYY
        """

    @abstractmethod
    async def get(self, subscription_id: str) -> Subscription:
        """
        Raises:
            NotFoundError: no subscription has this id
        """

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[Subscription]:
        """Return every subscription owned by ``user_id`` (possibly none)."""

    @abstractmethod
    async def update(self, subscription: Subscription) -> Subscription:
        """
        Overwrite all mutable fields of the row matching ``subscription.id``.

        Raises:
            ValidationError: a date is not MM-YYYY
            NotFoundError: no subscription has this id
        """

    @abstractmethod
    async def delete(self, subscription_id: str) -> None:
        """Remove the subscription; unknown ids are ignored."""


class SqlSubscriptionRepository(SubscriptionRepository):
    def __init__(self, db: Session):
        self.db = db

    async def create(self, data: SubscriptionCreate) -> Subscription:
        start = parse_month(data.start_date)
        end = parse_optional_month(data.end_date)
        row = SubscriptionRow(
            id=new_subscription_id(),
            service_name=data.service_name,
            price=data.price,
            user_id=data.user_id,
            start_date=start,
            end_date=end,
        )
        # Serialized before commit: committing expires the row.
        try:
            self.db.add(row)
            self.db.flush()
            created = serialize_subscription(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("create subscription", exc)
        logger.info("Created subscription %s for user %s", created.id, created.user_id)
        return created

    async def get(self, subscription_id: str) -> Subscription:
        try:
            row = self.db.get(SubscriptionRow, subscription_id)
            found = serialize_subscription(row) if row is not None else None
        except SQLAlchemyError as exc:
            self._fail("fetch subscription", exc)
        if found is None:
            raise NotFoundError(f"Subscription {subscription_id} not found")
        return found

    async def list_by_user(self, user_id: str) -> List[Subscription]:
        try:
            rows = self.db.scalars(select(SubscriptionRow).where(SubscriptionRow.user_id == user_id)).all()
            return [serialize_subscription(row) for row in rows]
        except SQLAlchemyError as exc:
            self._fail("list subscriptions", exc)

    async def update(self, subscription: Subscription) -> Subscription:
        start = parse_month(subscription.start_date)
        end = parse_optional_month(subscription.end_date)
        try:
            row = self.db.get(SubscriptionRow, subscription.id)
            if row is None:
                raise NotFoundError(f"Subscription {subscription.id} not found")
            row.service_name = subscription.service_name
            row.price = subscription.price
            row.user_id = subscription.user_id
            row.start_date = start
            row.end_date = end
            self.db.flush()
            updated = serialize_subscription(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("update subscription", exc)
        logger.info("Updated subscription %s", updated.id)
        return updated

    async def delete(self, subscription_id: str) -> None:
        try:
            result = self.db.execute(delete(SubscriptionRow).where(SubscriptionRow.id == subscription_id))
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("delete subscription", exc)
        if result.rowcount:
            logger.info("Deleted subscription %s", subscription_id)

    def _fail(self, action: str, exc: SQLAlchemyError) -> NoReturn:
        self.db.rollback()
        logger.exception("Could not %s", action)
        raise StoreError(f"Could not {action}") from exc


def serialize_subscription(row: SubscriptionRow) -> Subscription:
    return Subscription(
        id=row.id,
        service_name=row.service_name,
        price=row.price,
        user_id=row.user_id,
        start_date=format_month(row.start_date),
        end_date=format_month(row.end_date) if row.end_date else None,
    )
